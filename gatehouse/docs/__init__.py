"""
Gatehouse Documentation.

Request-time rendering of the OpenAPI document and its Swagger UI page.
"""

from .renderer import (
    SWAGGER_UI_VERSION,
    OriginContext,
    RenderedDocument,
    render_documentation,
    resolve_origin,
)
from .specification import build_openapi_template

__all__ = [
    "SWAGGER_UI_VERSION",
    "OriginContext",
    "RenderedDocument",
    "build_openapi_template",
    "render_documentation",
    "resolve_origin",
]
