"""
Static OpenAPI template.

Built once when the app is created, from the app's own routes. The
`servers` entry is a placeholder; the renderer replaces it per request.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from gatehouse.config import GatewaySettings

logger = logging.getLogger(__name__)

TAGS = [
    {"name": "Base", "description": "Service information"},
    {"name": "Health", "description": "Liveness and engine readiness"},
    {"name": "Docs", "description": "API documentation"},
]


def build_openapi_template(app: FastAPI, settings: GatewaySettings) -> Mapping[str, Any]:
    """Generate the read-only OpenAPI document for the app's current routes."""
    document = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=TAGS,
        servers=[{"url": "/"}],
        contact={"name": settings.service_name},
        license_info={"name": "MIT", "url": "https://opensource.org/licenses/MIT"},
    )
    logger.debug(f"[docs] OpenAPI template built with {len(document.get('paths', {}))} paths")
    return MappingProxyType(document)
