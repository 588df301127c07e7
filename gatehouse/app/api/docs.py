"""
Documentation endpoints.

The page is rendered per request so the advertised server matches the
address the caller actually used.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse

from gatehouse.app.dependencies import get_openapi_template, get_request_origin
from gatehouse.docs import OriginContext, render_documentation


def create_docs_router(docs_path: str = "/api-docs") -> APIRouter:
    """Router serving the Swagger UI page and the raw JSON document."""
    router = APIRouter()

    @router.get(docs_path, response_class=HTMLResponse, include_in_schema=False)
    async def api_docs(
        origin: OriginContext = Depends(get_request_origin),
        template: Mapping[str, Any] = Depends(get_openapi_template),
    ) -> HTMLResponse:
        """Self-contained Swagger UI page."""
        return HTMLResponse(render_documentation(template, origin).html)

    @router.get(f"{docs_path}.json", include_in_schema=False)
    async def api_docs_json(
        origin: OriginContext = Depends(get_request_origin),
        template: Mapping[str, Any] = Depends(get_openapi_template),
    ) -> JSONResponse:
        return JSONResponse(render_documentation(template, origin).specification)

    return router
