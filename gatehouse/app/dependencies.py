"""
Dependency Injection for Gatehouse.

Per-app singletons live on `app.state`, set once by create_app().
These functions expose them to route handlers through Depends().
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi import Request

from gatehouse.config import GatewaySettings
from gatehouse.docs import OriginContext, resolve_origin
from gatehouse.engine import EngineLifecycle


def get_app_settings(request: Request) -> GatewaySettings:
    return request.app.state.settings


def get_lifecycle(request: Request) -> EngineLifecycle:
    return request.app.state.lifecycle


def get_openapi_template(request: Request) -> Mapping[str, Any]:
    return request.app.state.openapi_template


def get_request_origin(request: Request) -> OriginContext:
    """
    Origin the request was made under.

    HOST_URL wins; otherwise x-forwarded-proto (or the transport scheme)
    plus the Host header.
    """
    settings: GatewaySettings = request.app.state.settings
    return resolve_origin(
        host=request.headers.get("host") or request.url.netloc,
        scheme=request.url.scheme,
        forwarded_proto=request.headers.get("x-forwarded-proto"),
        override=settings.host_url,
    )
