"""Resolvers for the base fragment."""
from __future__ import annotations

from typing import Any

from gatehouse.config import get_settings


def resolve_status(_root: Any, info: Any) -> dict[str, str]:
    request = (info.context or {}).get("request")
    settings = request.app.state.settings if request is not None else get_settings()
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "environment": settings.environment,
    }


resolvers = {
    "Query": {"status": resolve_status},
}
