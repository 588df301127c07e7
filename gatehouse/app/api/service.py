"""Service information and health endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from gatehouse.app.dependencies import get_app_settings, get_lifecycle, get_request_origin
from gatehouse.config import GatewaySettings
from gatehouse.docs import OriginContext
from gatehouse.engine import EngineLifecycle, EngineState

router = APIRouter()


@router.get("/", tags=["Base"])
async def root(
    settings: GatewaySettings = Depends(get_app_settings),
    origin: OriginContext = Depends(get_request_origin),
) -> dict[str, str]:
    """Root endpoint with service info."""
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "running",
        "docs": f"{origin.url}{settings.docs_path}",
        "graphql": f"{origin.url}{settings.graphql_path}",
    }


@router.get("/health", tags=["Health"])
async def health_check(lifecycle: EngineLifecycle = Depends(get_lifecycle)) -> dict[str, Any]:
    """
    Health check endpoint.

    Never waits on engine startup. Reports "degraded" once the GraphQL
    engine has failed to start; the rest of the API keeps serving.
    """
    state = lifecycle.state
    result: dict[str, Any] = {
        "status": "degraded" if state is EngineState.FAILED else "healthy",
        "engine": state.value,
    }
    if lifecycle.error is not None:
        result["error"] = str(lifecycle.error)
    return result
