"""
Request Gate.

HTTP middleware that holds requests for the GraphQL entry path until the
engine has started. Every other path passes straight through, so docs and
health checks never wait on engine startup.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from gatehouse.errors import StartupError

from .lifecycle import EngineLifecycle

logger = logging.getLogger(__name__)


def is_engine_entry_path(path: str, entry_path: str) -> bool:
    """Whether a request path targets the engine's entry path."""
    return path == entry_path


class RequestGate:
    """
    Middleware callable for `app.middleware("http")`.

    Only ever calls the lifecycle's ensure_started(); it never starts
    the engine on its own.
    """

    def __init__(self, lifecycle: EngineLifecycle, entry_path: str):
        self._lifecycle = lifecycle
        self._entry_path = entry_path

    @property
    def entry_path(self) -> str:
        return self._entry_path

    async def __call__(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not is_engine_entry_path(request.url.path, self._entry_path):
            return await call_next(request)

        try:
            await self._lifecycle.ensure_started()
        except StartupError as e:
            return JSONResponse(
                status_code=503,
                content={"detail": f"GraphQL engine unavailable: {e}"},
            )

        return await call_next(request)
