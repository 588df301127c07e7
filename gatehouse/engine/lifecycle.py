"""
Engine Lifecycle.

Lazy, idempotent startup for the GraphQL engine.

State machine:
    NOT_STARTED --[first ensure_started()]--> STARTING
    STARTING    --[start + bind succeed]----> STARTED
    STARTING    --[start or bind fails]-----> FAILED

No transition leads back. A failed attempt is never retried; the
recorded StartupError is raised to every caller, including the ones
already waiting. Restarting the process is the only recovery.

Concurrency:
    The first caller installs a shared startup task; every other caller
    awaits that same task. The check-then-set in ensure_started() has no
    await in between, which makes it atomic on a single event loop.
    Callers await through asyncio.shield, so a cancelled request never
    cancels the shared startup.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Protocol

from gatehouse.errors import StartupError

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    """Startup state of the engine."""

    NOT_STARTED = "not_started"
    STARTING = "starting"
    STARTED = "started"
    FAILED = "failed"


def _consume_result(future: asyncio.Future[None]) -> None:
    if not future.cancelled():
        future.exception()


class Engine(Protocol):
    """What the lifecycle needs from an engine."""

    async def start(self) -> None:
        ...

    def bind(self, app: Any) -> None:
        ...


class EngineLifecycle:
    """
    Owns the single startup attempt of one engine.

    Example:
        lifecycle = EngineLifecycle(engine, app)

        # Anywhere, any number of times, concurrently
        await lifecycle.ensure_started()
    """

    def __init__(self, engine: Engine, app: Any = None):
        """
        Initialize lifecycle.

        Args:
            engine: Engine to start
            app: Application the engine binds to after starting
        """
        self._engine = engine
        self._app = app
        self._state = EngineState.NOT_STARTED
        self._startup: asyncio.Future[None] | None = None
        self._error: StartupError | None = None

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is EngineState.STARTED

    @property
    def error(self) -> StartupError | None:
        """The recorded failure, if startup failed."""
        return self._error

    async def ensure_started(self) -> None:
        """
        Wait until the engine is ready.

        Raises:
            StartupError: If the (single) startup attempt failed
        """
        if self._state is EngineState.STARTED:
            return
        if self._state is EngineState.FAILED:
            raise self._error

        if self._startup is None:
            self._state = EngineState.STARTING
            self._startup = asyncio.ensure_future(self._run_startup())
            # Failure is logged and stored by _run_startup; waiters may all be gone
            self._startup.add_done_callback(_consume_result)

        await asyncio.shield(self._startup)

    async def _run_startup(self) -> None:
        logger.info("[engine] Starting GraphQL engine...")
        try:
            await self._engine.start()
            if self._app is not None:
                self._engine.bind(self._app)
        except Exception as e:
            self._error = StartupError(f"{type(e).__name__}: {e}")
            self._state = EngineState.FAILED
            logger.error(f"[engine] Failed to start GraphQL engine: {e}", exc_info=True)
            raise self._error from e

        self._state = EngineState.STARTED
        logger.info("[engine] GraphQL engine started")
