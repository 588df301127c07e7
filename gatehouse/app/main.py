"""
Gatehouse - GraphQL gateway with request-aware API docs

ASGI entry point. Serverless hosts import `app`; everywhere else `run()`
binds the listening socket with uvicorn.
"""
from __future__ import annotations

import logging

from gatehouse.app.factory import create_app
from gatehouse.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = create_app(settings)


def run() -> None:
    """Serve the app on PORT, unless a serverless platform hosts it."""
    if settings.serverless:
        logger.info("Serverless deployment detected; the platform serves the app")
        return

    import uvicorn

    uvicorn.run(
        "gatehouse.app.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
