"""
Application factory.

Wires the gateway together:
    1. Load and compose fragments (CompositionError aborts app creation)
    2. Create the GraphQL engine and its lifecycle (not started yet)
    3. Register routes and build the static OpenAPI template
    4. Install middleware: RequestGate inside, CORS outermost

Every request passes CORS first, then the gate, then the router.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from gatehouse.app.api import create_docs_router, service_router
from gatehouse.config import GatewaySettings, check_production_settings, get_settings
from gatehouse.cors import apply_cors_policy, log_cors_policy, resolve_cors_policy
from gatehouse.docs import build_openapi_template
from gatehouse.engine import EngineLifecycle, GraphQLEngine, RequestGate
from gatehouse.errors import StartupError
from gatehouse.schema import FileFragmentLoader, FragmentLoader, compose, compose_resolvers

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "API gateway composing GraphQL schema fragments into one endpoint, "
    "with request-aware API documentation."
)


def create_app(
    settings: GatewaySettings | None = None,
    loader: FragmentLoader | None = None,
) -> FastAPI:
    """
    Create the gateway application.

    Args:
        settings: Settings to use, defaults to get_settings()
        loader: Fragment source, defaults to FileFragmentLoader(settings.fragments_dir)

    Raises:
        CompositionError: If the fragments cannot be merged
    """
    settings = settings or get_settings()
    check_production_settings(settings)

    loader = loader or FileFragmentLoader(settings.fragments_dir)
    composed = compose(loader.load_schema_fragments())
    resolvers = compose_resolvers(loader.load_resolver_fragments())

    if settings.environment == "development":
        logger.info(f"\n=== GraphQL Schema Start ===\n\n{composed.sdl}\n\n=== GraphQL Schema End ===\n")

    policy = resolve_cors_policy(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the engine with the process unless startup is deferred."""
        if settings.eager_start:
            try:
                await app.state.lifecycle.ensure_started()
            except StartupError:
                logger.warning(f"GraphQL unavailable at {settings.graphql_path}; other routes keep serving")

            logger.info(f"{settings.service_name} started on port {settings.port}")
            logger.info(f"For API docs: {settings.public_url}{settings.docs_path}")
            logger.info(f"Open {settings.public_url} in browser.")
            logger.info(f"For graphql: {settings.public_url}{settings.graphql_path}")
            log_cors_policy(policy)
        yield

    app = FastAPI(
        title=settings.service_name,
        description=DESCRIPTION,
        version=settings.service_version,
        lifespan=lifespan,
        debug=settings.debug,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    engine = GraphQLEngine(composed, resolvers, path=settings.graphql_path)
    lifecycle = EngineLifecycle(engine, app)

    app.state.settings = settings
    app.state.composed_schema = composed
    app.state.lifecycle = lifecycle

    app.include_router(service_router)
    app.include_router(create_docs_router(settings.docs_path))
    app.state.openapi_template = build_openapi_template(app, settings)

    # Last added runs first: CORS wraps the gate
    app.add_middleware(BaseHTTPMiddleware, dispatch=RequestGate(lifecycle, settings.graphql_path))
    apply_cors_policy(app, policy)

    return app
