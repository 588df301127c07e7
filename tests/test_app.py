"""
Tests for the assembled application.
"""

import pytest
from fastapi.testclient import TestClient

from gatehouse.app import create_app
from gatehouse.config import GatewaySettings
from gatehouse.engine import EngineState
from gatehouse.errors import CompositionError
from gatehouse.schema import MemoryFragmentLoader


def _graphql_routes(app):
    return [r for r in app.routes if getattr(r, "path", None) == "/graphql"]


# =============================================================================
# Lazy Startup
# =============================================================================


class TestLazyStartup:
    """The engine starts on the first GraphQL request in test/serverless mode."""

    def test_engine_not_started_at_creation(self, test_settings, memory_loader):
        app = create_app(test_settings, loader=memory_loader)

        assert app.state.lifecycle.state is EngineState.NOT_STARTED
        assert _graphql_routes(app) == []

    def test_first_request_starts_engine(self, test_settings, memory_loader):
        app = create_app(test_settings, loader=memory_loader)
        client = TestClient(app)

        response = client.post("/graphql", json={"query": '{ ping echo(text: "x") }'})

        assert response.status_code == 200
        assert response.json()["data"] == {"ping": "pong", "echo": "x"}
        assert app.state.lifecycle.is_ready

    def test_engine_bound_once(self, test_settings, memory_loader):
        app = create_app(test_settings, loader=memory_loader)
        client = TestClient(app)

        for _ in range(3):
            assert client.post("/graphql", json={"query": "{ ping }"}).status_code == 200

        assert len(_graphql_routes(app)) == 1

    def test_serverless_defers_startup_through_lifespan(self, memory_loader):
        settings = GatewaySettings(environment="production", serverless=True, host_url="https://x")
        app = create_app(settings, loader=memory_loader)

        with TestClient(app):
            assert app.state.lifecycle.state is EngineState.NOT_STARTED

    def test_custom_graphql_path(self, memory_loader):
        settings = GatewaySettings(environment="test", graphql_path="/api/graphql")
        client = TestClient(create_app(settings, loader=memory_loader))

        response = client.post("/api/graphql", json={"query": "{ ping }"})
        assert response.json()["data"] == {"ping": "pong"}


class TestEagerStartup:
    """Development and production processes start the engine with the app."""

    def test_lifespan_starts_engine(self, memory_loader):
        settings = GatewaySettings(environment="development")
        app = create_app(settings, loader=memory_loader)

        with TestClient(app) as client:
            assert app.state.lifecycle.is_ready
            response = client.post("/graphql", json={"query": "{ ping }"})

        assert response.status_code == 200

    def test_failed_eager_start_keeps_serving(self, memory_loader):
        memory_loader.add_resolvers("broken", {"Query": {"nope": lambda *_: None}})
        settings = GatewaySettings(environment="development")
        app = create_app(settings, loader=memory_loader)

        with TestClient(app) as client:
            assert app.state.lifecycle.state is EngineState.FAILED
            assert client.get("/health").status_code == 200
            assert client.post("/graphql", json={"query": "{ ping }"}).status_code == 503


# =============================================================================
# Failure Handling
# =============================================================================


class TestFailures:
    """Composition and startup failures."""

    def test_composition_error_aborts_app_creation(self, test_settings):
        loader = MemoryFragmentLoader()
        loader.add_schema("a.graphql", "type Query { price: Float }")
        loader.add_schema("b.graphql", "type Query { price: String }")

        with pytest.raises(CompositionError):
            create_app(test_settings, loader=loader)

    def test_startup_failure_returns_503_without_retry(self, test_settings, memory_loader):
        memory_loader.add_resolvers("broken", {"Query": {"nope": lambda *_: None}})
        app = create_app(test_settings, loader=memory_loader)
        client = TestClient(app)

        first = client.post("/graphql", json={"query": "{ ping }"})
        second = client.post("/graphql", json={"query": "{ ping }"})

        assert first.status_code == 503
        assert "GraphQL engine unavailable" in first.json()["detail"]
        assert "Query.nope" in first.json()["detail"]
        assert second.status_code == 503
        assert app.state.lifecycle.state is EngineState.FAILED

    def test_startup_failure_does_not_affect_other_routes(self, test_settings, memory_loader):
        memory_loader.add_resolvers("broken", {"Query": {"nope": lambda *_: None}})
        client = TestClient(create_app(test_settings, loader=memory_loader))

        client.post("/graphql", json={"query": "{ ping }"})
        health = client.get("/health")

        assert health.status_code == 200
        assert health.json()["status"] == "degraded"
        assert health.json()["engine"] == "failed"
        assert "Query.nope" in health.json()["error"]
        assert client.get("/api-docs").status_code == 200
        assert client.get("/").status_code == 200


# =============================================================================
# Service Routes
# =============================================================================


class TestServiceRoutes:
    """Tests for / and /health."""

    def test_root(self, test_settings, memory_loader):
        client = TestClient(create_app(test_settings, loader=memory_loader))
        body = client.get("/", headers={"host": "foo:3000"}).json()

        assert body["service"] == "gatehouse"
        assert body["status"] == "running"
        assert body["docs"] == "http://foo:3000/api-docs"
        assert body["graphql"] == "http://foo:3000/graphql"

    def test_health_before_startup(self, test_settings, memory_loader):
        client = TestClient(create_app(test_settings, loader=memory_loader))
        assert client.get("/health").json() == {"status": "healthy", "engine": "not_started"}


# =============================================================================
# Packaged Fragments
# =============================================================================


class TestPackagedFragments:
    """The fragments shipped with the package."""

    def test_status_and_server_time(self, test_settings):
        client = TestClient(create_app(test_settings))
        response = client.post("/graphql", json={"query": "{ status { service environment } serverTime }"})

        data = response.json()["data"]
        assert data["status"] == {"service": "gatehouse", "environment": "test"}
        assert data["serverTime"].endswith("+00:00")
