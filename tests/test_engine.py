"""
Tests for GraphQLEngine.
"""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gatehouse.engine import GraphQLEngine
from gatehouse.schema import compose, compose_resolvers


@pytest.fixture
def engine(memory_loader):
    return GraphQLEngine(
        compose(memory_loader.load_schema_fragments()),
        compose_resolvers(memory_loader.load_resolver_fragments()),
    )


@pytest.fixture
def bound_client(engine):
    """TestClient for an app with a started and bound engine."""
    app = FastAPI()
    asyncio.run(engine.start())
    engine.bind(app)
    return TestClient(app)


# =============================================================================
# Build and Execute
# =============================================================================


class TestStartAndExecute:
    """Tests for start() and execute()."""

    @pytest.mark.asyncio
    async def test_start_builds_schema(self, engine):
        assert engine.schema is None
        await engine.start()
        assert engine.schema is not None
        assert set(engine.schema.query_type.fields) == {"ping", "echo"}

    @pytest.mark.asyncio
    async def test_executes_with_merged_resolvers(self, engine):
        await engine.start()
        result = await engine.execute('{ ping echo(text: "hi") }')

        assert result.errors is None
        assert result.data == {"ping": "pong", "echo": "hi"}

    @pytest.mark.asyncio
    async def test_execute_before_start_raises(self, engine):
        with pytest.raises(RuntimeError, match="not been started"):
            await engine.execute("{ ping }")

    @pytest.mark.asyncio
    async def test_resolver_for_unknown_field_fails(self, memory_loader):
        memory_loader.add_resolvers("extra", {"Query": {"missing": lambda *_: None}})
        engine = GraphQLEngine(
            compose(memory_loader.load_schema_fragments()),
            compose_resolvers(memory_loader.load_resolver_fragments()),
        )
        with pytest.raises(ValueError, match="Query.missing"):
            await engine.start()

    @pytest.mark.asyncio
    async def test_resolver_for_unknown_type_fails(self, memory_loader):
        memory_loader.add_resolvers("extra", {"Ghost": {"id": lambda *_: None}})
        engine = GraphQLEngine(
            compose(memory_loader.load_schema_fragments()),
            compose_resolvers(memory_loader.load_resolver_fragments()),
        )
        with pytest.raises(ValueError, match="Ghost"):
            await engine.start()


# =============================================================================
# Binding
# =============================================================================


class TestBind:
    """Tests for bind()."""

    def test_bind_before_start_raises(self, engine):
        with pytest.raises(RuntimeError, match="started"):
            engine.bind(FastAPI())

    @pytest.mark.asyncio
    async def test_bind_twice_raises(self, engine):
        app = FastAPI()
        await engine.start()
        engine.bind(app)

        with pytest.raises(RuntimeError, match="already bound"):
            engine.bind(app)

        graphql_routes = [r for r in app.routes if getattr(r, "path", None) == "/graphql"]
        assert len(graphql_routes) == 1
        assert engine.is_bound is True


# =============================================================================
# HTTP Handler
# =============================================================================


class TestHandle:
    """Tests for the HTTP endpoint."""

    def test_post_query(self, bound_client):
        response = bound_client.post("/graphql", json={"query": "{ ping }"})
        assert response.status_code == 200
        assert response.json() == {"data": {"ping": "pong"}}

    def test_post_with_variables_and_operation_name(self, bound_client):
        response = bound_client.post(
            "/graphql",
            json={
                "query": "query A { ping } query B($t: String!) { echo(text: $t) }",
                "variables": {"t": "hello"},
                "operationName": "B",
            },
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"echo": "hello"}

    def test_get_query(self, bound_client):
        response = bound_client.get(
            "/graphql",
            params={"query": "query ($t: String!) { echo(text: $t) }", "variables": '{"t": "x"}'},
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"echo": "x"}

    def test_missing_query(self, bound_client):
        response = bound_client.post("/graphql", json={})
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Must provide query string."

    def test_invalid_json_body(self, bound_client):
        response = bound_client.post(
            "/graphql",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_invalid_variables(self, bound_client):
        response = bound_client.get("/graphql", params={"query": "{ ping }", "variables": "nope"})
        assert response.status_code == 400
        assert "Variables" in response.json()["errors"][0]["message"]

    def test_validation_error_returns_400(self, bound_client):
        response = bound_client.post("/graphql", json={"query": "{ nope }"})
        assert response.status_code == 400
        assert "data" not in response.json() or response.json()["data"] is None
        assert response.json()["errors"]
