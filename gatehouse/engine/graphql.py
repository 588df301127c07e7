"""
GraphQL Engine.

Serves the composed schema and resolvers over HTTP.

Lifecycle:
    engine = GraphQLEngine(composed, resolvers, path="/graphql")
    await engine.start()   # build executable schema (expensive, runs once)
    engine.bind(app)       # register the endpoint on the FastAPI app (once)

Start and bind are driven by EngineLifecycle; nothing else should call them.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from graphql import (
    ExecutionResult,
    GraphQLObjectType,
    GraphQLSchema,
    build_ast_schema,
    graphql,
    validate_schema,
)

from gatehouse.schema import ComposedSchema, ResolverMap

logger = logging.getLogger(__name__)


class GraphQLEngine:
    """
    Executable GraphQL schema plus its HTTP endpoint.

    Example:
        engine = GraphQLEngine(compose(fragments), compose_resolvers(resolver_fragments))
        await engine.start()
        result = await engine.execute("{ status { service } }")
    """

    def __init__(
        self,
        composed: ComposedSchema,
        resolvers: ResolverMap,
        *,
        path: str = "/graphql",
    ):
        self._composed = composed
        self._resolvers = resolvers
        self._path = path
        self._schema: GraphQLSchema | None = None
        self._bound = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def schema(self) -> GraphQLSchema | None:
        """Executable schema, None until start() has completed."""
        return self._schema

    @property
    def is_bound(self) -> bool:
        return self._bound

    async def start(self) -> None:
        """
        Build the executable schema.

        Schema construction runs in a worker thread so the event loop keeps
        serving unrelated requests meanwhile.

        Raises:
            TypeError: If the composed SDL is invalid
            ValueError: If the schema or resolver map is inconsistent
        """
        self._schema = await asyncio.to_thread(self._build)

    def _build(self) -> GraphQLSchema:
        schema = build_ast_schema(self._composed.document)

        errors = validate_schema(schema)
        if errors:
            raise ValueError("; ".join(error.message for error in errors))

        for type_name, fields in self._resolvers.items():
            graphql_type = schema.get_type(type_name)
            if not isinstance(graphql_type, GraphQLObjectType):
                raise ValueError(f"Resolvers supplied for unknown object type '{type_name}'")
            for field_name, handler in fields.items():
                graphql_field = graphql_type.fields.get(field_name)
                if graphql_field is None:
                    raise ValueError(f"Resolver supplied for unknown field '{type_name}.{field_name}'")
                graphql_field.resolve = handler

        logger.debug(f"[engine] Built schema with {len(schema.type_map)} types")
        return schema

    def bind(self, app: FastAPI) -> None:
        """
        Register the GraphQL endpoint on the app.

        Raises:
            RuntimeError: If called before start() or more than once
        """
        if self._schema is None:
            raise RuntimeError("GraphQL engine must be started before it is bound")
        if self._bound:
            raise RuntimeError("GraphQL engine is already bound")

        app.add_api_route(
            self._path,
            self.handle,
            methods=["GET", "POST"],
            include_in_schema=False,
            name="graphql",
        )
        self._bound = True
        logger.info(f"[engine] GraphQL endpoint bound at {self._path}")

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
        context: Any = None,
    ) -> ExecutionResult:
        """Execute a GraphQL operation against the started schema."""
        if self._schema is None:
            raise RuntimeError("GraphQL engine has not been started")
        return await graphql(
            self._schema,
            query,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )

    async def handle(self, request: Request) -> JSONResponse:
        """HTTP handler: GET with query parameters, POST with a JSON body."""
        if request.method == "GET":
            params: Any = dict(request.query_params)
            if "variables" in params:
                try:
                    params["variables"] = json.loads(params["variables"])
                except ValueError:
                    return _error_response("Variables are invalid JSON.")
        else:
            try:
                params = await request.json()
            except ValueError:
                return _error_response("POST body sent invalid JSON.")

        if not isinstance(params, dict):
            return _error_response("GraphQL params should be a JSON object.")

        query = params.get("query")
        if not isinstance(query, str) or not query.strip():
            return _error_response("Must provide query string.")

        variables = params.get("variables")
        if variables is not None and not isinstance(variables, dict):
            return _error_response("Variables must be a JSON object.")

        result = await self.execute(
            query,
            variables=variables,
            operation_name=params.get("operationName"),
            context={"request": request},
        )
        status_code = 200 if result.data is not None else 400
        return JSONResponse(result.formatted, status_code=status_code)


def _error_response(message: str) -> JSONResponse:
    return JSONResponse({"errors": [{"message": message}]}, status_code=400)
