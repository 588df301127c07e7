"""
Fragment data model.

A fragment is an independently authored unit of schema or resolver
declarations. Fragments are merged by the composer into a single
ComposedSchema and a single resolver map.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from graphql import DocumentNode, TypeDefinitionNode, print_ast

Resolver = Callable[..., Any]
ResolverMap = Mapping[str, Mapping[str, Resolver]]


@dataclass(frozen=True)
class SchemaFragment:
    """
    GraphQL SDL source discovered from one location.

    Attributes:
        name: Where the fragment came from (path or label), used in errors
        source: Raw SDL text
    """

    name: str
    source: str


@dataclass(frozen=True)
class ResolverFragment:
    """
    Handlers keyed by type name, then field name.

    Several fragments may supply handlers for disjoint fields of the
    same type.
    """

    name: str
    resolvers: ResolverMap = field(default_factory=dict)

    def pairs(self) -> list[tuple[str, str, Resolver]]:
        """Flatten to (type_name, field_name, handler) in declaration order."""
        return [
            (type_name, field_name, handler)
            for type_name, fields in self.resolvers.items()
            for field_name, handler in fields.items()
        ]


@dataclass(frozen=True)
class ComposedSchema:
    """
    The merged schema document.

    Produced once per process and never mutated afterwards.
    """

    document: DocumentNode
    fragment_names: tuple[str, ...] = ()

    @property
    def sdl(self) -> str:
        """Printed SDL of the merged document."""
        return print_ast(self.document)

    @property
    def type_names(self) -> list[str]:
        return [
            definition.name.value
            for definition in self.document.definitions
            if isinstance(definition, TypeDefinitionNode)
        ]
