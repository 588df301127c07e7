"""
Schema Composer.

Merges independently authored schema fragments into one GraphQL document
and resolver fragments into one resolver map.

Merge rules:
    Types      - same-named declarations (including `extend type`) are
                 folded together; fields are unioned.
    Fields     - identical signatures are kept once, differing signatures
                 raise CompositionError. A signature is the field's argument
                 list plus its return type; descriptions and directives
                 are ignored.
    Enums      - values are unioned.
    Unions     - member types are unioned.
    Directives - identical definitions are kept once, differing ones raise.
    Resolvers  - last fragment wins for a (type, field) pair. Callers that
                 override a handler rely on the loader's stable order.

Both compose() and compose_resolvers() are pure: no I/O, no request state.
Output order follows first appearance, so the same ordered input always
produces the same document.

Usage:
    schema = compose([SchemaFragment("a.graphql", sdl_a), SchemaFragment("b.graphql", sdl_b)])
    resolvers = compose_resolvers([ResolverFragment("a", {...}), ResolverFragment("b", {...})])
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from graphql import (
    DirectiveDefinitionNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    GraphQLSyntaxError,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    NameNode,
    NamedTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    OperationTypeDefinitionNode,
    ScalarTypeDefinitionNode,
    ScalarTypeExtensionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
    parse,
    print_ast,
)

from gatehouse.errors import CompositionError

from .fragments import ComposedSchema, ResolverFragment, ResolverMap, SchemaFragment

logger = logging.getLogger(__name__)


_KINDS: dict[type, str] = {
    ObjectTypeDefinitionNode: "type",
    ObjectTypeExtensionNode: "type",
    InterfaceTypeDefinitionNode: "interface",
    InterfaceTypeExtensionNode: "interface",
    InputObjectTypeDefinitionNode: "input",
    InputObjectTypeExtensionNode: "input",
    EnumTypeDefinitionNode: "enum",
    EnumTypeExtensionNode: "enum",
    UnionTypeDefinitionNode: "union",
    UnionTypeExtensionNode: "union",
    ScalarTypeDefinitionNode: "scalar",
    ScalarTypeExtensionNode: "scalar",
}

_DEFINITION_NODES: dict[str, type] = {
    "type": ObjectTypeDefinitionNode,
    "interface": InterfaceTypeDefinitionNode,
    "input": InputObjectTypeDefinitionNode,
    "enum": EnumTypeDefinitionNode,
    "union": UnionTypeDefinitionNode,
    "scalar": ScalarTypeDefinitionNode,
}


# =============================================================================
# Signatures
# =============================================================================


def _input_value_signature(node: Any) -> str:
    signature = f"{node.name.value}: {print_ast(node.type)}"
    if node.default_value is not None:
        signature += f" = {print_ast(node.default_value)}"
    return signature


def field_signature(node: Any) -> str:
    """
    Comparable signature of a field or input field.

    Object and interface fields include their argument list;
    input fields include their default value.
    """
    arguments = getattr(node, "arguments", None)
    if arguments is None and hasattr(node, "default_value"):
        return _input_value_signature(node)
    args = ", ".join(_input_value_signature(arg) for arg in arguments or ())
    return f"({args}): {print_ast(node.type)}"


def _directive_signature(node: DirectiveDefinitionNode) -> str:
    args = ", ".join(_input_value_signature(arg) for arg in node.arguments or ())
    repeatable = " repeatable" if node.repeatable else ""
    locations = " | ".join(location.value for location in node.locations)
    return f"({args}){repeatable} on {locations}"


# =============================================================================
# Drafts
# =============================================================================


@dataclass
class _TypeDraft:
    """Mutable accumulator for one named type while fragments are merged."""

    kind: str
    name: str
    origin: str
    description: Any = None
    interfaces: dict[str, NamedTypeNode] = field(default_factory=dict)
    directives: dict[str, Any] = field(default_factory=dict)
    fields: dict[str, tuple[str, Any, str]] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)
    members: dict[str, NamedTypeNode] = field(default_factory=dict)

    def absorb(self, node: Any, fragment: str) -> None:
        if self.description is None and getattr(node, "description", None) is not None:
            self.description = node.description

        for directive in node.directives or ():
            self.directives.setdefault(print_ast(directive), directive)

        for interface in getattr(node, "interfaces", None) or ():
            self.interfaces.setdefault(interface.name.value, interface)

        for member in getattr(node, "types", None) or ():
            self.members.setdefault(member.name.value, member)

        for value in getattr(node, "values", None) or ():
            self.values.setdefault(value.name.value, value)

        for field_node in getattr(node, "fields", None) or ():
            self._absorb_field(field_node, fragment)

    def _absorb_field(self, node: Any, fragment: str) -> None:
        field_name = node.name.value
        signature = field_signature(node)
        existing = self.fields.get(field_name)

        if existing is None:
            self.fields[field_name] = (signature, node, fragment)
            return

        existing_signature, _, existing_fragment = existing
        if existing_signature != signature:
            raise CompositionError(
                f"Conflicting declarations of {self.name}.{field_name}: "
                f"'{existing_signature}' in {existing_fragment} "
                f"vs '{signature}' in {fragment}",
                type_name=self.name,
                field_name=field_name,
            )

    def build(self) -> Any:
        node_class = _DEFINITION_NODES[self.kind]
        attrs: dict[str, Any] = {
            "name": NameNode(value=self.name),
            "description": self.description,
            "directives": tuple(self.directives.values()),
        }
        if self.kind in ("type", "interface"):
            attrs["interfaces"] = tuple(self.interfaces.values())
            attrs["fields"] = tuple(node for _, node, _ in self.fields.values())
        elif self.kind == "input":
            attrs["fields"] = tuple(node for _, node, _ in self.fields.values())
        elif self.kind == "enum":
            attrs["values"] = tuple(self.values.values())
        elif self.kind == "union":
            attrs["types"] = tuple(self.members.values())
        return node_class(**attrs)


# =============================================================================
# Composition
# =============================================================================


def _parse(fragment: SchemaFragment) -> DocumentNode:
    try:
        return parse(fragment.source, no_location=True)
    except GraphQLSyntaxError as e:
        raise CompositionError(f"Invalid schema fragment {fragment.name}: {e.message}") from e


def compose(fragments: Sequence[SchemaFragment]) -> ComposedSchema:
    """
    Merge schema fragments into a single document.

    Args:
        fragments: Fragments in discovery order

    Returns:
        ComposedSchema with types in order of first appearance

    Raises:
        CompositionError: On invalid SDL or conflicting declarations
    """
    types: dict[str, _TypeDraft] = {}
    directives: dict[str, tuple[str, DirectiveDefinitionNode, str]] = {}
    operations: dict[Any, tuple[OperationTypeDefinitionNode, str]] = {}

    for fragment in fragments:
        document = _parse(fragment)

        for definition in document.definitions:
            if isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
                for operation in definition.operation_types or ():
                    existing = operations.get(operation.operation)
                    if existing is None:
                        operations[operation.operation] = (operation, fragment.name)
                    elif existing[0].type.name.value != operation.type.name.value:
                        raise CompositionError(
                            f"Conflicting {operation.operation.value} root type: "
                            f"{existing[0].type.name.value} in {existing[1]} "
                            f"vs {operation.type.name.value} in {fragment.name}"
                        )
                continue

            if isinstance(definition, DirectiveDefinitionNode):
                name = definition.name.value
                signature = _directive_signature(definition)
                existing_directive = directives.get(name)
                if existing_directive is None:
                    directives[name] = (signature, definition, fragment.name)
                elif existing_directive[0] != signature:
                    raise CompositionError(
                        f"Conflicting definitions of directive @{name} "
                        f"in {existing_directive[2]} and {fragment.name}"
                    )
                continue

            kind = _KINDS.get(type(definition))
            if kind is None:
                raise CompositionError(
                    f"Unsupported definition '{definition.kind}' in schema fragment {fragment.name}"
                )

            name = definition.name.value
            draft = types.get(name)
            if draft is None:
                draft = types[name] = _TypeDraft(kind=kind, name=name, origin=fragment.name)
            elif draft.kind != kind:
                raise CompositionError(
                    f"{name} is declared as {draft.kind} in {draft.origin} "
                    f"and as {kind} in {fragment.name}",
                    type_name=name,
                )
            draft.absorb(definition, fragment.name)

    definitions: list[Any] = []
    if operations:
        definitions.append(
            SchemaDefinitionNode(
                directives=(),
                operation_types=tuple(node for node, _ in operations.values()),
            )
        )
    definitions.extend(node for _, node, _ in directives.values())
    definitions.extend(draft.build() for draft in types.values())

    composed = ComposedSchema(
        document=DocumentNode(definitions=tuple(definitions)),
        fragment_names=tuple(fragment.name for fragment in fragments),
    )
    logger.info(f"[composer] Composed {len(types)} types from {len(fragments)} schema fragments")
    return composed


def compose_resolvers(fragments: Sequence[ResolverFragment]) -> ResolverMap:
    """
    Merge resolver fragments into one read-only map.

    When two fragments provide a handler for the same (type, field),
    the later fragment wins. This is intentional: it lets a fragment
    discovered later override a default handler.

    Raises:
        CompositionError: If a handler is not callable
    """
    merged: dict[str, dict[str, Any]] = {}

    for fragment in fragments:
        for type_name, fields in fragment.resolvers.items():
            if not isinstance(fields, Mapping):
                raise CompositionError(
                    f"Resolvers for {type_name} in {fragment.name} must map field names "
                    f"to handlers, got {type(fields).__name__}",
                    type_name=type_name,
                )

        for type_name, field_name, handler in fragment.pairs():
            if not callable(handler):
                raise CompositionError(
                    f"Resolver {type_name}.{field_name} in {fragment.name} is not callable",
                    type_name=type_name,
                    field_name=field_name,
                )
            fields = merged.setdefault(type_name, {})
            if field_name in fields and fields[field_name] is not handler:
                logger.debug(f"[composer] {fragment.name} overrides {type_name}.{field_name}")
            fields[field_name] = handler

    return MappingProxyType(
        {type_name: MappingProxyType(fields) for type_name, fields in merged.items()}
    )
