"""
Gatehouse Schema Layer.

Fragment discovery and deterministic composition.

Components:
    - FileFragmentLoader / MemoryFragmentLoader: produce ordered fragments
    - compose: merges SDL fragments into one ComposedSchema
    - compose_resolvers: merges resolver fragments, last fragment wins
"""

from .composer import compose, compose_resolvers, field_signature
from .fragments import ComposedSchema, Resolver, ResolverFragment, ResolverMap, SchemaFragment
from .loaders import FileFragmentLoader, FragmentLoader, MemoryFragmentLoader

__all__ = [
    "ComposedSchema",
    "FileFragmentLoader",
    "FragmentLoader",
    "MemoryFragmentLoader",
    "Resolver",
    "ResolverFragment",
    "ResolverMap",
    "SchemaFragment",
    "compose",
    "compose_resolvers",
    "field_signature",
]
