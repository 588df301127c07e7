"""
Fragment Loaders.

Discover schema and resolver fragments and hand them to the composer as
ordered sequences.

Design Principle:
    The composer never touches the filesystem. Loaders abstract away WHERE
    fragments come from so composition can be tested with synthetic lists.
    - Application: FileFragmentLoader (SDL files + Python resolver modules)
    - Testing: MemoryFragmentLoader (in-memory)

Order:
    FileFragmentLoader sorts paths, so discovery order is stable across
    restarts. Resolver overrides depend on it.

Usage:
    loader = FileFragmentLoader("gatehouse/fragments")
    schema = compose(loader.load_schema_fragments())
    resolvers = compose_resolvers(loader.load_resolver_fragments())
"""
from __future__ import annotations

import hashlib
import importlib.util
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from gatehouse.errors import CompositionError

from .fragments import ResolverFragment, ResolverMap, SchemaFragment

logger = logging.getLogger(__name__)


class FragmentLoader(Protocol):
    """Protocol for fragment sources."""

    def load_schema_fragments(self) -> list[SchemaFragment]:
        """Return schema fragments in a stable order."""
        ...

    def load_resolver_fragments(self) -> list[ResolverFragment]:
        """Return resolver fragments in a stable order."""
        ...


class FileFragmentLoader:
    """
    Loads fragments from a directory tree.

    fragments/
    ├── base.graphql            # schema fragment
    ├── status.graphql
    ├── status_resolver.py      # resolver fragment
    └── market/
        ├── market.graphql
        └── market_resolver.py

    Resolver modules export a module-level `resolvers` mapping:

        resolvers = {
            "Query": {"status": resolve_status},
        }
    """

    def __init__(
        self,
        base_dir: str | Path,
        *,
        schema_pattern: str = "**/*.graphql",
        resolver_pattern: str = "**/*_resolver.py",
    ):
        """
        Initialize loader.

        Args:
            base_dir: Root directory to search
            schema_pattern: Glob for SDL files
            resolver_pattern: Glob for resolver modules
        """
        self._base_dir = Path(base_dir)
        self._schema_pattern = schema_pattern
        self._resolver_pattern = resolver_pattern

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _discover(self, pattern: str) -> list[Path]:
        if not self._base_dir.exists():
            logger.warning(f"[loader] Fragments directory not found: {self._base_dir}")
            return []
        return sorted(path for path in self._base_dir.glob(pattern) if path.is_file())

    def _label(self, path: Path) -> str:
        return path.relative_to(self._base_dir).as_posix()

    def load_schema_fragments(self) -> list[SchemaFragment]:
        """Read every SDL file under base_dir."""
        fragments = [
            SchemaFragment(name=self._label(path), source=path.read_text(encoding="utf-8"))
            for path in self._discover(self._schema_pattern)
        ]
        logger.info(f"[loader] Loaded {len(fragments)} schema fragments from {self._base_dir}")
        return fragments

    def load_resolver_fragments(self) -> list[ResolverFragment]:
        """Import every resolver module under base_dir."""
        fragments = [self._import_resolvers(path) for path in self._discover(self._resolver_pattern)]
        logger.info(f"[loader] Loaded {len(fragments)} resolver fragments from {self._base_dir}")
        return fragments

    def _import_resolvers(self, path: Path) -> ResolverFragment:
        label = self._label(path)
        # Unique module name so same-named files in different folders don't collide
        digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:10]
        module_name = f"gatehouse_fragment_{path.stem}_{digest}"

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise CompositionError(f"Cannot import resolver fragment {label}")

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        resolvers = getattr(module, "resolvers", None)
        if not isinstance(resolvers, Mapping):
            raise CompositionError(
                f"Resolver fragment {label} must define a 'resolvers' mapping"
            )
        return ResolverFragment(name=label, resolvers=resolvers)


class MemoryFragmentLoader:
    """
    In-memory fragment loader for testing.

    Usage:
        loader = MemoryFragmentLoader()
        loader.add_schema("base", "type Query { ping: String }")
        loader.add_resolvers("base", {"Query": {"ping": lambda *_: "pong"}})
    """

    def __init__(self):
        self._schemas: list[SchemaFragment] = []
        self._resolvers: list[ResolverFragment] = []

    def add_schema(self, name: str, source: str) -> None:
        """Append a schema fragment."""
        self._schemas.append(SchemaFragment(name=name, source=source))

    def add_resolvers(self, name: str, resolvers: ResolverMap) -> None:
        """Append a resolver fragment."""
        self._resolvers.append(ResolverFragment(name=name, resolvers=resolvers))

    def load_schema_fragments(self) -> list[SchemaFragment]:
        return list(self._schemas)

    def load_resolver_fragments(self) -> list[ResolverFragment]:
        return list(self._resolvers)

    def clear(self) -> None:
        """Clear all fragments."""
        self._schemas.clear()
        self._resolvers.clear()
