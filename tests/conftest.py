"""
Pytest configuration and fixtures for Gatehouse tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from gatehouse.schema import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from gatehouse.config import GatewaySettings, get_settings  # noqa: E402
from gatehouse.schema import MemoryFragmentLoader  # noqa: E402

SETTINGS_ENV_VARS = (
    "SERVICE_NAME",
    "ENVIRONMENT",
    "SERVERLESS",
    "VERCEL",
    "DEBUG",
    "PORT",
    "HOST_URL",
    "OPENAI_API_KEY",
    "CORS_ORIGINS",
    "CORS_METHODS",
    "CORS_HEADERS",
    "CORS_CREDENTIALS",
    "FRAGMENTS_DIR",
    "GRAPHQL_PATH",
    "DOCS_PATH",
)


def resolve_ping(_root, _info):
    return "pong"


def resolve_echo(_root, _info, text):
    return text


@pytest.fixture
def test_settings():
    """Settings for an app that defers engine startup to the first request."""
    return GatewaySettings(environment="test")


@pytest.fixture
def memory_loader():
    """Two fragments contributing disjoint Query fields."""
    loader = MemoryFragmentLoader()
    loader.add_schema("ping.graphql", "type Query { ping: String! }")
    loader.add_schema("echo.graphql", "extend type Query { echo(text: String!): String! }")
    loader.add_resolvers("ping_resolver.py", {"Query": {"ping": resolve_ping}})
    loader.add_resolvers("echo_resolver.py", {"Query": {"echo": resolve_echo}})
    return loader


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every variable get_settings() reads and reset its cache."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
