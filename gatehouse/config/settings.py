"""
Gateway Settings.

Settings are read from the environment once per process. A local `.env`
file is loaded first so development setups don't need exported variables.

Security:
    API keys use SecretStr to prevent accidental logging.
    Access secret values with: settings.openai_api_key.get_secret_value()
"""
from __future__ import annotations

import logging
import os
import warnings
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from gatehouse.errors import ConfigurationWarning

logger = logging.getLogger(__name__)

DEFAULT_FRAGMENTS_DIR = Path(__file__).resolve().parent.parent / "fragments"

DEFAULT_CORS_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
DEFAULT_CORS_HEADERS = ("Content-Type", "Authorization")

KNOWN_ENVIRONMENTS = ("development", "test", "production")


def _split_csv(raw: str | None) -> tuple[str, ...] | None:
    """Split a comma-separated value, or None when the variable is unset."""
    if raw is None:
        return None
    return tuple(item.strip() for item in raw.split(",") if item.strip())


class GatewaySettings(BaseModel):
    """
    Application settings model.

    Used for type-safe settings access. Built by get_settings() from the
    environment; tests construct it directly.
    """

    model_config = ConfigDict(frozen=True)

    # Service identity
    service_name: str = "gatehouse"
    service_version: str = "1.1.0"
    environment: Literal["development", "test", "production"] = "development"
    serverless: bool = Field(default=False, description="Hosted by a serverless platform")
    debug: bool = False

    # Listening socket
    port: int = Field(default=3000, ge=1, le=65535)
    host_url: str | None = Field(default=None, description="Explicit public origin override")

    # Optional integrations
    openai_api_key: SecretStr | None = None

    # CORS
    cors_origins: tuple[str, ...] = ()
    cors_methods: tuple[str, ...] = DEFAULT_CORS_METHODS
    cors_headers: tuple[str, ...] = DEFAULT_CORS_HEADERS
    cors_credentials: bool = True

    # Layout
    fragments_dir: Path = DEFAULT_FRAGMENTS_DIR
    graphql_path: str = "/graphql"
    docs_path: str = "/api-docs"

    @field_validator("host_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @property
    def public_url(self) -> str:
        """HOST_URL, or the local address the process listens on."""
        return self.host_url or f"http://localhost:{self.port}"

    @property
    def eager_start(self) -> bool:
        """Whether the engine starts with the process instead of on first request."""
        return self.environment != "test" and not self.serverless


def _parse_environment(raw: str) -> str:
    environment = raw.strip().lower()
    if environment not in KNOWN_ENVIRONMENTS:
        logger.warning(f"[config] Unknown ENVIRONMENT '{raw}', running as development")
        return "development"
    return environment


def _parse_credentials(raw: str | None) -> bool:
    # Only the literal "false" disables credentials
    return raw != "false"


@lru_cache()
def get_settings() -> GatewaySettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    # Search from the working directory, not from the installed package
    load_dotenv(find_dotenv(usecwd=True))

    values: dict = {
        "service_name": os.getenv("SERVICE_NAME", "gatehouse"),
        "environment": _parse_environment(os.getenv("ENVIRONMENT", "development")),
        "serverless": bool(os.getenv("VERCEL"))
        or os.getenv("SERVERLESS", "false").lower() == "true",
        "debug": os.getenv("DEBUG", "false").lower() == "true",
        "port": int(os.getenv("PORT", "3000")),
        "host_url": os.getenv("HOST_URL") or None,
        "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
        "cors_origins": _split_csv(os.getenv("CORS_ORIGINS")) or (),
        "cors_credentials": _parse_credentials(os.getenv("CORS_CREDENTIALS")),
        "graphql_path": os.getenv("GRAPHQL_PATH", "/graphql"),
        "docs_path": os.getenv("DOCS_PATH", "/api-docs"),
    }

    methods = _split_csv(os.getenv("CORS_METHODS"))
    if methods is not None:
        values["cors_methods"] = methods
    headers = _split_csv(os.getenv("CORS_HEADERS"))
    if headers is not None:
        values["cors_headers"] = headers
    fragments_dir = os.getenv("FRAGMENTS_DIR")
    if fragments_dir:
        values["fragments_dir"] = Path(fragments_dir)

    return GatewaySettings(**values)


def check_production_settings(settings: GatewaySettings) -> list[ConfigurationWarning]:
    """
    Report missing optional configuration.

    Only production deployments are checked. Each problem is logged and
    emitted through the warnings module, then returned to the caller.
    """
    if settings.environment != "production":
        return []

    problems: list[ConfigurationWarning] = []
    if settings.openai_api_key is None:
        problems.append(
            ConfigurationWarning("OPENAI_API_KEY is not set. MCP features will not be available.")
        )
    if settings.host_url is None:
        problems.append(
            ConfigurationWarning(
                f"HOST_URL is not set. Defaulting to {settings.public_url}. "
                "Ensure this matches your public domain."
            )
        )

    for problem in problems:
        logger.warning(f"[config] {problem}")
        warnings.warn(problem, stacklevel=2)
    return problems
