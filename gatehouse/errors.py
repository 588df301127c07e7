"""
Error taxonomy for Gatehouse.

- CompositionError: fragments cannot be merged (fatal at startup)
- StartupError: the GraphQL engine failed to build or bind (fatal for its endpoint)
- ConfigurationWarning: optional configuration is missing (production only)
"""
from __future__ import annotations


class GatewayError(Exception):
    """Base class for all Gatehouse errors."""


class CompositionError(GatewayError):
    """
    Raised when schema fragments declare conflicting definitions.

    Attributes:
        type_name: The type whose declarations conflict, when known
        field_name: The conflicting field, when known
    """

    def __init__(
        self,
        message: str,
        *,
        type_name: str | None = None,
        field_name: str | None = None,
    ):
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(message)


class StartupError(GatewayError):
    """Raised to every waiter when the engine startup attempt fails."""


class ConfigurationWarning(UserWarning):
    """Optional configuration is missing and a default is being used."""
