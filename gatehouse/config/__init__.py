"""
Gatehouse Configuration

Environment-driven settings for the gateway.
"""

from .settings import GatewaySettings, check_production_settings, get_settings

__all__ = [
    "GatewaySettings",
    "check_production_settings",
    "get_settings",
]
