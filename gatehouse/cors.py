"""
CORS policy.

Resolved once from settings and applied to every request through
Starlette's CORSMiddleware.

Loopback origins (http://localhost:<port>, http://127.0.0.1:<port>) are
always allowed, whatever CORS_ORIGINS says.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gatehouse.config import GatewaySettings

logger = logging.getLogger(__name__)

LOOPBACK_ORIGIN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"http://localhost:\d+"),
    re.compile(r"http://127\.0\.0\.1:\d+"),
)


@dataclass(frozen=True)
class CorsPolicy:
    """Immutable allow-list evaluated per request."""

    origins: tuple[str, ...]
    origin_patterns: tuple[re.Pattern[str], ...]
    methods: tuple[str, ...]
    headers: tuple[str, ...]
    credentials: bool

    @property
    def origin_regex(self) -> str | None:
        """All patterns as one regex, in the form CORSMiddleware expects."""
        if not self.origin_patterns:
            return None
        return "|".join(f"(?:{pattern.pattern})" for pattern in self.origin_patterns)

    def allows_origin(self, origin: str) -> bool:
        if origin in self.origins:
            return True
        return any(pattern.fullmatch(origin) for pattern in self.origin_patterns)


def resolve_cors_policy(settings: GatewaySettings) -> CorsPolicy:
    """Build the policy from settings plus the built-in loopback patterns."""
    return CorsPolicy(
        origins=tuple(settings.cors_origins),
        origin_patterns=LOOPBACK_ORIGIN_PATTERNS,
        methods=tuple(settings.cors_methods),
        headers=tuple(settings.cors_headers),
        credentials=settings.cors_credentials,
    )


def apply_cors_policy(app: FastAPI, policy: CorsPolicy) -> None:
    """Install CORSMiddleware configured from the policy."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(policy.origins),
        allow_origin_regex=policy.origin_regex,
        allow_methods=list(policy.methods),
        allow_headers=list(policy.headers),
        allow_credentials=policy.credentials,
    )


def log_cors_policy(policy: CorsPolicy) -> None:
    if policy.origins:
        logger.info(f"[cors] Origins: {', '.join(policy.origins)}")
    logger.info(f"[cors] Methods: {', '.join(policy.methods)}")
    logger.info(f"[cors] Headers: {', '.join(policy.headers)}")
    logger.info(f"[cors] Credentials: {policy.credentials}")
