from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def resolve_server_time(_root: Any, _info: Any) -> str:
    return datetime.now(UTC).isoformat()


resolvers = {
    "Query": {"serverTime": resolve_server_time},
}
