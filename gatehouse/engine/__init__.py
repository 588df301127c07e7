"""
Gatehouse Engine Layer.

Components:
    - GraphQLEngine: executable schema + HTTP endpoint
    - EngineLifecycle: single, shared, lazy startup attempt
    - RequestGate: middleware awaiting startup on the entry path only
"""

from .gate import RequestGate, is_engine_entry_path
from .graphql import GraphQLEngine
from .lifecycle import Engine, EngineLifecycle, EngineState

__all__ = [
    "Engine",
    "EngineLifecycle",
    "EngineState",
    "GraphQLEngine",
    "RequestGate",
    "is_engine_entry_path",
]
