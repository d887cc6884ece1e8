"""
ormhub Engine Layer.

The ORM engine is external; this package defines its protocol and ships an
in-memory reference engine.
"""

from .base import BaseAdapter, EngineConfig, EngineError, ORMEngine
from .memory import MemoryAdapter, MemoryCollection, MemoryORM

__all__ = [
    "BaseAdapter",
    "EngineConfig",
    "EngineError",
    "ORMEngine",
    "MemoryAdapter",
    "MemoryCollection",
    "MemoryORM",
]
