"""
ormhub Runtime Layer.

Ties registration and the ORM engine together:
    - OrmHub: aggregation context and registration entry point
    - LifecycleController: one start, one stop
"""

from .hub import OrmHub, OrmPlugin, Plugin
from .lifecycle import LifecycleController, LifecycleState

__all__ = [
    "LifecycleController",
    "LifecycleState",
    "OrmHub",
    "OrmPlugin",
    "Plugin",
]
