"""
ormhub - shared ORM configuration for plugin-based FastAPI applications.

Several independent plugins each contribute part of the ORM configuration
(adapters, connections, models, defaults). ormhub merges those fragments
into one de-duplicated configuration, remembers which plugin owns which
models, and initializes / tears down the ORM engine exactly once with the
application lifespan.

Quick Start:
    >>> from fastapi import FastAPI
    >>> from ormhub import OrmHub
    >>> from ormhub.engine import MemoryAdapter
    >>>
    >>> hub = OrmHub()
    >>> hub.register({
    ...     "adapters": {"memory": MemoryAdapter()},
    ...     "connections": {"default": {"adapter": "memory"}},
    ...     "defaults": {"connection": "default"},
    ... })
    >>> hub.register([{"identity": "user"}], scope="users")
    >>> app = FastAPI(lifespan=hub.lifespan)
"""

__version__ = "0.1.0"
__license__ = "MIT"

from ormhub.config import ConfigFragment, ModelDefinition, PluginOptions
from ormhub.errors import (
    AlreadySetError,
    DuplicateRegistrationError,
    InitializationError,
    LifecycleError,
    OrmHubError,
    ResolutionError,
    TeardownError,
    ValidationError,
)
from ormhub.registration import Scope
from ormhub.runtime import LifecycleState, OrmHub, OrmPlugin, Plugin

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Core
    "OrmHub",
    "OrmPlugin",
    "Plugin",
    "Scope",
    "LifecycleState",
    # Configuration
    "ConfigFragment",
    "ModelDefinition",
    "PluginOptions",
    # Errors
    "OrmHubError",
    "ValidationError",
    "ResolutionError",
    "DuplicateRegistrationError",
    "AlreadySetError",
    "LifecycleError",
    "InitializationError",
    "TeardownError",
]
