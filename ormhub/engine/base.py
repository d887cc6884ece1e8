"""
ORM Engine Protocols.

ormhub does not implement an ORM. It hands merged configuration to an
engine that does. These protocols define the contract.

Protocols:
    - ORMEngine: loads collection definitions, initializes, tears down
    - Adapter: optional connection hooks an engine may call on adapters

Lifecycle as seen by the engine:

    load_collection(model)   x N   (one per registered model)
    await initialize(config)       (once)
    collections                    (identity -> collection, None before init)
    await teardown()               (once, unless suppressed)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ormhub.config.schemas import ConnectionDefinition, ModelDefinition


@dataclass
class EngineConfig:
    """Adapters, connections and defaults passed to the engine as one object."""

    adapters: dict[str, Any] = field(default_factory=dict)
    connections: dict[str, "ConnectionDefinition"] = field(default_factory=dict)
    defaults: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ORMEngine(Protocol):
    """
    Protocol for the external ORM engine.

    Example:
        class SQLEngine:
            def load_collection(self, definition):
                self._pending.append(definition)

            async def initialize(self, config):
                ...

            async def teardown(self):
                ...

            @property
            def collections(self):
                return self._collections
    """

    def load_collection(self, definition: "ModelDefinition") -> None:
        """Queue one model definition as a collection."""
        ...

    async def initialize(self, config: EngineConfig) -> None:
        """
        Connect to datastores and build collections.

        Raises:
            Exception: Any failure; the lifecycle controller wraps it
        """
        ...

    async def teardown(self) -> None:
        """Release connections."""
        ...

    @property
    def collections(self) -> dict[str, Any] | None:
        """Initialized collections by identity, or None before initialization."""
        ...


class BaseAdapter(ABC):
    """
    Abstract base class for adapters.

    Adapters are not required to subclass this. An engine calls
    ``register_connection`` / ``teardown`` only if the adapter has them.
    """

    @property
    @abstractmethod
    def identity(self) -> str:
        """Adapter identity, used in logs."""
        ...

    async def register_connection(
        self,
        name: str,
        connection: "ConnectionDefinition",
        collections: dict[str, Any],
    ) -> None:
        """Open a connection for the given collections."""
        return None

    async def teardown(self, name: str) -> None:
        """Close a connection."""
        return None


class EngineError(Exception):
    """Error raised by an engine while initializing or tearing down."""

    pass
