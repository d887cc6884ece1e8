"""
In-Memory ORM Engine.

Reference implementation of the ORMEngine protocol for development and
tests. It validates the wiring between models, connections and adapters
and produces one MemoryCollection per model, but stores nothing and runs
no queries.

Usage:
    engine = MemoryORM()
    hub = OrmHub(engine=engine)
    hub.register({
        "adapters": {"memory": MemoryAdapter()},
        "connections": {"default": {"adapter": "memory"}},
        "defaults": {"connection": "default"},
        "models": [{"identity": "user"}],
    })
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .base import BaseAdapter, EngineConfig, EngineError

if TYPE_CHECKING:
    from ormhub.config.schemas import ConnectionDefinition, ModelDefinition

logger = logging.getLogger(__name__)


@dataclass
class MemoryCollection:
    """Initialized runtime representation of one model."""

    identity: str
    definition: dict[str, Any]
    connections: list[str]
    adapter: Any = None

    @property
    def attributes(self) -> dict[str, Any]:
        return self.definition.get("attributes", {})


@dataclass
class MemoryAdapter(BaseAdapter):
    """
    Adapter that tracks which connections are open and which collections
    they serve.
    """

    name: str = "memory"
    connections: dict[str, list[str]] = field(default_factory=dict)
    closed: list[str] = field(default_factory=list)

    @property
    def identity(self) -> str:
        return self.name

    async def register_connection(
        self,
        name: str,
        connection: "ConnectionDefinition",
        collections: dict[str, Any],
    ) -> None:
        if name in self.connections:
            raise EngineError(f"Connection '{name}' is already open on adapter '{self.name}'")
        self.connections[name] = list(collections)

    async def teardown(self, name: str) -> None:
        self.connections.pop(name, None)
        self.closed.append(name)


class MemoryORM:
    """
    In-memory ORMEngine.

    Model definitions inherit any key they do not set from the defaults
    (most usefully ``connection``).
    """

    def __init__(self) -> None:
        self._definitions: dict[str, "ModelDefinition"] = {}
        self._collections: dict[str, MemoryCollection] | None = None
        self._open: list[tuple[str, Any]] = []
        self._initialized = False

    @property
    def collections(self) -> dict[str, MemoryCollection] | None:
        return self._collections

    @property
    def definitions(self) -> list["ModelDefinition"]:
        return list(self._definitions.values())

    def load_collection(self, definition: "ModelDefinition") -> None:
        if self._initialized:
            raise EngineError("Cannot load collections after initialization")
        if definition.identity in self._definitions:
            raise EngineError(f"Collection '{definition.identity}' is already loaded")
        self._definitions[definition.identity] = definition

    async def initialize(self, config: EngineConfig) -> None:
        if self._initialized:
            raise EngineError("Engine is already initialized")
        self._initialized = True

        collections: dict[str, MemoryCollection] = {}
        by_connection: dict[str, dict[str, MemoryCollection]] = {}

        for identity, model in self._definitions.items():
            definition = {**config.defaults, **model.to_definition()}
            names = self._connection_names(identity, definition)

            adapter = None
            for name in names:
                connection = config.connections.get(name)
                if connection is None:
                    raise EngineError(f"Model '{identity}' uses unknown connection '{name}'")
                if connection.adapter not in config.adapters:
                    raise EngineError(
                        f"Connection '{name}' uses unknown adapter '{connection.adapter}'"
                    )
                adapter = adapter or config.adapters[connection.adapter]

            collection = MemoryCollection(
                identity=identity,
                definition=definition,
                connections=names,
                adapter=adapter,
            )
            collections[identity] = collection
            for name in names:
                by_connection.setdefault(name, {})[identity] = collection

        for name, members in by_connection.items():
            connection = config.connections[name]
            adapter = config.adapters[connection.adapter]
            register = getattr(adapter, "register_connection", None)
            if register is not None:
                await _maybe_await(register(name, connection, members))
            self._open.append((name, adapter))
            logger.debug(f"[memory_orm] Opened connection {name} for {list(members)}")

        self._collections = collections
        logger.info(f"[memory_orm] Initialized {len(collections)} collections")

    async def teardown(self) -> None:
        """
        Close every open connection, then drop the collections.

        All connections get a close attempt even if one fails; the first
        failure is re-raised afterwards.
        """
        first_error: Exception | None = None
        try:
            while self._open:
                name, adapter = self._open.pop(0)
                close = getattr(adapter, "teardown", None)
                try:
                    if close is not None:
                        await _maybe_await(close(name))
                except Exception as e:
                    logger.error(f"[memory_orm] Failed to close connection {name}: {e}")
                    if first_error is None:
                        first_error = e
                    continue
                logger.debug(f"[memory_orm] Closed connection {name}")
        finally:
            self._collections = None

        if first_error is not None:
            raise first_error

    @staticmethod
    def _connection_names(identity: str, definition: dict[str, Any]) -> list[str]:
        connection = definition.get("connection")
        if not connection:
            raise EngineError(f"Model '{identity}' has no connection and no default connection is set")
        if isinstance(connection, str):
            return [connection]
        return list(connection)


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result
