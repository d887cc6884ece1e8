"""
OrmHub - the configuration aggregation context.

One OrmHub is owned by the application builder and shared by every plugin
that contributes ORM configuration. It replaces any process-wide singleton:
two hubs never see each other's models.

Flow:
    1. Plugins call hub.register(options, scope=...) at build time
    2. The host lifespan calls hub.start() (or uses hub.lifespan)
    3. Handlers read hub.collections(scope) / hub.collections(all=True)
    4. The host lifespan calls hub.stop()

Usage:
    hub = OrmHub(engine=MemoryORM())
    hub.register(
        {
            "adapters": {"memory": MemoryAdapter()},
            "connections": {"default": {"adapter": "memory"}},
            "defaults": {"connection": "default"},
        }
    )
    hub.register([{"identity": "user"}, {"identity": "session"}], scope="users")
    hub.register([{"identity": "product"}], scope="catalog")

    app = FastAPI(lifespan=hub.lifespan)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, AsyncIterator, Protocol, runtime_checkable

from ormhub.engine.memory import MemoryORM
from ormhub.errors import TeardownError
from ormhub.registration import (
    Collector,
    ConfigNormalizer,
    ReferenceResolver,
    Scope,
    ScopeStore,
)

from .lifecycle import LifecycleController, LifecycleState

if TYPE_CHECKING:
    from fastapi import FastAPI

    from ormhub.engine.base import ORMEngine

logger = logging.getLogger(__name__)

STATE_ATTRIBUTE = "ormhub"


@runtime_checkable
class Plugin(Protocol):
    """
    A unit of configuration that registers itself under its own scope.

    ``hub.include(plugin)`` creates the child scope ``<parent>/<plugin.name>``
    and calls ``plugin.register(hub, scope)``.
    """

    name: str

    def register(self, hub: OrmHub, scope: Scope) -> None:
        ...


@dataclass
class OrmPlugin:
    """Plugin that registers a fixed set of options."""

    name: str
    options: Any = field(default_factory=dict)

    def register(self, hub: OrmHub, scope: Scope) -> None:
        hub.register(self.options, scope=scope)


class OrmHub:
    """
    Aggregates plugin ORM configuration and drives the engine lifecycle.

    Args:
        engine: ORM engine (defaults to the in-memory engine)
        resolver: Reference resolver for adapter/model strings
        base_dir: Base directory for relative model paths (ignored if resolver given)
    """

    def __init__(
        self,
        engine: ORMEngine | None = None,
        *,
        resolver: ReferenceResolver | None = None,
        base_dir: str | Path | None = None,
    ):
        self._engine = engine if engine is not None else MemoryORM()
        self._scopes = ScopeStore()
        self._collector = Collector()
        self._normalizer = ConfigNormalizer(resolver or ReferenceResolver(base_dir))
        self._lifecycle = LifecycleController(self._collector, self._engine)

    # ==================== Properties ====================

    @property
    def root(self) -> Scope:
        return self._scopes.root

    @property
    def collector(self) -> Collector:
        return self._collector

    @property
    def scopes(self) -> ScopeStore:
        return self._scopes

    @property
    def engine(self) -> ORMEngine:
        return self._engine

    @property
    def state(self) -> LifecycleState:
        return self._lifecycle.state

    @property
    def ready(self) -> bool:
        return self._lifecycle.state is LifecycleState.READY

    def scope(self, path: Scope | str | None = None) -> Scope:
        """Resolve a scope argument (None = root, str = path under root)."""
        return self._scopes.coerce(path)

    # ==================== Registration ====================

    def register(self, options: Any = None, scope: Scope | str | None = None) -> Scope:
        """
        Plugin registration entry point.

        Args:
            options: PluginOptions, a mapping of the same shape, or a bare
                list of model definitions
            scope: Scope that owns the registered models (default: root)

        Returns:
            The scope the configuration was registered under

        Raises:
            ValidationError: Malformed options
            ResolutionError: Unresolvable adapter/model reference
            DuplicateRegistrationError: Reused adapter/connection/model/default key
            AlreadySetError: teardown_on_stop set a second time
            LifecycleError: Registration after startup
        """
        target = self.scope(scope)
        fragment, teardown_on_stop = self._normalizer.normalize_options(options)

        if teardown_on_stop is not None:
            self._collector.set_teardown_on_stop(teardown_on_stop)

        self._collector.merge(fragment, target, self._scopes)
        return target

    def add(self, config: Any, scope: Scope | str | None = None) -> list[str]:
        """
        Merge a configuration fragment or bare model list.

        Unlike ``register()``, ``teardown_on_stop`` is not accepted.

        Returns:
            Model identities registered by this call
        """
        target = self.scope(scope)
        fragment = self._normalizer.normalize(config)
        return self._collector.merge(fragment, target, self._scopes)

    def include(self, plugin: Plugin, scope: Scope | str | None = None) -> Scope:
        """Register a plugin under a child scope named after it."""
        target = self.scope(scope).child(plugin.name)
        logger.info(f"[hub] Including plugin {plugin.name} at {target.path}")
        plugin.register(self, target)
        return target

    # ==================== Collections ====================

    def collections(
        self,
        scope: Scope | str | None = None,
        *,
        all: bool = False,
        include_descendants: bool = False,
    ) -> dict[str, Any]:
        """
        Initialized collections, keyed by identity.

        Args:
            scope: Scope whose models to return (default: root)
            all: Return every collection regardless of scope
            include_descendants: Also return models registered by sub-scopes

        Returns:
            Mapping of identity to collection; empty if the engine has not
            produced collections yet
        """
        available = self._engine.collections
        if not available:
            return {}

        if all:
            return dict(available)

        identities = self._scopes.models_for(
            self.scope(scope),
            include_descendants=include_descendants,
        )
        return {identity: available[identity] for identity in identities if identity in available}

    # ==================== Lifecycle ====================

    async def start(self) -> None:
        await self._lifecycle.start()

    async def stop(self) -> None:
        await self._lifecycle.stop()

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        """
        FastAPI lifespan: start the ORM before serving, stop it after.

        Attaches the hub to ``app.state.ormhub`` for request dependencies.
        """
        setattr(app.state, STATE_ATTRIBUTE, self)

        logger.info("Starting ORM...")
        try:
            await self.start()
        except Exception as e:
            logger.error(f"Failed to start ORM: {e}", exc_info=True)
            raise

        yield

        logger.info("Stopping ORM...")
        try:
            await self.stop()
        except TeardownError as e:
            logger.error(f"Error during ORM teardown: {e}", exc_info=True)
