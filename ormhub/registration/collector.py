"""
Global Collector and Merge Engine.

The Collector holds the merged configuration of every plugin registered
with one hub. It is mutated only by ``Collector.merge()`` and only while
registration is open; the lifecycle controller freezes it at startup.

Merge rules:
    - adapters, connections, models and defaults are keyed maps
    - a key already present raises DuplicateRegistrationError
    - teardown_on_stop may be set once (AlreadySetError otherwise)
    - insertion order is preserved

A failed merge is not rolled back. Failure is a fatal misconfiguration and
the host must not start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ormhub.config.schemas import ConfigFragment, ConnectionDefinition, ModelDefinition
from ormhub.errors import AlreadySetError, DuplicateRegistrationError, LifecycleError

from .scopes import Scope, ScopeStore

logger = logging.getLogger(__name__)


@dataclass
class Collector:
    """
    Merged configuration for one hub.

    Attributes:
        adapters: adapter name -> adapter object
        connections: connection name -> definition
        models: identity -> model definition
        defaults: default key -> value
        teardown_on_stop: None while unset (behaves as True)
    """

    adapters: dict[str, Any] = field(default_factory=dict)
    connections: dict[str, ConnectionDefinition] = field(default_factory=dict)
    models: dict[str, ModelDefinition] = field(default_factory=dict)
    defaults: dict[str, Any] = field(default_factory=dict)
    teardown_on_stop: bool | None = None
    frozen: bool = False

    @property
    def datastores(self) -> dict[str, ConnectionDefinition]:
        """Alias of ``connections`` under the newer ORM naming."""
        return self.connections

    def freeze(self) -> None:
        self.frozen = True

    def set_teardown_on_stop(self, value: bool) -> None:
        """
        Set the one-time teardown flag.

        Raises:
            AlreadySetError: If any registration already set it
        """
        self._ensure_open()
        if self.teardown_on_stop is not None:
            raise AlreadySetError("teardown_on_stop")
        self.teardown_on_stop = value
        logger.info(f"[collector] teardown_on_stop set to {value}")

    def merge(self, fragment: ConfigFragment, scope: Scope, scopes: ScopeStore) -> list[str]:
        """
        Fold a normalized fragment into the collector.

        Args:
            fragment: Normalized configuration fragment
            scope: Scope the fragment is registered under
            scopes: Store recording which models belong to which scope

        Returns:
            Model identities merged by this call

        Raises:
            DuplicateRegistrationError: If any key was registered before
            LifecycleError: If registration is closed
        """
        self._ensure_open()

        for name, adapter in fragment.adapters.items():
            self._insert(self.adapters, "adapter", name, adapter)

        for name, connection in fragment.connections.items():
            self._insert(self.connections, "connection", name, connection)

        identities = fragment.identities
        for model in fragment.models:
            self._insert(self.models, "model", model.identity, model)

        for key, value in fragment.defaults.items():
            self._insert(self.defaults, "default", key, value)

        scopes.record(scope, identities)

        logger.info(
            f"[collector] Merged into {scope.path}: "
            f"adapters={list(fragment.adapters)} "
            f"connections={list(fragment.connections)} "
            f"models={identities} "
            f"defaults={list(fragment.defaults)}"
        )
        return identities

    def summary(self) -> dict[str, Any]:
        return {
            "adapters": list(self.adapters),
            "connections": list(self.connections),
            "models": list(self.models),
            "defaults": list(self.defaults),
            "teardown_on_stop": self.teardown_on_stop,
        }

    @staticmethod
    def _insert(target: dict[str, Any], kind: str, key: str, value: Any) -> None:
        if key in target:
            raise DuplicateRegistrationError(kind, key)
        target[key] = value
        logger.debug(f"[collector] Registered {kind}: {key}")

    def _ensure_open(self) -> None:
        if self.frozen:
            raise LifecycleError("Registration is closed: the ORM has already been started.")
