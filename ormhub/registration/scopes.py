"""
Registration Scopes.

A Scope identifies who contributed a piece of configuration. Scopes form a
tree rooted at the hub:

    root
    ├── root/users            (a plugin)
    │   └── root/users/admin  (a sub-registration of that plugin)
    └── root/catalog

The ScopeStore remembers, per scope, the model identities that scope
registered. It never owns model data; that lives in the Collector.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ROOT_SCOPE_NAME = "root"
SEPARATOR = "/"


@dataclass(frozen=True)
class Scope:
    """Immutable, hashable scope identifier."""

    name: str
    parent: Scope | None = None

    def __post_init__(self) -> None:
        if not self.name or SEPARATOR in self.name:
            raise ValueError(f"Invalid scope name: {self.name!r}")

    @property
    def path(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent.path}{SEPARATOR}{self.name}"

    def child(self, name: str) -> Scope:
        return Scope(name=name, parent=self)

    def is_within(self, other: Scope) -> bool:
        """True if this scope is ``other`` or one of its descendants."""
        scope: Scope | None = self
        while scope is not None:
            if scope == other:
                return True
            scope = scope.parent
        return False

    def __str__(self) -> str:
        return self.path


ROOT_SCOPE = Scope(ROOT_SCOPE_NAME)


@dataclass
class ScopeRecord:
    """Models registered by one scope. Append-only."""

    scope: Scope
    models: list[str] = field(default_factory=list)

    def extend(self, identities: list[str]) -> None:
        self.models.extend(identities)


class ScopeStore:
    """
    Per-scope record storage.

    Records are created lazily on first registration.

    Usage:
        store = ScopeStore()
        store.record(root.child("users"), ["user", "session"])
        store.models_for(root.child("users"))  # ["user", "session"]
    """

    def __init__(self, root: Scope = ROOT_SCOPE) -> None:
        self._root = root
        self._records: dict[Scope, ScopeRecord] = {}

    @property
    def root(self) -> Scope:
        return self._root

    def coerce(self, scope: Scope | str | None) -> Scope:
        """
        Turn a scope argument into a Scope.

        None means the root. A string is a path relative to the root, so
        ``"users/admin"`` is ``root/users/admin``. A full ``Scope.path`` such
        as ``"root/users/admin"`` gives back the same scope.
        """
        if scope is None:
            return self._root
        if isinstance(scope, Scope):
            return scope

        parts = [part for part in scope.split(SEPARATOR) if part]
        if parts[:1] == [self._root.name]:
            parts = parts[1:]

        result = self._root
        for part in parts:
            result = result.child(part)
        return result

    def record(self, scope: Scope, identities: list[str]) -> ScopeRecord:
        record = self._records.get(scope)
        if record is None:
            record = ScopeRecord(scope=scope)
            self._records[scope] = record

        record.extend(identities)
        if identities:
            logger.debug(f"[scopes] {scope.path} now owns: {record.models}")
        return record

    def get(self, scope: Scope) -> ScopeRecord | None:
        return self._records.get(scope)

    def models_for(self, scope: Scope, *, include_descendants: bool = False) -> list[str]:
        """
        Model identities owned by a scope.

        Args:
            scope: Scope to look up
            include_descendants: Also include identities registered by sub-scopes

        Returns:
            Identities in registration order (empty if the scope never registered)
        """
        if not include_descendants:
            record = self._records.get(scope)
            return list(record.models) if record else []

        models: list[str] = []
        for record in self._records.values():
            if record.scope.is_within(scope):
                models.extend(record.models)
        return models

    def scopes(self) -> list[Scope]:
        return list(self._records.keys())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, scope: Scope) -> bool:
        return scope in self._records
