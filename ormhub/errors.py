"""
Exceptions for ormhub.

Every error here is a configuration or startup failure. Nothing is retried:
a misconfigured persistence layer must stop the host from starting.
"""

from __future__ import annotations

from typing import Any


class OrmHubError(Exception):
    """Base exception for ormhub errors."""

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        key: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.key = key

    def __str__(self) -> str:
        return f"[ormhub] {self.args[0]}"


class ValidationError(OrmHubError):
    """Raised when a configuration fragment does not match the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message)
        self.errors = errors or []


class ResolutionError(OrmHubError):
    """Raised when an adapter or model reference cannot be resolved."""

    def __init__(self, reference: str, reason: str, *, kind: str | None = None):
        super().__init__(
            f"Could not resolve {kind or 'reference'} '{reference}': {reason}",
            kind=kind,
            key=reference,
        )
        self.reference = reference


class DuplicateRegistrationError(OrmHubError):
    """Raised when an adapter, connection, model or default key is reused."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind.capitalize()} '{key}' has already been registered.", kind=kind, key=key)


class AlreadySetError(OrmHubError):
    """Raised when a set-once option is supplied a second time."""

    def __init__(self, option: str):
        super().__init__(f"Option '{option}' can only be specified once.", kind="option", key=option)


class LifecycleError(OrmHubError):
    """Raised on an invalid lifecycle transition or a late registration."""

    pass


class InitializationError(OrmHubError):
    """Raised when the ORM engine fails to initialize."""

    pass


class TeardownError(OrmHubError):
    """Raised when the ORM engine fails during teardown."""

    pass
