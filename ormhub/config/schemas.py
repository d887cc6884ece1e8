"""
Configuration Schemas for ormhub.

Pydantic models for the configuration fragments that plugins contribute,
plus the application settings model.

Shapes:
    - ModelDefinition: one model, keyed by its ``identity``
    - ConnectionDefinition: one named datastore reachable via an adapter
    - ConfigFragment: the canonical shape every registration is normalized to
    - PluginOptions: what a plugin passes to ``OrmHub.register()``

Unknown keys on a model or connection are kept (the ORM engine decides what
they mean). Unknown top-level keys on a fragment are rejected.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ModelDefinition(BaseModel):
    """
    Definition of a single model, handed to the ORM engine as one collection.

    Example:
        {
            "identity": "user",
            "connection": "primary",
            "attributes": {"name": "string", "email": "string"}
        }
    """

    model_config = ConfigDict(extra="allow")

    identity: str = Field(..., min_length=1, description="Unique model identity")
    connection: str | list[str] | None = Field(
        default=None,
        description="Connection name(s); falls back to the 'connection' default",
    )
    attributes: dict[str, Any] = Field(default_factory=dict)

    def to_definition(self) -> dict[str, Any]:
        """Plain dict form, including any extra keys."""
        return self.model_dump(exclude_none=True)


class ConnectionDefinition(BaseModel):
    """
    A named datastore configuration.

    ``adapter`` names an entry in the merged adapters map. Everything else
    (host, database, credentials, ...) is adapter specific.
    """

    model_config = ConfigDict(extra="allow")

    adapter: str = Field(..., min_length=1, description="Adapter name")

    @property
    def options(self) -> dict[str, Any]:
        """Adapter-specific options (everything except ``adapter``)."""
        return dict(self.model_extra or {})


class ConfigFragment(BaseModel):
    """
    Canonical configuration fragment.

    All four keys are always present after normalization. ``adapters``
    values are live adapter objects once references have been resolved.
    ``datastores`` is accepted as an alternative spelling of ``connections``.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    adapters: dict[str, Any] = Field(default_factory=dict)
    connections: dict[str, ConnectionDefinition] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("connections", "datastores"),
    )
    models: list[ModelDefinition] = Field(default_factory=list)
    defaults: dict[str, Any] = Field(default_factory=dict)

    @property
    def identities(self) -> list[str]:
        return [model.identity for model in self.models]


class PluginOptions(BaseModel):
    """
    Options accepted by the registration entry point.

    Same keys as ConfigFragment, except ``models`` may also be a reference
    string (a ``.json`` path or a module reference), plus the process-wide
    ``teardown_on_stop`` flag which may be set by exactly one plugin.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    adapters: dict[str, Any] = Field(default_factory=dict)
    connections: dict[str, ConnectionDefinition] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("connections", "datastores"),
    )
    models: list[ModelDefinition] | str = Field(default_factory=list)
    defaults: dict[str, Any] = Field(default_factory=dict)
    teardown_on_stop: bool | None = Field(
        default=None,
        description="Whether server stop tears the ORM down (unset behaves as True)",
    )


class HubSettings(BaseModel):
    """
    Application settings model.

    Read from ``ORMHUB_*`` environment variables by
    ``ormhub.app.dependencies.get_settings()``.
    """

    service_name: str = "ormhub"
    environment: str = "development"
    debug: bool = False

    # Anchor for relative model file references
    base_dir: Path = Field(default_factory=Path.cwd)

    # Applied once by the application builder when not None
    teardown_on_stop: bool | None = None
