"""
ormhub Configuration

Pydantic schemas for configuration fragments and application settings.
"""

from .schemas import (
    ConfigFragment,
    ConnectionDefinition,
    HubSettings,
    ModelDefinition,
    PluginOptions,
)

__all__ = [
    "ConfigFragment",
    "ConnectionDefinition",
    "HubSettings",
    "ModelDefinition",
    "PluginOptions",
]
