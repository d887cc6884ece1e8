"""
Config Normalizer.

Every registration arrives in one of two shapes and leaves as a
ConfigFragment:

    [ {...model...}, {...model...} ]            -> ConfigFragment(models=[...])
    {"adapters": ..., "models": ..., ...}       -> ConfigFragment(...)

The shape is decided once, here. Downstream code only ever sees the
canonical fragment, with adapter and model references already resolved.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ormhub.config.schemas import ConfigFragment, PluginOptions
from ormhub.errors import ValidationError

from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class ConfigNormalizer:
    """
    Converts raw registration input into a ConfigFragment.

    Usage:
        normalizer = ConfigNormalizer(ReferenceResolver(base_dir))
        fragment = normalizer.normalize([{"identity": "user"}])
        fragment, teardown = normalizer.normalize_options({"models": "models.json"})
    """

    def __init__(self, resolver: ReferenceResolver | None = None):
        self._resolver = resolver or ReferenceResolver()

    @property
    def resolver(self) -> ReferenceResolver:
        return self._resolver

    def normalize(self, config: Any) -> ConfigFragment:
        """
        Normalize a bare model list or a fragment-shaped object.

        Args:
            config: list of model definitions, mapping, or ConfigFragment

        Returns:
            ConfigFragment with all keys present and references resolved

        Raises:
            ValidationError: If the input does not match either shape
            ResolutionError: If a reference cannot be resolved
        """
        if isinstance(config, ConfigFragment):
            fragment = config
        elif isinstance(config, (list, tuple)):
            fragment = self._validate(ConfigFragment, {"models": list(config)})
        elif isinstance(config, Mapping):
            data = dict(config)
            if isinstance(data.get("models"), str):
                data["models"] = self._resolver.resolve_models(data["models"])
            fragment = self._validate(ConfigFragment, data)
        else:
            raise ValidationError(
                f"Configuration must be a list of models or a mapping, got {type(config).__name__}"
            )

        return self._resolve_adapters(fragment)

    def normalize_options(self, options: Any) -> tuple[ConfigFragment, bool | None]:
        """
        Normalize registration entry-point options.

        Returns:
            (fragment, teardown_on_stop) where teardown_on_stop is None if unset
        """
        if options is None:
            opts = PluginOptions()
        elif isinstance(options, PluginOptions):
            opts = options
        elif isinstance(options, (list, tuple)):
            opts = self._validate(PluginOptions, {"models": list(options)})
        elif isinstance(options, Mapping):
            opts = self._validate(PluginOptions, dict(options))
        else:
            raise ValidationError(
                f"Plugin options must be a list of models or a mapping, got {type(options).__name__}"
            )

        models: Any = opts.models
        if isinstance(models, str):
            models = self._resolver.resolve_models(models)

        fragment = self._validate(
            ConfigFragment,
            {
                "adapters": opts.adapters,
                "connections": opts.connections,
                "models": models,
                "defaults": opts.defaults,
            },
        )
        return self._resolve_adapters(fragment), opts.teardown_on_stop

    def _resolve_adapters(self, fragment: ConfigFragment) -> ConfigFragment:
        if not any(isinstance(adapter, str) for adapter in fragment.adapters.values()):
            return fragment

        adapters = {
            name: self._resolver.resolve_adapter(adapter) if isinstance(adapter, str) else adapter
            for name, adapter in fragment.adapters.items()
        }
        return fragment.model_copy(update={"adapters": adapters})

    @staticmethod
    def _validate(schema: type[M], data: dict[str, Any]) -> M:
        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            logger.debug(f"[normalizer] Rejected {schema.__name__}: {e}")
            raise ValidationError(
                f"Bad configuration passed to ormhub: {e.error_count()} error(s) in {schema.__name__}",
                errors=e.errors(),
            ) from e
