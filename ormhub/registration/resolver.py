"""
Reference Resolution.

Turns adapter and model references into concrete values before merge.

Reference forms:
    - "package.module"          -> the imported module
    - "package.module:attr"     -> an attribute of the imported module
    - "models/users.json"       -> JSON list of model definitions (models only)

Relative JSON paths are resolved against a base directory, which defaults to
the process working directory.

Usage:
    resolver = ReferenceResolver(base_dir="config/")
    adapter = resolver.resolve_adapter("ormhub.engine.memory:MemoryAdapter")
    models = resolver.resolve_models("models/users.json")
"""

from __future__ import annotations

import importlib
import json
import logging
from pathlib import Path
from types import ModuleType
from typing import Any

from ormhub.errors import ResolutionError

logger = logging.getLogger(__name__)

MODELS_ATTRIBUTE = "MODELS"


class ReferenceResolver:
    """Resolves string references to adapters and model lists."""

    def __init__(self, base_dir: str | Path | None = None):
        self._base_dir = Path(base_dir) if base_dir is not None else None

    @property
    def base_dir(self) -> Path:
        return self._base_dir if self._base_dir is not None else Path.cwd()

    def resolve_adapter(self, reference: str) -> Any:
        """
        Resolve an adapter reference.

        Args:
            reference: "module" or "module:attr"

        Returns:
            The imported module or attribute

        Raises:
            ResolutionError: If the module or attribute cannot be found
        """
        adapter = self._import(reference, kind="adapter")
        logger.debug(f"[resolver] Resolved adapter reference: {reference}")
        return adapter

    def resolve_models(self, reference: str) -> list[Any]:
        """
        Resolve a models reference to a list of raw model definitions.

        A ``.json`` reference is read from disk. Anything else is imported;
        if it resolves to a module, the module's ``MODELS`` attribute is used.

        Raises:
            ResolutionError: If the reference cannot be loaded or is not a list
        """
        if reference.endswith(".json"):
            models = self._load_json(reference)
        else:
            models = self._import(reference, kind="models")
            if isinstance(models, ModuleType):
                if not hasattr(models, MODELS_ATTRIBUTE):
                    raise ResolutionError(
                        reference,
                        f"module has no '{MODELS_ATTRIBUTE}' attribute",
                        kind="models",
                    )
                models = getattr(models, MODELS_ATTRIBUTE)

        if not isinstance(models, (list, tuple)):
            raise ResolutionError(
                reference,
                f"expected a list of models, got {type(models).__name__}",
                kind="models",
            )

        logger.debug(f"[resolver] Resolved {len(models)} models from: {reference}")
        return list(models)

    def _import(self, reference: str, *, kind: str) -> Any:
        module_name, _, attr = reference.partition(":")
        if not module_name:
            raise ResolutionError(reference, "empty module name", kind=kind)

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ResolutionError(reference, str(e), kind=kind) from e

        if not attr:
            return module

        try:
            return getattr(module, attr)
        except AttributeError as e:
            raise ResolutionError(
                reference,
                f"module '{module_name}' has no attribute '{attr}'",
                kind=kind,
            ) from e

    def _load_json(self, reference: str) -> Any:
        path = Path(reference)
        if not path.is_absolute():
            path = self.base_dir / path

        if not path.exists():
            raise ResolutionError(reference, f"file not found: {path}", kind="models")

        try:
            with path.open() as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ResolutionError(reference, str(e), kind="models") from e
