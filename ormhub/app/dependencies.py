"""
Dependency Injection for ormhub.

Provides settings and request-level access to the hub and its collections.

Route handlers get collections for their own scope:

    users = APIRouter()

    @users.get("/users")
    async def list_users(collections=Depends(scoped_collections("users"))):
        return {"collections": list(collections)}
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

from fastapi import Request

from ormhub.config.schemas import HubSettings
from ormhub.errors import LifecycleError
from ormhub.registration.scopes import Scope
from ormhub.runtime.hub import STATE_ATTRIBUTE, OrmHub

logger = logging.getLogger(__name__)


def _optional_bool(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return value.lower() == "true"


@lru_cache()
def get_settings() -> HubSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    base_dir = os.getenv("ORMHUB_BASE_DIR")
    return HubSettings(
        service_name=os.getenv("ORMHUB_SERVICE_NAME", "ormhub"),
        environment=os.getenv("ORMHUB_ENVIRONMENT", "development"),
        debug=os.getenv("ORMHUB_DEBUG", "false").lower() == "true",
        base_dir=Path(base_dir) if base_dir else Path.cwd(),
        teardown_on_stop=_optional_bool(os.getenv("ORMHUB_TEARDOWN_ON_STOP")),
    )


def get_hub(request: Request) -> OrmHub:
    """
    Get the hub attached to the running application.

    Raises:
        LifecycleError: If the app was neither built by create_app() nor
            started with the hub lifespan
    """
    hub = getattr(request.app.state, STATE_ATTRIBUTE, None)
    if hub is None:
        raise LifecycleError("No OrmHub attached to this application; use create_app() or hub.lifespan")
    return hub


def scoped_collections(
    scope: Scope | str | None = None,
    *,
    all: bool = False,
    include_descendants: bool = False,
) -> Callable[[Request], dict[str, Any]]:
    """
    Build a dependency returning collections for a scope.

    Same semantics as ``OrmHub.collections()``: empty before startup.

    Args:
        scope: Scope whose models to return (default: root)
        all: Return every collection
        include_descendants: Include sub-scope models
    """

    def dependency(request: Request) -> dict[str, Any]:
        return get_hub(request).collections(
            scope,
            all=all,
            include_descendants=include_descendants,
        )

    return dependency
