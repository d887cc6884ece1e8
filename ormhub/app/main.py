"""
ormhub - FastAPI application builder.

``create_app()`` owns the OrmHub: it registers plugins, installs the hub
lifespan and exposes a health endpoint.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from fastapi import Depends, FastAPI

from ormhub import __version__
from ormhub.app.dependencies import get_hub, get_settings
from ormhub.config.schemas import HubSettings
from ormhub.runtime.hub import STATE_ATTRIBUTE, OrmHub, Plugin

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    hub: OrmHub | None = None,
    plugins: Iterable[Plugin] = (),
    settings: HubSettings | None = None,
) -> FastAPI:
    """
    Build the application around one OrmHub.

    Args:
        hub: Hub to use (a new in-memory hub if None)
        plugins: Plugins to include, each under its own scope
        settings: Application settings (environment if None)

    Returns:
        FastAPI app whose lifespan starts and stops the ORM
    """
    settings = settings or get_settings()
    hub = hub or OrmHub(base_dir=settings.base_dir)

    if settings.teardown_on_stop is not None:
        hub.register({"teardown_on_stop": settings.teardown_on_stop})

    for plugin in plugins:
        hub.include(plugin)

    app = FastAPI(
        title=settings.service_name,
        description="Plugin ORM configuration hub",
        version=__version__,
        lifespan=hub.lifespan,
        debug=settings.debug,
    )
    # Mounted sub-apps never run their own lifespan
    setattr(app.state, STATE_ATTRIBUTE, hub)

    @app.get("/", tags=["root"])
    async def root() -> dict[str, str]:
        """Root endpoint with service info."""
        return {
            "service": settings.service_name,
            "version": __version__,
            "status": "running",
        }

    @app.get("/health", tags=["health"])
    async def health_check(current: OrmHub = Depends(get_hub)) -> dict[str, Any]:
        """
        Health check endpoint.

        Returns lifecycle state, the merged configuration summary and the
        initialized collection identities.
        """
        return {
            "status": "healthy" if current.ready else "unhealthy",
            "lifecycle": current.state.value,
            "config": current.collector.summary(),
            "collections": list(current.collections(all=True)),
        }

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        create_app(),
        host="0.0.0.0",
        port=8000,
    )
