"""
Two Plugins Example

This example demonstrates the registration pattern:
1. A database plugin contributes the adapter, connection and defaults
2. Two feature plugins each contribute their own models
3. The app starts the ORM once and each router sees only its own collections

Run: python -m examples.01-two-plugins.main
"""

import uvicorn
from fastapi import APIRouter, Depends

from ormhub import OrmHub, OrmPlugin
from ormhub.app.dependencies import scoped_collections
from ormhub.app.main import create_app
from ormhub.engine import MemoryAdapter

# =============================================================================
# Plugins
# =============================================================================

database = OrmPlugin(
    name="database",
    options={
        "adapters": {"memory": MemoryAdapter()},
        "connections": {"default": {"adapter": "memory"}},
        "defaults": {"connection": "default", "migrate": "safe"},
        "teardown_on_stop": True,
    },
)

users = OrmPlugin(
    name="users",
    options=[
        {"identity": "user", "attributes": {"name": "string", "email": "string"}},
        {"identity": "session", "attributes": {"token": "string"}},
    ],
)

catalog = OrmPlugin(
    name="catalog",
    options={"models": [{"identity": "product", "attributes": {"sku": "string"}}]},
)

# =============================================================================
# Routes
# =============================================================================

users_router = APIRouter(prefix="/users")
catalog_router = APIRouter(prefix="/catalog")


@users_router.get("/collections")
async def user_collections(collections=Depends(scoped_collections("users"))):
    return {"collections": list(collections)}


@catalog_router.get("/collections")
async def catalog_collections(collections=Depends(scoped_collections("catalog"))):
    return {"collections": list(collections)}


# =============================================================================
# Application
# =============================================================================

hub = OrmHub()
app = create_app(hub=hub, plugins=[database, users, catalog])
app.include_router(users_router)
app.include_router(catalog_router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
