"""
Pytest configuration and fixtures for ormhub tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from ormhub import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from ormhub.engine import MemoryAdapter, MemoryORM  # noqa: E402
from ormhub.runtime import OrmHub  # noqa: E402


@pytest.fixture
def memory_adapter():
    """Fresh in-memory adapter."""
    return MemoryAdapter()


@pytest.fixture
def base_options(memory_adapter):
    """Adapter, connection and default connection, no models."""
    return {
        "adapters": {"memory": memory_adapter},
        "connections": {"default": {"adapter": "memory"}},
        "defaults": {"connection": "default"},
    }


@pytest.fixture
def engine():
    return MemoryORM()


@pytest.fixture
def hub(engine, base_options):
    """Hub with the base options registered at the root scope."""
    hub = OrmHub(engine=engine)
    hub.register(base_options)
    return hub


@pytest.fixture
def user_models():
    return [
        {"identity": "user", "attributes": {"name": "string"}},
        {"identity": "session", "attributes": {"token": "string"}},
    ]


@pytest.fixture
def product_models():
    return [{"identity": "product", "attributes": {"sku": "string"}}]
