"""Pytest fixtures for Bongo tests."""

import pytest
import pytest_asyncio

from bongo import Bongo, FieldDeclaration, FieldRegistry, StorageType
from bongo.storage.engine import StorageEngine


@pytest.fixture
def registry():
    """Provide a registry with a `users` shape."""
    registry = FieldRegistry()
    registry.register_shape("users", [
        FieldDeclaration(name="name", type=StorageType.TEXT),
        FieldDeclaration(name="age", type=StorageType.INTEGER),
    ])
    return registry


@pytest.fixture
def db_path(tmp_path):
    """Provide a storage path inside a not-yet-existing directory."""
    return str(tmp_path / "data" / "test")


@pytest_asyncio.fixture
async def store(db_path, registry):
    """Provide an opened Bongo store."""
    bongo = Bongo(db_path, registry=registry)
    await bongo.initialize()
    yield bongo
    await bongo.close()


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Provide an opened storage engine."""
    async with StorageEngine(str(tmp_path / "engine.sqlite")) as storage:
        yield storage
