"""Fixtures for node store tests."""

import pytest

from healthmem.core.node_store.memory_store import InMemoryNodeStore
from healthmem.core.node_store.sqlite_store import SQLiteNodeStore


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    """Create each node store implementation in turn."""
    if request.param == "memory":
        node_store = InMemoryNodeStore()
    else:
        node_store = SQLiteNodeStore(db_path=str(tmp_path / "nodes.db"))
    await node_store.initialize()
    yield node_store
    await node_store.close()
