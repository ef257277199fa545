"""
Tests for backend and store factories.
"""

import pytest

from healthmem.config import CloudModelConfig, LocalModelConfig, StoreConfig
from healthmem.core.factory import BackendFactory, NodeStoreFactory
from healthmem.core.llm.cloud import CloudBackend
from healthmem.core.llm.local import LocalBackend
from healthmem.core.node_store.memory_store import InMemoryNodeStore
from healthmem.core.node_store.sqlite_store import SQLiteNodeStore
from healthmem.utils.exceptions import ConfigurationError


@pytest.mark.unit
class TestBackendFactory:
    """Test backend creation."""

    def test_local(self):
        backend = BackendFactory.create_local(LocalModelConfig(model="llama3.1:8b"))

        assert isinstance(backend, LocalBackend)
        assert backend.model == "llama3.1:8b"

    def test_local_disabled(self):
        assert BackendFactory.create_local(LocalModelConfig(enabled=False)) is None

    def test_cloud(self):
        backend = BackendFactory.create_cloud(CloudModelConfig(api_key="key"))
        assert isinstance(backend, CloudBackend)

    def test_cloud_without_key(self):
        assert BackendFactory.create_cloud(CloudModelConfig()) is None


@pytest.mark.unit
class TestNodeStoreFactory:
    """Test store creation."""

    def test_memory(self):
        assert isinstance(NodeStoreFactory.create(StoreConfig()), InMemoryNodeStore)

    def test_sqlite(self, tmp_path):
        store = NodeStoreFactory.create(
            StoreConfig(backend="sqlite", db_path=str(tmp_path / "h.db"))
        )
        assert isinstance(store, SQLiteNodeStore)

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError):
            NodeStoreFactory.create(StoreConfig(backend="postgres"))
