"""
Factory for creating node stores.
"""

from healthmem.config import StoreConfig
from healthmem.core.node_store.base import NodeStore
from healthmem.core.node_store.memory_store import InMemoryNodeStore
from healthmem.core.node_store.sqlite_store import SQLiteNodeStore
from healthmem.utils.exceptions import ConfigurationError


class NodeStoreFactory:
    """Factory for creating node stores from configuration."""

    @staticmethod
    def create(config: StoreConfig) -> NodeStore:
        """
        Create node store from configuration.

        Args:
            config: Store configuration

        Returns:
            Node store instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        if config.backend == "memory":
            return InMemoryNodeStore()
        elif config.backend == "sqlite":
            return SQLiteNodeStore(db_path=config.db_path)
        else:
            raise ConfigurationError(
                f"Unsupported store backend: {config.backend}",
                context={"backend": config.backend},
            )
