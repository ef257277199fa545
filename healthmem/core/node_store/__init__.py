"""
Node store abstraction layer.

Supported backends:
- In-memory (dict arena)
- SQLite (aiosqlite)
"""

from healthmem.core.node_store.base import NodeStore
from healthmem.core.node_store.memory_store import InMemoryNodeStore
from healthmem.core.node_store.sqlite_store import SQLiteNodeStore

__all__ = ["NodeStore", "InMemoryNodeStore", "SQLiteNodeStore"]
