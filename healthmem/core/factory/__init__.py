"""
Factory modules for creating healthmem components.

Provides factories for generation backends and node stores.
"""

from healthmem.core.factory.backend_factory import BackendFactory
from healthmem.core.factory.store_factory import NodeStoreFactory

__all__ = [
    "BackendFactory",
    "NodeStoreFactory",
]
