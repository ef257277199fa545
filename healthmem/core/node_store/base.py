"""
Base interface for node storage.

Thin contract over the document store: create, read, filter by layer, time
range and patient, and hard delete. No hierarchy logic lives here.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from healthmem.models.node import MedicalNode


class NodeStore(ABC):
    """Abstract base class for node storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    @abstractmethod
    async def create(self, node: MedicalNode) -> MedicalNode:
        """
        Persist a new node.

        Args:
            node: Node to store

        Returns:
            The stored node

        Raises:
            StoreError: If the write fails or the id already exists
        """
        pass

    @abstractmethod
    async def get(self, node_id: str) -> MedicalNode | None:
        """
        Retrieve a node by ID.

        Args:
            node_id: Node identifier

        Returns:
            MedicalNode or None if not found
        """
        pass

    @abstractmethod
    async def query_nodes(
        self,
        layer: int | None = None,
        min_layer: int = 0,
        patient_id: str | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
        record_type: str | None = None,
    ) -> list[MedicalNode]:
        """
        Query nodes with filters, oldest first.

        Args:
            layer: Exact layer to match
            min_layer: Lowest layer to include when ``layer`` is not given
            patient_id: Restrict to one patient
            created_after: Inclusive lower bound on created_at
            created_before: Inclusive upper bound on created_at
            record_type: Restrict to one record type

        Returns:
            List of matching nodes
        """
        pass

    async def query_by_layer(self, layer: int, patient_id: str | None = None) -> list[MedicalNode]:
        """
        Get every node of one hierarchy layer.

        Args:
            layer: Hierarchy layer
            patient_id: Optional patient filter

        Returns:
            Nodes of that layer, oldest first
        """
        return await self.query_nodes(layer=layer, patient_id=patient_id)

    @abstractmethod
    async def delete(self, node_id: str) -> None:
        """
        Hard-delete a node.

        Args:
            node_id: Node identifier

        Raises:
            NotFoundError: If the node doesn't exist
        """
        pass

    @abstractmethod
    async def count(self, layer: int | None = None) -> int:
        """
        Count stored nodes.

        Args:
            layer: Optional layer filter

        Returns:
            Number of nodes
        """
        pass

    async def close(self) -> None:
        """Close connections. Optional to override."""
        pass
