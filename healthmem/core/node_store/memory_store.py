"""
In-process node store.

Arena keyed by node id with a per-layer index. Used for tests and
single-process deployments.
"""

import asyncio
from collections import defaultdict
from datetime import datetime

from healthmem.core.node_store.base import NodeStore
from healthmem.models.node import MedicalNode, ensure_utc
from healthmem.utils.exceptions import NotFoundError, StoreError
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryNodeStore(NodeStore):
    """Dictionary-backed node store."""

    def __init__(self):
        self._nodes: dict[str, MedicalNode] = {}
        self._by_layer: dict[int, list[str]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Nothing to set up."""
        logger.debug("In-memory node store ready")

    async def create(self, node: MedicalNode) -> MedicalNode:
        async with self._lock:
            if node.id in self._nodes:
                raise StoreError(f"Node already exists: {node.id}", context={"node_id": node.id})
            self._nodes[node.id] = node
            self._by_layer[node.layer].append(node.id)
        return node

    async def get(self, node_id: str) -> MedicalNode | None:
        return self._nodes.get(node_id)

    async def query_nodes(
        self,
        layer: int | None = None,
        min_layer: int = 0,
        patient_id: str | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
        record_type: str | None = None,
    ) -> list[MedicalNode]:
        if layer is not None:
            candidates = [self._nodes[node_id] for node_id in self._by_layer.get(layer, [])]
        else:
            candidates = [node for node in self._nodes.values() if node.layer >= min_layer]

        if created_after is not None:
            created_after = ensure_utc(created_after)
        if created_before is not None:
            created_before = ensure_utc(created_before)

        results = []
        for node in candidates:
            if patient_id is not None and node.patient_id != patient_id:
                continue
            if created_after is not None and node.created_at < created_after:
                continue
            if created_before is not None and node.created_at > created_before:
                continue
            if record_type is not None and node.record_type != record_type:
                continue
            results.append(node)

        results.sort(key=lambda n: n.created_at)
        return results

    async def delete(self, node_id: str) -> None:
        async with self._lock:
            node = self._nodes.pop(node_id, None)
            if node is None:
                raise NotFoundError(f"Node not found: {node_id}", context={"node_id": node_id})
            self._by_layer[node.layer].remove(node_id)

    async def count(self, layer: int | None = None) -> int:
        if layer is None:
            return len(self._nodes)
        return len(self._by_layer.get(layer, []))
