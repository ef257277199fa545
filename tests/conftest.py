"""
Shared test fixtures for all test modules.
"""

from datetime import UTC, datetime

import pytest

from healthmem.core.node_store.memory_store import InMemoryNodeStore
from healthmem.models.node import MedicalNode, NodeMetadata


@pytest.fixture
def now() -> datetime:
    """Fixed reference time so recency-dependent tests are deterministic."""
    return datetime(2024, 3, 31, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_node(now):
    """Factory building nodes without going through a store."""

    def _make(
        content: str,
        record_type: str = "symptom",
        created_at: datetime | None = None,
        patient_id: str = "patient-1",
        layer: int = 0,
        summary_of: list[str] | None = None,
        embedding: list[float] | None = None,
    ) -> MedicalNode:
        metadata = NodeMetadata(
            created_at=created_at or now,
            record_type=record_type,
            patient_id=patient_id,
            layer=layer,
            summary_of=summary_of,
        )
        return MedicalNode(content=content, metadata=metadata, embedding=embedding)

    return _make


@pytest.fixture
async def memory_store():
    """Create an initialized in-memory node store."""
    store = InMemoryNodeStore()
    await store.initialize()
    yield store
    await store.close()
