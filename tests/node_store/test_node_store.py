"""
Tests for node store implementations.

Every test runs against the in-memory and SQLite stores.
"""

from datetime import timedelta

import pytest

from healthmem.core.node_store.sqlite_store import SQLiteNodeStore
from healthmem.utils.exceptions import NotFoundError, StoreError


@pytest.mark.unit
@pytest.mark.asyncio
class TestNodeStore:
    """Test the node store contract."""

    async def test_create_and_get(self, store, make_node):
        node = make_node("Blood pressure 130/85", record_type="vital_sign", embedding=[0.1, 0.2])

        await store.create(node)
        stored = await store.get(node.id)

        assert stored == node
        assert stored.embedding == [0.1, 0.2]
        assert stored.created_at == node.created_at

    async def test_get_missing(self, store):
        assert await store.get("node_missing") is None

    async def test_duplicate_id_rejected(self, store, make_node):
        node = make_node("Headache")
        await store.create(node)

        with pytest.raises(StoreError):
            await store.create(node)

    async def test_summary_round_trip(self, store, make_node):
        record = make_node("Fever 38.5")
        summary = make_node(
            "Weekly summary",
            record_type="health_period_summary",
            layer=1,
            summary_of=[record.id],
        )
        await store.create(record)
        await store.create(summary)

        stored = await store.get(summary.id)

        assert stored.layer == 1
        assert stored.summary_of == [record.id]

    async def test_query_by_layer(self, store, make_node):
        record = make_node("Cough")
        summary = make_node("Summary", layer=1, summary_of=[record.id])
        await store.create(record)
        await store.create(summary)

        assert [n.id for n in await store.query_by_layer(0)] == [record.id]
        assert [n.id for n in await store.query_by_layer(1)] == [summary.id]
        assert [n.id for n in await store.query_nodes(min_layer=1)] == [summary.id]

    async def test_query_filters(self, store, make_node, now):
        """Test patient, time-range and type filters with inclusive bounds."""
        early = make_node("Old record", created_at=now - timedelta(days=10))
        inside = make_node("Inside record", record_type="medication", created_at=now - timedelta(days=5))
        edge = make_node("Edge record", created_at=now)
        other = make_node("Other patient", patient_id="patient-2", created_at=now - timedelta(days=5))
        for node in (early, inside, edge, other):
            await store.create(node)

        window = await store.query_nodes(
            layer=0,
            patient_id="patient-1",
            created_after=now - timedelta(days=5),
            created_before=now,
        )
        assert [n.id for n in window] == [inside.id, edge.id]

        medications = await store.query_nodes(record_type="medication")
        assert [n.id for n in medications] == [inside.id]

    async def test_results_oldest_first(self, store, make_node, now):
        newer = make_node("Newer", created_at=now)
        older = make_node("Older", created_at=now - timedelta(days=1))
        await store.create(newer)
        await store.create(older)

        assert [n.id for n in await store.query_by_layer(0)] == [older.id, newer.id]

    async def test_delete(self, store, make_node):
        node = make_node("Rash")
        await store.create(node)

        await store.delete(node.id)

        assert await store.get(node.id) is None
        assert await store.count() == 0

    async def test_delete_missing(self, store):
        with pytest.raises(NotFoundError):
            await store.delete("node_missing")

    async def test_count(self, store, make_node):
        record = make_node("Nausea")
        await store.create(record)
        await store.create(make_node("Summary", layer=1, summary_of=[record.id]))

        assert await store.count() == 2
        assert await store.count(layer=0) == 1
        assert await store.count(layer=1) == 1


@pytest.mark.unit
@pytest.mark.asyncio
class TestSQLiteErrors:
    """Test that SQLite failures surface as StoreError."""

    @pytest.fixture
    async def broken_store(self, tmp_path):
        node_store = SQLiteNodeStore(db_path=str(tmp_path / "nodes.db"))
        await node_store.initialize()
        await node_store.connection.execute("DROP TABLE medical_nodes")
        yield node_store
        await node_store.close()

    @pytest.mark.parametrize("layer", [None, 0])
    async def test_count_wraps_sqlite_error(self, broken_store, layer):
        with pytest.raises(StoreError):
            await broken_store.count(layer=layer)

    async def test_get_wraps_sqlite_error(self, broken_store):
        with pytest.raises(StoreError):
            await broken_store.get("node_missing")
