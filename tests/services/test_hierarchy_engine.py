"""
Tests for the hierarchy engine.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from healthmem.models.node import NodeMetadata
from healthmem.utils.exceptions import InvalidInputError, NotFoundError, StoreError


@pytest.mark.unit
@pytest.mark.asyncio
class TestAddNode:
    """Test node creation and layer validation."""

    async def test_ingest_creates_layer_zero(self, engine, memory_store):
        created_at = datetime(2024, 3, 10, 9, 30, tzinfo=UTC)

        node_id = await engine.ingest("Blood pressure 130/85", record_type="vital_sign", created_at=created_at)

        node = await memory_store.get(node_id)
        assert node.layer == 0
        assert node.record_type == "vital_sign"
        assert node.patient_id == "patient-1"
        assert node.created_at == created_at
        assert node.summary_of == []

    async def test_add_node_with_dict_metadata(self, engine, memory_store):
        node_id = await engine.add_node(
            "Allergy to penicillin",
            {"record_type": "allergy", "patient_id": "patient-2", "layer": 0},
            embedding=[0.1, 0.2, 0.3],
        )

        node = await memory_store.get(node_id)
        assert node.patient_id == "patient-2"
        assert node.embedding == [0.1, 0.2, 0.3]

    async def test_add_node_with_model_metadata(self, engine):
        metadata = NodeMetadata(record_type="symptom", patient_id="patient-1")
        node_id = await engine.add_node("Dizziness", metadata)
        assert node_id.startswith("node_")

    async def test_summary_without_sources_rejected(self, engine, memory_store):
        with pytest.raises(InvalidInputError):
            await engine.add_node(
                "Summary", {"record_type": "health_period_summary", "patient_id": "p", "layer": 1}
            )
        assert await memory_store.count() == 0

    async def test_blank_content_rejected(self, engine):
        with pytest.raises(InvalidInputError):
            await engine.ingest("  ", record_type="symptom")

    async def test_store_failure_propagates(self, engine, memory_store):
        with patch.object(memory_store, "create", new_callable=AsyncMock) as mock_create:
            mock_create.side_effect = StoreError("disk full")

            with pytest.raises(StoreError):
                await engine.ingest("Fever", record_type="symptom")

            mock_create.assert_called_once()


@pytest.mark.unit
@pytest.mark.asyncio
class TestCreateSummaryNode:
    """Test summary node creation."""

    async def test_references_sources(self, engine, memory_store):
        first = await engine.ingest("Fever 38.5", record_type="symptom")
        second = await engine.ingest("Paracetamol 500mg", record_type="medication")

        summary_id = await engine.create_summary_node(
            "Fever treated with paracetamol",
            [first, second, first],
            layer=1,
            record_type="health_period_summary",
        )

        summary = await memory_store.get(summary_id)
        assert summary.layer == 1
        assert summary.summary_of == [first, second]
        assert summary.patient_id == "patient-1"
        assert summary.record_type == "health_period_summary"

    async def test_patient_from_caller(self, engine, memory_store):
        source = await engine.ingest("Cough", record_type="symptom", patient_id="patient-2")

        summary_id = await engine.create_summary_node(
            "Cough summary", [source], layer=1, record_type="health_period_summary", patient_id="patient-2"
        )

        assert (await memory_store.get(summary_id)).patient_id == "patient-2"

    async def test_layer_zero_rejected(self, engine):
        with pytest.raises(InvalidInputError):
            await engine.create_summary_node("x", ["node_a"], layer=0, record_type="summary")

    async def test_empty_sources_rejected(self, engine):
        with pytest.raises(InvalidInputError):
            await engine.create_summary_node("x", [], layer=1, record_type="summary")

    async def test_summaries_reference_lower_layers(self, engine, memory_store):
        """Every stored summary names at least one strictly lower-layer node."""
        record = await engine.ingest("Glucose 98", record_type="lab_result")
        weekly = await engine.create_summary_node("Weekly", [record], 1, "health_period_summary")
        await engine.create_summary_node("Monthly", [weekly], 2, "health_period_summary")

        for node in await memory_store.query_nodes(min_layer=1):
            assert node.summary_of
            for source_id in node.summary_of:
                assert (await memory_store.get(source_id)).layer < node.layer


@pytest.mark.unit
class TestCheckSources:
    """Test source validation for summaries."""

    def test_valid_sources(self, engine, make_node):
        engine.check_sources([make_node("Fever")], layer=1, patient_id="patient-1")

    def test_same_layer_rejected(self, engine, make_node):
        record = make_node("Fever")
        summary = make_node("Summary", layer=1, summary_of=[record.id])

        with pytest.raises(InvalidInputError):
            engine.check_sources([summary], layer=1, patient_id="patient-1")

    def test_other_patient_rejected(self, engine, make_node):
        with pytest.raises(InvalidInputError):
            engine.check_sources([make_node("Fever", patient_id="patient-2")], layer=1, patient_id="patient-1")


@pytest.mark.unit
@pytest.mark.asyncio
class TestNodeAccess:
    """Test reads and deletes."""

    async def test_get_node(self, engine):
        node_id = await engine.ingest("Rash", record_type="symptom")
        assert (await engine.get_node(node_id)).content == "Rash"

    async def test_get_missing(self, engine):
        with pytest.raises(NotFoundError):
            await engine.get_node("node_missing")

    async def test_delete_node(self, engine, memory_store):
        node_id = await engine.ingest("Rash", record_type="symptom")

        await engine.delete_node(node_id)

        assert await memory_store.get(node_id) is None
        with pytest.raises(NotFoundError):
            await engine.delete_node(node_id)
