"""
Tests for the HealthMemory facade.
"""

from datetime import UTC, datetime, timedelta

import pytest

from healthmem.config import Config, StoreConfig, TokenizerConfig
from healthmem.core.llm.local import LocalBackend
from healthmem.core.node_store.sqlite_store import SQLiteNodeStore
from healthmem.models.llm import AdapterChoice
from healthmem.models.search import SearchStrategy
from healthmem.services.health_memory import HealthMemory
from healthmem.utils.exceptions import BackendUnavailableError


@pytest.fixture
def config():
    return Config(tokenizer=TokenizerConfig(provider="approximate"), default_patient_id="patient-1")


@pytest.fixture
async def health_memory(memory_store, config, stub_backend_cls):
    memory = HealthMemory(memory_store, config, local=stub_backend_cls(text="local text"))
    await memory.initialize()
    yield memory
    await memory.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestHealthMemory:
    """Test the end-to-end flow through the facade."""

    async def test_ingest_and_search(self, health_memory):
        node_id = await health_memory.ingest("Blood pressure 130/85", record_type="vital_sign")
        await health_memory.ingest("Walked 5 km", record_type="activity")

        assert await health_memory.search("blood pressure", strategy=SearchStrategy.BM25) == [node_id]
        assert (await health_memory.get_node(node_id)).patient_id == "patient-1"

    async def test_search_selects_strategy(self, health_memory):
        node_id = await health_memory.ingest("Dolor de cabeza", record_type="symptom")
        assert await health_memory.search("dolor") == [node_id]

    async def test_compare_and_smart_search(self, health_memory):
        await health_memory.ingest("Fever 38.5", record_type="symptom")

        comparison = await health_memory.compare_strategies("fever")
        smart = await health_memory.smart_search("fever")

        assert set(comparison) == {"bm25", "mmr", "diversity", "recency"}
        assert smart.total_results == 2

    async def test_explain(self):
        assert HealthMemory.explain(SearchStrategy.DIVERSITY) == SearchStrategy.DIVERSITY.explain()

    async def test_generation(self, health_memory):
        text, choice = await health_memory.generate_text("How am I doing?")
        assert (text, choice) == ("local text", AdapterChoice.LOCAL)

    async def test_summary_flow(self, health_memory):
        start = datetime.now(UTC) - timedelta(days=7)
        for content in ("Fever", "Cough", "Rest"):
            await health_memory.ingest(content, record_type="symptom")

        report = await health_memory.generate_summary(start, datetime.now(UTC))
        results = await health_memory.multi_hop("fever", max_hops=1, top_k=1)

        assert report.used_llm is True
        assert results[0].context[0].node_id == report.summary_node_id

    async def test_usage_without_cloud(self, health_memory):
        assert await health_memory.usage() is None
        with pytest.raises(BackendUnavailableError):
            await health_memory.reset_usage()

    async def test_network_flag(self, health_memory):
        await health_memory.set_network_available(False)
        assert await health_memory.router.is_network_available() is False

    async def test_delete(self, health_memory):
        node_id = await health_memory.ingest("Rash", record_type="symptom")
        await health_memory.delete_node(node_id)
        assert await health_memory.search("rash", strategy=SearchStrategy.BM25) == []


@pytest.mark.unit
class TestFromConfig:
    """Test component wiring from configuration."""

    def test_builds_components(self, tmp_path):
        config = Config(store=StoreConfig(backend="sqlite", db_path=str(tmp_path / "h.db")))

        memory = HealthMemory.from_config(config)

        assert isinstance(memory.store, SQLiteNodeStore)
        assert isinstance(memory.router.local, LocalBackend)
        assert memory.router.cloud is None
        assert memory.hierarchy.patient_id == "default"
