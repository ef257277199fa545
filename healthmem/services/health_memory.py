"""
Health Memory - wires the store, hierarchy, retrieval, routing and the
summary pipeline into one object built from Config.
"""

from datetime import datetime

from healthmem.config import Config
from healthmem.core.factory import BackendFactory, NodeStoreFactory
from healthmem.core.llm.base import GenerationBackend
from healthmem.core.node_store.base import NodeStore
from healthmem.core.retrieval.strategy import explain as explain_strategy
from healthmem.core.retrieval.strategy import select_strategy
from healthmem.core.tokenizer.tokenizer import Tokenizer
from healthmem.models.health import HealthSummaryReport, SummaryType
from healthmem.models.llm import AdapterChoice, UsageStats
from healthmem.models.node import MedicalNode
from healthmem.models.search import MultiHopResult, SearchStrategy, SmartSearchResult
from healthmem.services.hierarchy_engine import HierarchyEngine
from healthmem.services.model_router import AdaptiveModelRouter
from healthmem.services.retriever import MultiHopRetriever
from healthmem.services.smart_search import SmartSearch
from healthmem.services.summary_pipeline import HealthSummaryGenerator
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class HealthMemory:
    """
    Entry point for hosts embedding the health memory core.

    Usage:
        memory = HealthMemory.from_config(Config.from_env())
        await memory.initialize()
        node_id = await memory.ingest("Fasting glucose 98 mg/dL", record_type="lab_result")
        results = await memory.multi_hop("glucose")
        await memory.close()
    """

    def __init__(
        self,
        store: NodeStore,
        config: Config | None = None,
        local: GenerationBackend | None = None,
        cloud: GenerationBackend | None = None,
    ):
        """
        Initialize Health Memory.

        Args:
            store: Node store
            config: Configuration object
            local: Local backend (None if not configured)
            cloud: Cloud backend (None if not configured)
        """
        self.config = config or Config()
        self.store = store
        patient_id = self.config.default_patient_id

        self.hierarchy = HierarchyEngine(store, patient_id=patient_id)
        self.retriever = MultiHopRetriever(store, self.config.retrieval)
        self.smart = SmartSearch(self.retriever)
        self.router = AdaptiveModelRouter(
            self.config.router,
            local=local,
            cloud=cloud,
            tokenizer=Tokenizer(self.config.tokenizer),
        )
        self.summaries = HealthSummaryGenerator(
            store, self.hierarchy, self.router, patient_id=patient_id
        )

    @classmethod
    def from_config(cls, config: Config) -> "HealthMemory":
        """Build every component from configuration."""
        return cls(
            store=NodeStoreFactory.create(config.store),
            config=config,
            local=BackendFactory.create_local(config.local_model),
            cloud=BackendFactory.create_cloud(config.cloud_model),
        )

    async def initialize(self) -> None:
        logger.info("Initializing Health Memory")
        await self.store.initialize()
        logger.info(
            f"Health Memory ready (router={self.router.strategy.value}, "
            f"local={self.router.local is not None}, cloud={self.router.cloud is not None})"
        )

    async def close(self) -> None:
        await self.router.close()
        await self.store.close()
        logger.info("Health Memory closed")

    # ═══════════════════════════════════════════════════════════
    # RECORDS
    # ═══════════════════════════════════════════════════════════

    async def ingest(
        self,
        content: str,
        record_type: str,
        patient_id: str | None = None,
        created_at: datetime | None = None,
        embedding: list[float] | None = None,
    ) -> str:
        return await self.hierarchy.ingest(
            content,
            record_type=record_type,
            patient_id=patient_id,
            created_at=created_at,
            embedding=embedding,
        )

    async def get_node(self, node_id: str) -> MedicalNode:
        return await self.hierarchy.get_node(node_id)

    async def delete_node(self, node_id: str) -> None:
        await self.hierarchy.delete_node(node_id)

    # ═══════════════════════════════════════════════════════════
    # RETRIEVAL
    # ═══════════════════════════════════════════════════════════

    async def search(
        self,
        query: str,
        limit: int = 10,
        strategy: SearchStrategy | None = None,
        patient_id: str | None = None,
    ) -> list[str]:
        """Direct search; the strategy is selected from the query when omitted."""
        return await self.retriever.search(
            query, limit, strategy or select_strategy(query), patient_id=patient_id
        )

    async def multi_hop(
        self,
        query: str,
        max_hops: int | None = None,
        top_k: int | None = None,
        patient_id: str | None = None,
    ) -> list[MultiHopResult]:
        return await self.retriever.multi_hop(
            query, max_hops=max_hops, top_k=top_k, patient_id=patient_id
        )

    async def compare_strategies(
        self, query: str, limit: int = 10, patient_id: str | None = None
    ) -> dict[str, list[str]]:
        return await self.retriever.compare_strategies(query, limit, patient_id=patient_id)

    async def smart_search(
        self, query: str, limit: int = 10, patient_id: str | None = None
    ) -> SmartSearchResult:
        return await self.smart.execute(query, limit, patient_id=patient_id)

    @staticmethod
    def explain(strategy: SearchStrategy) -> str:
        return explain_strategy(strategy)

    # ═══════════════════════════════════════════════════════════
    # GENERATION
    # ═══════════════════════════════════════════════════════════

    async def generate_text(self, prompt: str) -> tuple[str, AdapterChoice]:
        return await self.router.generate_text(prompt)

    async def generate_summary(
        self,
        start_date: datetime,
        end_date: datetime,
        summary_type: SummaryType = SummaryType.MONTHLY,
        patient_id: str | None = None,
    ) -> HealthSummaryReport:
        return await self.summaries.generate_summary(
            start_date, end_date, summary_type, patient_id=patient_id
        )

    async def set_network_available(self, available: bool) -> None:
        await self.router.set_network_available(available)

    async def usage(self) -> UsageStats | None:
        return await self.router.get_cloud_usage()

    async def reset_usage(self) -> None:
        await self.router.reset_cloud_usage()
