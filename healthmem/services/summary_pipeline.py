"""
Summary Pipeline - turns a time window of raw records into a period summary.

Flow:
1. Read the patient's layer-0 nodes inside [start, end]
2. With enough records and a reachable model, generate a summary and store
   it as a layer-1 node referencing every record in the window
3. Otherwise fall back to a rule-based digest (no node is written)
4. Count records per type for insights and derive recommendations

Insufficient data is a normal outcome and never raises.
"""

from collections import Counter
from datetime import datetime

from healthmem.core.llm.prompts import create_fallback_summary
from healthmem.core.node_store.base import NodeStore
from healthmem.models.health import HealthSummaryReport, SummaryType
from healthmem.models.node import SUMMARY_RECORD_TYPE, MedicalNode, ensure_utc
from healthmem.services.hierarchy_engine import HierarchyEngine
from healthmem.services.model_router import AdaptiveModelRouter
from healthmem.utils.exceptions import BackendUnavailableError
from healthmem.utils.logger import get_logger, log_context

logger = get_logger(__name__)

# Records needed before a model is asked for a summary
MIN_RECORDS_FOR_SUMMARY = 3

# Insight lines needed before generic guidance replaces the "record more" hint
MIN_INSIGHTS_FOR_GUIDANCE = 3

NO_INSIGHTS_MESSAGE = "Not enough data to generate insights"
RECORD_MORE_MESSAGE = "Record more health information to get better recommendations"
GUIDANCE_MESSAGES = (
    "Keep a regular record of your health",
    "Consult your doctor for a detailed analysis",
)


class HealthSummaryGenerator:
    """
    Builds HealthSummaryReport objects for a time window.

    Usage:
        generator = HealthSummaryGenerator(store, engine, router)
        report = await generator.generate_summary(start, end, SummaryType.MONTHLY)
    """

    def __init__(
        self,
        store: NodeStore,
        hierarchy: HierarchyEngine,
        router: AdaptiveModelRouter | None = None,
        patient_id: str | None = None,
    ):
        """
        Initialize generator.

        Args:
            store: Node store
            hierarchy: Engine used to write summary nodes
            router: Model router (None means no model is ever used)
            patient_id: Default patient (the engine's default if None)
        """
        self.store = store
        self.hierarchy = hierarchy
        self.router = router
        self.patient_id = patient_id or hierarchy.patient_id

    async def generate_summary(
        self,
        start_date: datetime,
        end_date: datetime,
        summary_type: SummaryType = SummaryType.MONTHLY,
        patient_id: str | None = None,
    ) -> HealthSummaryReport:
        """
        Summarize the records of one time window.

        Args:
            start_date: Window start (inclusive)
            end_date: Window end (inclusive)
            summary_type: Period covered
            patient_id: Patient override

        Returns:
            Report for the window

        Raises:
            StoreError: If reading or writing the store fails
            BackendFailureError: If the chosen model fails or times out
        """
        summary_type = SummaryType(summary_type)
        patient_id = patient_id or self.patient_id
        start_date, end_date = ensure_utc(start_date), ensure_utc(end_date)

        with log_context(patient_id=patient_id):
            return await self._build_report(start_date, end_date, summary_type, patient_id)

    async def _build_report(
        self,
        start_date: datetime,
        end_date: datetime,
        summary_type: SummaryType,
        patient_id: str,
    ) -> HealthSummaryReport:
        records = await self.store.query_nodes(
            layer=0,
            patient_id=patient_id,
            created_after=start_date,
            created_before=end_date,
        )
        contents = [node.content for node in records]

        summary_node_id = None
        summary_content = None
        used_llm = False
        adapter = None

        if len(records) >= MIN_RECORDS_FOR_SUMMARY:
            generated = await self._generate(contents, summary_type)
            if generated is None:
                summary_content = create_fallback_summary(contents, summary_type)
                logger.info(
                    f"No model available, using fallback {summary_type} summary",
                    extra={"records": len(records)},
                )
            else:
                summary_content, adapter = generated
                used_llm = True
                HierarchyEngine.check_sources(records, layer=1, patient_id=patient_id)
                summary_node_id = await self.hierarchy.create_summary_node(
                    content=summary_content,
                    source_ids=[node.id for node in records],
                    layer=1,
                    record_type=SUMMARY_RECORD_TYPE,
                    patient_id=patient_id,
                )
        else:
            logger.debug(f"Only {len(records)} records in window, skipping generation")

        insights = self.key_insights(records)
        report = HealthSummaryReport(
            period=self.period_label(start_date, end_date, summary_type),
            total_records=len(records),
            summary_node_id=summary_node_id,
            summary_content=summary_content,
            key_insights=insights,
            recommendations=self.recommendations(insights),
            used_llm=used_llm,
            adapter=adapter,
        )

        logger.info(
            f"Generated {summary_type} report over {len(records)} records",
            extra={"used_llm": used_llm, "node_id": summary_node_id},
        )
        return report

    async def _generate(self, contents: list[str], summary_type: SummaryType):
        """Ask the router for a summary; None when no backend is eligible."""
        if self.router is None or not await self.router.is_available():
            return None
        try:
            return await self.router.generate_summary(contents, summary_type)
        except BackendUnavailableError as e:
            # Routing state changed between the check and dispatch
            logger.warning(f"Backend became unavailable: {e}")
            return None

    @staticmethod
    def key_insights(records: list[MedicalNode]) -> list[str]:
        """One line per record type, most frequent first."""
        if not records:
            return [NO_INSIGHTS_MESSAGE]
        counts = Counter(node.record_type for node in records)
        return [f"{count} {record_type} records" for record_type, count in counts.most_common()]

    @staticmethod
    def recommendations(insights: list[str]) -> list[str]:
        if len(insights) < MIN_INSIGHTS_FOR_GUIDANCE:
            return [RECORD_MORE_MESSAGE]
        return list(GUIDANCE_MESSAGES)

    @staticmethod
    def period_label(start_date: datetime, end_date: datetime, summary_type: SummaryType) -> str:
        return f"{SummaryType(summary_type).value}: {start_date:%Y-%m-%d} - {end_date:%Y-%m-%d}"
