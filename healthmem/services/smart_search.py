"""
Smart Search - one call that picks a strategy and returns flat and
hierarchical results together.
"""

from healthmem.core.retrieval.strategy import select_strategy
from healthmem.models.search import SmartSearchResult
from healthmem.services.retriever import MultiHopRetriever
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)

# Traversal used for the hierarchical half of a smart search
SMART_SEARCH_MAX_HOPS = 2
SMART_SEARCH_TOP_K = 3


class SmartSearch:
    """
    Strategy-selecting search over a MultiHopRetriever.

    Usage:
        result = await SmartSearch(retriever).execute("recent blood pressure")
        print(result.strategy.explain())
    """

    def __init__(self, retriever: MultiHopRetriever):
        self.retriever = retriever

    async def execute(
        self, query: str, limit: int = 10, patient_id: str | None = None
    ) -> SmartSearchResult:
        """
        Run a direct search and a multi-hop search with the selected strategy.

        Args:
            query: Free-text query
            limit: Maximum number of direct results
            patient_id: Optional patient override

        Returns:
            Direct IDs plus hierarchical results
        """
        strategy = select_strategy(query)
        direct = await self.retriever.search(query, limit, strategy, patient_id=patient_id)
        hierarchical = await self.retriever.multi_hop(
            query,
            max_hops=SMART_SEARCH_MAX_HOPS,
            top_k=SMART_SEARCH_TOP_K,
            strategy=strategy,
            patient_id=patient_id,
        )

        logger.info(
            f"Smart search used {strategy.value}",
            extra={"direct": len(direct), "hierarchical": len(hierarchical)},
        )
        return SmartSearchResult(
            query=query,
            strategy=strategy,
            direct_results=direct,
            hierarchical_results=hierarchical,
        )
