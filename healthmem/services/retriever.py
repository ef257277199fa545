"""
Multi-Hop Retriever - ranked search over layer 0 plus hierarchical context.

Direct search ranks layer-0 nodes with one of the four strategies.
Multi-hop search then walks up the summary_of back-references from each
hit, breadth first, to attach the summaries that include it.
"""

from collections import defaultdict

from healthmem.config import RetrievalConfig
from healthmem.core.node_store.base import NodeStore
from healthmem.core.retrieval.ranking import Ranker
from healthmem.core.retrieval.strategy import select_strategy
from healthmem.models.node import MedicalNode
from healthmem.models.search import ContextNode, MultiHopResult, ScoredNode, SearchStrategy
from healthmem.utils.exceptions import InvalidInputError
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)

# Order used by compare_strategies
COMPARISON_ORDER = (
    SearchStrategy.BM25,
    SearchStrategy.MMR,
    SearchStrategy.DIVERSITY,
    SearchStrategy.RECENCY,
)


class MultiHopRetriever:
    """
    Query-time retrieval over the node hierarchy.

    Holds no state across calls: every request reads the store and builds
    its own working set.
    """

    def __init__(
        self,
        store: NodeStore,
        config: RetrievalConfig | None = None,
        patient_id: str | None = None,
    ):
        """
        Initialize retriever.

        Args:
            store: Node store
            config: Ranking and traversal settings
            patient_id: Restrict retrieval to one patient (all patients if None)
        """
        self.store = store
        self.config = config or RetrievalConfig()
        self.patient_id = patient_id
        self.ranker = Ranker(self.config)

    async def rank(
        self,
        query: str,
        limit: int,
        strategy: SearchStrategy,
        patient_id: str | None = None,
    ) -> list[ScoredNode]:
        """
        Rank layer-0 nodes for a query.

        Args:
            query: Free-text query
            limit: Maximum number of results
            strategy: Ranking strategy
            patient_id: Optional patient override

        Returns:
            Ranked nodes, best first

        Raises:
            InvalidInputError: If limit is negative
            StoreError: If reading the store fails
        """
        if limit < 0:
            raise InvalidInputError(f"limit must be >= 0, got {limit}", context={"limit": limit})

        nodes = await self.store.query_by_layer(0, patient_id=patient_id or self.patient_id)
        return self.ranker.rank(query, nodes, limit, strategy)

    async def search(
        self,
        query: str,
        limit: int = 10,
        strategy: SearchStrategy = SearchStrategy.MMR,
        patient_id: str | None = None,
    ) -> list[str]:
        """
        Direct search.

        Returns:
            IDs of the ranked layer-0 nodes
        """
        ranked = await self.rank(query, limit, strategy, patient_id=patient_id)
        logger.debug(
            f"Search returned {len(ranked)} results",
            extra={"strategy": SearchStrategy(strategy).value, "limit": limit},
        )
        return [hit.node.id for hit in ranked]

    async def multi_hop(
        self,
        query: str,
        max_hops: int | None = None,
        top_k: int | None = None,
        strategy: SearchStrategy | None = None,
        patient_id: str | None = None,
    ) -> list[MultiHopResult]:
        """
        Hierarchical search.

        Finds the top_k layer-0 hits, then for each hit collects every summary
        node that includes it within max_hops levels of summary_of references.
        Context is ordered by layer ascending, newest first within a layer.
        A summary reached from several hits is attached only to the
        highest-ranked one.

        Args:
            query: Free-text query
            max_hops: Maximum number of upward hops (config default if None)
            top_k: Number of layer-0 hits (config default if None)
            strategy: Ranking strategy (selected from the query if None)
            patient_id: Optional patient override

        Returns:
            One result per hit, best first
        """
        max_hops = self.config.max_hops if max_hops is None else max_hops
        top_k = self.config.top_k if top_k is None else top_k
        if max_hops < 0 or top_k < 0:
            raise InvalidInputError(
                "max_hops and top_k must be >= 0",
                context={"max_hops": max_hops, "top_k": top_k},
            )

        strategy = strategy or select_strategy(query)
        hits = await self.rank(query, top_k, strategy, patient_id=patient_id)
        if not hits:
            return []

        parents_of: dict[str, list[MedicalNode]] = {}
        if max_hops > 0:
            summaries = await self.store.query_nodes(
                min_layer=1, patient_id=patient_id or self.patient_id
            )
            parents_of = self._build_parent_index(summaries)

        seen: set[str] = {hit.node.id for hit in hits}
        results = []
        for hit in hits:
            context = []
            for summary in self._walk_up(hit.node.id, parents_of, max_hops):
                if summary.id in seen:
                    continue
                seen.add(summary.id)
                context.append(summary)

            context.sort(key=lambda n: (n.layer, -n.created_at.timestamp()))
            results.append(
                MultiHopResult(
                    node_id=hit.node.id,
                    content=hit.node.content,
                    layer=hit.node.layer,
                    relevance_score=hit.score,
                    context=[
                        ContextNode(
                            node_id=n.id,
                            content=n.content,
                            layer=n.layer,
                            created_at=n.created_at,
                        )
                        for n in context
                    ],
                )
            )

        logger.debug(
            f"Multi-hop search returned {len(results)} hits",
            extra={
                "strategy": SearchStrategy(strategy).value,
                "context_nodes": sum(len(r.context) for r in results),
            },
        )
        return results

    async def compare_strategies(
        self, query: str, limit: int = 10, patient_id: str | None = None
    ) -> dict[str, list[str]]:
        """
        Run the same query under every strategy.

        A failing strategy is reported inline as ["Error: <message>"] and does
        not abort the comparison.

        Returns:
            Mapping of strategy name to result IDs
        """
        results: dict[str, list[str]] = {}
        for strategy in COMPARISON_ORDER:
            try:
                results[strategy.value] = await self.search(
                    query, limit, strategy, patient_id=patient_id
                )
            except Exception as e:
                logger.warning(
                    f"Strategy {strategy.value} failed during comparison",
                    extra={"strategy": strategy.value, "error": str(e), "error_type": type(e).__name__},
                )
                results[strategy.value] = [f"Error: {e}"]
        return results

    @staticmethod
    def _build_parent_index(summaries: list[MedicalNode]) -> dict[str, list[MedicalNode]]:
        """Map each node id to the summary nodes that reference it."""
        parents_of: dict[str, list[MedicalNode]] = defaultdict(list)
        for summary in summaries:
            for source_id in summary.summary_of:
                parents_of[source_id].append(summary)
        return parents_of

    @staticmethod
    def _walk_up(
        node_id: str, parents_of: dict[str, list[MedicalNode]], max_hops: int
    ) -> list[MedicalNode]:
        """Breadth-first walk over summary_of back-references."""
        found: list[MedicalNode] = []
        visited = {node_id}
        frontier = [node_id]

        for _ in range(max_hops):
            next_frontier = []
            for current in frontier:
                for parent in parents_of.get(current, ()):
                    if parent.id in visited:
                        continue
                    visited.add(parent.id)
                    found.append(parent)
                    next_frontier.append(parent.id)
            if not next_frontier:
                break
            frontier = next_frontier

        return found
