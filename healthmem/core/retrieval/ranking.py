"""
Ranking functions for the four search strategies.

Each ranker takes the candidate nodes of one request and returns at most
``limit`` ScoredNode entries, best first. Content similarity uses the
caller-supplied embeddings when every candidate has one of the same size,
and TF-IDF vectors of the contents otherwise.
"""

from datetime import UTC, datetime

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from healthmem.config import RetrievalConfig
from healthmem.core.retrieval.bm25 import BM25Index
from healthmem.core.retrieval.text import lexical_overlap, tokenize
from healthmem.models.node import MedicalNode, ensure_utc
from healthmem.models.search import ScoredNode, SearchStrategy
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class Ranker:
    """
    Strategy-dispatching ranker over a transient candidate set.

    Usage:
        ranker = Ranker(RetrievalConfig())
        hits = ranker.rank("blood pressure", nodes, limit=5, strategy=SearchStrategy.MMR)
    """

    def __init__(self, config: RetrievalConfig | None = None):
        self.config = config or RetrievalConfig()

    def rank(
        self,
        query: str,
        nodes: list[MedicalNode],
        limit: int,
        strategy: SearchStrategy,
        now: datetime | None = None,
    ) -> list[ScoredNode]:
        """
        Rank candidate nodes for a query.

        Args:
            query: Free-text query
            nodes: Candidate nodes
            limit: Maximum number of results
            strategy: Ranking strategy
            now: Reference time for recency (defaults to current UTC time)

        Returns:
            Ranked nodes, best first
        """
        if limit <= 0 or not nodes:
            return []

        strategy = SearchStrategy(strategy)
        if strategy is SearchStrategy.BM25:
            return self.rank_bm25(query, nodes, limit)
        if strategy is SearchStrategy.RECENCY:
            return self.rank_recency(query, nodes, limit, now=now)
        if strategy is SearchStrategy.DIVERSITY:
            return self.rank_diversity(query, nodes, limit)
        return self.rank_mmr(query, nodes, limit)

    def rank_bm25(self, query: str, nodes: list[MedicalNode], limit: int) -> list[ScoredNode]:
        """Lexical BM25 ranking; nodes without any query term are dropped."""
        index = self._index(nodes)
        scored = [
            (score, node)
            for score, node in zip(index.scores(query), nodes, strict=True)
            if score > 0
        ]
        scored.sort(key=lambda pair: (pair[0], pair[1].created_at.timestamp()), reverse=True)
        return [ScoredNode(node=node, score=score) for score, node in scored[:limit]]

    def rank_recency(
        self,
        query: str,
        nodes: list[MedicalNode],
        limit: int,
        now: datetime | None = None,
    ) -> list[ScoredNode]:
        """Exponential time decay; equal ages are ordered by query term overlap."""
        now = ensure_utc(now) if now else datetime.now(UTC)
        half_life = self.config.recency_half_life_days
        query_tokens = tokenize(query)

        scored = []
        for node in nodes:
            decay = 0.5 ** (node.age_days(now) / half_life)
            overlap = lexical_overlap(query_tokens, tokenize(node.content))
            scored.append((decay, overlap, node))

        scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [ScoredNode(node=node, score=decay) for decay, _, node in scored[:limit]]

    def rank_diversity(self, query: str, nodes: list[MedicalNode], limit: int) -> list[ScoredNode]:
        """
        Greedy max-dissimilarity selection above a relevance floor.

        The first pick is the most relevant candidate. Each following pick
        maximizes its minimum distance to everything already selected plus a
        bonus for a record type not selected yet.
        """
        relevance = self._index(nodes).normalized_scores(query)
        floor = self.config.diversity_relevance_floor

        if max(relevance, default=0.0) > 0:
            pool = [i for i, rel in enumerate(relevance) if rel >= floor]
        else:
            # Nothing matches lexically: every node is an equally relevant candidate
            pool = list(range(len(nodes)))

        if not pool:
            return []

        pool_nodes = [nodes[i] for i in pool]
        pool_relevance = [relevance[i] for i in pool]
        similarity = self.similarity_matrix(pool_nodes)

        first = max(
            range(len(pool_nodes)),
            key=lambda i: (pool_relevance[i], pool_nodes[i].created_at.timestamp()),
        )
        selected = [first]
        selected_types = {pool_nodes[first].record_type}
        remaining = [i for i in range(len(pool_nodes)) if i != first]

        while remaining and len(selected) < limit:
            best, best_key = None, None
            for i in remaining:
                distance = min(1.0 - float(similarity[i, j]) for j in selected)
                novelty = (
                    self.config.diversity_type_bonus
                    if pool_nodes[i].record_type not in selected_types
                    else 0.0
                )
                key = (distance + novelty, pool_relevance[i], pool_nodes[i].created_at.timestamp())
                if best_key is None or key > best_key:
                    best, best_key = i, key

            selected.append(best)
            selected_types.add(pool_nodes[best].record_type)
            remaining.remove(best)

        return [ScoredNode(node=pool_nodes[i], score=pool_relevance[i]) for i in selected]

    def rank_mmr(self, query: str, nodes: list[MedicalNode], limit: int) -> list[ScoredNode]:
        """
        Maximal Marginal Relevance.

        MMR(d) = lambda * rel(q, d) - (1 - lambda) * max(sim(d, d_i) for d_i in selected)
        """
        relevance = self._index(nodes).normalized_scores(query)
        mmr_lambda = self.config.mmr_lambda

        if max(relevance, default=0.0) > 0:
            pool = [i for i, rel in enumerate(relevance) if rel > 0]
        else:
            pool = list(range(len(nodes)))

        pool_nodes = [nodes[i] for i in pool]
        pool_relevance = [relevance[i] for i in pool]
        similarity = self.similarity_matrix(pool_nodes)

        selected: list[int] = []
        remaining = list(range(len(pool_nodes)))

        while remaining and len(selected) < limit:
            best, best_key = None, None
            for i in remaining:
                redundancy = max((float(similarity[i, j]) for j in selected), default=0.0)
                mmr = mmr_lambda * pool_relevance[i] - (1 - mmr_lambda) * redundancy
                key = (mmr, pool_nodes[i].created_at.timestamp())
                if best_key is None or key > best_key:
                    best, best_key = i, key

            selected.append(best)
            remaining.remove(best)

        return [ScoredNode(node=pool_nodes[i], score=pool_relevance[i]) for i in selected]

    def similarity_matrix(self, nodes: list[MedicalNode]) -> np.ndarray:
        """
        Pairwise cosine similarity between nodes.

        Args:
            nodes: Nodes to compare

        Returns:
            Square matrix of similarities in [0, 1] (embeddings may go below 0)
        """
        if not nodes:
            return np.zeros((0, 0))

        embeddings = [node.embedding for node in nodes]
        dims = {len(e) for e in embeddings if e}
        if all(embeddings) and len(dims) == 1:
            return cosine_similarity(np.array(embeddings, dtype=float))

        vectorizer = TfidfVectorizer(tokenizer=tokenize, lowercase=False, token_pattern=None)
        try:
            matrix = vectorizer.fit_transform([node.content for node in nodes])
        except ValueError:
            # Empty vocabulary (punctuation-only contents): treat nodes as unrelated
            logger.debug("TF-IDF vocabulary empty, using identity similarity")
            return np.eye(len(nodes))
        return cosine_similarity(matrix)

    def _index(self, nodes: list[MedicalNode]) -> BM25Index:
        return BM25Index(
            [node.content for node in nodes], k1=self.config.bm25_k1, b=self.config.bm25_b
        )
