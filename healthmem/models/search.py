"""
Retrieval models: strategies, ranked hits and multi-hop results.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from healthmem.models.node import MedicalNode

_EXPLANATIONS = {
    "bm25": (
        "Using BM25: your query contains specific medical terms. "
        "This strategy prioritizes exact keyword matches."
    ),
    "recency": (
        "Using Recency: your query asks for recent information. "
        "This strategy prioritizes the newest records."
    ),
    "diversity": (
        "Using Diversity: your query is exploratory. "
        "This strategy maximizes the variety of results."
    ),
    "mmr": (
        "Using MMR (Maximal Marginal Relevance): this strategy "
        "balances relevance and diversity for well-rounded results."
    ),
}


class SearchStrategy(str, Enum):
    """Ranking strategy chosen for a query."""

    BM25 = "bm25"  # Keyword matching for specific medical terms
    RECENCY = "recency"  # Time-based prioritization
    DIVERSITY = "diversity"  # Maximize variety in results
    MMR = "mmr"  # Maximal Marginal Relevance (balanced)

    def explain(self) -> str:
        """User-facing explanation of why this strategy is used."""
        return _EXPLANATIONS[self.value]


class ScoredNode(BaseModel):
    """A node with the score its ranker assigned."""

    node: MedicalNode
    score: float


class ContextNode(BaseModel):
    """Higher-layer node reached by walking up from a hit."""

    node_id: str
    content: str
    layer: int
    created_at: datetime


class MultiHopResult(BaseModel):
    """Direct hit plus the summary nodes that transitively include it."""

    node_id: str
    content: str
    layer: int
    relevance_score: float
    context: list[ContextNode] = Field(default_factory=list)


class SmartSearchResult(BaseModel):
    """Direct and hierarchical results for one query."""

    query: str
    strategy: SearchStrategy
    direct_results: list[str] = Field(default_factory=list)
    hierarchical_results: list[MultiHopResult] = Field(default_factory=list)
    search_time: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_results(self) -> int:
        """Number of direct plus hierarchical results."""
        return len(self.direct_results) + len(self.hierarchical_results)

    @property
    def has_hierarchical_context(self) -> bool:
        """True if any hierarchical hit carries summary context."""
        return any(result.context for result in self.hierarchical_results)
