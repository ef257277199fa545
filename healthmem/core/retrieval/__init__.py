"""
Retrieval building blocks.

- select_strategy / explain: lexical query classification
- BM25Index: Okapi BM25 over node contents
- Ranker: BM25, Recency, Diversity and MMR rankers
"""

from healthmem.core.retrieval.bm25 import BM25Index
from healthmem.core.retrieval.ranking import Ranker
from healthmem.core.retrieval.strategy import explain, select_strategy

__all__ = ["BM25Index", "Ranker", "explain", "select_strategy"]
