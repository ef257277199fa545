"""
Okapi BM25 over node contents.

Built per request from the candidate nodes; nothing is cached across calls.
"""

import math
from collections import Counter

from healthmem.core.retrieval.text import tokenize


class BM25Index:
    """
    In-memory BM25 index.

    Usage:
        index = BM25Index([node.content for node in nodes])
        scores = index.scores("blood pressure")
    """

    def __init__(self, documents: list[str], k1: float = 1.5, b: float = 0.75):
        """
        Build the index.

        Args:
            documents: Document texts, scored in this order
            k1: Term frequency saturation
            b: Length normalization strength
        """
        self.k1 = k1
        self.b = b
        self.doc_tokens = [tokenize(doc) for doc in documents]
        self.term_freqs = [Counter(tokens) for tokens in self.doc_tokens]
        self.doc_lengths = [len(tokens) for tokens in self.doc_tokens]
        self.avg_length = (
            sum(self.doc_lengths) / len(self.doc_lengths) if self.doc_lengths else 0.0
        )

        doc_freq: Counter = Counter()
        for tokens in self.doc_tokens:
            doc_freq.update(set(tokens))

        n_docs = len(self.doc_tokens)
        # Lucene-style idf, always positive
        self.idf = {
            term: math.log(1 + (n_docs - df + 0.5) / (df + 0.5)) for term, df in doc_freq.items()
        }

    def __len__(self) -> int:
        return len(self.doc_tokens)

    def score(self, query_tokens: list[str], index: int) -> float:
        """BM25 score of one document for already tokenized query terms."""
        freqs = self.term_freqs[index]
        length = self.doc_lengths[index]
        norm = 1 - self.b + self.b * (length / self.avg_length if self.avg_length else 0.0)

        total = 0.0
        for term in query_tokens:
            tf = freqs.get(term, 0)
            if not tf:
                continue
            total += self.idf[term] * (tf * (self.k1 + 1)) / (tf + self.k1 * norm)
        return total

    def scores(self, query: str) -> list[float]:
        """Score every document against the query."""
        query_tokens = tokenize(query)
        return [self.score(query_tokens, i) for i in range(len(self.doc_tokens))]

    def normalized_scores(self, query: str) -> list[float]:
        """Scores scaled into [0, 1] by the best match (all zeros if nothing matches)."""
        raw = self.scores(query)
        best = max(raw, default=0.0)
        if best <= 0:
            return [0.0 for _ in raw]
        return [s / best for s in raw]
