"""Lexical normalization shared by the rankers."""

import re
import unicodedata

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def fold(text: str) -> str:
    """Lowercase and strip accents so "Diagnóstico" matches "diagnostico"."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def tokenize(text: str) -> list[str]:
    """Split text into folded word tokens."""
    if not text:
        return []
    return _TOKEN_RE.findall(fold(text))


def lexical_overlap(query_tokens: list[str], doc_tokens: list[str]) -> float:
    """Fraction of distinct query terms present in the document."""
    query_terms = set(query_tokens)
    if not query_terms:
        return 0.0
    return len(query_terms & set(doc_tokens)) / len(query_terms)
