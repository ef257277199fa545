"""
Query strategy selection.

Classifies a free-text query into a ranking strategy by case-insensitive
substring matching. Categories are checked in a fixed order and the first
match wins: medical terms, then temporal terms, then exploratory terms,
otherwise MMR.
"""

from healthmem.models.search import SearchStrategy

MEDICAL_TERMS = (
    # Spanish
    "diagnóstico",
    "diagnostico",
    "síntoma",
    "sintoma",
    "medicamento",
    "tratamiento",
    "prescripción",
    "prescripcion",
    "dosis",
    "análisis",
    "analisis",
    "resultado",
    "diabetes",
    "hipertensión",
    "hipertension",
    "alergia",
    "dolor",
    # English
    "diagnosis",
    "symptom",
    "medication",
    "medicine",
    "treatment",
    "prescription",
    "dose",
    "dosage",
    "analysis",
    "lab result",
    "hypertension",
    "allergy",
    "pain",
)

TEMPORAL_TERMS = (
    "reciente",
    "último",
    "ultimo",
    "actual",
    "hoy",
    "ayer",
    "esta semana",
    "este mes",
    "nuevo",
    "recent",
    "latest",
    "today",
    "yesterday",
    "this week",
    "this month",
    "current",
    "new",
)

EXPLORATORY_TERMS = (
    "todos",
    "diferentes",
    "variedad",
    "tipos",
    "opciones",
    "alternativas",
    "qué más",
    "que mas",
    "every",
    "different",
    "variety",
    "types",
    "options",
    "alternatives",
    "what else",
    "overview",
)

# Evaluation order is part of the contract: precision, recency, breadth, balance
_PRIORITY = (
    (MEDICAL_TERMS, SearchStrategy.BM25),
    (TEMPORAL_TERMS, SearchStrategy.RECENCY),
    (EXPLORATORY_TERMS, SearchStrategy.DIVERSITY),
)


def select_strategy(query: str) -> SearchStrategy:
    """
    Choose the ranking strategy for a query.

    Args:
        query: Free-text user query

    Returns:
        The first matching category's strategy, MMR when nothing matches
    """
    lowered = (query or "").lower()
    for vocabulary, strategy in _PRIORITY:
        if any(term in lowered for term in vocabulary):
            return strategy
    return SearchStrategy.MMR


def explain(strategy: SearchStrategy | str) -> str:
    """Human-readable reason for a strategy, for UI transparency."""
    return SearchStrategy(strategy).explain()
