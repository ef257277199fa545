"""
Service layer: hierarchy writes, retrieval, model routing and summaries.
"""

from healthmem.services.health_memory import HealthMemory
from healthmem.services.hierarchy_engine import HierarchyEngine
from healthmem.services.model_router import AdaptiveModelRouter
from healthmem.services.retriever import MultiHopRetriever
from healthmem.services.smart_search import SmartSearch
from healthmem.services.summary_pipeline import HealthSummaryGenerator

__all__ = [
    "AdaptiveModelRouter",
    "HealthMemory",
    "HealthSummaryGenerator",
    "HierarchyEngine",
    "MultiHopRetriever",
    "SmartSearch",
]
