"""
Data models for healthmem.

Hierarchy:
1. Layer 0 - raw health observations (MedicalNode)
2. Layer N - summaries referencing lower layers via summary_of

Core models:
- MedicalNode, NodeMetadata: hierarchy nodes
- SearchStrategy, ScoredNode, ContextNode, MultiHopResult, SmartSearchResult: retrieval
- RoutingStrategy, AdapterChoice, TokenUsage, UsageStats, GenerationResult: generation
- ModelInfo, DownloadProgress: local model cache
- SummaryType, HealthSummaryReport: summary pipeline
"""

from healthmem.models.health import HealthSummaryReport, SummaryType
from healthmem.models.llm import (
    AdapterChoice,
    DownloadProgress,
    GenerationResult,
    ModelInfo,
    RoutingStrategy,
    TokenUsage,
    UsageStats,
)
from healthmem.models.node import SUMMARY_RECORD_TYPE, MedicalNode, NodeMetadata
from healthmem.models.search import (
    ContextNode,
    MultiHopResult,
    ScoredNode,
    SearchStrategy,
    SmartSearchResult,
)

__all__ = [
    # Nodes
    "MedicalNode",
    "NodeMetadata",
    "SUMMARY_RECORD_TYPE",
    # Retrieval
    "SearchStrategy",
    "ScoredNode",
    "ContextNode",
    "MultiHopResult",
    "SmartSearchResult",
    # Generation
    "RoutingStrategy",
    "AdapterChoice",
    "TokenUsage",
    "UsageStats",
    "GenerationResult",
    "ModelInfo",
    "DownloadProgress",
    # Summaries
    "SummaryType",
    "HealthSummaryReport",
]
