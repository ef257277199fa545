"""
Health summary models.
"""

from enum import Enum

from pydantic import BaseModel, Field

from healthmem.models.llm import AdapterChoice


class SummaryType(str, Enum):
    """Period covered by a health summary."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    def __str__(self) -> str:
        return self.value


class HealthSummaryReport(BaseModel):
    """Result of the summary pipeline for one time window."""

    period: str
    total_records: int = Field(ge=0)
    summary_node_id: str | None = None
    summary_content: str | None = None
    key_insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    used_llm: bool = False
    adapter: AdapterChoice | None = None
