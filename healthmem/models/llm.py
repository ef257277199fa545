"""
Generation and routing models.
"""

from enum import Enum

from pydantic import BaseModel, Field


class RoutingStrategy(str, Enum):
    """How the router picks a generation backend."""

    LOCAL_ONLY = "local_only"
    CLOUD_ONLY = "cloud_only"
    HYBRID = "hybrid"  # Auto-switch on availability, budget and prompt size


class AdapterChoice(str, Enum):
    """Backend chosen for a request."""

    LOCAL = "local"
    CLOUD = "cloud"

    def __str__(self) -> str:
        return self.value.capitalize()


class TokenUsage(BaseModel):
    """Token counts reported by a backend for one call."""

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


class UsageStats(BaseModel):
    """Cumulative cloud usage counters."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    requests_count: int = 0

    def add(self, usage: TokenUsage | None) -> "UsageStats":
        """Return new stats with one more request and its token counts."""
        usage = usage or TokenUsage()
        return UsageStats(
            prompt_tokens=self.prompt_tokens + usage.prompt_tokens,
            completion_tokens=self.completion_tokens + usage.completion_tokens,
            total_tokens=self.total_tokens + usage.total_tokens,
            requests_count=self.requests_count + 1,
        )


class GenerationResult(BaseModel):
    """Text produced by a backend and the usage it reported."""

    text: str
    usage: TokenUsage | None = None


class ModelInfo(BaseModel):
    """A model present in the local model cache."""

    id: str
    name: str
    size_bytes: int = 0
    version: str = "local"
    is_downloaded: bool = True


class DownloadProgress(BaseModel):
    """Progress of a local model download."""

    status: str = ""
    downloaded_bytes: int = 0
    total_bytes: int = 0

    @property
    def percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.downloaded_bytes / self.total_bytes * 100.0
