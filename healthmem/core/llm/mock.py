"""
Always-unavailable backend for tests and unconfigured deployments.
"""

from healthmem.core.llm.base import GenerationBackend
from healthmem.models.health import SummaryType
from healthmem.models.llm import GenerationResult
from healthmem.utils.exceptions import BackendUnavailableError


class UnavailableBackend(GenerationBackend):
    """Backend that never serves text and reports a fixed diagnostic."""

    name = "mock"

    async def is_available(self) -> bool:
        return False

    async def generate_text(self, prompt: str) -> GenerationResult:
        raise BackendUnavailableError("Mock backend - not available")

    async def generate_summary(
        self, contents: list[str], summary_type: SummaryType
    ) -> GenerationResult:
        return GenerationResult(
            text=f"[MOCK] {SummaryType(summary_type).value} summary generated automatically (LLM not available)"
        )
