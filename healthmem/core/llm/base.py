"""
Abstract base class for generation backends.
Local and cloud backends expose the same capability set.
"""

from abc import ABC, abstractmethod

from healthmem.models.health import SummaryType
from healthmem.models.llm import GenerationResult


class GenerationBackend(ABC):
    """
    Abstract base for text generation backends.

    Responsibilities:
    - Availability check
    - Free-form text generation
    - Health period summary generation
    """

    name: str = "backend"

    @abstractmethod
    async def is_available(self) -> bool:
        """
        Check if the backend can serve requests.

        Returns:
            True if the backend is usable right now
        """
        pass

    @abstractmethod
    async def generate_text(self, prompt: str) -> GenerationResult:
        """
        Generate a completion for a prompt.

        Args:
            prompt: The input prompt

        Returns:
            Generated text and reported token usage

        Raises:
            BackendFailureError: If the backend fails or returns nothing
            BackendUnavailableError: If the backend cannot serve requests
        """
        pass

    @abstractmethod
    async def generate_summary(
        self, contents: list[str], summary_type: SummaryType
    ) -> GenerationResult:
        """
        Summarize health records for a period.

        Args:
            contents: Record contents, oldest first
            summary_type: Period covered

        Returns:
            Generated summary and reported token usage
        """
        pass

    async def close(self) -> None:
        """
        Close any open connections.
        Optional to override if backend needs cleanup.
        """
        pass
