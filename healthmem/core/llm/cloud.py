"""
Cloud generation backend using the official OpenAI SDK.

Works against any OpenAI-compatible endpoint; the default configuration
targets Gemini's compatibility API.
"""

from openai import APIStatusError, AsyncOpenAI

from healthmem.core.llm.base import GenerationBackend
from healthmem.core.llm.prompts import create_summary_prompt
from healthmem.models.health import SummaryType
from healthmem.models.llm import GenerationResult, TokenUsage
from healthmem.utils.exceptions import BackendFailureError, BackendUnavailableError
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class CloudBackend(GenerationBackend):
    """
    Cloud model backend.

    Usage accounting is left to the caller: every result carries the token
    counts the API reported.
    """

    name = "cloud"

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-1.5-flash",
        base_url: str | None = None,
        timeout: float = 60.0,
    ):
        """
        Initialize cloud backend.

        Args:
            api_key: API key; the backend reports unavailable without one
            model: Model name
            base_url: Optional OpenAI-compatible endpoint
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url

        self.client = (
            AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout) if api_key else None
        )

    async def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate_text(self, prompt: str) -> GenerationResult:
        return await self.complete(prompt, temperature=0.7, top_p=0.9, max_tokens=512)

    async def generate_summary(
        self, contents: list[str], summary_type: SummaryType
    ) -> GenerationResult:
        prompt = create_summary_prompt(contents, summary_type)
        return await self.complete(prompt, temperature=0.7, top_p=0.9, max_tokens=1024)

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        top_p: float = 0.9,
        max_tokens: int = 512,
    ) -> GenerationResult:
        """
        Single request/response completion.

        Args:
            prompt: Input prompt
            temperature: Sampling temperature
            top_p: Nucleus sampling mass
            max_tokens: Maximum tokens to generate

        Returns:
            Generated text with reported token usage (None if not reported)

        Raises:
            BackendUnavailableError: If no API key is configured
            BackendFailureError: On non-2xx status, transport errors or empty responses
        """
        if self.client is None:
            raise BackendUnavailableError("Cloud API key not configured")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
            )
        except APIStatusError as e:
            logger.error(
                f"Cloud API error ({e.status_code})",
                extra={"model": self.model, "status_code": e.status_code, "error": e.message},
            )
            raise BackendFailureError(
                f"Cloud API error ({e.status_code}): {e.message}",
                context={"model": self.model, "status_code": e.status_code},
            ) from e
        except Exception as e:
            logger.error(
                "Cloud API request failed",
                extra={"model": self.model, "error": str(e), "error_type": type(e).__name__},
            )
            raise BackendFailureError(
                f"Cloud API request failed: {e}", context={"model": self.model}
            ) from e

        if not response.choices or not response.choices[0].message.content:
            raise BackendFailureError("No response from cloud model", context={"model": self.model})

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        return GenerationResult(text=response.choices[0].message.content, usage=usage)

    async def close(self) -> None:
        """Close OpenAI client."""
        if self.client is not None:
            await self.client.close()
