"""
Local generation backend using native ollama-python SDK.
"""

import ollama

from healthmem.core.llm.base import GenerationBackend
from healthmem.core.llm.model_manager import ModelManager
from healthmem.core.llm.prompts import create_summary_prompt
from healthmem.models.health import SummaryType
from healthmem.models.llm import GenerationResult, TokenUsage
from healthmem.utils.exceptions import (
    BackendFailureError,
    BackendUnavailableError,
    ModelAcquisitionError,
    NotFoundError,
)
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class LocalBackend(GenerationBackend):
    """
    On-device model served by Ollama.

    Available once the configured model is in the local model cache.
    """

    name = "local"

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "phi3:mini",
        timeout: float = 120.0,
        model_manager: ModelManager | None = None,
    ):
        """
        Initialize local backend.

        Args:
            host: Ollama server URL
            model: Model reference (e.g., "phi3:mini", "llama3.1:8b")
            timeout: Request timeout in seconds
            model_manager: Optional model cache manager sharing this backend's server
        """
        self.host = host
        self.model = model
        self.timeout = timeout

        self.client = ollama.AsyncClient(host=host, timeout=timeout)
        self.model_manager = model_manager or ModelManager(host=host, client=self.client)

    async def is_available(self) -> bool:
        try:
            return await self.model_manager.is_downloaded(self.model)
        except ModelAcquisitionError as e:
            logger.warning(f"Local model availability check failed: {e}")
            return False

    async def generate_text(self, prompt: str) -> GenerationResult:
        return await self._generate(prompt, temperature=0.7, top_p=0.9, max_tokens=512)

    async def generate_summary(
        self, contents: list[str], summary_type: SummaryType
    ) -> GenerationResult:
        prompt = create_summary_prompt(contents, summary_type)
        return await self._generate(prompt, temperature=0.7, top_p=0.9, max_tokens=1024)

    async def _resolve_model(self) -> str:
        """Local reference of the configured model, as listed by the server."""
        try:
            return await self.model_manager.resolve_local_model(self.model)
        except (NotFoundError, ModelAcquisitionError) as e:
            raise BackendUnavailableError(
                f"Local model {self.model} is not ready: {e.message}",
                context={"model": self.model, "host": self.host},
            ) from e

    async def _generate(
        self, prompt: str, temperature: float, top_p: float, max_tokens: int
    ) -> GenerationResult:
        model = await self._resolve_model()
        options = {
            "temperature": temperature,
            "top_p": top_p,
            "num_predict": max_tokens,
        }

        try:
            response = await self.client.generate(model=model, prompt=prompt, options=options)
        except Exception as e:
            logger.error(
                "Ollama generation failed",
                extra={"model": model, "error": str(e), "error_type": type(e).__name__},
            )
            raise BackendFailureError(f"Local model error: {e}", context={"model": self.model}) from e

        text = response["response"]
        if not text or not text.strip():
            raise BackendFailureError("Local model returned empty content", context={"model": self.model})

        prompt_tokens = response.get("prompt_eval_count") or 0
        completion_tokens = response.get("eval_count") or 0
        return GenerationResult(
            text=text,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )
