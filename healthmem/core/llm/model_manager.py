"""
Local model acquisition over the Ollama model cache.

Answers "is this model downloaded?" and "which local model reference do I
run?", and pulls missing models with progress reporting. Model files
themselves are managed by the Ollama server.
"""

from collections.abc import Callable

import ollama

from healthmem.models.llm import DownloadProgress, ModelInfo
from healthmem.utils.exceptions import ModelAcquisitionError, NotFoundError
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


def normalize_model_id(model_id: str) -> str:
    """Ollama lists untagged models as ``name:latest``."""
    return model_id if ":" in model_id else f"{model_id}:latest"


class ModelManager:
    """
    Local model cache.

    Usage:
        manager = ModelManager(host="http://localhost:11434")
        if not await manager.is_downloaded("phi3:mini"):
            await manager.pull("phi3:mini", progress_callback=print)
    """

    def __init__(self, host: str = "http://localhost:11434", client: ollama.AsyncClient | None = None):
        """
        Initialize model manager.

        Args:
            host: Ollama server URL
            client: Optional shared Ollama client
        """
        self.host = host
        self.client = client or ollama.AsyncClient(host=host)
        self._cache: dict[str, ModelInfo] = {}

    async def refresh(self) -> list[ModelInfo]:
        """
        Rescan the local model cache.

        Returns:
            Models currently available locally

        Raises:
            ModelAcquisitionError: If the Ollama server cannot be reached
        """
        try:
            response = await self.client.list()
        except Exception as e:
            raise ModelAcquisitionError(
                f"Failed to list local models: {e}", context={"host": self.host}
            ) from e

        self._cache.clear()
        for entry in response.models:
            model_id = normalize_model_id(entry.model)
            self._cache[model_id] = ModelInfo(
                id=model_id,
                name=entry.model,
                size_bytes=entry.size or 0,
            )

        logger.debug(f"Local model cache refreshed: {len(self._cache)} models")
        return list(self._cache.values())

    async def list_models(self) -> list[ModelInfo]:
        """Models in the local cache (rescanned)."""
        return await self.refresh()

    async def is_downloaded(self, model_id: str) -> bool:
        """
        Check whether a model is present locally.

        Args:
            model_id: Ollama model reference, e.g. "phi3:mini"

        Returns:
            True if the model is in the local cache
        """
        if normalize_model_id(model_id) in self._cache:
            return True
        await self.refresh()
        return normalize_model_id(model_id) in self._cache

    async def resolve_local_model(self, model_id: str) -> str:
        """
        Resolve the local reference to run for a model.

        Args:
            model_id: Ollama model reference

        Returns:
            Canonical local model reference

        Raises:
            NotFoundError: If the model has not been downloaded
        """
        if not await self.is_downloaded(model_id):
            raise NotFoundError(f"Model not downloaded: {model_id}", context={"model": model_id})
        return self._cache[normalize_model_id(model_id)].name

    async def pull(
        self,
        model_id: str,
        progress_callback: Callable[[DownloadProgress], None] | None = None,
    ) -> ModelInfo:
        """
        Download a model into the local cache.

        Args:
            model_id: Ollama model reference
            progress_callback: Called with each progress update

        Returns:
            The downloaded model

        Raises:
            ModelAcquisitionError: If the download fails
        """
        if await self.is_downloaded(model_id):
            return self._cache[normalize_model_id(model_id)]

        logger.info(f"Pulling local model {model_id}")
        try:
            async for update in await self.client.pull(model_id, stream=True):
                if progress_callback is not None:
                    progress_callback(
                        DownloadProgress(
                            status=update.status or "",
                            downloaded_bytes=update.completed or 0,
                            total_bytes=update.total or 0,
                        )
                    )
        except Exception as e:
            raise ModelAcquisitionError(
                f"Failed to download model {model_id}: {e}", context={"model": model_id}
            ) from e

        await self.refresh()
        info = self._cache.get(normalize_model_id(model_id))
        if info is None:
            raise ModelAcquisitionError(
                f"Model {model_id} missing after download", context={"model": model_id}
            )
        return info
