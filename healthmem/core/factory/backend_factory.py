"""
Factory for creating generation backends.
"""

from healthmem.config import CloudModelConfig, LocalModelConfig
from healthmem.core.llm.base import GenerationBackend
from healthmem.core.llm.cloud import CloudBackend
from healthmem.core.llm.local import LocalBackend


class BackendFactory:
    """Factory for creating local and cloud backends from configuration."""

    @staticmethod
    def create_local(config: LocalModelConfig) -> GenerationBackend | None:
        """
        Create the local backend.

        Args:
            config: Local model configuration

        Returns:
            Local backend, or None when disabled
        """
        if not config.enabled:
            return None
        return LocalBackend(host=config.base_url, model=config.model, timeout=config.timeout)

    @staticmethod
    def create_cloud(config: CloudModelConfig) -> GenerationBackend | None:
        """
        Create the cloud backend.

        Args:
            config: Cloud model configuration

        Returns:
            Cloud backend, or None when no API key is configured
        """
        if not config.api_key:
            return None
        return CloudBackend(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout,
        )
