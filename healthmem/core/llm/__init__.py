"""
Generation backend abstraction layer.

Supported backends:
- Local: Ollama (native SDK)
- Cloud: OpenAI-compatible API (official SDK)
- Mock: always unavailable
"""

from healthmem.core.llm.base import GenerationBackend
from healthmem.core.llm.cloud import CloudBackend
from healthmem.core.llm.local import LocalBackend
from healthmem.core.llm.mock import UnavailableBackend
from healthmem.core.llm.model_manager import ModelManager

__all__ = [
    "GenerationBackend",
    "LocalBackend",
    "CloudBackend",
    "UnavailableBackend",
    "ModelManager",
]
