"""Fixtures for service tests.

Backends are in-process doubles; no model server or API key is needed.
"""

import asyncio

import pytest

from healthmem.config import RouterConfig, TokenizerConfig
from healthmem.core.llm.base import GenerationBackend
from healthmem.core.tokenizer import Tokenizer
from healthmem.models.health import SummaryType
from healthmem.models.llm import GenerationResult, TokenUsage
from healthmem.services.hierarchy_engine import HierarchyEngine
from healthmem.services.model_router import AdaptiveModelRouter


class StubBackend(GenerationBackend):
    """Backend returning canned text, optionally failing or stalling."""

    def __init__(
        self,
        name: str = "stub",
        text: str = "Generated text",
        usage: TokenUsage | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        available: bool = True,
    ):
        self.name = name
        self.text = text
        self.usage = usage
        self.error = error
        self.delay = delay
        self.available = available
        self.calls: list[str] = []
        self.closed = False

    async def is_available(self) -> bool:
        return self.available

    async def generate_text(self, prompt: str) -> GenerationResult:
        return await self._respond(prompt)

    async def generate_summary(
        self, contents: list[str], summary_type: SummaryType
    ) -> GenerationResult:
        return await self._respond("\n".join(contents))

    async def _respond(self, prompt: str) -> GenerationResult:
        self.calls.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return GenerationResult(text=self.text, usage=self.usage)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def tokenizer():
    """Character-based counter (no encoding download)."""
    return Tokenizer(TokenizerConfig(provider="approximate"))


@pytest.fixture
def make_router(tokenizer):
    """Factory for routers over stub backends."""

    def _make(
        local: GenerationBackend | None = None,
        cloud: GenerationBackend | None = None,
        **config,
    ) -> AdaptiveModelRouter:
        return AdaptiveModelRouter(
            RouterConfig(**config), local=local, cloud=cloud, tokenizer=tokenizer
        )

    return _make


@pytest.fixture
def engine(memory_store):
    return HierarchyEngine(memory_store, patient_id="patient-1")


@pytest.fixture
def stub_backend_cls():
    return StubBackend
