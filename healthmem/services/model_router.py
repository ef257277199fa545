"""
Adaptive Model Router - picks the local or cloud backend per request.

Routing state:
- local backend configured or not
- cloud backend configured or not, and the network flag set by the host
- cumulative cloud token usage against a monthly budget

The decision itself (select_adapter) is a pure function of that state.
Requests first ask each configured backend whether it can serve; a backend
that reports unavailable is treated as not configured for that request.
Counters and the network flag are the only mutable shared state and sit
behind a reader/writer lock.
"""

import asyncio

from healthmem.config import RouterConfig
from healthmem.core.llm.base import GenerationBackend
from healthmem.core.tokenizer.tokenizer import Tokenizer
from healthmem.models.health import SummaryType
from healthmem.models.llm import AdapterChoice, GenerationResult, RoutingStrategy, UsageStats
from healthmem.utils.exceptions import BackendFailureError, BackendUnavailableError
from healthmem.utils.id_generator import generate_request_id
from healthmem.utils.locks import ReadWriteLock
from healthmem.utils.logger import get_logger, log_context

logger = get_logger(__name__)


class AdaptiveModelRouter:
    """
    Routes generation requests between a local and a cloud backend.

    Usage:
        router = AdaptiveModelRouter(RouterConfig(), local=LocalBackend(), cloud=CloudBackend(key))
        text, choice = await router.generate_text("Explain my last blood test")
    """

    def __init__(
        self,
        config: RouterConfig | None = None,
        local: GenerationBackend | None = None,
        cloud: GenerationBackend | None = None,
        tokenizer: Tokenizer | None = None,
    ):
        """
        Initialize router.

        Args:
            config: Routing strategy, budget and thresholds
            local: Local backend (None if not configured)
            cloud: Cloud backend (None if not configured)
            tokenizer: Prompt size counter
        """
        self.config = config or RouterConfig()
        self.strategy = RoutingStrategy(self.config.strategy)
        self.local = local
        self.cloud = cloud
        self.tokenizer = tokenizer or Tokenizer()

        self._network_available = True
        self._usage = UsageStats()
        self._lock = ReadWriteLock()

    # ═══════════════════════════════════════════════════════════
    # STATE
    # ═══════════════════════════════════════════════════════════

    async def set_network_available(self, available: bool) -> None:
        """Update network availability from the host's connectivity signal."""
        async with self._lock.write():
            changed = self._network_available != available
            self._network_available = available
        if changed:
            logger.info(f"Network availability set to {available}")

    async def is_network_available(self) -> bool:
        async with self._lock.read():
            return self._network_available

    async def get_cloud_usage(self) -> UsageStats | None:
        """
        Snapshot of cloud usage counters.

        Returns:
            Copy of the counters, or None when no cloud backend is configured
        """
        if self.cloud is None:
            return None
        async with self._lock.read():
            return self._usage.model_copy()

    async def reset_cloud_usage(self) -> None:
        """
        Zero the cloud usage counters (e.g. at the start of a billing month).

        Raises:
            BackendUnavailableError: If no cloud backend is configured
        """
        if self.cloud is None:
            raise BackendUnavailableError("Cloud adapter not configured")
        async with self._lock.write():
            self._usage = UsageStats()
        logger.info("Cloud usage counters reset")

    async def _record_cloud_usage(self, result: GenerationResult) -> None:
        async with self._lock.write():
            self._usage = self._usage.add(result.usage)

    # ═══════════════════════════════════════════════════════════
    # ROUTING DECISION
    # ═══════════════════════════════════════════════════════════

    async def select_adapter(self, prompt_size: int) -> AdapterChoice:
        """
        Decide which backend serves a prompt of the given size.

        Args:
            prompt_size: Prompt size in tokens

        Returns:
            AdapterChoice.LOCAL or AdapterChoice.CLOUD

        Raises:
            BackendUnavailableError: If no backend is eligible under the strategy
        """
        return await self._decide(prompt_size, self.local is not None, self.cloud is not None)

    async def _route(self, prompt_size: int) -> AdapterChoice:
        """Routing decision over the backends that report themselves ready."""
        local_ready, cloud_ready = await self._check_backends()
        return await self._decide(prompt_size, local_ready, cloud_ready)

    async def _check_backends(self) -> tuple[bool, bool]:
        local_ready = self.local is not None and await self.local.is_available()
        cloud_ready = self.cloud is not None and await self.cloud.is_available()
        if self.local is not None and not local_ready:
            logger.debug(f"Local backend {self.local.name} reports unavailable")
        if self.cloud is not None and not cloud_ready:
            logger.debug(f"Cloud backend {self.cloud.name} reports unavailable")
        return local_ready, cloud_ready

    async def _decide(
        self, prompt_size: int, local_available: bool, cloud_configured: bool
    ) -> AdapterChoice:
        async with self._lock.read():
            network_available = self._network_available
            total_tokens = self._usage.total_tokens

        cloud_available = cloud_configured and network_available

        if self.strategy is RoutingStrategy.LOCAL_ONLY:
            if local_available:
                return AdapterChoice.LOCAL
            raise BackendUnavailableError(
                "Local adapter not available but strategy is local_only",
                context={"strategy": self.strategy.value},
            )

        if self.strategy is RoutingStrategy.CLOUD_ONLY:
            if cloud_available:
                return AdapterChoice.CLOUD
            raise BackendUnavailableError(
                "Cloud adapter not available but strategy is cloud_only",
                context={"strategy": self.strategy.value, "network_available": network_available},
            )

        # Hybrid
        cloud_eligible = cloud_available and total_tokens < self.config.max_monthly_tokens

        if cloud_eligible and local_available:
            if prompt_size < self.config.prefer_local_under_tokens:
                return AdapterChoice.LOCAL
            return AdapterChoice.CLOUD
        if cloud_eligible:
            return AdapterChoice.CLOUD
        if local_available:
            return AdapterChoice.LOCAL

        raise BackendUnavailableError(
            "No LLM adapter available",
            context={
                "strategy": self.strategy.value,
                "network_available": network_available,
                "cloud_tokens_used": total_tokens,
            },
        )

    async def get_preferred_adapter(self, prompt_size: int) -> AdapterChoice:
        """Which backend would serve a prompt of this size right now."""
        return await self._route(prompt_size)

    async def is_available(self) -> bool:
        """True if some ready backend is eligible for a minimal prompt."""
        try:
            await self._route(0)
        except BackendUnavailableError:
            return False
        return True

    # ═══════════════════════════════════════════════════════════
    # GENERATION
    # ═══════════════════════════════════════════════════════════

    async def generate_text(self, prompt: str) -> tuple[str, AdapterChoice]:
        """
        Generate text with the best eligible backend.

        Args:
            prompt: Input prompt

        Returns:
            Tuple of (text, chosen adapter)

        Raises:
            BackendUnavailableError: If no backend is eligible
            BackendFailureError: If the chosen backend fails or times out
        """
        choice = await self._route(self.tokenizer.count_tokens(prompt))
        backend = self._backend_for(choice)
        result = await self._dispatch(choice, "text", backend.generate_text(prompt))
        return result.text, choice

    async def generate_summary(
        self, contents: list[str], summary_type: SummaryType
    ) -> tuple[str, AdapterChoice]:
        """
        Generate a period summary with the best eligible backend.

        Prompt size is estimated from the record contents.

        Returns:
            Tuple of (summary text, chosen adapter)
        """
        choice = await self._route(self.tokenizer.count_many(contents))
        backend = self._backend_for(choice)
        result = await self._dispatch(
            choice, "summary", backend.generate_summary(contents, summary_type)
        )
        return result.text, choice

    async def _dispatch(self, choice: AdapterChoice, kind: str, call) -> GenerationResult:
        """Await a backend call under the request timeout and account cloud usage."""
        request_id = generate_request_id()
        with log_context(request_id=request_id, adapter=choice.value):
            logger.info(f"Routing {kind} request to {choice}", extra={"strategy": self.strategy.value})

            try:
                async with asyncio.timeout(self.config.request_timeout):
                    result = await call
            except TimeoutError as e:
                # No failover: the caller decides whether to retry
                logger.warning(
                    f"Request to {choice} timed out",
                    extra={"timeout": self.config.request_timeout},
                )
                raise BackendFailureError(
                    f"{choice} backend timed out after {self.config.request_timeout}s",
                    context={"request_id": request_id, "adapter": choice.value},
                ) from e

        if choice is AdapterChoice.CLOUD:
            await self._record_cloud_usage(result)

        return result

    def _backend_for(self, choice: AdapterChoice) -> GenerationBackend:
        backend = self.local if choice is AdapterChoice.LOCAL else self.cloud
        if backend is None:
            raise BackendUnavailableError(f"{choice} adapter not available")
        return backend

    async def close(self) -> None:
        """Close both backends."""
        for backend in (self.local, self.cloud):
            if backend is not None:
                await backend.close()
