from __future__ import annotations

import logging
from typing import List, Optional

from ..errors import CompletionServiceError
from .base import GenerationConfig, ProviderHealth, SummaryProvider

logger = logging.getLogger(__name__)


class ProviderChain(SummaryProvider):
    """Manages fallback chain of providers with sticky session support.

    In sticky mode (default), once a provider succeeds, it's reused for the
    rest of the request. This keeps map and reduce calls on the same model.

    For batch operations, a batch that fails with the active provider is
    retried as a whole with the next provider in the chain.
    """

    def __init__(self, providers: List[SummaryProvider], sticky: bool = True):
        """Initialize provider chain.

        Args:
            providers: Ordered list of providers (first = highest priority)
            sticky: If True, reuse successful provider for entire session
        """
        if not providers:
            raise ValueError("Provider chain requires at least one provider")

        self.providers = providers
        self.sticky = sticky
        self._active_provider: Optional[SummaryProvider] = None
        self._health_cache: dict[str, ProviderHealth] = {}

    @property
    def name(self) -> str:
        return "chain"

    @property
    def model_name(self) -> str:
        provider = self._active_provider or self.providers[0]
        return provider.model_name

    def fork(self) -> "ProviderChain":
        """Return a chain over the same providers with fresh session state."""
        return ProviderChain(self.providers, sticky=self.sticky)

    def reset_session(self) -> None:
        """Reset sticky provider and health cache.

        Call this at the start of each summarization request.
        """
        self._active_provider = None
        self._health_cache.clear()

    async def health_check(self) -> ProviderHealth:
        results = await self.check_all_health()
        if any(health.healthy for _, health in results):
            return ProviderHealth(healthy=True)
        errors = "; ".join(f"{name}: {health.error_message}" for name, health in results)
        return ProviderHealth(healthy=False, error_message=errors)

    async def check_all_health(self) -> List[tuple[str, ProviderHealth]]:
        """Check health of all providers and cache results.

        Returns:
            List of (provider_name, health_status) tuples
        """
        results = []
        for provider in self.providers:
            try:
                health = await provider.health_check()
            except Exception as exc:
                health = ProviderHealth(healthy=False, error_message=str(exc))
            self._health_cache[provider.name] = health
            results.append((provider.name, health))
            logger.info(
                "Provider health check",
                extra={
                    "provider": provider.name,
                    "healthy": health.healthy,
                    "error": health.error_message,
                },
            )
        return results

    def _get_cached_health(self, provider: SummaryProvider) -> Optional[ProviderHealth]:
        """Get cached health status, if available."""
        return self._health_cache.get(provider.name)

    async def generate(
        self, prompt: str, config: Optional[GenerationConfig] = None
    ) -> str:
        """Generate using fallback chain with sticky provider support.

        If sticky mode is enabled and a provider has already succeeded in this
        session, that provider is tried first.

        Raises:
            CompletionServiceError: If every provider failed
        """
        failures: list[str] = []

        if self.sticky and self._active_provider:
            health = self._get_cached_health(self._active_provider)
            if health is None or health.healthy:
                try:
                    result = await self._active_provider.generate(prompt, config)
                    logger.debug(
                        "Sticky provider succeeded",
                        extra={"provider": self._active_provider.name},
                    )
                    return result
                except CompletionServiceError as exc:
                    failures.append(str(exc))
                    logger.warning(
                        "Sticky provider failed, falling back to chain",
                        extra={"provider": self._active_provider.name, "error": str(exc)},
                    )

        for provider in self.providers:
            if provider is self._active_provider and failures:
                continue

            health = self._get_cached_health(provider)
            if health and not health.healthy:
                logger.debug(
                    "Skipping unhealthy provider",
                    extra={"provider": provider.name, "error": health.error_message},
                )
                failures.append(f"[{provider.name}] unhealthy: {health.error_message}")
                continue

            logger.debug("Trying provider", extra={"provider": provider.name})
            try:
                result = await provider.generate(prompt, config)
            except CompletionServiceError as exc:
                failures.append(str(exc))
                logger.warning(
                    "Provider failed, trying next",
                    extra={"provider": provider.name, "error": str(exc)},
                )
                continue

            if self.sticky:
                self._active_provider = provider
            logger.info("Provider succeeded", extra={"provider": provider.name})
            return result

        logger.error("All providers failed for single generation")
        raise CompletionServiceError(
            "All providers failed: " + "; ".join(failures), provider=self.name
        )

    async def generate_batch(
        self, prompts: List[str], config: Optional[GenerationConfig] = None
    ) -> List[str]:
        """Generate batch with fallback to later providers.

        In sticky mode, uses the active provider for the entire batch.
        If the batch fails, it is retried with the next provider in the chain.

        In non-sticky mode, each prompt independently uses the fallback chain.

        Raises:
            CompletionServiceError: If any prompt failed with every provider
        """
        if not prompts:
            return []

        if not self.sticky:
            results = []
            for prompt in prompts:
                results.append(await self.generate(prompt, config))
            return results

        providers_to_try: List[SummaryProvider] = []
        if self._active_provider:
            health = self._get_cached_health(self._active_provider)
            if health is None or health.healthy:
                providers_to_try.append(self._active_provider)
        providers_to_try.extend(
            [p for p in self.providers if p is not self._active_provider]
        )

        failures: list[str] = []
        for provider in providers_to_try:
            health = self._get_cached_health(provider)
            if health and not health.healthy:
                logger.debug(
                    "Skipping unhealthy provider",
                    extra={"provider": provider.name, "error": health.error_message},
                )
                continue

            logger.info(
                "Attempting batch generation",
                extra={"provider": provider.name, "prompt_count": len(prompts)},
            )
            try:
                results = await provider.generate_batch(prompts, config)
            except CompletionServiceError as exc:
                failures.append(str(exc))
                logger.warning(
                    "Batch generation failed, trying next",
                    extra={"provider": provider.name, "error": str(exc)},
                )
                continue

            self._active_provider = provider
            logger.info(
                "Batch generation completed",
                extra={"provider": provider.name, "prompt_count": len(results)},
            )
            return results

        logger.error(
            "Batch failed with all providers",
            extra={"prompt_count": len(prompts)},
        )
        raise CompletionServiceError(
            "All providers failed: " + "; ".join(failures), provider=self.name
        )
