"""Provider factory for creating completion providers from configuration."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .base import SummaryProvider
from .gemini import GeminiProvider
from .huggingface import HuggingFaceProvider

if TYPE_CHECKING:
    from ...config import Settings

logger = logging.getLogger(__name__)


class ProviderFactory:
    """Factory for creating completion providers from configuration.

    Handles provider-specific construction logic and error collection.
    """

    def __init__(self, settings: "Settings"):
        self.settings = settings
        self._errors: list[tuple[str, str]] = []

    @property
    def errors(self) -> list[tuple[str, str]]:
        """Get list of (provider_name, error_message) tuples from creation attempts."""
        return self._errors.copy()

    def create_gemini(self) -> Optional[SummaryProvider]:
        """Create Gemini provider, or None if no API key is configured."""
        gemini = self.settings.gemini
        if not gemini.is_configured():
            self._record_error("gemini", "GEMINI_API_KEY is not set")
            return None
        try:
            return GeminiProvider.from_settings(gemini)
        except ValueError as e:
            self._record_error("gemini", str(e))
            return None

    def create_huggingface(self) -> Optional[SummaryProvider]:
        """Create Hugging Face provider from configuration."""
        try:
            return HuggingFaceProvider.from_settings(self.settings.huggingface)
        except ValueError as e:
            self._record_error("huggingface", str(e))
            return None

    def create_provider(self, provider_name: str) -> Optional[SummaryProvider]:
        """Create provider by name.

        Args:
            provider_name: Provider identifier ('gemini' or 'huggingface')

        Returns:
            Configured provider, or None if creation failed or unknown provider
        """
        if provider_name == "gemini":
            return self.create_gemini()
        elif provider_name == "huggingface":
            return self.create_huggingface()
        else:
            self._record_error(provider_name, f"Unknown provider: {provider_name}")
            return None

    def create_all_configured(self) -> list[SummaryProvider]:
        """Create all providers listed in settings.summarization.providers.

        Raises:
            ValueError: If no providers could be created
        """
        providers: list[SummaryProvider] = []

        for provider_name in self.settings.summarization.providers:
            provider = self.create_provider(provider_name)
            if provider is not None:
                providers.append(provider)
                logger.info(
                    "Successfully created provider",
                    extra={"provider": provider_name, "model": provider.model_name},
                )

        if not providers:
            error_summary = "; ".join(f"{name}: {msg}" for name, msg in self._errors)
            raise ValueError(f"Failed to create any providers. Errors: {error_summary}")

        if self._errors:
            logger.warning(
                "Some providers failed to create",
                extra={
                    "success_count": len(providers),
                    "failure_count": len(self._errors),
                    "errors": self._errors,
                },
            )

        return providers

    def _record_error(self, provider_name: str, message: str) -> None:
        self._errors.append((provider_name, message))
        logger.warning(
            "Failed to create provider",
            extra={"provider": provider_name, "error": message},
        )
