from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class ProviderHealth:
    """Health check result for a provider"""

    healthy: bool
    error_message: Optional[str] = None


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling knobs passed to the completion service."""

    temperature: float = 0.3
    max_output_tokens: int = 2048
    top_p: float = 0.95
    top_k: int = 40


class SummaryProvider(ABC):
    """Base class for completion providers.

    Providers handle the LLM call (text in -> text out). The SummaryService
    orchestrates detection, chunking, prompt building and parsing.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g., 'gemini', 'huggingface')"""
        pass

    @property
    def model_name(self) -> str:
        """Model identifier reported in forensic report footers."""
        return self.name

    @abstractmethod
    async def health_check(self) -> ProviderHealth:
        """Check if provider is available and healthy.

        This should be a lightweight check (e.g., ping endpoint, verify credentials).
        """
        pass

    @abstractmethod
    async def generate(
        self, prompt: str, config: Optional[GenerationConfig] = None
    ) -> str:
        """Generate a single response.

        Args:
            prompt: The prompt text to send to the LLM
            config: Optional per-call sampling override

        Returns:
            Generated text

        Raises:
            CompletionServiceError: On transport failure, non-2xx status or
                a malformed response envelope
        """
        pass

    async def generate_batch(
        self, prompts: List[str], config: Optional[GenerationConfig] = None
    ) -> List[str]:
        """Generate multiple responses.

        Default implementation: sequential calls to generate().
        Providers can override for parallelization.

        Args:
            prompts: List of prompt texts
            config: Optional per-call sampling override

        Returns:
            List with same length and order as input
        """
        results = []
        for prompt in prompts:
            result = await self.generate(prompt, config)
            results.append(result)
        return results
