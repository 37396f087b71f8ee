from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from huggingface_hub import AsyncInferenceClient
from huggingface_hub.errors import HfHubHTTPError, InferenceTimeoutError

from ..errors import CompletionServiceError
from .base import GenerationConfig, ProviderHealth, SummaryProvider

if TYPE_CHECKING:
    from ...config import HuggingFaceSettings

logger = logging.getLogger(__name__)

SUMMARIZATION_MIN_LENGTH = 50


class HuggingFaceProvider(SummaryProvider):
    """Hugging Face Inference provider.

    Runs either the ``text-generation`` task (instruction-following models or
    a TGI endpoint) or the ``summarization`` task (seq2seq models such as
    ``facebook/bart-large-cnn``, which summarize the prompt as given).
    Supports async batching with configurable concurrency limits.
    """

    def __init__(
        self,
        model: str,
        token: Optional[str] = None,
        task: str = "text-generation",
        timeout: Optional[float] = None,
        config: Optional[GenerationConfig] = None,
        max_concurrency: int = 0,
    ):
        """Initialize Hugging Face provider.

        Args:
            model: Hosted model id or TGI endpoint URL
            token: Optional API token
            task: ``text-generation`` or ``summarization``
            timeout: Per-request timeout in seconds
            config: Default sampling configuration
            max_concurrency: Max concurrent requests (0 = unlimited)
        """
        if task not in ("text-generation", "summarization"):
            raise ValueError(f"Unsupported Hugging Face task: {task}")
        self._model = model
        self._token = token
        self._task = task
        self._timeout = timeout
        self._config = config or GenerationConfig(max_output_tokens=500)
        self._max_concurrency = max_concurrency

    @classmethod
    def from_settings(cls, settings: "HuggingFaceSettings") -> "HuggingFaceProvider":
        """Create provider from configuration settings."""
        base = (settings.api_base or "").strip()
        if base.endswith("/v1"):
            base = base[:-3]

        token = settings.api_key
        if not token or token == "-":
            token = None

        return cls(
            model=base or settings.model,
            token=token,
            task=settings.task,
            timeout=settings.timeout,
            config=GenerationConfig(
                temperature=settings.temperature,
                max_output_tokens=settings.max_output_tokens,
            ),
            max_concurrency=settings.max_concurrency,
        )

    @property
    def name(self) -> str:
        return "huggingface"

    @property
    def model_name(self) -> str:
        return self._model

    def _client(self) -> AsyncInferenceClient:
        return AsyncInferenceClient(self._model, token=self._token, timeout=self._timeout)

    async def health_check(self) -> ProviderHealth:
        """Check endpoint health via a minimal request."""
        try:
            async with self._client() as client:
                if self._task == "summarization":
                    await client.summarization("Health check.")
                else:
                    await client.text_generation("test", max_new_tokens=1)
            return ProviderHealth(healthy=True)
        except Exception as e:
            return ProviderHealth(healthy=False, error_message=str(e))

    async def generate(
        self, prompt: str, config: Optional[GenerationConfig] = None
    ) -> str:
        async with self._client() as client:
            return await self._generate_one(client, prompt, config or self._config)

    async def generate_batch(
        self, prompts: List[str], config: Optional[GenerationConfig] = None
    ) -> List[str]:
        """Async batching with semaphore-controlled concurrency."""
        if not prompts:
            return []

        cfg = config or self._config
        async with self._client() as client:
            limit = self._resolve_concurrency_limit(len(prompts))
            sem = asyncio.Semaphore(limit)

            async def generate_one(prompt: str) -> str:
                async with sem:
                    return await self._generate_one(client, prompt, cfg)

            results = await asyncio.gather(*[generate_one(p) for p in prompts])
            return list(results)

    def _resolve_concurrency_limit(self, total: int) -> int:
        """Resolve effective concurrency limit."""
        if not self._max_concurrency:
            return total
        return max(1, min(int(self._max_concurrency), total))

    async def _generate_one(
        self, client: AsyncInferenceClient, prompt: str, cfg: GenerationConfig
    ) -> str:
        try:
            if self._task == "summarization":
                raw = await client.summarization(
                    prompt,
                    generate_parameters={
                        "max_length": cfg.max_output_tokens,
                        "min_length": min(SUMMARIZATION_MIN_LENGTH, cfg.max_output_tokens),
                        "do_sample": False,
                    },
                )
            else:
                raw = await client.text_generation(
                    prompt, **self._text_generation_params(cfg)
                )
        except InferenceTimeoutError as exc:
            raise CompletionServiceError(
                f"Request timed out after {self._timeout}s", provider=self.name
            ) from exc
        except HfHubHTTPError as exc:
            response = getattr(exc, "response", None)
            raise CompletionServiceError(
                f"Inference API error: {exc}",
                provider=self.name,
                status_code=getattr(response, "status_code", None),
            ) from exc
        except Exception as exc:
            raise CompletionServiceError(
                f"Generation failed: {exc}", provider=self.name
            ) from exc

        text = self._coerce_generated_text(raw)
        if not text.strip():
            raise CompletionServiceError("Empty generation", provider=self.name)
        return text

    @staticmethod
    def _text_generation_params(cfg: GenerationConfig) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "max_new_tokens": cfg.max_output_tokens,
            "return_full_text": False,
        }
        # TGI rejects a zero temperature; greedy decoding instead
        if cfg.temperature > 0:
            params.update(
                do_sample=True,
                temperature=cfg.temperature,
                top_p=cfg.top_p,
                top_k=cfg.top_k,
            )
        else:
            params["do_sample"] = False
        return params

    def _coerce_generated_text(self, raw: Any) -> str:
        """Extract text from the task output types."""
        if raw is None:
            return ""
        if isinstance(raw, str):
            return raw
        for attr in ("summary_text", "generated_text"):
            text = getattr(raw, attr, None)
            if isinstance(text, str):
                return text
        if isinstance(raw, dict):
            for key in ("summary_text", "generated_text", "text"):
                value = raw.get(key)
                if isinstance(value, str):
                    return value
        return str(raw)
