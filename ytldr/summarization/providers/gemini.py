"""Google Gemini completion provider."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

import httpx

from ..errors import CompletionServiceError
from .base import GenerationConfig, ProviderHealth, SummaryProvider

if TYPE_CHECKING:
    from ...config import GeminiSettings

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(SummaryProvider):
    """Gemini ``generateContent`` over plain HTTPS.

    One ``httpx.AsyncClient`` is opened per call so the provider holds no
    connection state between requests.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash-latest",
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 60.0,
        config: Optional[GenerationConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI Studio API key
            model: Model id, e.g. ``gemini-1.5-flash-latest``
            api_base: API root without trailing slash
            timeout: Per-request timeout in seconds
            config: Default sampling configuration
            transport: Optional transport override (used by tests)
        """
        if not api_key:
            raise ValueError("Gemini provider requires an API key")
        self._api_key = api_key
        self._model = model
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._config = config or GenerationConfig()
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: "GeminiSettings") -> "GeminiProvider":
        return cls(
            api_key=settings.api_key.get_secret_value(),
            model=settings.model,
            api_base=settings.api_base,
            timeout=settings.timeout,
            config=GenerationConfig(
                temperature=settings.temperature,
                max_output_tokens=settings.max_output_tokens,
            ),
        )

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def health_check(self) -> ProviderHealth:
        """Verify the key and model by fetching the model descriptor."""
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self._api_base}/models/{self._model}",
                    params={"key": self._api_key},
                )
            if response.status_code == 200:
                return ProviderHealth(healthy=True)
            return ProviderHealth(
                healthy=False,
                error_message=f"HTTP {response.status_code}",
            )
        except httpx.HTTPError as exc:
            return ProviderHealth(healthy=False, error_message=str(exc))

    async def generate(
        self, prompt: str, config: Optional[GenerationConfig] = None
    ) -> str:
        cfg = config or self._config
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": cfg.temperature,
                "topK": cfg.top_k,
                "topP": cfg.top_p,
                "maxOutputTokens": cfg.max_output_tokens,
            },
        }
        url = f"{self._api_base}/models/{self._model}:generateContent"

        try:
            async with self._client() as client:
                response = await client.post(
                    url, params={"key": self._api_key}, json=body
                )
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise CompletionServiceError(
                f"Request timed out after {self._timeout}s", provider=self.name
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise CompletionServiceError(
                f"API error {status}: {self._error_detail(exc.response)}",
                provider=self.name,
                status_code=status,
            ) from exc
        except httpx.RequestError as exc:
            raise CompletionServiceError(
                f"Connection error: {exc}", provider=self.name
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise CompletionServiceError(
                "Response body is not JSON", provider=self.name
            ) from exc

        text = self._extract_text(data)
        logger.debug(
            "Gemini generation completed",
            extra={
                "model": self._model,
                "prompt_length": len(prompt),
                "response_length": len(text),
            },
        )
        return text

    def _extract_text(self, data: Any) -> str:
        """Pull the reply out of ``candidates[0].content.parts``."""
        try:
            parts = data["candidates"][0]["content"]["parts"]
            texts = [part["text"] for part in parts if isinstance(part.get("text"), str)]
        except (KeyError, IndexError, TypeError) as exc:
            reason = None
            if isinstance(data, dict):
                reason = (data.get("promptFeedback") or {}).get("blockReason")
            message = "Invalid response envelope"
            if reason:
                message = f"{message} (blocked: {reason})"
            raise CompletionServiceError(message, provider=self.name) from exc

        if not texts:
            raise CompletionServiceError(
                "Response contained no text parts", provider=self.name
            )
        return "".join(texts)

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text[:200] or response.reason_phrase
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return response.reason_phrase
