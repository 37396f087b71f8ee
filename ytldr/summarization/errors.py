"""Error types raised by the summarization pipeline."""
from __future__ import annotations

from typing import Optional


class SummarizationError(Exception):
    """Base class for summarization failures."""


class InvalidInputError(SummarizationError, ValueError):
    """Content or options rejected before any completion call is made."""


class CompletionServiceError(SummarizationError):
    """A completion provider failed to return usable text.

    Covers non-2xx responses, timeouts, transport errors and malformed
    response envelopes.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    def __str__(self) -> str:
        message = super().__str__()
        if self.provider:
            return f"[{self.provider}] {message}"
        return message


class ParseWarning(UserWarning):
    """A forensic response contained none of the expected sections."""
