"""Boundary-aware text chunking for summary generation."""
from __future__ import annotations

import logging
from typing import List

from .models import Chunk

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_SIZE = 30000
DEFAULT_OVERLAP_SIZE = 1000
DEFAULT_BOUNDARY_RATIO = 0.7


class TextChunker:
    """Splits long text into overlapping character windows.

    Cuts prefer the last sentence terminator, then the last newline, inside
    each window, as long as the cut lands past ``boundary_ratio`` of the
    window. Otherwise the window is hard-cut at ``max_chunk_size``.
    """

    def __init__(
        self,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        overlap_size: int = DEFAULT_OVERLAP_SIZE,
        boundary_ratio: float = DEFAULT_BOUNDARY_RATIO,
    ):
        """Initialize chunker.

        Args:
            max_chunk_size: Maximum characters per chunk
            overlap_size: Characters shared between consecutive chunks
            boundary_ratio: Fraction of the window a boundary cut must exceed
        """
        if max_chunk_size <= 0:
            raise ValueError("max_chunk_size must be positive")
        if overlap_size < 0:
            raise ValueError("overlap_size must not be negative")
        if not 0.0 <= boundary_ratio < 1.0:
            raise ValueError("boundary_ratio must be in [0, 1)")

        self.max_chunk_size = max_chunk_size
        self.overlap_size = overlap_size
        self.boundary_ratio = boundary_ratio

    def chunk(self, text: str) -> List[Chunk]:
        """Chunk text into ordered, possibly overlapping segments.

        Args:
            text: Text to chunk

        Returns:
            Chunks in source order; a single chunk if the text fits
        """
        total = len(text)
        if total <= self.max_chunk_size:
            return [Chunk(index=0, text=text, start_offset=0, end_offset=total)]

        chunks: List[Chunk] = []
        start = 0

        while start < total:
            end = start + self.max_chunk_size
            if end < total:
                end = self._find_boundary(text, start, end)
            else:
                end = total

            chunks.append(
                Chunk(
                    index=len(chunks),
                    text=text[start:end],
                    start_offset=start,
                    end_offset=end,
                )
            )

            if end >= total:
                break

            start = max(start + 1, end - self.overlap_size)

        logger.debug(
            "Segmented text",
            extra={
                "chunk_count": len(chunks),
                "text_length": total,
                "max_chunk_size": self.max_chunk_size,
                "overlap_size": self.overlap_size,
            },
        )
        return chunks

    def _find_boundary(self, text: str, start: int, end: int) -> int:
        """Pick the cut position for the window ``[start, end)``."""
        threshold = start + self.max_chunk_size * self.boundary_ratio

        last_sentence = text.rfind(".", start, end)
        if last_sentence > threshold:
            return last_sentence + 1

        last_newline = text.rfind("\n", start, end)
        if last_newline > threshold:
            return last_newline

        # No acceptable boundary: hard cut, possibly mid-sentence
        return end
