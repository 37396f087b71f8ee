"""Single-pass or map-reduce summarization over chunks."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Sequence, Union

from .errors import InvalidInputError
from .models import (
    Chunk,
    ChunkSummary,
    ContentType,
    SummaryMetadata,
    SummaryOptions,
    SummaryResult,
)
from .prompt_builder import PromptBuilder
from .providers import GenerationConfig, SummaryProvider

logger = logging.getLogger(__name__)


class HierarchicalSummarizer:
    """Summarizes chunked text with at most ``len(chunks) + 1`` completion calls.

    One chunk is summarized directly with the full instruction. Several chunks
    are summarized one by one (map) and the partial summaries are then merged
    in source order with the full instruction (reduce).
    """

    def __init__(
        self,
        provider: SummaryProvider,
        prompt_builder: Optional[PromptBuilder] = None,
        max_concurrency: int = 1,
        config: Optional[GenerationConfig] = None,
    ):
        """Initialize summarizer.

        Args:
            provider: Provider or provider chain for LLM calls
            prompt_builder: Builds instruction and chunk prompts
            max_concurrency: Map calls allowed in flight; 1 means sequential
            config: Optional sampling override for every call
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.provider = provider
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.max_concurrency = max_concurrency
        self.config = config

    async def summarize(
        self,
        chunks: Sequence[Chunk],
        options: SummaryOptions,
        *,
        content_type: Union[ContentType, str],
        original_length: int,
    ) -> SummaryResult:
        """Produce the final summary for ``chunks``.

        Raises:
            InvalidInputError: If ``chunks`` is empty
            CompletionServiceError: If any completion call fails
        """
        if not chunks:
            raise InvalidInputError("Nothing to summarize: no chunks")

        started = time.perf_counter()
        instruction = self.prompt_builder.build(options, content_type)

        if len(chunks) == 1:
            prompt = self.prompt_builder.build_single(instruction, chunks[0].text)
            summary_text = await self.provider.generate(prompt, self.config)
        else:
            chunk_summaries = await self._map(chunks)
            reduce_prompt = self.prompt_builder.build_reduce(instruction, chunk_summaries)
            summary_text = await self.provider.generate(reduce_prompt, self.config)

        elapsed_ms = (time.perf_counter() - started) * 1000
        type_tag = content_type.value if isinstance(content_type, ContentType) else content_type
        logger.info(
            "Summary generated",
            extra={
                "content_type": type_tag,
                "chunks_processed": len(chunks),
                "original_length": original_length,
                "processing_time_ms": round(elapsed_ms, 1),
            },
        )
        return SummaryResult(
            summary_text=summary_text,
            metadata=SummaryMetadata(
                content_type=type_tag,
                original_length=original_length,
                chunks_processed=len(chunks),
                processing_time_ms=elapsed_ms,
                options_used=options,
            ),
        )

    async def _map(self, chunks: Sequence[Chunk]) -> List[ChunkSummary]:
        total = len(chunks)

        if self.max_concurrency == 1:
            summaries = []
            for position, chunk in enumerate(chunks, start=1):
                summaries.append(await self._summarize_chunk(chunk, position, total))
            return summaries

        sem = asyncio.Semaphore(min(self.max_concurrency, total))

        async def bounded(chunk: Chunk, position: int) -> ChunkSummary:
            async with sem:
                return await self._summarize_chunk(chunk, position, total)

        tasks = [
            asyncio.ensure_future(bounded(chunk, position))
            for position, chunk in enumerate(chunks, start=1)
        ]
        try:
            summaries = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Settle the rest so their exceptions are retrieved
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return sorted(summaries, key=lambda summary: summary.chunk_index)

    async def _summarize_chunk(self, chunk: Chunk, position: int, total: int) -> ChunkSummary:
        prompt = self.prompt_builder.build_chunk(chunk.text, position, total)
        text = await self.provider.generate(prompt, self.config)
        logger.debug(
            "Chunk summarized",
            extra={"chunk_index": chunk.index, "chunk_count": total},
        )
        return ChunkSummary(chunk_index=chunk.index, text=text)
