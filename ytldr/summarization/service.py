"""SummaryService - Orchestrator for summary generation."""
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import PurePath
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from .chunker import TextChunker
from .detector import Content, ContentTypeDetector
from .errors import InvalidInputError
from .extractors import TextExtractor, looks_like_html
from .forensic import ForensicSectionParser
from .hierarchical import HierarchicalSummarizer
from .models import (
    ContentType,
    ContentUnit,
    SummaryFocus,
    SummaryMetadata,
    SummaryOptions,
    SummaryResult,
)
from .prompt_builder import PromptBuilder
from .providers import (
    GenerationConfig,
    ProviderChain,
    ProviderFactory,
    ProviderHealth,
    SummaryProvider,
)

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

OptionsLike = Union[SummaryOptions, Mapping[str, Any], None]


class SummaryService:
    """Pure orchestrator for summary generation.

    Coordinates detection, extraction, chunking, prompt building, generation
    and forensic parsing. All specialized logic is delegated to injected
    dependencies; nothing is retained between requests.
    """

    def __init__(
        self,
        provider: SummaryProvider,
        *,
        detector: Optional[ContentTypeDetector] = None,
        extractor: Optional[TextExtractor] = None,
        chunker: Optional[TextChunker] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        forensic_parser: Optional[ForensicSectionParser] = None,
        max_concurrency: int = 1,
        min_content_length: int = 10,
        forensic_config: Optional[GenerationConfig] = None,
    ):
        """Initialize summary service.

        Args:
            provider: Provider or provider chain for LLM calls
            detector: Classifies incoming content
            extractor: Turns content into plain text
            chunker: Splits long text
            prompt_builder: Builds prompts for generation
            forensic_parser: Parses and renders forensic reports
            max_concurrency: Map-phase calls allowed in flight
            min_content_length: Shortest extracted text accepted
            forensic_config: Sampling used for forensic calls
        """
        self.provider = provider
        self.detector = detector or ContentTypeDetector()
        self.extractor = extractor or TextExtractor()
        self.chunker = chunker or TextChunker()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.forensic_parser = forensic_parser or ForensicSectionParser()
        self.max_concurrency = max_concurrency
        self.min_content_length = min_content_length
        self.forensic_config = forensic_config or GenerationConfig(
            temperature=0.1, max_output_tokens=2048
        )

    async def summarize(
        self,
        content: Content,
        options: OptionsLike = None,
        *,
        url: Optional[str] = None,
        mime_type: Optional[str] = None,
        content_type: Union[ContentType, str, None] = None,
    ) -> SummaryResult:
        """Summarize ``content``.

        Args:
            content: Text, raw bytes, a file path, or a URL to fetch
            options: Summary options (model or mapping)
            url: Source URL, used for type detection
            mime_type: Declared MIME type, used for type detection
            content_type: Explicit content type, skips detection

        Raises:
            InvalidInputError: Empty or too-short content, bad options or
                unknown content type
            CompletionServiceError: If the completion service fails
        """
        opts = self._coerce_options(options)
        if opts.is_forensic:
            return await self.summarize_forensic(
                content,
                url=url,
                mime_type=mime_type,
                content_type=content_type,
                options=opts,
            )

        raw = await self._load(content)
        resolved = self._resolve_type(content, raw, url, mime_type, content_type)
        text = await self._extract(raw, resolved, url)

        chunks = self.chunker.chunk(text)
        logger.info(
            "Prepared content",
            extra={
                "content_type": resolved.value,
                "text_length": len(text),
                "chunk_count": len(chunks),
                "max_chunk_size": self.chunker.max_chunk_size,
            },
        )

        summarizer = HierarchicalSummarizer(
            provider=self._session_provider(),
            prompt_builder=self.prompt_builder,
            max_concurrency=self.max_concurrency,
        )
        return await summarizer.summarize(
            chunks, opts, content_type=resolved, original_length=len(text)
        )

    async def summarize_forensic(
        self,
        content: Content,
        *,
        url: Optional[str] = None,
        mime_type: Optional[str] = None,
        content_type: Union[ContentType, str, None] = None,
        include_metadata: bool = True,
        options: OptionsLike = None,
    ) -> SummaryResult:
        """Run a single-call forensic analysis of ``content``.

        The whole text goes into one prompt. The response is parsed into
        four sections and rendered as a markdown report; if no section can
        be found, the raw response is returned as the summary text.

        Raises:
            InvalidInputError: Empty or too-short content, bad options or
                unknown content type
            CompletionServiceError: If the completion service fails
        """
        opts = self._coerce_options(options)
        if not opts.is_forensic:
            opts = opts.model_copy(update={"focus": SummaryFocus.FORENSIC})

        started = time.perf_counter()
        raw = await self._load(content)
        base_type = self._resolve_type(content, raw, url, mime_type, content_type)
        text = await self._extract(raw, base_type, url)
        refined = base_type
        if content_type is None:
            refined = self.detector.detect_forensic(text)
            if refined in (ContentType.TEXT, ContentType.LONG_TEXT):
                refined = base_type

        provider = self._session_provider()
        prompt = self.prompt_builder.build_forensic(text, url=url, content_type=refined)
        completion = await provider.generate(prompt, self.forensic_config)

        sections = self.forensic_parser.parse(completion)
        self.forensic_parser.validate(sections)

        if sections.found_sections():
            page = None
            if include_metadata and url:
                html = raw if isinstance(raw, str) and looks_like_html(raw) else None
                page = self.extractor.page_metadata(url, html)
            summary_text = self.forensic_parser.format_report(
                sections, page, model_name=provider.model_name
            )
        else:
            summary_text = completion.strip()

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Forensic analysis completed",
            extra={
                "content_type": refined.value,
                "sections_found": len(sections.found_sections()),
                "processing_time_ms": round(elapsed_ms, 1),
            },
        )
        return SummaryResult(
            summary_text=summary_text,
            metadata=SummaryMetadata(
                content_type=refined.value,
                original_length=len(text),
                chunks_processed=1,
                processing_time_ms=elapsed_ms,
                options_used=opts,
            ),
            forensic=sections,
        )

    async def check_health(self) -> List[tuple[str, ProviderHealth]]:
        """Check every configured provider."""
        if isinstance(self.provider, ProviderChain):
            return await self.provider.fork().check_all_health()
        return [(self.provider.name, await self.provider.health_check())]

    def _session_provider(self) -> SummaryProvider:
        if isinstance(self.provider, ProviderChain):
            return self.provider.fork()
        return self.provider

    @staticmethod
    def _coerce_options(options: OptionsLike) -> SummaryOptions:
        if options is None:
            return SummaryOptions()
        if isinstance(options, SummaryOptions):
            return options
        try:
            return SummaryOptions.model_validate(dict(options))
        except (ValidationError, TypeError, ValueError) as exc:
            raise InvalidInputError(f"Invalid summary options: {exc}") from exc

    async def _load(self, content: Content) -> Union[str, bytes]:
        if content is None:
            raise InvalidInputError("Content is required")
        if isinstance(content, PurePath):
            try:
                return await asyncio.to_thread(_read_bytes, content)
            except OSError as exc:
                raise InvalidInputError(f"Cannot read {content}: {exc}") from exc
        if isinstance(content, (bytes, bytearray)):
            if not content:
                raise InvalidInputError("Content is empty")
            return bytes(content)
        if not isinstance(content, str):
            raise InvalidInputError(
                f"Unsupported content of type {type(content).__name__}"
            )
        if not content.strip():
            raise InvalidInputError("Content is empty")
        return content

    def _resolve_type(
        self,
        content: Content,
        raw: Union[str, bytes],
        url: Optional[str],
        mime_type: Optional[str],
        content_type: Union[ContentType, str, None],
    ) -> ContentType:
        if content_type is not None:
            try:
                return ContentType(content_type)
            except ValueError as exc:
                raise InvalidInputError(f"Unknown content type: {content_type}") from exc
        if isinstance(content, PurePath) and not (url or mime_type):
            return self.detector.detect(content)
        return self.detector.detect(raw, url=url, mime_type=mime_type)

    async def _extract(
        self, raw: Union[str, bytes], content_type: ContentType, url: Optional[str]
    ) -> str:
        unit = ContentUnit(raw_content=raw, source_type=content_type, source_ref=url)
        text = await self.extractor.extract(unit)
        if len(text.strip()) < self.min_content_length:
            raise InvalidInputError(
                f"Content must be at least {self.min_content_length} characters"
            )
        return text


def _read_bytes(path: PurePath) -> bytes:
    with open(path, "rb") as handle:
        return handle.read()


def create_summary_service(settings: Optional["Settings"] = None) -> SummaryService:
    """Factory function to create SummaryService from settings.

    Args:
        settings: Settings instance, uses cached settings if not provided

    Raises:
        ValueError: If no provider could be created
    """
    from ..config import get_settings

    if settings is None:
        settings = get_settings()
    summarization = settings.summarization

    providers = ProviderFactory(settings).create_all_configured()
    chain = ProviderChain(providers, sticky=summarization.sticky_provider)

    logger.info(
        "Summary service configured",
        extra={
            "providers": [p.name for p in providers],
            "max_chunk_size": summarization.max_chunk_size,
            "overlap_size": summarization.overlap_size,
            "max_concurrency": summarization.max_concurrency,
        },
    )

    return SummaryService(
        provider=chain,
        extractor=TextExtractor.from_settings(settings.extraction),
        chunker=TextChunker(
            max_chunk_size=summarization.max_chunk_size,
            overlap_size=summarization.overlap_size,
            boundary_ratio=summarization.boundary_ratio,
        ),
        max_concurrency=summarization.max_concurrency,
        min_content_length=summarization.min_content_length,
        forensic_config=GenerationConfig(
            temperature=summarization.forensic_temperature,
            max_output_tokens=summarization.forensic_max_output_tokens,
        ),
    )
