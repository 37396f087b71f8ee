"""
Summarization pipeline for ytldr.

Provides content-type detection, text extraction, chunking, prompt building,
hierarchical summarization, forensic report parsing, and completion provider
abstraction.
"""

from .chunker import TextChunker
from .detector import ContentTypeDetector
from .errors import (
    CompletionServiceError,
    InvalidInputError,
    ParseWarning,
    SummarizationError,
)
from .extractors import TextExtractor
from .forensic import ForensicSectionParser
from .hierarchical import HierarchicalSummarizer
from .models import (
    Chunk,
    ChunkSummary,
    ContentType,
    ContentUnit,
    ForensicSections,
    PageMetadata,
    SummaryFocus,
    SummaryFormat,
    SummaryLength,
    SummaryMetadata,
    SummaryOptions,
    SummaryResult,
)
from .prompt_builder import PromptBuilder
from .providers import (
    GenerationConfig,
    ProviderChain,
    ProviderHealth,
    SummaryProvider,
)
from .service import SummaryService, create_summary_service

__all__ = [
    "TextChunker",
    "ContentTypeDetector",
    "CompletionServiceError",
    "InvalidInputError",
    "ParseWarning",
    "SummarizationError",
    "TextExtractor",
    "ForensicSectionParser",
    "HierarchicalSummarizer",
    "Chunk",
    "ChunkSummary",
    "ContentType",
    "ContentUnit",
    "ForensicSections",
    "PageMetadata",
    "SummaryFocus",
    "SummaryFormat",
    "SummaryLength",
    "SummaryMetadata",
    "SummaryOptions",
    "SummaryResult",
    "PromptBuilder",
    "GenerationConfig",
    "ProviderChain",
    "ProviderHealth",
    "SummaryProvider",
    "SummaryService",
    "create_summary_service",
]
