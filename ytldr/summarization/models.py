"""Data structures shared across the summarization pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Classification tag driving extraction and prompt phrasing."""

    TEXT = "text"
    MARKDOWN = "markdown"
    HTML = "html"
    PDF = "pdf"
    ARTICLE = "article"
    YOUTUBE = "youtube"
    VIDEO = "video"
    PODCAST = "podcast"
    AUDIO = "audio"
    SOCIAL = "social"
    DATA = "data"
    LONG_TEXT = "long-text"

    # Refinements used by forensic analysis
    TUTORIAL = "tutorial"
    DEMO = "demo"
    REVIEW = "review"
    CONFIGURATION = "configuration"


class SummaryLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    DETAILED = "detailed"


class SummaryFormat(str, Enum):
    MARKDOWN = "markdown"
    BULLET = "bullet"
    PARAGRAPH = "paragraph"


class SummaryFocus(str, Enum):
    GENERAL = "general"
    KEY_POINTS = "key-points"
    ANALYSIS = "analysis"
    EXECUTIVE = "executive"
    FORENSIC = "forensic"


@dataclass(frozen=True)
class ContentUnit:
    """One piece of content submitted for summarization."""

    raw_content: Union[str, bytes]
    source_type: ContentType
    source_ref: Optional[str] = None


@dataclass(frozen=True)
class Chunk:
    """Slice ``text == original[start_offset:end_offset]`` of the source text."""

    index: int
    text: str
    start_offset: int
    end_offset: int

    def __len__(self) -> int:
        return self.end_offset - self.start_offset


@dataclass(frozen=True)
class ChunkSummary:
    """Map-phase output for a single chunk."""

    chunk_index: int
    text: str


class SummaryOptions(BaseModel):
    """Caller-supplied summary configuration."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    length: SummaryLength = SummaryLength.MEDIUM
    format: SummaryFormat = SummaryFormat.MARKDOWN
    focus: SummaryFocus = SummaryFocus.GENERAL

    @property
    def is_forensic(self) -> bool:
        return self.focus is SummaryFocus.FORENSIC


class ForensicSections(BaseModel):
    """Named sections parsed out of a forensic completion.

    Every field is a string; sections that could not be located are empty.
    """

    model_config = ConfigDict(frozen=True)

    structured_outline: str = ""
    bullet_summary: str = ""
    tldr: str = ""
    link_breakdown: str = ""
    raw_text: str = ""

    @classmethod
    def section_names(cls) -> tuple[str, ...]:
        return ("structured_outline", "bullet_summary", "tldr", "link_breakdown")

    def found_sections(self) -> list[str]:
        return [name for name in self.section_names() if getattr(self, name).strip()]


class SummaryMetadata(BaseModel):
    """Bookkeeping attached to every summary result."""

    model_config = ConfigDict(frozen=True)

    content_type: str
    original_length: int = Field(ge=0)
    chunks_processed: int = Field(ge=0)
    processing_time_ms: float = Field(ge=0)
    options_used: SummaryOptions


class SummaryResult(BaseModel):
    """Final artifact returned to the caller."""

    model_config = ConfigDict(frozen=True)

    summary_text: str
    metadata: SummaryMetadata
    forensic: Optional[ForensicSections] = None


class ContentProfile(BaseModel):
    """Cheap statistics describing a piece of content."""

    content_type: ContentType
    size: int = 0
    estimated_words: int = 0
    estimated_reading_minutes: int = 0
    has_media: bool = False
    complexity: str = "simple"


class TypeCapabilities(BaseModel):
    """What the pipeline can do with a given content type."""

    extractable: bool = True
    summarizable: bool = True
    translatable: bool = False


class PageMetadata(BaseModel):
    """Page details rendered in the forensic report header."""

    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    favicon: Optional[str] = None
