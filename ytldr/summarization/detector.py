"""Content type detection for summarization inputs."""
from __future__ import annotations

import json
import re
from pathlib import PurePath
from typing import Optional, Union

from .models import ContentProfile, ContentType, TypeCapabilities

Content = Union[str, bytes, PurePath]

MIME_TYPES: dict[str, ContentType] = {
    "application/pdf": ContentType.PDF,
    "video/mp4": ContentType.VIDEO,
    "video/avi": ContentType.VIDEO,
    "video/mov": ContentType.VIDEO,
    "video/quicktime": ContentType.VIDEO,
    "audio/mp3": ContentType.AUDIO,
    "audio/wav": ContentType.AUDIO,
    "audio/mpeg": ContentType.AUDIO,
    "audio/m4a": ContentType.AUDIO,
    "text/plain": ContentType.TEXT,
    "text/html": ContentType.ARTICLE,
    "text/markdown": ContentType.MARKDOWN,
    "application/json": ContentType.DATA,
}

# Ordered; first match wins.
URL_PATTERNS: tuple[tuple[re.Pattern[str], ContentType], ...] = (
    (re.compile(r"youtube\.com|youtu\.be", re.I), ContentType.YOUTUBE),
    (re.compile(r"spotify\.com.*podcast", re.I), ContentType.PODCAST),
    (re.compile(r"apple\.com.*podcast", re.I), ContentType.PODCAST),
    (re.compile(r"soundcloud\.com", re.I), ContentType.AUDIO),
    (re.compile(r"\.pdf(\?|$)", re.I), ContentType.PDF),
    (
        re.compile(r"medium\.com|nytimes\.com|bbc\.com|wikipedia\.org", re.I),
        ContentType.ARTICLE,
    ),
    (re.compile(r"twitter\.com|(?<![\w-])x\.com", re.I), ContentType.SOCIAL),
    (re.compile(r"\.(mp4|avi|mov|mkv)$", re.I), ContentType.VIDEO),
    (re.compile(r"\.(mp3|wav|m4a|aac)$", re.I), ContentType.AUDIO),
)

FILE_EXTENSIONS: dict[str, ContentType] = {
    "pdf": ContentType.PDF,
    "mp4": ContentType.VIDEO,
    "avi": ContentType.VIDEO,
    "mov": ContentType.VIDEO,
    "mp3": ContentType.AUDIO,
    "wav": ContentType.AUDIO,
    "m4a": ContentType.AUDIO,
    "txt": ContentType.TEXT,
    "md": ContentType.MARKDOWN,
    "html": ContentType.HTML,
    "htm": ContentType.HTML,
}

FORENSIC_KEYWORDS: tuple[tuple[re.Pattern[str], ContentType], ...] = (
    (re.compile(r"\b(?:tutorial|guide)s?\b", re.I), ContentType.TUTORIAL),
    (re.compile(r"\b(?:demo|demonstration)s?\b", re.I), ContentType.DEMO),
    (re.compile(r"\b(?:review|comparison)s?\b", re.I), ContentType.REVIEW),
    (re.compile(r"\b(?:configuration|setup)s?\b", re.I), ContentType.CONFIGURATION),
)

CAPABILITIES: dict[ContentType, TypeCapabilities] = {
    ContentType.TEXT: TypeCapabilities(extractable=True, summarizable=True, translatable=True),
    ContentType.MARKDOWN: TypeCapabilities(extractable=True, summarizable=True, translatable=True),
    ContentType.HTML: TypeCapabilities(extractable=True, summarizable=True, translatable=True),
    ContentType.PDF: TypeCapabilities(extractable=True, summarizable=True, translatable=False),
    ContentType.ARTICLE: TypeCapabilities(extractable=True, summarizable=True, translatable=True),
    # Media types need a transcript supplied by the caller
    ContentType.YOUTUBE: TypeCapabilities(extractable=False, summarizable=True, translatable=True),
    ContentType.VIDEO: TypeCapabilities(extractable=False, summarizable=True, translatable=True),
    ContentType.PODCAST: TypeCapabilities(extractable=False, summarizable=True, translatable=True),
    ContentType.AUDIO: TypeCapabilities(extractable=False, summarizable=True, translatable=True),
    ContentType.SOCIAL: TypeCapabilities(extractable=True, summarizable=True, translatable=True),
    ContentType.DATA: TypeCapabilities(extractable=True, summarizable=False, translatable=False),
    ContentType.LONG_TEXT: TypeCapabilities(extractable=True, summarizable=True, translatable=True),
}

LONG_TEXT_THRESHOLD = 50_000
ARTICLE_MIN_SENTENCES = 20
ARTICLE_MIN_WORDS = 300
WORDS_PER_MINUTE = 200

_URL_RE = re.compile(r"^https?://\S+$", re.I)
_FILENAME_RE = re.compile(r"^[^\s/]+\.([A-Za-z0-9]{2,4})$")
_HEADING_RE = re.compile(r"^#{1,6} ", re.M)
_TIMESTAMP_RE = re.compile(r"\[\d{1,2}:\d{2}")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_MEDIA_MARKER_RE = re.compile(r"\[(VIDEO|AUDIO|IMAGE|PDF)\]")
_LONG_WORD_RE = re.compile(r"\b\w{8,}\b")


class ContentTypeDetector:
    """Classifies content into a :class:`ContentType`.

    Resolution order: explicit MIME type, then explicit URL, then heuristics
    over the content itself. All methods are pure.
    """

    def detect(
        self,
        content: Content,
        *,
        url: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> ContentType:
        """Detect the content type of ``content``.

        Args:
            content: Text, raw bytes, or a file path
            url: Source URL, if known
            mime_type: Declared MIME type, if known

        Returns:
            Detected content type tag
        """
        if mime_type:
            return self.detect_from_mime_type(mime_type)

        if url:
            return self.detect_from_url(url)

        if isinstance(content, PurePath):
            return self.detect_from_filename(content.name)

        if isinstance(content, (bytes, bytearray)):
            if bytes(content[:5]) == b"%PDF-":
                return ContentType.PDF
            content = bytes(content).decode("utf-8", errors="replace")

        if isinstance(content, str):
            candidate = content.strip()
            if _URL_RE.match(candidate):
                return self.detect_from_url(candidate)
            if _FILENAME_RE.match(candidate):
                by_name = self.detect_from_filename(candidate, default=None)
                if by_name is not None:
                    return by_name
            return self.detect_from_content(content)

        return ContentType.TEXT

    def detect_forensic(
        self,
        content: Content,
        *,
        url: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> ContentType:
        """Detect with forensic refinements (tutorial, demo, review, configuration)."""
        if isinstance(content, str):
            for pattern, content_type in FORENSIC_KEYWORDS:
                if pattern.search(content):
                    return content_type
        return self.detect(content, url=url, mime_type=mime_type)

    def detect_from_mime_type(self, mime_type: str) -> ContentType:
        base = mime_type.split(";", 1)[0].strip().lower()
        return MIME_TYPES.get(base, ContentType.TEXT)

    def detect_from_url(self, url: str) -> ContentType:
        for pattern, content_type in URL_PATTERNS:
            if pattern.search(url):
                return content_type
        return ContentType.ARTICLE

    def detect_from_filename(
        self, filename: str, default: Optional[ContentType] = ContentType.TEXT
    ) -> Optional[ContentType]:
        _, dot, extension = filename.rpartition(".")
        if not dot:
            return default
        return FILE_EXTENSIONS.get(extension.lower(), default)

    def detect_from_content(self, content: str) -> ContentType:
        if "%PDF-" in content or "[PDF]" in content:
            return ContentType.PDF

        if "[VIDEO" in content or "TRANSCRIPT" in content:
            if "SPEAKER" in content or _TIMESTAMP_RE.search(content):
                return ContentType.VIDEO if "VIDEO" in content else ContentType.AUDIO

        if _HEADING_RE.search(content):
            return ContentType.MARKDOWN

        if self._is_structured_data(content):
            return ContentType.DATA

        lowered = content.lower()
        if "<html" in lowered or "<body" in lowered:
            return ContentType.HTML

        if len(content) > LONG_TEXT_THRESHOLD:
            return ContentType.LONG_TEXT

        sentences = len(_SENTENCE_SPLIT_RE.split(content))
        words = len(content.split())
        if sentences > ARTICLE_MIN_SENTENCES and words > ARTICLE_MIN_WORDS:
            return ContentType.ARTICLE

        return ContentType.TEXT

    @staticmethod
    def _is_structured_data(content: str) -> bool:
        stripped = content.strip()
        if not stripped or stripped[0] not in "[{":
            return False
        try:
            return isinstance(json.loads(stripped), (dict, list))
        except ValueError:
            return False

    def profile(self, content: str, content_type: ContentType) -> ContentProfile:
        """Estimate size, reading time and complexity of ``content``."""
        words = len(content.split())
        if not words:
            return ContentProfile(content_type=content_type, size=len(content))

        avg_word_length = len("".join(content.split())) / words
        long_words = len(_LONG_WORD_RE.findall(content))

        complexity = "simple"
        if avg_word_length > 6 or long_words > words * 0.1:
            complexity = "complex"
        elif words > 1000:
            complexity = "long"

        return ContentProfile(
            content_type=content_type,
            size=len(content),
            estimated_words=words,
            estimated_reading_minutes=-(-words // WORDS_PER_MINUTE),
            has_media=bool(_MEDIA_MARKER_RE.search(content)),
            complexity=complexity,
        )

    def capabilities(self, content_type: ContentType) -> TypeCapabilities:
        return CAPABILITIES.get(
            content_type,
            TypeCapabilities(extractable=True, summarizable=True, translatable=False),
        )

    def supported_types(self) -> list[ContentType]:
        return list(CAPABILITIES)
