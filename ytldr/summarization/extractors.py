"""Plain-text extraction for each content type."""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Optional
from urllib.parse import urljoin, urlparse, unquote

import httpx
import lxml.html as LH
from lxml.etree import ParserError
from readability import Document

from .errors import InvalidInputError
from .models import ContentType, ContentUnit, PageMetadata

if TYPE_CHECKING:
    from ..config import ExtractionSettings

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ytldr-summarizer/0.3"

# Removed before text extraction
NOISE_XPATH = "//script|//style|//noscript|//nav|//header|//footer|//aside|//iframe"
BLOCK_TAGS = frozenset(
    {"p", "div", "br", "li", "tr", "section", "article", "blockquote", "pre",
     "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "table"}
)

# Content types that can only be summarized from a caller-supplied transcript
TRANSCRIPT_ONLY = frozenset(
    {ContentType.YOUTUBE, ContentType.VIDEO, ContentType.AUDIO, ContentType.PODCAST}
)
FETCHABLE = frozenset({ContentType.ARTICLE, ContentType.HTML, ContentType.SOCIAL})

_URL_RE = re.compile(r"^https?://\S+$", re.I)
_PDF_MARKER_RE = re.compile(r"\[PDF\]|PDF Document", re.I)
_HTML_HINT_RE = re.compile(r"<(html|head|body|p|div|article)[\s>]", re.I)
_INLINE_SPACE_RE = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def html_to_text(html: str) -> str:
    """Convert HTML to plain text.

    Script, style and page chrome elements are dropped, block elements end
    with a newline, entities are decoded and whitespace is normalised.
    """
    if not html or not html.strip():
        return ""
    try:
        tree = LH.fromstring(html)
    except ParserError:
        return ""

    for element in tree.xpath(NOISE_XPATH):
        if element.getparent() is not None:
            element.drop_tree()
    for element in tree.iter():
        if isinstance(element.tag, str) and element.tag.lower() in BLOCK_TAGS:
            element.tail = "\n" + (element.tail or "")

    return normalize_whitespace(tree.text_content())


def looks_like_html(text: str) -> bool:
    """True when ``text`` carries document or block-level HTML tags."""
    return bool(_HTML_HINT_RE.search(text))


def normalize_whitespace(text: str) -> str:
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


class TextExtractor:
    """Turns a :class:`ContentUnit` into the plain text that gets summarized.

    URL-only article, HTML and social units are fetched over HTTP; media
    units must arrive with a transcript, since no audio or video is processed
    here.
    """

    def __init__(
        self,
        fetch_timeout: float = 10.0,
        max_content_length: int = 500_000,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.fetch_timeout = fetch_timeout
        self.max_content_length = max_content_length
        self.user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: "ExtractionSettings") -> "TextExtractor":
        return cls(
            fetch_timeout=settings.fetch_timeout,
            max_content_length=settings.max_content_length,
            user_agent=settings.user_agent,
        )

    async def extract(self, unit: ContentUnit) -> str:
        """Extract plain text from ``unit``.

        Raises:
            InvalidInputError: For binary PDFs, media URLs without a
                transcript, or pages that cannot be fetched
        """
        raw = unit.raw_content
        if isinstance(raw, (bytes, bytearray)):
            if unit.source_type is ContentType.PDF and bytes(raw[:5]) == b"%PDF-":
                raise InvalidInputError(
                    "Binary PDF content is not supported; supply the document text"
                )
            raw = bytes(raw).decode("utf-8", errors="replace")

        candidate = raw.strip()
        if _URL_RE.match(candidate):
            return await self._extract_url(candidate, unit.source_type)

        if unit.source_type is ContentType.PDF:
            if candidate.startswith("%PDF-"):
                raise InvalidInputError(
                    "Binary PDF content is not supported; supply the document text"
                )
            return normalize_whitespace(_PDF_MARKER_RE.sub("", raw))

        if unit.source_type is ContentType.HTML or (
            unit.source_type is ContentType.ARTICLE and looks_like_html(raw)
        ):
            return html_to_text(raw)

        return raw

    async def _extract_url(self, url: str, content_type: ContentType) -> str:
        if content_type in TRANSCRIPT_ONLY:
            raise InvalidInputError(
                f"Cannot extract text from {content_type.value} URL; supply a transcript"
            )
        if content_type is ContentType.PDF:
            raise InvalidInputError("PDF URLs are not fetched; supply the document text")
        if content_type not in FETCHABLE:
            return url

        html = await self.fetch(url)
        try:
            article_html = Document(html).summary(html_partial=True)
        except Exception as exc:
            logger.warning(
                "Readability extraction failed; using full page",
                extra={"url": url, "error": str(exc)},
            )
            article_html = html
        text = html_to_text(article_html) or html_to_text(html)
        logger.info(
            "Extracted article text",
            extra={"url": url, "html_length": len(html), "text_length": len(text)},
        )
        return text

    async def fetch(self, url: str) -> str:
        """Fetch page HTML.

        Raises:
            InvalidInputError: If the page cannot be retrieved
        """
        headers = {"User-Agent": self.user_agent}
        try:
            async with httpx.AsyncClient(
                timeout=self.fetch_timeout,
                follow_redirects=True,
                headers=headers,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise InvalidInputError(
                f"Failed to fetch {url}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise InvalidInputError(f"Failed to fetch {url}: {exc}") from exc

        html = response.text
        if len(html) > self.max_content_length:
            logger.warning(
                "Fetched page truncated",
                extra={"url": url, "length": len(html), "limit": self.max_content_length},
            )
            html = html[: self.max_content_length]
        return html

    def page_metadata(self, url: str, html: Optional[str] = None) -> PageMetadata:
        """Collect title, description, thumbnail and favicon for ``url``."""
        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}" if parsed.netloc else ""
        favicon = f"{origin}/favicon.ico" if origin else None

        title = description = thumbnail = None
        if html and html.strip():
            try:
                tree = LH.fromstring(html)
            except ParserError:
                tree = None
            if tree is not None:

                def mget(names: list[tuple[str, str]]) -> Optional[str]:
                    for attr, key in names:
                        val = tree.xpath(f"//meta[@{attr}='{key}']/@content")
                        if val and val[0].strip():
                            return val[0].strip()
                    return None

                def tget(path: str) -> Optional[str]:
                    val = tree.xpath(f"string({path})").strip()
                    return val or None

                title = (
                    mget([("property", "og:title"), ("name", "twitter:title")])
                    or tget("//title")
                    or tget("//h1")
                )
                description = mget(
                    [
                        ("property", "og:description"),
                        ("name", "twitter:description"),
                        ("name", "description"),
                    ]
                )
                thumbnail = mget([("property", "og:image"), ("name", "twitter:image")])
                if thumbnail and origin:
                    thumbnail = urljoin(url, thumbnail)

                icon = tree.xpath(
                    "//link[contains(translate(@rel,'ICON','icon'),'icon')]/@href"
                )
                if icon and origin:
                    favicon = urljoin(url, icon[0])

        if not title:
            title = self._title_from_path(parsed.path)

        return PageMetadata(
            url=url,
            title=title,
            description=description,
            thumbnail=thumbnail,
            favicon=favicon,
        )

    @staticmethod
    def _title_from_path(path: str) -> Optional[str]:
        segment = unquote(path.rstrip("/").rsplit("/", 1)[-1])
        if not segment:
            return None
        segment = re.sub(r"\.[A-Za-z0-9]{1,5}$", "", segment)
        words = re.sub(r"[-_]+", " ", segment).strip()
        return words.title() if words else None
