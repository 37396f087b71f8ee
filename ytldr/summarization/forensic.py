"""Parsing and rendering of four-section forensic reports."""
from __future__ import annotations

import logging
import re
import warnings
from datetime import datetime, timezone
from typing import List, Optional

from .errors import ParseWarning
from .models import ForensicSections, PageMetadata

logger = logging.getLogger(__name__)

# Heading prefix: optional markdown hashes, bold markers and a list number
_PREFIX = (
    r"^[ \t]*(?:#{1,6}[ \t]*)?(?:(?P<bold>\*\*)[ \t]*)?"
    r"(?:\d{1,2}[.)][ \t]*)?(?:(?P<bold_after_number>\*\*)[ \t]*)?"
)
# Bold heading: decoration up to the closing bold marker and an optional colon
_BOLD_REST = r"(?:[^\n*]|\*(?!\*))*(?:\*\*[ \t]*:?)?"
# Plain heading: decoration up to the first colon; text after it is body
_PLAIN_REST = r"[^\n:]*:?"
_SUFFIX = rf"(?(bold){_BOLD_REST}|(?(bold_after_number){_BOLD_REST}|{_PLAIN_REST}))"

SECTION_TITLES = {
    "structured_outline": "Structured Outline",
    "bullet_summary": "Bullet Summary (w/ Emojis)",
    "tldr": "TL;DR",
    "link_breakdown": "Full Link Breakdown",
}

_SECTION_NAMES = {
    "structured_outline": r"Structured\s+Outline",
    "bullet_summary": r"Bullet\s+Summary",
    "tldr": r"TL\s*;?\s*DR",
    "link_breakdown": r"(?:Full\s+)?Link\s+Breakdown",
}

SECTION_HEADINGS: dict[str, re.Pattern[str]] = {
    field: re.compile(_PREFIX + name + _SUFFIX, re.IGNORECASE | re.MULTILINE)
    for field, name in _SECTION_NAMES.items()
}


class ForensicSectionParser:
    """Splits a forensic completion into its four named sections.

    Parsing is best-effort. Each section is located independently by its
    heading and runs until the heading of any later section or the end of the
    text, so a missing or renamed heading only empties that one section.
    """

    def parse(self, raw_text: str) -> ForensicSections:
        names = ForensicSections.section_names()
        found: dict[str, str] = {}

        for position, field in enumerate(names):
            match = SECTION_HEADINGS[field].search(raw_text)
            if match is None:
                found[field] = ""
                continue

            start = match.end()
            end = len(raw_text)
            for later in names[position + 1:]:
                boundary = SECTION_HEADINGS[later].search(raw_text, start)
                if boundary is not None:
                    end = min(end, boundary.start())
            found[field] = raw_text[start:end].strip()

        sections = ForensicSections(raw_text=raw_text, **found)
        if not sections.found_sections():
            logger.warning(
                "Forensic response contained no recognizable sections",
                extra={"response_length": len(raw_text)},
            )
            warnings.warn(
                "No forensic sections found in response", ParseWarning, stacklevel=2
            )
        return sections

    def validate(self, sections: ForensicSections) -> List[str]:
        """Return the names of required sections that are empty."""
        missing = [
            name
            for name in ForensicSections.section_names()
            if not getattr(sections, name).strip()
        ]
        for name in missing:
            logger.warning(
                "Forensic analysis missing required section",
                extra={"section": name},
            )
        return missing

    def format_report(
        self,
        sections: ForensicSections,
        page: Optional[PageMetadata] = None,
        *,
        model_name: str,
        completed_at: Optional[datetime] = None,
    ) -> str:
        """Render parsed sections as a markdown report.

        Args:
            sections: Parsed sections; empty ones are omitted
            page: Optional page details for the report header
            model_name: Model credited in the footer
            completed_at: Completion timestamp, defaults to now (UTC)
        """
        completed_at = completed_at or datetime.now(timezone.utc)
        lines: List[str] = []

        if page is not None:
            lines += [
                f"📸 **Site Thumbnail:** {page.thumbnail or 'Not available'}",
                f"🔗 **URL:** {page.url}",
                f"📄 **Title:** {page.title or 'Not extracted'}",
                f"📝 **Description:** {page.description or 'Not available'}",
                "",
                "---",
                "",
            ]

        lines += ["## 🔍 FORENSIC ANALYSIS REPORT", ""]
        for number, field in enumerate(ForensicSections.section_names(), start=1):
            body = getattr(sections, field).strip()
            if body:
                lines += [f"### {number}. {SECTION_TITLES[field]}", "", body, ""]

        lines += [
            "---",
            "",
            f"**Analysis completed at:** {completed_at.isoformat()}",
            "**Analysis method:** Ultra-detailed forensic extraction",
            f"**AI Model:** {model_name}",
        ]
        return "\n".join(lines) + "\n"
