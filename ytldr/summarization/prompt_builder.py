"""Prompt building for summary generation."""
from __future__ import annotations

import logging
from textwrap import dedent
from typing import Optional, Sequence, Union

from .models import (
    ChunkSummary,
    ContentType,
    SummaryFocus,
    SummaryFormat,
    SummaryLength,
    SummaryOptions,
)

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"

LENGTH_CLAUSES: dict[SummaryLength, str] = {
    SummaryLength.SHORT: "Create a brief summary (2-3 sentences).",
    SummaryLength.MEDIUM: "Create a concise summary (4-6 sentences).",
    SummaryLength.LONG: "Create a detailed summary (8-12 sentences).",
    SummaryLength.DETAILED: "Create a comprehensive summary with key details.",
}

FOCUS_CLAUSES: dict[SummaryFocus, str] = {
    SummaryFocus.GENERAL: "Provide a balanced overview of the content.",
    SummaryFocus.KEY_POINTS: "Focus on the most important points and takeaways.",
    SummaryFocus.ANALYSIS: "Include analysis of the main arguments and implications.",
    SummaryFocus.EXECUTIVE: (
        "Format as an executive summary with key decisions and actions."
    ),
    SummaryFocus.FORENSIC: (
        "Extract every step, tool, command, setting and link in sequential order "
        "without grouping or skipping anything."
    ),
}

_VIDEO_CLAUSE = (
    "This is a video transcript. Focus on the main discussion points and conclusions."
)
_AUDIO_CLAUSE = (
    "This is a podcast transcript. Highlight key topics, guest insights, "
    "and main takeaways."
)

CONTENT_TYPE_CLAUSES: dict[ContentType, str] = {
    ContentType.VIDEO: _VIDEO_CLAUSE,
    ContentType.YOUTUBE: _VIDEO_CLAUSE,
    ContentType.PODCAST: _AUDIO_CLAUSE,
    ContentType.AUDIO: _AUDIO_CLAUSE,
    ContentType.PDF: (
        "This is document content. Focus on the core information and key findings."
    ),
    ContentType.ARTICLE: (
        "This is an article. Summarize the main thesis, supporting points, "
        "and conclusions."
    ),
}

FORMAT_CLAUSES: dict[SummaryFormat, str] = {
    SummaryFormat.BULLET: "Format the summary as bullet points.",
    SummaryFormat.PARAGRAPH: "Format the summary as coherent paragraphs.",
    SummaryFormat.MARKDOWN: (
        "Format the summary in markdown with appropriate headings and structure."
    ),
}

FORENSIC_INSTRUCTIONS = dedent(
    """
    You are an ultra-intelligent, semi-autonomous AI summarizer with forensic-level detail extraction capabilities. Analyze the provided content and report every technical, procedural, and contextual detail with surgical precision.

    CRITICAL REQUIREMENTS:
    - Do NOT generalize, skip steps, or group actions vaguely
    - Extract every individual action, setting, and config in order
    - Break the content into sections, then into detailed, sequential steps
    - Every action, tool, file, and command is its own sub-step
    - Include visual references: buttons, menu names, tabs, sliders, filenames
    - Never combine steps or omit names, models, commands, links, or tool versions
    - Write as an engineer documenting a system rebuild from scratch

    MANDATORY OUTPUT FORMAT:

    1. **Structured Outline of Content Title**
       - Break the content down into sections
       - Further break into detailed, sequential steps (not grouped)
       - Every action, tool, file, and command as individual sub-step
       - Include visual references: buttons, menu names, tabs, sliders, filenames

    2. **Bullet Summary (w/ Emojis):**
       - 🛠️ Tools/frameworks used
       - 📋 Ordered steps performed
       - 💻 Devices/Specs mentioned
       - 🧪 Test/benchmarks conducted
       - 📁 Files/config paths referenced
       - 💰 Pricing/sponsorship information
       - 🔗 Full URLs mentioned
       - 🔒 Privacy/telemetry concerns

    3. **TL;DR (3-15 Sentences):**
       - A detailed yet readable synthesis
       - Include all named devices, tools, techniques, and results
       - If steps were shown, summarize their purpose and result

    4. **Full Link Breakdown:**
       - Show every URL in full
       - Label each: Free, Affiliate/Sponsored, Docs, Risky or tracking
       - Include context for each link

    OUTPUT ONLY TEXT. Be relentlessly thorough.
    """
).strip()

ContentTypeLike = Union[ContentType, str, None]


class PromptBuilder:
    """Builds prompts for summary generation.

    Instruction text is assembled only from fixed clause tables keyed by the
    option enums, so identical options always yield identical prompts.
    """

    def build(self, options: SummaryOptions, content_type: ContentTypeLike = None) -> str:
        """Build the instruction text for a summary request.

        Args:
            options: Length, format and focus selection
            content_type: Detected or declared content type

        Returns:
            Instruction text without any content attached
        """
        clauses = [
            LENGTH_CLAUSES[options.length],
            FOCUS_CLAUSES[options.focus],
        ]
        type_clause = CONTENT_TYPE_CLAUSES.get(self._coerce_type(content_type))
        if type_clause:
            clauses.append(type_clause)
        clauses.append(FORMAT_CLAUSES[options.format])

        instruction = " ".join(clauses)
        logger.debug(
            "Built instruction",
            extra={
                "length": options.length.value,
                "format": options.format.value,
                "focus": options.focus.value,
                "content_type": str(content_type),
            },
        )
        return instruction

    def build_single(self, instruction: str, text: str) -> str:
        """Build the prompt for content that fits in one chunk."""
        return f"{instruction}\n\nContent:\n{text}"

    def build_chunk(self, text: str, index: int, total: int) -> str:
        """Build the map-phase prompt for one chunk.

        Args:
            text: Chunk text
            index: 1-based chunk position
            total: Total number of chunks
        """
        return f"Summarize this section (part {index}/{total}):\n{text}"

    def build_reduce(
        self, instruction: str, chunk_summaries: Sequence[ChunkSummary]
    ) -> str:
        """Build the reduce prompt combining chunk summaries in source order."""
        ordered = sorted(chunk_summaries, key=lambda summary: summary.chunk_index)
        combined = SECTION_SEPARATOR.join(summary.text for summary in ordered)
        logger.debug(
            "Reduce prompt assembled",
            extra={"chunk_count": len(ordered), "combined_length": len(combined)},
        )
        return f"{instruction}\n\nCombined sections:\n{combined}"

    def build_forensic(
        self,
        content: str,
        *,
        url: Optional[str] = None,
        content_type: ContentTypeLike = None,
    ) -> str:
        """Build the single-call forensic analysis prompt."""
        resolved = self._coerce_type(content_type)
        type_label = resolved.value if resolved else (content_type or ContentType.TEXT.value)
        context = dedent(
            f"""
            ADDITIONAL CONTEXT:
            - URL: {url or 'Not provided'}
            - Content Type: {type_label}
            - Analysis Level: Ultra-detailed forensic extraction
            - Output Format: Strictly follow the specified structure
            """
        ).strip()
        return (
            f"{FORENSIC_INSTRUCTIONS}\n\n"
            f"CONTENT TO ANALYZE:\n{content}\n\n"
            f"{context}\n\n"
            "PERFORM THE ANALYSIS NOW:"
        )

    @staticmethod
    def _coerce_type(content_type: ContentTypeLike) -> Optional[ContentType]:
        if content_type is None or isinstance(content_type, ContentType):
            return content_type
        try:
            return ContentType(content_type)
        except ValueError:
            return None
