"""Markdown rendering for question labels, help text and explanations.

Architecture note:
    Exam screens show markup in plain ``QLabel`` widgets, which understand a
    subset of HTML. Source text is rendered with markdown-it using the
    CommonMark preset and raw HTML disabled, so a form author cannot inject
    markup into the responder's window. Inline math delimiters are left as
    literal text; ``QLabel`` has no math engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re

from markdown_it import MarkdownIt

_SINGLE_PARAGRAPH = re.compile(r"^<p>(.*)</p>\s*$", re.DOTALL)


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown into HTML fragments suitable for Qt rich text."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = markdown_text.strip()
        if not sanitized:
            return ""
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render without the wrapping paragraph so the text sits inline in a label."""

        fragment = self.render_fragment(markdown_text)
        match = _SINGLE_PARAGRAPH.match(fragment)
        return match.group(1) if match else fragment


renderer = MarkdownMathRenderer()
# Shared instance; only the Qt thread renders.
