"""HTML display-markup formatter for chat bubbles.

WHY: The chat view inserts each message as structured markup. Actions
and thoughts are shown as emphasized text whose look depends on who is
speaking; tag content is emphasized without a speaker class; leftover
bracketed text is wrapped so it can be styled as a stage cue.

HOW: Walks the fragment once. Literal text is copied as is (or escaped
when the render style asks for it) and every span is wrapped in a fixed
element chosen by its kind.

RULES:
- Action / Thought → <em class="{speaker class}">content</em>
- TagContent       → <em>content</em>, enclosed spans rendered inside
  (<em><em class="ai-action">nods</em> slowly</em>)
- BracketFallback  → <span class="{fallback class}">content</span>
- Speaker class: style.user_class for user messages, style.other_class
  otherwise
- Without escaping, a message with no markup comes out byte-for-byte
  unchanged
- Escaping uses html.escape(quote=False): thought quotes stay literal
- Output media type: "text/html"
"""

from __future__ import annotations

import html
from typing import Iterable

from chat_markup.core.ir import AnnotatedFragment, AnnotationSpan, Segment, SpanKind, SpanStyle, TextRun
from chat_markup.formatters.base import BaseFormatter


class HtmlFormatter(BaseFormatter):
    """Formatter that produces the display markup inserted into chat bubbles."""

    @property
    def name(self) -> str:
        return "HTML display markup"

    @property
    def media_type(self) -> str:
        return "text/html"

    def format(self, fragment: AnnotatedFragment) -> str:
        return self._segments(fragment.segments)

    def _segments(self, segments: Iterable[Segment]) -> str:
        parts = []
        for segment in segments:
            if isinstance(segment, TextRun):
                parts.append(self._text(segment.text))
            else:
                parts.append(self._wrap(segment))
        return "".join(parts)

    def _text(self, text: str) -> str:
        if self.style.escape_html:
            return html.escape(text, quote=False)
        return text

    def _speaker_class(self, style: SpanStyle) -> str:
        if style is SpanStyle.USER:
            return self.style.user_class
        return self.style.other_class

    def _wrap(self, span: AnnotationSpan) -> str:
        if span.children:
            content = self._segments(span.children)
        else:
            content = self._text(span.content)
        if span.kind in (SpanKind.ACTION, SpanKind.THOUGHT):
            return '<em class="{}">{}</em>'.format(self._speaker_class(span.style), content)
        if span.kind is SpanKind.TAG_CONTENT:
            return "<em>{}</em>".format(content)
        return '<span class="{}">{}</span>'.format(self.style.fallback_class, content)
