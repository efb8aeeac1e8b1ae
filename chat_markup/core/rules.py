"""The ordered markup rules that turn literal chat text into annotation spans.

WHY: Model and user messages mark stage directions with asterisks, inner
thoughts with underscores, and structured intent with uppercase bracket
tags. Each convention has its own boundary conditions, and the rules
interact: a tag must be gone before thoughts are matched, and generic
brackets are only wrapped once every tag form had its chance. Keeping
each rule as a small class with one compiled pattern makes the order
explicit and each rule testable on its own.

HOW: Every rule rewrites the TextRun segments of a segment list and
leaves AnnotationSpans alone. A TextRun is scanned through a scan
string: when the run is not at the start (or end) of the message, an
object-replacement character stands in for the neighbouring span, so
start/end anchors and whitespace lookarounds see "something that is not
whitespace" there, exactly as they would see the markup of an emitted
span. Matches never include the stand-in. Deleted constructs leave
nothing behind, and adjacent TextRuns are merged after every rule so the
next rule sees the joined text. The tag-with-content rule then scans the
whole message once more, each span reduced to a single stand-in, so a
tag that encloses an action is matched as a whole.

RULES:
- Order is fixed: action, tag with content, bare tag, thought, bracket
  fallback (see PIPELINE)
- A rule never scans inside an emitted span, with one exception: the two
  tag rules also strip tags from Action span content, because tags are
  metadata and are never displayed
- A tag whose content encloses spans keeps them as children of its
  TagContent span; its name and brackets are removed (a bare tag has no
  content and cannot enclose anything)
- Unmatched or malformed delimiters stay literal; no rule raises
- Known quirk: uppercase tags lose their brackets (rules 2-3) while any
  other bracketed text keeps them (rule 5). Kept as is.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from chat_markup.core.ir import AnnotationSpan, Segment, SpanKind, SpanStyle, TextRun, segments_text

# Stands in for an emitted span next to a TextRun while it is scanned.
# Not whitespace, not punctuation, not a delimiter.
_NEIGHBOUR = "\ufffc"

# *text* or **text**, no asterisk inside, start or whitespace before,
# no colon directly after. The double form is tried first.
_ACTION_RE = re.compile(r"(?:^|(?<=\s))(?:\*\*([^*]+?)\*\*|\*([^*]+?)\*)(?!:)")

# [TAG: content], uppercase tag, content lazily up to the first "]".
_TAG_WITH_CONTENT_RE = re.compile(r"\[\s*([A-Z]+)\s*:(.*?)\]")

# [TAG] with no colon and no content.
_BARE_TAG_RE = re.compile(r"\[\s*[A-Z]+\s*\]")

# _text_, start or whitespace before, end, whitespace or .!?,;: after.
_THOUGHT_RE = re.compile(r"(?:^|(?<=\s))_([^_]+)_(?=[\s.!?,;:]|\Z)")

# Any other [...] with at least one character on the same line.
_BRACKET_RE = re.compile(r"\[(.+?)\]")


def merge_runs(segments: List[Segment]) -> List[Segment]:
    """Join neighbouring TextRuns and drop empty ones."""
    merged: List[Segment] = []
    for segment in segments:
        if isinstance(segment, TextRun):
            if not segment.text:
                continue
            if merged and isinstance(merged[-1], TextRun):
                merged[-1] = TextRun(merged[-1].text + segment.text)
                continue
        merged.append(segment)
    return merged


class MarkupRule(ABC):
    """Base class for one rewriting rule of the pipeline.

    To add a rule: subclass, set ``name`` and ``pattern``, implement
    ``emit()``, and insert an instance at the right place in PIPELINE.
    """

    name: str = ""
    pattern: re.Pattern[str]

    @abstractmethod
    def emit(self, match: re.Match[str], style: SpanStyle) -> Optional[AnnotationSpan]:
        """Build the span for one match, or return None to delete the match."""

    def rewrite_span(self, span: AnnotationSpan) -> AnnotationSpan:
        """Hook for rules that also act on already emitted spans."""
        return span

    def apply(self, segments: List[Segment], style: SpanStyle) -> List[Segment]:
        """Rewrite every TextRun in ``segments`` and return a new list."""
        rewritten: List[Segment] = []
        last = len(segments) - 1
        for index, segment in enumerate(segments):
            if isinstance(segment, TextRun):
                rewritten.extend(self._rewrite_run(
                    segment.text, style, at_start=index == 0, at_end=index == last,
                ))
            else:
                rewritten.append(self.rewrite_span(segment))
        return merge_runs(rewritten)

    def _rewrite_run(
        self,
        text: str,
        style: SpanStyle,
        at_start: bool,
        at_end: bool,
    ) -> List[Segment]:
        prefix = "" if at_start else _NEIGHBOUR
        suffix = "" if at_end else _NEIGHBOUR
        scan = prefix + text + suffix
        shift = len(prefix)

        pieces: List[Segment] = []
        cursor = 0
        for match in self.pattern.finditer(scan):
            start = match.start() - shift
            end = match.end() - shift
            if start > cursor:
                pieces.append(TextRun(text[cursor:start]))
            span = self.emit(match, style)
            if span is not None:
                pieces.append(span)
            cursor = end
        if cursor < len(text):
            pieces.append(TextRun(text[cursor:]))
        return pieces


class ActionRule(MarkupRule):
    """``*waves*`` / ``**waves**`` → Action span ``waves``."""

    name = "action"
    pattern = _ACTION_RE

    def emit(self, match: re.Match[str], style: SpanStyle) -> Optional[AnnotationSpan]:
        inner = match.group(1) if match.group(1) is not None else match.group(2)
        return AnnotationSpan(SpanKind.ACTION, style, inner.strip())


class _TagRule(MarkupRule):
    """Shared behaviour of the two uppercase-tag rules.

    Tags inside Action content are stripped too: ``*[SEES: car]*`` shows
    ``car`` and ``*[PAUSE]*`` leaves an empty action. Actions enclosed by
    an earlier tag are handled the same way.
    """

    def inline(self, match: re.Match[str]) -> str:
        return ""

    def rewrite_span(self, span: AnnotationSpan) -> AnnotationSpan:
        if span.children:
            children = tuple(
                self.rewrite_span(child) if isinstance(child, AnnotationSpan) else child
                for child in span.children
            )
            if children == span.children:
                return span
            return AnnotationSpan(span.kind, span.style, segments_text(children), children)
        if span.kind is not SpanKind.ACTION:
            return span
        content = self.pattern.sub(self.inline, span.content).strip()
        if content == span.content:
            return span
        return AnnotationSpan(span.kind, span.style, content)


def _slice_segments(segments: List[Segment], starts: List[int], begin: int, end: int) -> List[Segment]:
    """Segments between two offsets of a flattened scan string.

    Each span occupies one character of that string; TextRuns are cut at
    the offsets.
    """
    pieces: List[Segment] = []
    for segment, start in zip(segments, starts):
        if isinstance(segment, TextRun):
            stop = start + len(segment.text)
            if stop <= begin or start >= end:
                continue
            pieces.append(TextRun(segment.text[max(begin, start) - start:min(end, stop) - start]))
        elif begin <= start < end:
            pieces.append(segment)
    return merge_runs(pieces)


def _trim_edges(segments: List[Segment]) -> List[Segment]:
    """Strip leading whitespace of the first run and trailing of the last."""
    trimmed = list(segments)
    if trimmed and isinstance(trimmed[0], TextRun):
        trimmed[0] = TextRun(trimmed[0].text.lstrip())
    if trimmed and isinstance(trimmed[-1], TextRun):
        trimmed[-1] = TextRun(trimmed[-1].text.rstrip())
    return merge_runs(trimmed)


class TagWithContentRule(_TagRule):
    """``[SEES: a red car]`` → TagContent span ``a red car``; empty content deletes.

    A tag may also enclose spans emitted by the action rule:
    ``[NARRATION: *nods* slowly]`` becomes one TagContent span whose
    children are the Action span and the text `` slowly``. The tag name
    and both brackets disappear either way.
    """

    name = "tag_with_content"
    pattern = _TAG_WITH_CONTENT_RE

    def inline(self, match: re.Match[str]) -> str:
        return match.group(2).strip()

    def emit(self, match: re.Match[str], style: SpanStyle) -> Optional[AnnotationSpan]:
        content = match.group(2).strip()
        if not content:
            return None
        return AnnotationSpan(SpanKind.TAG_CONTENT, style, content)

    def apply(self, segments: List[Segment], style: SpanStyle) -> List[Segment]:
        segments = super().apply(segments, style)
        if not any(isinstance(segment, AnnotationSpan) for segment in segments):
            return segments
        return self._enclose_spans(segments, style)

    def _enclose_spans(self, segments: List[Segment], style: SpanStyle) -> List[Segment]:
        # Scan the whole message with every span as a single stand-in
        # character; only matches that swallow a stand-in are new.
        starts: List[int] = []
        span_offsets: List[int] = []
        parts: List[str] = []
        offset = 0
        for segment in segments:
            starts.append(offset)
            if isinstance(segment, TextRun):
                parts.append(segment.text)
                offset += len(segment.text)
            else:
                parts.append(_NEIGHBOUR)
                span_offsets.append(offset)
                offset += 1
        scan = "".join(parts)

        rewritten: List[Segment] = []
        cursor = 0
        for match in self.pattern.finditer(scan):
            if not any(match.start() < pos < match.end() for pos in span_offsets):
                continue
            rewritten.extend(_slice_segments(segments, starts, cursor, match.start()))
            children = _trim_edges(_slice_segments(segments, starts, match.start(2), match.end(2)))
            rewritten.append(AnnotationSpan(
                SpanKind.TAG_CONTENT, style, segments_text(children), tuple(children),
            ))
            cursor = match.end()
        if not rewritten:
            return segments
        rewritten.extend(_slice_segments(segments, starts, cursor, offset))
        return merge_runs(rewritten)


class BareTagRule(_TagRule):
    """``[PAUSE]`` → nothing."""

    name = "bare_tag"
    pattern = _BARE_TAG_RE

    def emit(self, match: re.Match[str], style: SpanStyle) -> Optional[AnnotationSpan]:
        return None


class ThoughtRule(MarkupRule):
    """``_I wonder_`` → Thought span ``"I wonder"``; trailing punctuation stays literal."""

    name = "thought"
    pattern = _THOUGHT_RE

    def emit(self, match: re.Match[str], style: SpanStyle) -> Optional[AnnotationSpan]:
        return AnnotationSpan(SpanKind.THOUGHT, style, '"{}"'.format(match.group(1).strip()))


class BracketFallbackRule(MarkupRule):
    """``[not a tag]`` → BracketFallback span ``[not a tag]``, brackets kept."""

    name = "bracket_fallback"
    pattern = _BRACKET_RE

    def emit(self, match: re.Match[str], style: SpanStyle) -> Optional[AnnotationSpan]:
        return AnnotationSpan(SpanKind.BRACKET_FALLBACK, style, match.group(0))


PIPELINE: Tuple[MarkupRule, ...] = (
    ActionRule(),
    TagWithContentRule(),
    BareTagRule(),
    ThoughtRule(),
    BracketFallbackRule(),
)
"""The rules in the order they run. Order is part of the behaviour."""


def run_pipeline(text: str, style: SpanStyle) -> List[Segment]:
    """Run every rule of PIPELINE over ``text`` and return the segments."""
    segments: List[Segment] = merge_runs([TextRun(text)])
    for rule in PIPELINE:
        segments = rule.apply(segments, style)
    return segments
