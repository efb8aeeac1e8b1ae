"""Intermediate representation dataclasses for annotated chat messages.

WHY: Chat messages arrive as raw text with an inline markup convention
(``*actions*``, ``_thoughts_``, ``[TAG: content]``). Rewriting one mutable
string rule after rule lets later rules match inside markup emitted by
earlier ones. The IR keeps literal text and emitted spans apart so every
rule only ever scans literal text, and all formatters consume the same
well-typed structure.

HOW: Six small types:
  SpanKind          — which rule produced a span
  SpanStyle         — user vs. other-speaker visual treatment
  TextRun           — literal text, rendered verbatim
  AnnotationSpan    — one emitted span (kind, style, trimmed content)
  AnnotatedFragment — the ordered segment sequence for one message
  RawMessage / DisplayMarkup — the engine's input and public output

RULES:
- Span style is derived from is_user_speaker only, never from content
- Span content is already trimmed (thought content includes its quotes,
  bracket-fallback content includes its brackets)
- Only TagContent spans have children: a tag that encloses earlier
  spans keeps them, and those children never have children themselves
- Every object is created per call; nothing here is shared or mutated
  after the pipeline returns it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Tuple, Union


class SpanKind(str, Enum):
    """The rule that emitted an annotation span."""

    ACTION = "action"
    THOUGHT = "thought"
    TAG_CONTENT = "tag_content"
    BRACKET_FALLBACK = "bracket_fallback"


class SpanStyle(str, Enum):
    """Visual treatment selector attached to every span.

    RULES:
    - USER when the message was written by the user, OTHER otherwise
    - Formatters decide which kinds actually show the style (the HTML
      formatter only puts it on actions and thoughts)
    """

    USER = "user"
    OTHER = "other"

    @classmethod
    def for_speaker(cls, is_user_speaker: bool) -> "SpanStyle":
        return cls.USER if is_user_speaker else cls.OTHER


@dataclass(frozen=True)
class TextRun:
    """Literal message text that no rule has claimed."""

    text: str


@dataclass(frozen=True)
class AnnotationSpan:
    """A span emitted by one of the markup rules.

    Attributes:
        kind: Which rule produced the span.
        style: Speaker style, derived from the message's speaker flag.
        content: Display text, delimiters removed and whitespace trimmed.
        children: Segments enclosed by the span. Only set on TagContent
            spans whose tag wrapped an earlier span, e.g.
            ``[NARRATION: *nods* slowly]``; content is then their
            display text.
    """

    kind: SpanKind
    style: SpanStyle
    content: str
    children: Tuple["Segment", ...] = ()


Segment = Union[TextRun, AnnotationSpan]


def segments_text(segments: Iterable[Segment]) -> str:
    """Literal runs plus span content, joined without markup."""
    parts: List[str] = []
    for segment in segments:
        if isinstance(segment, TextRun):
            parts.append(segment.text)
        else:
            parts.append(segment.content)
    return "".join(parts)


@dataclass(frozen=True)
class RawMessage:
    """One chat message as handed to the engine."""

    text: str
    is_user_speaker: bool = False


@dataclass
class AnnotatedFragment:
    """The annotated form of one message.

    WHY: Formatters (HTML, plain text, JSON) need the same ordered view of
    literal text and spans; only the presentation differs.

    RULES:
    - segments are in source order
    - adjacent TextRuns are merged by the pipeline, so two TextRuns are
      never neighbours in a finished fragment
    - empty TextRuns are never emitted
    """

    segments: List[Segment] = field(default_factory=list)
    is_user_speaker: bool = False

    @property
    def spans(self) -> List[AnnotationSpan]:
        return [s for s in self.segments if isinstance(s, AnnotationSpan)]

    @property
    def display_text(self) -> str:
        """Human-readable text: literal runs plus span content, no markup."""
        return segments_text(self.segments)


@dataclass(frozen=True)
class DisplayMarkup:
    """Return value of :func:`chat_markup.core.transformer.transform`."""

    display_markup: str
