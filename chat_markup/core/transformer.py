"""Public entry points of the markup engine: annotate() and transform().

WHY: The chat view calls the engine once per message at render time
with nothing but the raw text and whether the user wrote it. It needs a
total function: any string in, safe display markup out, never an
exception, whatever the model happened to generate.

HOW: annotate() runs the rule pipeline and wraps the segments in an
AnnotatedFragment. transform() formats that fragment with the HTML
formatter and returns the display markup. Neither reads configuration
or touches shared state; a RenderStyle can be passed in explicitly.

RULES:
- transform(text, is_user_speaker) -> DisplayMarkup(display_markup=...)
- Never raises for str input (empty, whitespace-only, unbalanced markup)
- Text without *, _, [ or ] comes back unchanged
- The speaker flag only selects the span style; boundaries and content
  are identical for both speakers
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from chat_markup.config import RenderStyle
from chat_markup.core.ir import AnnotatedFragment, DisplayMarkup, RawMessage, SpanStyle
from chat_markup.core.rules import run_pipeline
from chat_markup.formatters.html import HtmlFormatter

logger = logging.getLogger(__name__)


def annotate(text: str, is_user_speaker: bool = False) -> AnnotatedFragment:
    """Run the markup rules over ``text`` and return the annotated fragment.

    Args:
        text: Raw message text, possibly empty, possibly without markup.
        is_user_speaker: True when the user wrote the message.

    Returns:
        A fresh AnnotatedFragment; nothing is cached or shared.
    """
    segments = run_pipeline(text, SpanStyle.for_speaker(is_user_speaker))
    fragment = AnnotatedFragment(segments=segments, is_user_speaker=is_user_speaker)
    logger.debug(
        "Annotated %d chars into %d segments (%d spans)",
        len(text), len(fragment.segments), len(fragment.spans),
    )
    return fragment


def transform(
    text: str,
    is_user_speaker: bool = False,
    style: Optional[RenderStyle] = None,
) -> DisplayMarkup:
    """Turn raw message text into display markup for the chat view.

    Args:
        text: Raw message text.
        is_user_speaker: Selects the user or the other-speaker span class.
        style: Class names and escaping; defaults to RenderStyle().

    Returns:
        DisplayMarkup holding the HTML string to insert.
    """
    fragment = annotate(text, is_user_speaker)
    return DisplayMarkup(display_markup=HtmlFormatter(style).format(fragment))


def transform_message(message: RawMessage, style: Optional[RenderStyle] = None) -> DisplayMarkup:
    return transform(message.text, message.is_user_speaker, style)


def transform_all(
    messages: Iterable[RawMessage],
    style: Optional[RenderStyle] = None,
) -> List[DisplayMarkup]:
    """Render a sequence of messages in order, each independently."""
    return [transform_message(message, style) for message in messages]
