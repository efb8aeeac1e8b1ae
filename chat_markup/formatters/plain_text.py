"""Plain text formatter: the message as a reader sees it, without markup.

WHY: Notifications, search indexes, logs and text-to-speech need the
visible words of a message, not its markup. Stripping the delimiters
with the same rule pipeline keeps those surfaces consistent with what
the chat view shows.

RULES:
- Literal text copied verbatim
- Span content copied verbatim (thought quotes and fallback brackets
  stay, dropped tags stay dropped)
- Output media type: "text/plain"
"""

from __future__ import annotations

from chat_markup.core.ir import AnnotatedFragment
from chat_markup.formatters.base import BaseFormatter


class PlainTextFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "Plain Text"

    @property
    def media_type(self) -> str:
        return "text/plain"

    def format(self, fragment: AnnotatedFragment) -> str:
        return fragment.display_text
