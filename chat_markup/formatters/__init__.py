"""Output formatter registry — pluggable format hub.

WHY: The transformer, CLI and API layers need a single lookup to find
the right formatter by name. A central dict makes it trivial to add new
formats: create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["html"](style)``.

RULES:
- Keys are snake_case identifiers (used in CLI flags, API requests, etc.)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from chat_markup.formatters.html import HtmlFormatter
from chat_markup.formatters.json_segments import JsonSegmentsFormatter
from chat_markup.formatters.plain_text import PlainTextFormatter

if TYPE_CHECKING:
    from chat_markup.formatters.base import BaseFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "html": HtmlFormatter,
    "plain_text": PlainTextFormatter,
    "json": JsonSegmentsFormatter,
}
