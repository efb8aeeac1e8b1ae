"""Chat Markup — inline markup renderer for character chat transcripts.

WHY: Messages exchanged with an AI character carry a small inline
convention: *actions*, _inner thoughts_, [TAG: content] meta-tags. The
chat view must show them as styled spans without ever failing on
whatever text the model produces.

HOW: Three-stage pipeline — annotate (ordered rule pipeline into an
IR), format (pluggable formatters: HTML, plain text, JSON), surface
(CLI and HTTP API). Each stage is independently testable.

RULES:
- All formatters consume the same AnnotatedFragment IR
- Adding a new output format = one new formatter module, no core changes
- transform() is total: no input string makes it raise
"""

from chat_markup.core.ir import AnnotatedFragment, DisplayMarkup, RawMessage
from chat_markup.core.transformer import annotate, transform

__version__ = "0.1.0"

__all__ = [
    "AnnotatedFragment",
    "DisplayMarkup",
    "RawMessage",
    "annotate",
    "transform",
]
