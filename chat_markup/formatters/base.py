"""Abstract base formatter.

WHY: Every output format consumes the same AnnotatedFragment IR but
presents it differently (HTML display markup, plain text, JSON). This
base class gives the transformer, CLI and API one interface to work with
any formatter generically.

HOW: BaseFormatter is an ABC with three requirements: a ``name``
property, a ``media_type`` property and a ``format()`` method. The
render style is injected through the constructor.

RULES:
- Subclasses MUST implement ``name``, ``media_type`` and ``format()``
- ``format()`` returns one string per message
- Formatters never change the fragment they are given
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from chat_markup.config import RenderStyle
from chat_markup.core.ir import AnnotatedFragment


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement name, media_type and format()
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    def __init__(self, style: Optional[RenderStyle] = None) -> None:
        self.style = style if style is not None else RenderStyle()

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'HTML display markup'."""

    @property
    @abstractmethod
    def media_type(self) -> str:
        """MIME type of the formatted output, e.g. 'text/html'."""

    @abstractmethod
    def format(self, fragment: AnnotatedFragment) -> str:
        """Convert one annotated message into its output string.

        Args:
            fragment: The annotated message produced by the rule pipeline.

        Returns:
            The formatted message.
        """
