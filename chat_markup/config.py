"""Configuration constants, render style settings, and .env loading.

WHY: Host applications style chat spans with their own CSS, and some of
them sanitize message text before it reaches the renderer while others
do not. Class names, the escaping switch, the default output format and
the API bind address are plain data here so they can be changed without
touching the rule pipeline.

HOW: python-dotenv loads the .env file on import. Constants are read
from the environment with defaults. RenderStyle bundles everything the
HTML formatter needs; load_render_style() builds one from the
environment and validates it.

RULES:
- The engine itself never reads configuration; only the CLI and the API
  call load_render_style() and pass the result down
- RenderStyle() with no arguments always yields the built-in defaults
  ("user-action", "ai-action", "action", no escaping)
- Invalid class names raise ValueError with a readable message
- The API port is parsed by load_api_address() when the server starts,
  never at import time
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Render style defaults
# ---------------------------------------------------------------------------

DEFAULT_USER_CLASS = "user-action"
DEFAULT_OTHER_CLASS = "ai-action"
DEFAULT_FALLBACK_CLASS = "action"

_CSS_CLASS_RE = re.compile(r"^-?[_a-zA-Z][_a-zA-Z0-9-]*$")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class RenderStyle:
    """CSS class names and escaping switch used by the HTML formatter.

    Attributes:
        user_class: Class on action/thought spans of user messages.
        other_class: Class on action/thought spans of the other speaker.
        fallback_class: Class on bracket-fallback spans.
        escape_html: Escape literal text and span content before wrapping.
    """

    user_class: str = DEFAULT_USER_CLASS
    other_class: str = DEFAULT_OTHER_CLASS
    fallback_class: str = DEFAULT_FALLBACK_CLASS
    escape_html: bool = False


def load_render_style() -> RenderStyle:
    """Build a RenderStyle from CHAT_MARKUP_* environment variables.

    RULES:
    - Unset variables fall back to the built-in defaults
    - Every class name must be a single CSS class token
    - Raises ValueError naming the offending variable otherwise
    """
    values = {
        "CHAT_MARKUP_USER_CLASS": os.getenv("CHAT_MARKUP_USER_CLASS", DEFAULT_USER_CLASS).strip(),
        "CHAT_MARKUP_OTHER_CLASS": os.getenv("CHAT_MARKUP_OTHER_CLASS", DEFAULT_OTHER_CLASS).strip(),
        "CHAT_MARKUP_FALLBACK_CLASS": os.getenv("CHAT_MARKUP_FALLBACK_CLASS", DEFAULT_FALLBACK_CLASS).strip(),
    }
    for name, value in values.items():
        if not _CSS_CLASS_RE.match(value):
            raise ValueError(
                "Invalid CSS class {!r} in {}. "
                "Use a single class name such as 'user-action'.".format(value, name)
            )
    return RenderStyle(
        user_class=values["CHAT_MARKUP_USER_CLASS"],
        other_class=values["CHAT_MARKUP_OTHER_CLASS"],
        fallback_class=values["CHAT_MARKUP_FALLBACK_CLASS"],
        escape_html=_env_flag("CHAT_MARKUP_ESCAPE_HTML", False),
    )


# ---------------------------------------------------------------------------
# Output and API defaults
# ---------------------------------------------------------------------------

DEFAULT_FORMAT = os.getenv("CHAT_MARKUP_DEFAULT_FORMAT", "html")
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 8000


def load_api_address() -> Tuple[str, int]:
    """Read the API bind address from CHAT_MARKUP_API_HOST / CHAT_MARKUP_API_PORT.

    Only the API server calls this, when it starts; importing the engine
    never parses the port.

    Raises:
        ValueError: If the port is not a number between 1 and 65535.
    """
    host = os.getenv("CHAT_MARKUP_API_HOST", "").strip() or DEFAULT_API_HOST
    raw_port = os.getenv("CHAT_MARKUP_API_PORT", "").strip() or str(DEFAULT_API_PORT)
    try:
        port = int(raw_port)
    except ValueError:
        port = 0
    if not 0 < port < 65536:
        raise ValueError(
            "Invalid port {!r} in CHAT_MARKUP_API_PORT. "
            "Use a number between 1 and 65535.".format(raw_port)
        )
    return host, port
