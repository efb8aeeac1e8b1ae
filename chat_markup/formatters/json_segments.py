"""JSON formatter exposing the annotated segments of a message.

WHY: Clients that build their own widgets (native apps, terminal UIs)
cannot use HTML. They need the segment structure itself: which text is
literal and which is an action, thought, tag content or bracket cue,
together with the speaker style.

HOW: The fragment is converted to a plain dict by fragment_to_dict(),
validated against fragment_schema.json with jsonschema, and serialized.

RULES:
- Top level: {"is_user_speaker": bool, "segments": [...]}
- Text segment: {"type": "text", "text": str}
- Span segment: {"type": "span", "kind": str, "style": str, "content": str}
  plus "children": [segment, ...] when a tag enclosed other spans
- Schema validation is mandatory; raises on invalid output
- Output media type: "application/json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from chat_markup.core.ir import AnnotatedFragment, Segment, TextRun
from chat_markup.formatters.base import BaseFormatter

_SCHEMA_PATH = Path(__file__).resolve().parent / "fragment_schema.json"


def _load_schema() -> Dict[str, Any]:
    """Load the fragment JSON schema from disk.

    Cached at module level after first call to avoid repeated I/O.
    """
    with open(_SCHEMA_PATH, encoding="utf-8") as f:
        return json.load(f)


_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def get_schema() -> Dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        _CACHED_SCHEMA = _load_schema()
    return _CACHED_SCHEMA


def _segment_to_dict(segment: Segment) -> Dict[str, Any]:
    if isinstance(segment, TextRun):
        return {"type": "text", "text": segment.text}
    item: Dict[str, Any] = {
        "type": "span",
        "kind": segment.kind.value,
        "style": segment.style.value,
        "content": segment.content,
    }
    if segment.children:
        item["children"] = [_segment_to_dict(child) for child in segment.children]
    return item


def fragment_to_dict(fragment: AnnotatedFragment) -> Dict[str, Any]:
    """Convert a fragment into the JSON-ready structure described above."""
    return {
        "is_user_speaker": fragment.is_user_speaker,
        "segments": [_segment_to_dict(segment) for segment in fragment.segments],
    }


class JsonSegmentsFormatter(BaseFormatter):
    """Formatter that serializes the segment list as validated JSON."""

    @property
    def name(self) -> str:
        return "JSON segments"

    @property
    def media_type(self) -> str:
        return "application/json"

    def format(self, fragment: AnnotatedFragment) -> str:
        """Serialize the fragment.

        Raises:
            jsonschema.ValidationError: If the generated document does not
                conform to fragment_schema.json.
        """
        output = fragment_to_dict(fragment)
        jsonschema.validate(instance=output, schema=get_schema())
        return json.dumps(output, ensure_ascii=False)
