"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. Enums
are avoided for format names: the formatter registry is the single
source of truth and unknown keys are rejected by the endpoint. All
models include Field descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- format fields hold keys of chat_markup.formatters.FORMATTERS
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RenderRequest(BaseModel):
    """One message to render.

    RULES:
    - text may be empty; it is never rejected for its content
    - is_user_speaker defaults to False (the character is speaking)
    - format defaults to html
    """

    text: str = Field(description="Raw message text, markup included.")
    is_user_speaker: bool = Field(
        default=False,
        description="True when the user wrote the message; selects the user span style.",
    )
    format: str = Field(
        default="html",
        description="Output format key for display_markup (see GET /formats).",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {"text": "*waves* Hello! [SEES: a red car]", "is_user_speaker": False, "format": "html"}
        ]
    }}


class MessageIn(BaseModel):
    """A message inside a batch request."""

    text: str = Field(description="Raw message text, markup included.")
    is_user_speaker: bool = Field(default=False, description="True when the user wrote the message.")


class BatchRenderRequest(BaseModel):
    """Several messages rendered with the same format, in order."""

    messages: List[MessageIn] = Field(description="Messages in display order.")
    format: str = Field(default="html", description="Output format for every message.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SegmentOut(BaseModel):
    """One literal text run or annotation span.

    RULES:
    - type is "text" (text is set) or "span" (kind, style, content are set)
    - children is only set on tag_content spans that enclose other spans
    """

    type: str = Field(description="'text' for literal text, 'span' for an annotation span.")
    text: Optional[str] = Field(default=None, description="Literal text, for type 'text'.")
    kind: Optional[str] = Field(
        default=None,
        description="Span kind: action, thought, tag_content or bracket_fallback.",
    )
    style: Optional[str] = Field(default=None, description="Span style: user or other.")
    content: Optional[str] = Field(default=None, description="Span display content, trimmed.")
    children: Optional[List[SegmentOut]] = Field(
        default=None,
        description="Segments enclosed by a tag, e.g. the action in '[NARRATION: *nods* slowly]'.",
    )


SegmentOut.model_rebuild()


class RenderResponse(BaseModel):
    """Rendered message plus its segment structure."""

    display_markup: str = Field(description="The message in the requested output format.")
    format: str = Field(description="Format of display_markup.")
    segments: List[SegmentOut] = Field(description="Annotated segments in source order.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "display_markup": '<em class="ai-action">waves</em> Hello!',
                "format": "html",
                "segments": [
                    {"type": "span", "kind": "action", "style": "other", "content": "waves"},
                    {"type": "text", "text": " Hello!"},
                ],
            }
        ]
    }}


class BatchRenderResponse(BaseModel):
    results: List[RenderResponse] = Field(description="One result per request message, same order.")


class FormatInfo(BaseModel):
    """Description of an available output format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    media_type: str = Field(description="MIME type of the formatted output.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
