"""FastAPI application exposing the markup renderer over HTTP.

WHY: Chat front ends that are not written in Python (web views, mobile
clients, bots) need the same rendering rules as the Python side. A small
stateless HTTP API lets them send raw message text and get display
markup back, with OpenAPI docs for client generation.

HOW: A FastAPI app with four endpoints. POST /render and POST
/render/batch run annotate() and the requested formatter; GET /formats
lists the formatter registry; GET /health answers liveness probes. The
render style comes from the environment once and is reused.

RULES:
- All endpoints have OpenAPI descriptions on every response
- Error responses use a consistent ErrorResponse schema
- Unknown format keys → 400; malformed bodies → 422 (FastAPI validation)
- Invalid CHAT_MARKUP_* class settings → 500 ErrorResponse naming the
  variable; run_api() refuses to start with them
- No message is stored; every request is independent
"""

from __future__ import annotations

import functools
import logging
import sys
from typing import List

from fastapi import FastAPI, HTTPException

from chat_markup import __version__
from chat_markup.config import RenderStyle, load_api_address, load_render_style
from chat_markup.core.transformer import annotate
from chat_markup.formatters import FORMATTERS
from chat_markup.formatters.base import BaseFormatter
from chat_markup.formatters.json_segments import fragment_to_dict
from chat_markup.server.models import (
    BatchRenderRequest,
    BatchRenderResponse,
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    RenderRequest,
    RenderResponse,
    SegmentOut,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Chat Markup API",
    description=(
        "Renders chat message markup (*actions*, _inner thoughts_, "
        "[TAG: content] meta-tags) into HTML display markup, plain text "
        "or JSON segments."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=1)
def get_render_style() -> RenderStyle:
    """Render style from the environment, loaded on first use."""
    return load_render_style()


def _get_formatter(key: str) -> BaseFormatter:
    """Instantiate the formatter for ``key``; 400 for unknown keys, 500 for a bad style."""
    formatter_cls = FORMATTERS.get(key)
    if formatter_cls is None:
        raise HTTPException(
            status_code=400,
            detail="Unknown format '{}'. Available formats: {}".format(
                key, ", ".join(sorted(FORMATTERS))
            ),
        )
    try:
        style = get_render_style()
    except ValueError as exc:
        logger.error("Render style configuration is invalid: %s", exc)
        raise HTTPException(status_code=500, detail="Server misconfigured: {}".format(exc))
    return formatter_cls(style)


def _render(text: str, is_user_speaker: bool, key: str, formatter: BaseFormatter) -> RenderResponse:
    fragment = annotate(text, is_user_speaker)
    segments = [SegmentOut(**item) for item in fragment_to_dict(fragment)["segments"]]
    return RenderResponse(
        display_markup=formatter.format(fragment),
        format=key,
        segments=segments,
    )


# ---------------------------------------------------------------------------
# Endpoints: Rendering
# ---------------------------------------------------------------------------


@app.post(
    "/render",
    response_model=RenderResponse,
    tags=["render"],
    summary="Render one message",
    description=(
        "Runs the markup rules over the message text and returns the "
        "formatted result together with the annotated segments."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unknown output format."},
        500: {"model": ErrorResponse, "description": "Invalid CHAT_MARKUP_* render style settings."},
    },
)
async def render_message(request: RenderRequest) -> RenderResponse:
    formatter = _get_formatter(request.format)
    return _render(request.text, request.is_user_speaker, request.format, formatter)


@app.post(
    "/render/batch",
    response_model=BatchRenderResponse,
    tags=["render"],
    summary="Render several messages",
    description="Renders every message independently, preserving order.",
    responses={
        400: {"model": ErrorResponse, "description": "Unknown output format."},
        500: {"model": ErrorResponse, "description": "Invalid CHAT_MARKUP_* render style settings."},
    },
)
async def render_batch(request: BatchRenderRequest) -> BatchRenderResponse:
    formatter = _get_formatter(request.format)
    results = [
        _render(message.text, message.is_user_speaker, request.format, formatter)
        for message in request.messages
    ]
    logger.info("Rendered batch of %d message(s) as %s", len(results), request.format)
    return BatchRenderResponse(results=results)


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available output formats",
    description="Returns every registered output format with its name and MIME type.",
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            media_type=formatter.media_type,
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the chat-markup-api console script.

    The bind address and the render style are checked before uvicorn is
    imported, so a bad CHAT_MARKUP_* value stops the server with a
    readable message instead of failing on the first request.
    """
    try:
        host, port = load_api_address()
        get_render_style()
    except ValueError as exc:
        print("Error: {}".format(exc), file=sys.stderr)
        sys.exit(1)

    import uvicorn
    logger.info("Starting chat markup API on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
