"""Shared test fixtures for the chat_markup test suite.

WHY: Several test modules need the same sample chat messages and a
clean configuration environment. Centralizing them here avoids
duplication and keeps every module on the same reference data.

HOW: Pytest fixtures provide a short sample transcript (as RawMessages
and as a JSON file on disk) and scrub CHAT_MARKUP_* variables so a
developer's .env never changes test results.

RULES:
- SAMPLE_TRANSCRIPT alternates user and character messages
- Every test runs with the built-in render defaults unless it sets
  CHAT_MARKUP_* variables itself via monkeypatch
"""

import json
from typing import Any, Dict, List

import pytest

from chat_markup.core.ir import RawMessage


SAMPLE_TRANSCRIPT: List[Dict[str, Any]] = [
    {"text": "*waves* Hi there!", "is_user": True},
    {"text": "*smiles warmly* Hello! [SEES: a red car] _Who is this?_", "is_user": False},
    {"text": "[PAUSE] Nice car, right?", "is_user": True},
    {"text": "[not a tag] It is.", "isUser": False},
]

_CONFIG_VARS = (
    "CHAT_MARKUP_USER_CLASS",
    "CHAT_MARKUP_OTHER_CLASS",
    "CHAT_MARKUP_FALLBACK_CLASS",
    "CHAT_MARKUP_ESCAPE_HTML",
    "CHAT_MARKUP_API_HOST",
    "CHAT_MARKUP_API_PORT",
)


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch):
    """Remove CHAT_MARKUP_* overrides picked up from the shell or .env."""
    for name in _CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_messages():
    """SAMPLE_TRANSCRIPT as RawMessage objects."""
    return [
        RawMessage(
            text=item["text"],
            is_user_speaker=item.get("is_user", item.get("isUser", False)),
        )
        for item in SAMPLE_TRANSCRIPT
    ]


@pytest.fixture
def transcript_file(tmp_path):
    """SAMPLE_TRANSCRIPT written to a JSON file."""
    path = tmp_path / "transcript.json"
    path.write_text(json.dumps(SAMPLE_TRANSCRIPT), encoding="utf-8")
    return path
