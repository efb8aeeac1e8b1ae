"""Command-line interface for the chat markup renderer.

WHY: Writers and integrators need to see how a message will render
without starting the chat app: paste a line, pipe a model reply, or run
a whole exported transcript through the same rules the chat view uses.

HOW: Uses argparse to accept a message as an argument, from stdin, or a
transcript JSON file of messages. Each message goes through annotate()
and the selected formatter. Results go to stdout (or --output); status
and errors go to stderr.

RULES:
- Positional argument: message text (optional; stdin is read when it is
  missing and no --transcript is given)
- --user marks the message as written by the user
- --transcript: JSON array of {"text": str, "is_user": bool} objects
  ("isUser" is accepted as well), validated with jsonschema
- --format: one of the registered formatter keys (default from config)
- Multiple messages: one rendered message per line; the json format
  prints a single JSON array instead
- Errors print "Error: ..." to stderr and exit with status 1
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from chat_markup.config import DEFAULT_FORMAT, load_render_style
from chat_markup.core.ir import RawMessage
from chat_markup.core.transformer import annotate
from chat_markup.formatters import FORMATTERS
from chat_markup.formatters.base import BaseFormatter

TRANSCRIPT_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["text"],
        "properties": {
            "text": {"type": "string"},
            "is_user": {"type": "boolean"},
            "isUser": {"type": "boolean"},
        },
    },
}
"""Shape of a transcript file: the message list the chat view renders."""


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def load_transcript(path: Path) -> List[RawMessage]:
    """Load and validate a transcript JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON.
        jsonschema.ValidationError: If the JSON is not a message list.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    jsonschema.validate(instance=data, schema=TRANSCRIPT_SCHEMA)
    return [
        RawMessage(
            text=item["text"],
            is_user_speaker=bool(item.get("is_user", item.get("isUser", False))),
        )
        for item in data
    ]


def _read_messages(args: argparse.Namespace) -> List[RawMessage]:
    if args.transcript:
        return load_transcript(Path(args.transcript))
    if args.text is not None:
        text = args.text
    else:
        text = sys.stdin.read().rstrip("\r\n")
    return [RawMessage(text=text, is_user_speaker=args.user)]


def _make_formatter(args: argparse.Namespace) -> BaseFormatter:
    if args.format not in FORMATTERS:
        raise ValueError("Unknown format '{}'. Available: {}".format(
            args.format, ", ".join(sorted(FORMATTERS)),
        ))
    style = load_render_style()
    if args.escape_html is not None:
        style = dataclasses.replace(style, escape_html=args.escape_html)
    return FORMATTERS[args.format](style)


def render_messages(messages: List[RawMessage], formatter: BaseFormatter) -> str:
    """Render every message and join the results for output.

    RULES:
    - JSON output of several messages is one JSON array
    - Any other format: one rendered message per line
    """
    rendered = [
        formatter.format(annotate(message.text, message.is_user_speaker))
        for message in messages
    ]
    if formatter.media_type == "application/json" and len(messages) != 1:
        return json.dumps([json.loads(item) for item in rendered], ensure_ascii=False)
    return "\n".join(rendered)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without rendering anything.
    """
    parser = argparse.ArgumentParser(
        prog="chat-markup",
        description="Render chat message markup (*actions*, _thoughts_, "
                    "[TAG: content]) as HTML, plain text or JSON.",
    )

    parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Message text to render. Read from stdin when omitted.",
    )

    parser.add_argument(
        "--user",
        action="store_true",
        help="The message was written by the user (selects the user style).",
    )

    parser.add_argument(
        "--transcript",
        default=None,
        help="Path to a JSON transcript: a list of {\"text\": ..., \"is_user\": ...} objects.",
    )

    parser.add_argument(
        "--format",
        default=DEFAULT_FORMAT,
        help="Output format. Available: {}. Default: %(default)s.".format(
            ", ".join(sorted(FORMATTERS.keys()))
        ),
    )

    parser.add_argument(
        "--escape-html",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Escape HTML in message text (default: CHAT_MARKUP_ESCAPE_HTML or off).",
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Write the result to this file instead of stdout.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        formatter = _make_formatter(args)
        messages = _read_messages(args)
        output = render_messages(messages, formatter)

        if args.output:
            out_path = Path(args.output)
            out_path.write_text(output + "\n", encoding="utf-8")
            _status("Rendered {} message(s) to {}".format(len(messages), out_path))
        else:
            print(output)
    except jsonschema.ValidationError as e:
        print("Error: invalid transcript: {}".format(e.message), file=sys.stderr)
        sys.exit(1)
    except (ValueError, OSError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
