"""Tests for the command-line interface.

WHY: The CLI is how writers preview messages and how exported
transcripts are rendered in bulk. It must print clean results on stdout,
keep status on stderr, and exit non-zero with a readable message on bad
input instead of a traceback.

HOW: main() is called with explicit argv lists; capsys captures output,
monkeypatch replaces stdin, tmp_path holds transcript and output files.
"""

import io
import json

import pytest

from chat_markup.cli import build_parser, load_transcript, main


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.text is None
        assert args.user is False
        assert args.transcript is None
        assert args.format == "html"
        assert args.escape_html is None

    def test_flags(self):
        args = build_parser().parse_args(
            ["hi", "--user", "--format", "json", "--no-escape-html", "--output", "out.txt"]
        )
        assert args.text == "hi"
        assert args.user is True
        assert args.format == "json"
        assert args.escape_html is False
        assert args.output == "out.txt"


class TestSingleMessage:

    def test_text_argument(self, capsys):
        main(["*waves* hi"])
        assert capsys.readouterr().out == '<em class="ai-action">waves</em> hi\n'

    def test_user_flag(self, capsys):
        main(["*waves*", "--user"])
        assert capsys.readouterr().out == '<em class="user-action">waves</em>\n'

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("_hm_.\n"))
        main([])
        assert capsys.readouterr().out == '<em class="ai-action">"hm"</em>.\n'

    def test_plain_text_format(self, capsys):
        main(["*waves* [SEES: a dog]", "--format", "plain_text"])
        assert capsys.readouterr().out == "waves a dog\n"

    def test_json_format(self, capsys):
        main(["[PAUSE]ok", "--format", "json"])
        data = json.loads(capsys.readouterr().out)
        assert data == {"is_user_speaker": False, "segments": [{"type": "text", "text": "ok"}]}

    def test_escape_flag(self, capsys):
        main(["<i> *a*", "--escape-html"])
        assert capsys.readouterr().out == '&lt;i&gt; <em class="ai-action">a</em>\n'

    def test_escape_from_env(self, capsys, monkeypatch):
        monkeypatch.setenv("CHAT_MARKUP_ESCAPE_HTML", "true")
        main(["<i>"])
        assert capsys.readouterr().out == "&lt;i&gt;\n"


class TestTranscript:

    def test_load_transcript(self, transcript_file):
        messages = load_transcript(transcript_file)
        assert [m.is_user_speaker for m in messages] == [True, False, True, False]
        assert messages[0].text == "*waves* Hi there!"

    def test_renders_one_line_per_message(self, capsys, transcript_file):
        main(["--transcript", str(transcript_file)])
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            '<em class="user-action">waves</em> Hi there!',
            '<em class="ai-action">smiles warmly</em> Hello! <em>a red car</em> '
            '<em class="ai-action">"Who is this?"</em>',
            " Nice car, right?",
            '<span class="action">[not a tag]</span> It is.',
        ]

    def test_json_array(self, capsys, transcript_file):
        main(["--transcript", str(transcript_file), "--format", "json"])
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 4
        assert data[0]["is_user_speaker"] is True
        assert data[2]["segments"] == [{"type": "text", "text": " Nice car, right?"}]

    def test_output_file(self, capsys, tmp_path, transcript_file):
        out_path = tmp_path / "out.html"
        main(["--transcript", str(transcript_file), "--output", str(out_path)])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Rendered 4 message(s)" in captured.err
        assert out_path.read_text(encoding="utf-8").count("\n") == 4


class TestErrors:

    def test_invalid_transcript_shape(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"text": 1}]), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["--transcript", str(path)])
        assert exc_info.value.code == 1
        assert "Error: invalid transcript" in capsys.readouterr().err

    def test_not_json(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("not json", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["--transcript", str(path)])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_missing_file(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["--transcript", str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_unknown_format(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["hi", "--format", "pdf"])
        assert exc_info.value.code == 1
        assert "Unknown format 'pdf'" in capsys.readouterr().err

    def test_invalid_class_env(self, capsys, monkeypatch):
        monkeypatch.setenv("CHAT_MARKUP_USER_CLASS", "not valid")
        with pytest.raises(SystemExit) as exc_info:
            main(["hi"])
        assert exc_info.value.code == 1
        assert "CHAT_MARKUP_USER_CLASS" in capsys.readouterr().err
