"""Unit tests for the individual markup rules and the pipeline order.

WHY: The rules interact through the segment list they pass along. A rule
that scans an emitted span, forgets to merge text runs after a deletion,
or runs out of order changes what the reader sees in ways that are hard
to spot from the final HTML alone.

HOW: Rules are applied directly to hand-built segment lists so each
rule's contract (what it claims, what it leaves alone) is checked in
isolation, then the PIPELINE order is pinned down.

RULES:
- Segments are compared structurally (TextRun / AnnotationSpan equality)
"""

from chat_markup.core.ir import AnnotatedFragment, AnnotationSpan, SpanKind, SpanStyle, TextRun
from chat_markup.core.rules import (
    PIPELINE,
    ActionRule,
    BareTagRule,
    BracketFallbackRule,
    TagWithContentRule,
    ThoughtRule,
    merge_runs,
    run_pipeline,
)

OTHER = SpanStyle.OTHER
USER = SpanStyle.USER


def _action(content, style=OTHER):
    return AnnotationSpan(SpanKind.ACTION, style, content)


class TestMergeRuns:
    """merge_runs() joins neighbouring text and drops empty runs."""

    def test_joins_adjacent_runs(self):
        assert merge_runs([TextRun("a"), TextRun("b")]) == [TextRun("ab")]

    def test_drops_empty_runs(self):
        assert merge_runs([TextRun(""), _action("x"), TextRun("")]) == [_action("x")]

    def test_keeps_spans_between_runs(self):
        segments = [TextRun("a"), _action("x"), TextRun("b")]
        assert merge_runs(segments) == segments


class TestActionRule:
    """ActionRule claims *text* and **text** in literal runs only."""

    def test_splits_run(self):
        result = ActionRule().apply([TextRun("*a* b")], OTHER)
        assert result == [_action("a"), TextRun(" b")]

    def test_uses_given_style(self):
        result = ActionRule().apply([TextRun("*a*")], USER)
        assert result == [_action("a", USER)]

    def test_run_after_span_is_not_message_start(self):
        segments = [_action("x"), TextRun("*a*")]
        assert ActionRule().apply(segments, OTHER) == segments

    def test_run_before_span_is_not_message_end(self):
        # The neighbouring span is not a colon, so the action still matches
        segments = [TextRun("*a*"), _action("x")]
        assert ActionRule().apply(segments, OTHER) == [_action("a"), _action("x")]

    def test_existing_spans_untouched(self):
        span = AnnotationSpan(SpanKind.THOUGHT, OTHER, '"*a*"')
        assert ActionRule().apply([span], OTHER) == [span]


class TestTagRules:
    """The tag rules delete or convert tags and clean action content."""

    def test_tag_with_content_span(self):
        result = TagWithContentRule().apply([TextRun("x [SEES: dog] y")], OTHER)
        assert result == [
            TextRun("x "),
            AnnotationSpan(SpanKind.TAG_CONTENT, OTHER, "dog"),
            TextRun(" y"),
        ]

    def test_empty_tag_removed_and_runs_merged(self):
        result = TagWithContentRule().apply([TextRun("x [HEARS:   ] y")], OTHER)
        assert result == [TextRun("x  y")]

    def test_bare_tag_removed(self):
        assert BareTagRule().apply([TextRun("[PAUSE]")], OTHER) == []

    def test_lowercase_not_a_tag(self):
        segments = [TextRun("[pause]")]
        assert BareTagRule().apply(segments, OTHER) == segments
        assert TagWithContentRule().apply(segments, OTHER) == segments

    def test_strips_tags_inside_action(self):
        result = BareTagRule().apply([_action("look [PAUSE] here")], OTHER)
        assert result == [_action("look  here")]

    def test_tag_content_kept_inside_action(self):
        result = TagWithContentRule().apply([_action("[SEES: car]")], OTHER)
        assert result == [_action("car")]

    def test_other_span_kinds_untouched(self):
        span = AnnotationSpan(SpanKind.THOUGHT, OTHER, '"[PAUSE]"')
        assert BareTagRule().apply([span], OTHER) == [span]

    def test_tag_enclosing_span_becomes_parent(self):
        segments = [TextRun("[NARRATION: "), _action("nods"), TextRun(" slowly] ok")]
        result = TagWithContentRule().apply(segments, OTHER)
        assert result == [
            AnnotationSpan(
                SpanKind.TAG_CONTENT, OTHER, "nods slowly",
                (_action("nods"), TextRun(" slowly")),
            ),
            TextRun(" ok"),
        ]

    def test_enclosing_tag_keeps_text_before(self):
        segments = [TextRun("so [SEES: "), _action("a"), TextRun("]")]
        result = TagWithContentRule().apply(segments, USER)
        assert result == [
            TextRun("so "),
            AnnotationSpan(SpanKind.TAG_CONTENT, USER, "a", (_action("a"),)),
        ]

    def test_brackets_around_span_without_tag_untouched(self):
        segments = [TextRun("[aside "), _action("a"), TextRun(" here]")]
        assert TagWithContentRule().apply(segments, OTHER) == segments

    def test_bare_tag_stripped_inside_enclosed_action(self):
        span = AnnotationSpan(
            SpanKind.TAG_CONTENT, OTHER, "hi [PAUSE] now",
            (_action("hi [PAUSE]"), TextRun(" now")),
        )
        assert BareTagRule().apply([span], OTHER) == [
            AnnotationSpan(SpanKind.TAG_CONTENT, OTHER, "hi now", (_action("hi"), TextRun(" now"))),
        ]


class TestThoughtRule:

    def test_quotes_content(self):
        result = ThoughtRule().apply([TextRun("_why_?")], USER)
        assert result == [AnnotationSpan(SpanKind.THOUGHT, USER, '"why"'), TextRun("?")]

    def test_run_before_span_is_not_message_end(self):
        segments = [TextRun("_a_"), _action("x")]
        assert ThoughtRule().apply(segments, OTHER) == segments


class TestBracketFallbackRule:

    def test_keeps_brackets(self):
        result = BracketFallbackRule().apply([TextRun("a [b] c")], OTHER)
        assert result == [
            TextRun("a "),
            AnnotationSpan(SpanKind.BRACKET_FALLBACK, OTHER, "[b]"),
            TextRun(" c"),
        ]


class TestPipeline:
    """PIPELINE order and run_pipeline() results."""

    def test_order(self):
        assert [rule.name for rule in PIPELINE] == [
            "action",
            "tag_with_content",
            "bare_tag",
            "thought",
            "bracket_fallback",
        ]

    def test_empty_text(self):
        assert run_pipeline("", OTHER) == []

    def test_no_adjacent_text_runs(self):
        segments = run_pipeline("a [PAUSE] b [X] c [SEES: ] d", OTHER)
        assert segments == [TextRun("a  b  c  d")]

    def test_fragment_spans_helper(self):
        segments = run_pipeline("*a* _b_ [c]", OTHER)
        fragment = AnnotatedFragment(segments=segments)
        assert [s.kind for s in fragment.spans] == [
            SpanKind.ACTION,
            SpanKind.THOUGHT,
            SpanKind.BRACKET_FALLBACK,
        ]
