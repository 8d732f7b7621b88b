from __future__ import annotations

from segmentation.models import LENGTH_BLANK, LENGTH_LONG, LENGTH_MEDIUM, LENGTH_SHORT
from segmentation.steps.a_line_classification import LineClassifier


def _classify(text: str):
    return LineClassifier().process(text)


def test_one_record_per_line_with_features() -> None:
    lines = _classify("Alice [9:00 AM]\n\nHello")

    assert [line.index for line in lines] == [0, 1, 2]
    header = lines[0]
    assert header.features.has_timestamp
    assert header.features.starts_capital
    assert header.features.has_digits
    assert header.length_class == LENGTH_SHORT
    assert lines[1].is_blank
    assert lines[1].length_class == LENGTH_BLANK


def test_neighbour_context() -> None:
    lines = _classify("Alice [9:00 AM]\n\nHello")

    assert lines[0].context.prev_line is None
    assert lines[0].context.blank_after
    assert lines[2].context.blank_before
    assert lines[2].context.prev_line == ""
    assert lines[2].context.next_line is None


def test_length_classes() -> None:
    lines = _classify("x" * 30 + "\n" + "y" * 101)
    assert lines[0].length_class == LENGTH_MEDIUM
    assert lines[1].length_class == LENGTH_LONG
    assert lines[1].is_long


def test_urls_avatars_and_reactions() -> None:
    lines = _classify(
        "![](https://ca.slack-edge.com/T0-U1-abc-48)\n"
        "see https://example.com\n"
        ":+1: 3"
    )
    assert lines[0].features.has_avatar
    assert lines[1].features.has_url
    assert not lines[1].features.has_avatar
    assert lines[2].features.has_reaction
    assert lines[2].features.has_emoji


def test_all_caps_needs_letters() -> None:
    lines = _classify("URGENT\n1234\nAbc")
    assert lines[0].features.is_all_caps
    assert not lines[1].features.is_all_caps
    assert not lines[2].features.is_all_caps


def test_raw_text_is_preserved() -> None:
    lines = _classify("  indented line  \r\nnext")
    assert lines[0].raw == "  indented line  "
    assert lines[0].trimmed == "indented line"
    assert lines[1].trimmed == "next"
