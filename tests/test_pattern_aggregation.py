from __future__ import annotations

import pytest

from segmentation.models import FORMAT_MIXED, FORMAT_TAGGED
from segmentation.steps.a_line_classification import LineClassifier
from segmentation.steps.b_pattern_aggregation import PatternAggregator

CONVERSATION = (
    "Alice [9:00 AM]\n"
    "Hello\n"
    "\n"
    "Bob [9:05 AM]\n"
    "Hi Alice\n"
    "\n"
    "Alice [9:10 AM]\n"
    "See you"
)


def _profile(text: str):
    lines = LineClassifier().process(text)
    return PatternAggregator().process(lines)


def test_profile_of_a_tagged_conversation() -> None:
    profile = _profile(CONVERSATION)

    assert profile.start_candidates == frozenset({0, 3, 6})
    assert profile.timestamp_lines == frozenset({0, 3, 6})
    assert {0, 3, 6} <= profile.username_lines
    assert profile.metadata_lines == frozenset()
    assert profile.continuation_lines == frozenset()
    assert profile.average_message_length == 2
    assert profile.recurring_usernames == ("Alice",)
    assert profile.timestamp_formats == ("[#:# XM]",)
    assert profile.format == FORMAT_TAGGED
    assert profile.confidence == pytest.approx(1.0)


def test_continuation_markers_are_collected() -> None:
    profile = _profile("Alice [9:00 AM]\n\nHello\n\n[9:01]\n\nworld")

    assert profile.continuation_lines == frozenset({4})
    assert profile.start_candidates == frozenset({0})
    assert 4 in profile.timestamp_lines


def test_metadata_lines_are_collected() -> None:
    profile = _profile("Alice [9:00 AM]\nShipping it\n:tada: 3\n2 replies")
    assert profile.metadata_lines == frozenset({2, 3})


def test_document_without_timestamps_is_mixed() -> None:
    profile = _profile("just some words\nand some more words")

    assert profile.timestamp_formats == ()
    assert profile.format == FORMAT_MIXED
    assert profile.start_candidates == frozenset()
    assert profile.confidence == 0.0


def test_empty_document() -> None:
    profile = PatternAggregator().process([])

    assert profile.start_candidates == frozenset()
    assert profile.average_message_length == 0
    assert profile.confidence == 0.0


def test_confidence_stays_in_range() -> None:
    for text in [
        CONVERSATION,
        "Alice [9:00 AM]\nBob 3:00 PM\nToday at 4:15 PM\nDec 11, 2024\nCarol [10:00]",
        "PDF\n\nGitHub\n\n---",
    ]:
        assert 0.0 <= _profile(text).confidence <= 1.0


def test_profile_serializes_to_sorted_lists() -> None:
    data = _profile(CONVERSATION).to_dict()
    assert data["start_candidates"] == [0, 3, 6]
    assert data["format"] == FORMAT_TAGGED
