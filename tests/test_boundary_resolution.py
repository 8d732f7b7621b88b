from __future__ import annotations

import pytest

from segmentation.models import Segment
from segmentation.steps.a_line_classification import LineClassifier
from segmentation.steps.b_pattern_aggregation import PatternAggregator
from segmentation.steps.c_boundary_resolution import BoundaryResolver
from segmentation.strategies.continuation import continuation_end

CONTINUATION_THEN_HEADING = (
    "Alice [9:00 AM]\n"
    "Hello\n"
    "\n"
    "[9:01]\n"
    "follow up text\n"
    "\n"
    "Release Checklist\n"
    "- item one"
)


def _resolve(text: str, config=None):
    lines = LineClassifier().process(text)
    profile = PatternAggregator().process(lines)
    resolver = BoundaryResolver(config)
    return lines, profile, resolver, resolver.process(lines, profile)


def test_continuation_end_absorbs_following_content() -> None:
    lines = LineClassifier().process("Alice [9:00 AM]\n\nHello\n\n[9:01]\n\nworld")
    assert continuation_end(lines, 4, {0}) == 6


def test_continuation_end_stops_at_a_full_header() -> None:
    lines = LineClassifier().process("Alice [9:00 AM]\nHello\n[9:01]\nmore\nBob [9:02 AM]\nHi")
    assert continuation_end(lines, 2, {0, 4}) == 3


def test_continuation_is_merged_over_the_next_candidate() -> None:
    lines, profile, _, segments = _resolve(CONTINUATION_THEN_HEADING)

    assert profile.start_candidates == frozenset({0, 6})
    assert profile.continuation_lines == frozenset({3})
    assert [(segment.start, segment.end) for segment in segments] == [(0, 7)]


def test_segments_do_not_overlap() -> None:
    text = (
        "Alice [9:00 AM]\nHello\n\n"
        "Bob [9:05 AM]\nHi Alice\n\n"
        "Alice [9:10 AM]\nSee you"
    )
    _, _, _, segments = _resolve(text)

    assert [(segment.start, segment.end) for segment in segments] == [(0, 2), (3, 5), (6, 7)]
    for earlier, later in zip(segments, segments[1:]):
        assert earlier.end < later.start


def test_leading_noise_segment_is_dropped() -> None:
    _, profile, _, segments = _resolve("---\nAlice [9:00 AM]\nHello there")

    assert profile.start_candidates == frozenset({1})
    assert [(segment.start, segment.end) for segment in segments] == [(1, 2)]


def test_confidence_threshold_is_a_tunable() -> None:
    _, _, resolver, segments = _resolve(
        "---\nAlice [9:00 AM]\nHello there", {"min_segment_confidence": 0.1}
    )

    assert resolver.min_confidence == 0.1
    assert [(segment.start, segment.end) for segment in segments] == [(0, 0), (1, 2)]


def test_ranking_is_by_score_then_index() -> None:
    lines, profile, resolver, _ = _resolve(CONTINUATION_THEN_HEADING)
    ranked = resolver.rank_candidates(lines, profile)

    assert sorted(candidate.index for candidate in ranked) == [0, 6]
    for earlier, later in zip(ranked, ranked[1:]):
        assert (earlier.score, -earlier.index) >= (later.score, -later.index)


def test_rank_weights_can_be_overridden() -> None:
    resolver = BoundaryResolver({"rank_weights": {"metadata": -10}})
    assert resolver.rank_weights["metadata"] == -10
    assert resolver.rank_weights["timestamp_nearby"] == 3


def test_segment_confidence_is_clamped() -> None:
    lines, profile, resolver, _ = _resolve(CONTINUATION_THEN_HEADING)
    for start in range(len(lines)):
        for end in range(start, len(lines)):
            assert 0.0 <= resolver.segment_confidence(lines, profile, start, end) <= 1.0


def test_empty_input_yields_no_segments() -> None:
    assert BoundaryResolver().process([], PatternAggregator().process([])) == []


def test_segment_rejects_invalid_ranges() -> None:
    with pytest.raises(ValueError):
        Segment(start=3, end=1)
    with pytest.raises(ValueError):
        Segment(start=-1, end=0)
