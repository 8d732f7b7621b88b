from __future__ import annotations

from segmentation.steps.a_line_classification import LineClassifier
from segmentation.strategies.continuation import is_continuation
from segmentation.strategies.start_predicates import (
    build_start_chain,
    could_be_message_start,
    explain_message_start,
)
from segmentation.strategies.start_predicates.acceptance import (
    StrongIndicatorRule,
    previous_line_ends_message,
)

DM_TRANSCRIPT = "Alex MittellAlex Mittell\n  3:13 PM\nFirst DM message"

CONTINUATION_TRANSCRIPT = "Alice [9:00 AM]\n\nHello\n\n[9:01]\n\nworld"

WEAK_NAME_TRANSCRIPT = (
    "Alice [9:00 AM]\n"
    "Hello there everyone, the build is green.\n"
    "\n"
    "Status update follows\n"
    "\n"
    "Bob Martinez\n"
    "Hi all, quick question about the deploy."
)

LINK_PREVIEW_TRANSCRIPT = (
    "Alice [9:00 AM]\n"
    "Check this out https://example.com/article\n"
    "Example Domain Article Title\n"
    "This domain is for use in illustrative examples in documents.\n"
    "\n"
    "Bob [9:05 AM]\n"
    "Nice find"
)


def _lines(text: str):
    return LineClassifier().process(text)


def test_header_at_top_is_a_start() -> None:
    lines = _lines("Alice [9:00 AM]\nHello there")
    assert explain_message_start(lines, 0) == (True, "strong-indicator")
    assert not could_be_message_start(lines, 1)


def test_blank_and_metadata_lines_are_rejected() -> None:
    lines = _lines("Alice [9:00 AM]\n\n:+1: 3")
    assert explain_message_start(lines, 1) == (False, "blank")
    assert explain_message_start(lines, 2) == (False, "metadata")


def test_attachment_labels_are_rejected() -> None:
    lines = _lines("Jane DoeJane Doe [3:00 PM]\nHere are the docs:\n\nPDF")
    assert explain_message_start(lines, 3) == (False, "attachment-label")


def test_continuation_marker_is_not_a_start() -> None:
    lines = _lines(CONTINUATION_TRANSCRIPT)
    assert is_continuation(lines, 4)
    assert explain_message_start(lines, 4) == (False, "continuation")


def test_timestamp_under_a_name_is_not_a_continuation() -> None:
    lines = _lines(DM_TRANSCRIPT)
    assert not is_continuation(lines, 1)
    assert explain_message_start(lines, 0) == (True, "strong-indicator")
    assert explain_message_start(lines, 1) == (False, "split-header-time")
    assert not could_be_message_start(lines, 2)


def test_standalone_timestamp_before_a_new_header_is_not_a_continuation() -> None:
    lines = _lines("Alice [9:00 AM]\nHello\n\n[9:01]\n\nBob [9:02 AM]\nHi")
    assert not is_continuation(lines, 3)


def test_link_preview_title_is_rejected() -> None:
    lines = _lines(LINK_PREVIEW_TRANSCRIPT)
    assert explain_message_start(lines, 2) == (False, "link-preview")
    assert could_be_message_start(lines, 5)


def test_weak_name_line_needs_distance_from_the_last_header() -> None:
    lines = _lines(WEAK_NAME_TRANSCRIPT)
    assert not could_be_message_start(lines, 3)
    assert explain_message_start(lines, 5) == (True, "weak-indicator")
    assert not could_be_message_start(lines, 6)


def test_weak_line_right_under_a_header_is_rejected() -> None:
    lines = _lines("Alice [9:00 AM]\nBob [9:01 AM]\nHi from Bob")
    assert could_be_message_start(lines, 1)
    assert explain_message_start(lines, 2) == (False, "weak-indicator")


def test_full_header_starts_a_message_right_after_content() -> None:
    lines = _lines("Alice [9:00 AM]\nsee you tomorrow\nBob [9:05 AM]\nhi")
    assert explain_message_start(lines, 2) == (True, "strong-indicator")

    lines = _lines(
        "Alex MittellAlex Mittell\n  3:13 PM\nhello world\nJohn DoeJohn Doe\n  3:14 PM\nhi"
    )
    assert explain_message_start(lines, 3) == (True, "strong-indicator")


def test_timestamp_without_a_name_needs_context() -> None:
    lines = _lines("Alice [9:00 AM]\nsee you tomorrow\nMeeting moved to 3:00 PM\nok")
    assert StrongIndicatorRule.has_strong_indicator(lines, 2)
    assert StrongIndicatorRule().decide(lines, 2) is None
    assert not could_be_message_start(lines, 2)


def test_previous_line_endings() -> None:
    lines = _lines("Done.\nsee you tomorrow\nok\nAlice [9:00 AM]")
    assert previous_line_ends_message(lines[0])
    assert not previous_line_ends_message(lines[1])
    assert previous_line_ends_message(lines[2])
    assert previous_line_ends_message(lines[3])


def test_chain_can_be_reused() -> None:
    chain = build_start_chain()
    lines = _lines(CONTINUATION_TRANSCRIPT)
    decisions = [could_be_message_start(lines, index, chain) for index in range(len(lines))]
    assert decisions == [True, False, False, False, False, False, False]
