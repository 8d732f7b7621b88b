from __future__ import annotations

from segmentation.strategies.patterns import (
    BRACKETED_TIME_RE,
    extract_time_text,
    has_avatar,
    has_timestamp,
    is_attachment_label,
    is_metadata,
    is_standalone_timestamp,
    is_thread_marker,
    is_truncation_indicator,
    parse_reaction,
    safe_search,
    split_lines,
    timestamp_shape,
)


class ExplodingPattern:
    pattern = "boom"

    def search(self, text: str) -> None:
        raise RecursionError("maximum recursion depth exceeded")


def test_precise_timestamps_are_detected() -> None:
    assert has_timestamp("Alice [9:00 AM]")
    assert has_timestamp("[12:01](https://example.com/p2)")
    assert has_timestamp("  3:13 PM")
    assert has_timestamp("Today at 4:15 PM")
    assert has_timestamp("Dec 11, 2024")
    assert has_timestamp("2024-03-01 09:30")


def test_loose_timestamp_is_suppressed_in_narrative_lines() -> None:
    assert has_timestamp("Monday")
    assert not has_timestamp("Shipping the release today")
    assert not has_timestamp("We wanted to sync up by 10:30 or so")


def test_plain_prose_has_no_timestamp() -> None:
    assert not has_timestamp("Hello")
    assert not has_timestamp("Looks good to me")


def test_metadata_catalog() -> None:
    for line in [
        ":+1: 3",
        "\U0001F44D 2",
        "2 replies",
        "Added by GitHub",
        "---",
        "42",
        "https://example.com/some/page",
        "![](https://ca.slack-edge.com/T0-U1-abc-48)",
        "View thread",
    ]:
        assert is_metadata(line), line

    for line in ["Hello", "[9:01]", "Check https://example.com", "Alice [9:00 AM]"]:
        assert not is_metadata(line), line


def test_attachment_labels() -> None:
    assert is_attachment_label("PDF")
    assert is_attachment_label("Google Doc")
    assert is_attachment_label("GitHub")
    assert is_attachment_label("4 files")
    assert is_attachment_label("quarterly-report.pdf")
    assert not is_attachment_label("Bob Martinez")


def test_avatar_markup() -> None:
    assert has_avatar("![](https://ca.slack-edge.com/T0-U1-abc-48)")
    assert not has_avatar("![screenshot](https://example.com/shot.png)")


def test_parse_reaction() -> None:
    assert parse_reaction(":+1: 3") == ("+1", 3)
    assert parse_reaction(":tada: 12") == ("tada", 12)
    assert parse_reaction("\U0001F44D 2") == ("\U0001F44D", 2)
    assert parse_reaction("3 people agreed") is None


def test_standalone_timestamps() -> None:
    assert is_standalone_timestamp("[9:01]")
    assert is_standalone_timestamp("[12:01](https://example.com/p2)")
    assert is_standalone_timestamp("3:13 PM")
    assert is_standalone_timestamp("Yesterday at 9:15 AM")
    assert not is_standalone_timestamp("Alice [9:00 AM]")
    assert not is_standalone_timestamp("[12:00 PM")


def test_thread_and_truncation_markers() -> None:
    assert is_thread_marker("2 replies")
    assert is_thread_marker("View thread")
    assert not is_thread_marker("2 replies Last reply 3 days ago")
    assert is_truncation_indicator("See more")
    assert not is_truncation_indicator("See more details below")


def test_extract_time_text() -> None:
    assert extract_time_text("[12:01](https://example.com/p2)") == "12:01"
    assert extract_time_text("Today at 3:00 PM") == "Today at 3:00 PM"
    assert extract_time_text("  3:13 PM") == "3:13 PM"
    assert extract_time_text("no time here") is None


def test_timestamp_shape_ignores_the_actual_time() -> None:
    assert timestamp_shape("Alice [9:00 AM]") == "[#:# XM]"
    assert timestamp_shape("Bob [11:45 PM]") == "[#:# XM]"
    assert timestamp_shape("3:13 PM") == "#:# XM"


def test_probes_are_total() -> None:
    assert safe_search(BRACKETED_TIME_RE, None) is None
    assert safe_search(BRACKETED_TIME_RE, "") is None
    assert safe_search(ExplodingPattern(), "anything") is None


def test_split_lines_normalises_line_endings() -> None:
    assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]
