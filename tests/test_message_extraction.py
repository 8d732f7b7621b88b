from __future__ import annotations

from segmentation.config import ParserConfig
from segmentation.models import NO_HEADER_AUTHOR, Reaction, Segment
from segmentation.steps.a_line_classification import LineClassifier
from segmentation.steps.d_message_extraction import MessageExtractor


def test_split_body_collects_reactions_and_thread_marker() -> None:
    body, reactions, thread_marker = MessageExtractor.split_body(
        ["Shipping the release today", ":tada: 3", "\U0001F44D 2", "2 replies", "View thread"]
    )

    assert body == "Shipping the release today"
    assert reactions == [Reaction("tada", 3), Reaction("\U0001F44D", 2)]
    assert thread_marker == "2 replies"


def test_split_body_drops_metadata_and_keeps_layout() -> None:
    body, reactions, thread_marker = MessageExtractor.split_body(
        ["first line", "    indented", "---", "", "after the gap", ""]
    )

    assert body == "first line\n    indented\n\nafter the gap"
    assert reactions == []
    assert thread_marker is None


def test_split_body_skips_leading_doubled_name() -> None:
    body, _, _ = MessageExtractor.split_body(["Jane DoeJane Doe", "Hello"])
    assert body == "Hello"


def test_extract_segment_with_header() -> None:
    lines = LineClassifier().process("Jane DoeJane Doe [3:00 PM]\nLooks good to me")
    message = MessageExtractor().extract_segment(lines, Segment(0, 1))

    assert message.author == "Jane Doe"
    assert message.timestamp == "3:00 PM"
    assert message.body == "Looks good to me"
    assert (message.start_line, message.end_line) == (0, 1)


def test_extract_segment_maps_display_names() -> None:
    lines = LineClassifier().process("jdoe [9:00 AM]\nhello world")
    extractor = MessageExtractor(parser_config=ParserConfig(user_map={"jdoe": "Jane Doe"}))

    message = extractor.extract_segment(lines, Segment(0, 1))
    assert message.author == "Jane Doe"
    assert message.body == "hello world"


def test_extract_segment_without_header() -> None:
    lines = LineClassifier().process("just some words here\nand more")
    message = MessageExtractor().extract_segment(lines, Segment(0, 1))

    assert message.author == NO_HEADER_AUTHOR
    assert message.timestamp is None
    assert message.body == "just some words here\nand more"
    assert not message.has_header


def test_process_keeps_segment_order() -> None:
    lines = LineClassifier().process("Alice [9:00 AM]\nHello\nBob [9:01 AM]\nHi")
    messages = MessageExtractor().process(lines, [Segment(0, 1), Segment(2, 3)])
    assert [message.author for message in messages] == ["Alice", "Bob"]
