"""
Acceptance rules: strong and weak indicators of a new message.
"""

from typing import Optional, Sequence

from ...models import LineRecord
from ..continuation import (
    has_strong_timestamp,
    is_continuation,
    is_split_header_name,
    is_very_strong_header,
    previous_non_blank,
)
from ..headers import MAX_USERNAME_WORDS, is_full_header, looks_like_username
from ..patterns import is_metadata
from .base import StartRule

WEAK_MIN_LENGTH = 10
CONTINUATION_PROXIMITY = 2
RECENT_HEADER_WINDOW = 3
TINY_LINE_LENGTH = 5
MESSAGE_END_CHARACTERS = (".", "!", "?", "]", ")", ":", '"')


def previous_line_ends_message(line: LineRecord) -> bool:
    """True if a line plausibly closes the message before it."""
    text = line.trimmed
    if is_full_header(text):
        return True
    if line.features.has_reaction or is_metadata(text):
        return True
    if text.endswith(MESSAGE_END_CHARACTERS):
        return True
    return looks_like_username(text) or len(text) < TINY_LINE_LENGTH


def context_supports_start(lines: Sequence[LineRecord], index: int) -> bool:
    """First content line, after a blank line, or after a line that ends a message."""
    line = lines[index]
    if line.context.blank_before:
        return True
    previous = previous_non_blank(lines, index)
    if previous is None:
        return True
    return previous_line_ends_message(lines[previous])


def is_header_like(line: LineRecord) -> bool:
    return (
        line.features.has_timestamp
        or line.features.has_avatar
        or looks_like_username(line.trimmed)
    )


class StrongIndicatorRule(StartRule):
    """
    Accept lines with a strong header indicator when the context allows it.

    Strong indicators: a header-shaped timestamp, avatar markup, a name and
    timestamp on one line, or a name directly above a standalone time. A
    name+timestamp header opens a message wherever it appears; the other
    strong lines need context support and otherwise defer to the weak rule.
    """

    name = "strong-indicator"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        if not self.has_strong_indicator(lines, index):
            return None
        if is_very_strong_header(lines, index):
            return True
        if context_supports_start(lines, index):
            return True
        return None

    @staticmethod
    def has_strong_indicator(lines: Sequence[LineRecord], index: int) -> bool:
        line = lines[index]
        if has_strong_timestamp(line) and not is_continuation(lines, index):
            return True
        if line.features.has_avatar:
            return True
        return is_full_header(line.trimmed) or is_split_header_name(lines, index)


class WeakIndicatorRule(StartRule):
    """
    Accept a capitalized, name-shaped line only away from other header signals.

    Rejected when directly under a header-like line, within two lines of a
    continuation marker, or within three lines after a full header.
    """

    name = "weak-indicator"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        line = lines[index]
        text = line.trimmed
        if not (line.features.starts_capital and len(text) > WEAK_MIN_LENGTH):
            return False
        if len(text.split()) > MAX_USERNAME_WORDS or text.endswith((".", "!", "?", ",", ":", ";")):
            return False

        if index > 0 and not lines[index - 1].is_blank and is_header_like(lines[index - 1]):
            return False

        low = max(0, index - CONTINUATION_PROXIMITY)
        high = min(len(lines), index + CONTINUATION_PROXIMITY + 1)
        if any(is_continuation(lines, position) for position in range(low, high) if position != index):
            return False

        for position in range(max(0, index - RECENT_HEADER_WINDOW), index):
            if is_full_header(lines[position].trimmed):
                return False

        return context_supports_start(lines, index)
