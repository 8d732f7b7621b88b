"""
Continuation markers.

A continuation marker is a standalone timestamp line (or a truncation
indicator such as "See more") that extends the previous author's message
instead of opening a new one. This module decides which lines are markers
and how far the content after a marker reaches.
"""

from typing import AbstractSet, Optional, Sequence

from ..models import LineRecord
from .headers import is_full_header, looks_like_username
from .patterns import is_narrative, is_standalone_timestamp, is_truncation_indicator

LOOKAROUND_LIMIT = 50
MAX_CONTINUATION_SCAN = 500
BLANK_RUN_REACH = 3
STRONG_HEADER_REACH = 4


def next_non_blank(
    lines: Sequence[LineRecord], index: int, limit: int = LOOKAROUND_LIMIT
) -> Optional[int]:
    """Index of the next non-blank line after `index`, within `limit` lines."""
    for position in range(index + 1, min(len(lines), index + 1 + limit)):
        if not lines[position].is_blank:
            return position
    return None


def previous_non_blank(
    lines: Sequence[LineRecord], index: int, limit: int = LOOKAROUND_LIMIT
) -> Optional[int]:
    """Index of the closest non-blank line before `index`, within `limit` lines."""
    for position in range(index - 1, max(-1, index - 1 - limit), -1):
        if not lines[position].is_blank:
            return position
    return None


def has_strong_timestamp(line: LineRecord) -> bool:
    """A timestamp on a line that reads like a header rather than prose."""
    return (
        line.features.has_timestamp
        and not line.is_long
        and not is_narrative(line.trimmed)
    )


def is_split_header_name(lines: Sequence[LineRecord], index: int) -> bool:
    """A bare name line sitting directly above a standalone time line (DM layout)."""
    line = lines[index]
    if line.is_blank or line.features.has_timestamp or index + 1 >= len(lines):
        return False
    following = lines[index + 1]
    return (
        not following.is_blank
        and is_standalone_timestamp(following.trimmed)
        and looks_like_username(line.trimmed)
    )


def has_header_signal(lines: Sequence[LineRecord], index: int) -> bool:
    line = lines[index]
    if line.is_blank:
        return False
    if line.features.has_avatar or has_strong_timestamp(line):
        return True
    return is_split_header_name(lines, index)


def is_very_strong_header(lines: Sequence[LineRecord], index: int) -> bool:
    """Name and timestamp together, either on one line or as a split header."""
    return is_full_header(lines[index].trimmed) or is_split_header_name(lines, index)


def is_continuation(lines: Sequence[LineRecord], index: int) -> bool:
    """
    Decide whether a line is a continuation marker.

    A standalone timestamp continues the previous message when there is
    earlier content, the line directly above is not a bare name (that would
    make it the time half of a DM header) and the next non-blank line is
    ordinary prose rather than another header.

    Args:
        lines: Classified lines of the document
        index: Line to test

    Returns:
        True if the line extends the previous message
    """
    line = lines[index]
    if line.is_blank or previous_non_blank(lines, index) is None:
        return False

    text = line.trimmed
    if is_truncation_indicator(text):
        return True
    if not is_standalone_timestamp(text):
        return False

    above = lines[index - 1]
    if not above.is_blank and looks_like_username(above.trimmed):
        return False

    following = next_non_blank(lines, index)
    if following is None:
        return True
    return not has_header_signal(lines, following)


def continuation_end(
    lines: Sequence[LineRecord],
    marker: int,
    start_candidates: AbstractSet[int],
    max_scan: int = MAX_CONTINUATION_SCAN,
) -> int:
    """
    Find the last line absorbed by the continuation that starts at `marker`.

    Blank runs are absorbed unless the next content line is both more than
    three lines past the marker and a valid message start. Within four lines
    of the marker only a full name+timestamp header stops the scan; further
    out any valid message start does.

    Args:
        lines: Classified lines of the document
        marker: Index of the continuation marker
        start_candidates: Indices accepted by the message-start predicate
        max_scan: Upper bound on the number of lines examined

    Returns:
        Index of the last absorbed line (at least `marker`)
    """
    end = marker
    stop = min(len(lines), marker + 1 + max_scan)
    for position in range(marker + 1, stop):
        line = lines[position]
        if line.is_blank:
            following = next_non_blank(lines, position)
            if (
                following is not None
                and following - marker > BLANK_RUN_REACH
                and following in start_candidates
            ):
                break
            end = position
            continue

        if position - marker <= STRONG_HEADER_REACH:
            if is_very_strong_header(lines, position):
                break
        elif position in start_candidates:
            break
        end = position
    return end
