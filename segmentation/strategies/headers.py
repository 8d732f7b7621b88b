"""
Username and header recognition.

Same-line header rules are tried in priority order: app messages, doubled
name with a bracketed timestamp, single name with a bracketed timestamp, and
name followed by a loose time. A segment may also open with a split header
(name line directly above a time line) or with a bare username.
"""

import re
from typing import Callable, List, Optional, Sequence, Tuple

from ..models import Header
from .patterns import (
    EMOJI_CODE,
    MAX_USERNAME_WORDS,
    MONTHS,
    UNICODE_EMOJI,
    extract_time_text,
    has_timestamp,
    has_url,
    is_attachment_label,
    is_metadata,
    is_standalone_timestamp,
    is_truncation_indicator,
    matches,
    safe_search,
)

HEADER_WINDOW = 3
MAX_HEADER_LINE_LENGTH = 200
MAX_LOOSE_NAME_LENGTH = 30
THREAD_LINK_MARKER = "/archives/"

NAME_SHAPE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9 \-_.'()]{1,60}$")
USERNAME_WORD_RE = re.compile(r"^[\w\-.'()\[\]:@]+$")
USERNAME_TIME_WORDS_RE = re.compile(r"\b(?:at|on|today|yesterday|am|pm)\b", re.IGNORECASE)
CONTENT_WORDS_RE = re.compile(
    r"\b(?:the|and|but|or|for|with|from|to|of|in|is|are|was|were|be|been|"
    r"this|that|these|those|what|when|where|why|how|who|which|there|here|"
    r"then|than|if|it|its|it's|me|my|you|your|we|our|they|their|hi|hello|"
    r"hey|thanks|thank|please|yes|ok|okay|just|not|do|does|did|have|has|had|"
    r"good|great|looks|see|know|think)\b",
    re.IGNORECASE,
)
TIME_LIKE_RE = re.compile(
    rf"\d{{1,2}}:\d{{2}}|\b(?:Today|Yesterday)\b|\b{MONTHS}\s+\d", re.IGNORECASE
)

DOUBLED_NAME_RE = re.compile(r"^(.+?)\s*\1$")
SPLIT_DOUBLED_NAME_RE = re.compile(r"^([A-Za-z]+)\1\s+([A-Za-z]+)\2$")
SLACK_EMOJI_IMAGE_RE = re.compile(rf"!\[{EMOJI_CODE}\]\([^)]*\)")
APP_PREFIX_RE = re.compile(r"^\s*\(https?://[^)]*\)")

APP_HEADER_RE = re.compile(
    r"^\s*\(https?://[^)]*(?:services|apps?|bots?)[^)]*\)\s*"
    r"([A-Za-z][A-Za-z0-9 \-_.]*?)\s*"
    r"(?:\[([^\]]+)\](?:\(https?://[^)\s]+\))?)?\s*$",
    re.IGNORECASE,
)
DOUBLED_HEADER_RE = re.compile(
    rf"^([A-Za-z][A-Za-z0-9 \-_.']*?)\1"
    rf"(?:\s*(?:!\[{EMOJI_CODE}\]\([^)]*\)|{EMOJI_CODE}|{UNICODE_EMOJI}))*"
    r"\s*\[([^\]]+)\]"
)
SINGLE_HEADER_RE = re.compile(
    r"^([A-Za-z0-9][A-Za-z0-9 \-_.']*?)\s*\[([^\]]+)\](\(https?://[^)\s]+\))?"
)
LOOSE_HEADER_RE = re.compile(
    r"^([A-Za-z][A-Za-z0-9 \-_.']*?)\s+\[?(\d{1,2}:\d{2}(?:\s*[AP]M)?)\]?"
    r"(?:\s*\(https?://[^)\s]+\))?\s*$",
    re.IGNORECASE,
)


def undouble_name(name: str) -> str:
    """Collapse copy-paste doubling such as "Jane DoeJane Doe" or "AmyAmy BritoBrito"."""
    match = safe_search(SPLIT_DOUBLED_NAME_RE, name)
    if match:
        return f"{match.group(1)} {match.group(2)}"
    match = safe_search(DOUBLED_NAME_RE, name)
    if match:
        return match.group(1).strip()
    return name


def is_doubled_name(text: str) -> bool:
    return undouble_name(text) != text and looks_like_username(text)


def clean_username(text: str) -> str:
    """
    Normalize a raw author string.

    Strips emoji (codes, glyphs and inline emoji images), an app link
    prefix, trailing punctuation and copy-paste doubling.
    """
    cleaned = SLACK_EMOJI_IMAGE_RE.sub("", text or "")
    cleaned = re.sub(EMOJI_CODE, "", cleaned)
    cleaned = re.sub(UNICODE_EMOJI, "", cleaned)
    cleaned = APP_PREFIX_RE.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    cleaned = cleaned.rstrip(".,;:!?").strip()
    return undouble_name(cleaned)


def looks_like_username(text: str) -> bool:
    """
    Decide whether a line, on its own, reads like a bare display name.

    Args:
        text: Trimmed line text

    Returns:
        True for name-shaped lines without time words, content words or
        sentence punctuation
    """
    candidate = (text or "").strip()
    if not matches(NAME_SHAPE_RE, candidate):
        return False
    if candidate[-1] in ".,;:!?":
        return False
    if (
        is_metadata(candidate)
        or is_attachment_label(candidate)
        or is_truncation_indicator(candidate)
    ):
        return False
    if matches(USERNAME_TIME_WORDS_RE, candidate) or matches(CONTENT_WORDS_RE, candidate):
        return False
    return len(undouble_name(candidate).split()) <= MAX_USERNAME_WORDS


def is_username_line(text: str) -> bool:
    """
    Broader username-line shape used for document statistics.

    Capitalized, at least two characters, no URL, not metadata, at most four
    words made of alphanumerics and punctuation. Header lines such as
    "Alice [9:00 AM]" qualify.
    """
    candidate = (text or "").strip()
    if len(candidate) < 2 or not candidate[0].isupper():
        return False
    if has_url(candidate) or is_metadata(candidate):
        return False
    words = candidate.split()
    if len(words) > MAX_USERNAME_WORDS:
        return False
    return all(matches(USERNAME_WORD_RE, word) for word in words)


def _is_time_like(text: Optional[str]) -> bool:
    return matches(TIME_LIKE_RE, text)


def match_app_header(text: str) -> Optional[Header]:
    match = safe_search(APP_HEADER_RE, text)
    if not match:
        return None
    author = clean_username(match.group(1))
    if not author:
        return None
    timestamp = match.group(2).strip() if _is_time_like(match.group(2)) else None
    return Header(author=author, timestamp=timestamp, rule="app")


def match_doubled_name_header(text: str) -> Optional[Header]:
    match = safe_search(DOUBLED_HEADER_RE, text)
    if not match or not _is_time_like(match.group(2)):
        return None
    author = clean_username(match.group(1))
    if not author:
        return None
    return Header(author=author, timestamp=match.group(2).strip(), rule="doubled")


def has_foreign_url(text: str) -> bool:
    """True if the line links anywhere other than a message permalink (/archives/)."""
    return has_url(text) and THREAD_LINK_MARKER not in text


def match_single_name_header(text: str) -> Optional[Header]:
    match = safe_search(SINGLE_HEADER_RE, text)
    if not match or not _is_time_like(match.group(2)):
        return None
    name = clean_username(match.group(1))
    if not looks_like_username(name) or has_foreign_url(text):
        return None
    return Header(author=name, timestamp=match.group(2).strip(), rule="single")


def match_loose_time_header(text: str) -> Optional[Header]:
    match = safe_search(LOOSE_HEADER_RE, text)
    if not match or has_foreign_url(text):
        return None
    name = match.group(1).strip()
    if len(name) > MAX_LOOSE_NAME_LENGTH or not looks_like_username(name):
        return None
    return Header(author=clean_username(name), timestamp=match.group(2).strip(), rule="loose")


SAME_LINE_RULES: List[Callable[[str], Optional[Header]]] = [
    match_app_header,
    match_doubled_name_header,
    match_single_name_header,
    match_loose_time_header,
]


def match_same_line_header(text: str) -> Optional[Header]:
    """Try every same-line header rule, in priority order, against one line."""
    candidate = (text or "").strip()
    if not candidate or len(candidate) > MAX_HEADER_LINE_LENGTH:
        return None
    for rule in SAME_LINE_RULES:
        header = rule(candidate)
        if header:
            return header
    return None


def is_full_header(text: str) -> bool:
    """True if the line carries both an author and a timestamp."""
    header = match_same_line_header(text)
    return header is not None and header.is_complete


def find_header(lines: Sequence[str]) -> Tuple[Optional[Header], int]:
    """
    Locate the header among the first non-blank lines of a segment.

    Args:
        lines: Raw segment lines

    Returns:
        (header, body_offset): the header found (or None) and the offset of
        the first body line within the segment
    """
    window = [(offset, line.strip()) for offset, line in enumerate(lines) if line.strip()]
    window = window[:HEADER_WINDOW]

    for rule in SAME_LINE_RULES:
        for offset, text in window:
            if len(text) > MAX_HEADER_LINE_LENGTH:
                continue
            header = rule(text)
            if header:
                return header, offset + 1

    for position, (offset, text) in enumerate(window[:-1]):
        next_offset, next_text = window[position + 1]
        if (
            next_offset == offset + 1
            and looks_like_username(text)
            and is_standalone_timestamp(next_text)
        ):
            header = Header(
                author=clean_username(text),
                timestamp=extract_time_text(next_text),
                rule="split",
            )
            return header, next_offset + 1

    if not any(has_timestamp(text) for _, text in window):
        for offset, text in window:
            if is_metadata(text):
                continue
            if looks_like_username(text):
                return Header(author=clean_username(text), rule="bare"), offset + 1
            break

    return None, 0
