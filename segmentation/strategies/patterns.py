"""
Pattern catalog and safe probes for pasted chat transcripts.

Every probe in this module is total: a pattern that cannot be evaluated
against a line is logged here and reported as "no match", so a single odd
line can never abort a parse.
"""

import logging
import re
from typing import List, Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)

SHORT_LINE_LENGTH = 25
LONG_LINE_LENGTH = 100
MAX_USERNAME_WORDS = 4
ALL_CAPS_MIN_LENGTH = 3
MAX_THREAD_MARKER_LENGTH = 20

EMOJI_CHARS = "\U0001F300-\U0001FAFF\u2600-\u27BF\u2B50\u2B55"
UNICODE_EMOJI = f"(?:[{EMOJI_CHARS}]\uFE0F?)"
EMOJI_CODE = r":(?=[\w+-]*[A-Za-z+])[\w+-]+:"

MONTHS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?"
WEEKDAYS = r"(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)"

# High-precision timestamp shapes
BRACKETED_TIME_RE = re.compile(r"\[\d{1,2}:\d{2}(?:\s*(?:AM|PM))?\]", re.IGNORECASE)
BARE_TIME_LINE_RE = re.compile(r"^\s*\d{1,2}:\d{2}\s*(?:AM|PM)?\s*$", re.IGNORECASE)
MERIDIEM_TIME_RE = re.compile(r"\b\d{1,2}:\d{2}\s*(?:AM|PM)\b", re.IGNORECASE)
RELATIVE_DAY_TIME_RE = re.compile(
    r"\b(?:Today|Yesterday)\s+at\s+\d{1,2}:\d{2}", re.IGNORECASE
)
WEEKDAY_TIME_RE = re.compile(rf"\b{WEEKDAYS}\s+at\s+\d{{1,2}}:\d{{2}}", re.IGNORECASE)
MONTH_DAY_RE = re.compile(
    rf"\b{MONTHS}\s+\d{{1,2}}(?:st|nd|rd|th)?"
    r"(?:,?\s+\d{4}|\s+at\s+\d{1,2}:\d{2})"
)
ISO_DATETIME_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}[ T]\d{1,2}:\d{2}")

PRECISE_TIMESTAMP_PATTERNS = [
    BRACKETED_TIME_RE,
    BARE_TIME_LINE_RE,
    MERIDIEM_TIME_RE,
    RELATIVE_DAY_TIME_RE,
    WEEKDAY_TIME_RE,
    MONTH_DAY_RE,
    ISO_DATETIME_RE,
]

# Loose fallbacks, only consulted when no precise shape matches
LOOSE_TIME_RE = re.compile(r"\b\d{1,2}:\d{2}\b")
LOOSE_DAY_RE = re.compile(rf"\b(?:Today|Yesterday|{WEEKDAYS})\b", re.IGNORECASE)
LOOSE_MONTH_DAY_RE = re.compile(rf"\b{MONTHS}\s+\d{{1,2}}(?:st|nd|rd|th)?\b")

LOOSE_TIMESTAMP_PATTERNS = [LOOSE_TIME_RE, LOOSE_DAY_RE, LOOSE_MONTH_DAY_RE]

NARRATIVE_RE = re.compile(
    r"\b(?:the|and|is|are|was|were|will|would|should|could|can|have|has|had|"
    r"this|that|with|for|you|we|they|our|your|it's|i'm|let's|btw|wanted|"
    r"needed|mention|tracking|happens|related|finding|fixed|errors|after|"
    r"switching)\b",
    re.IGNORECASE,
)
WIKI_LINK_RE = re.compile(r"\[\[[^\]]+\]\]")

URL_RE = re.compile(r"https?://|www\.", re.IGNORECASE)
AVATAR_RE = re.compile(
    r"!\[\]\(https?://[^)]*(?:slack|avatar|gravatar)[^)]*\)", re.IGNORECASE
)
EMOJI_RE = re.compile(rf"{EMOJI_CODE}|{UNICODE_EMOJI}|!\[{EMOJI_CODE}\]")
REACTION_RE = re.compile(rf"^({UNICODE_EMOJI}+|{EMOJI_CODE})\s*(\d+)$")
CAPITAL_START_RE = re.compile(r"^[A-Z]")
DIGIT_RE = re.compile(r"\d")
QUOTE_RE = re.compile(r"^>\s*\S")

METADATA_PATTERNS = [
    re.compile(
        r"^\d+\s+(?:reply|replies|files?|minutes?|hours?|days?)(?:\s+ago)?$",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(?:View thread|Thread:|Last reply(?:\s.*)?|Language|TypeScript|Last updated)$",
        re.IGNORECASE,
    ),
    re.compile(r"^Added by\s+", re.IGNORECASE),
    re.compile(rf"^{EMOJI_CODE}\s*\d*$"),
    re.compile(rf"^{UNICODE_EMOJI}+\s*\d+$"),
    re.compile(r"^\d+$"),
    re.compile(r"^(?:-{3,}|={3,}|\*{3,}|_{3,})$"),
    re.compile(r"^https?://\S+$", re.IGNORECASE),
    re.compile(r"^!\[\]\(https?://[^)]+\)$", re.IGNORECASE),
]

ATTACHMENT_LABEL_PATTERNS = [
    re.compile(r"^\d+\s+files?$", re.IGNORECASE),
    re.compile(
        r"^(?:Zip|PDF|Doc|Docx|Google Docs?|Google Sheets?|Google Slides|"
        r"Google Drive|Excel|PowerPoint|Image|Video|Word|Spreadsheet|GitHub|"
        r"GitLab|Figma|Notion|Loom|Dropbox)$",
        re.IGNORECASE,
    ),
    re.compile(
        r"^\S.*\.(?:zip|pdf|docx?|xlsx?|pptx?|jpe?g|png|gif|mp4|mov|avi|csv|txt)$",
        re.IGNORECASE,
    ),
    re.compile(r"\(\d+(?:\.\d+)?\s*[KMG]?B\)$", re.IGNORECASE),
    re.compile(r"files\.slack\.com", re.IGNORECASE),
]

# Attachment credits and UI chrome that never stand alone as a message
CREDIT_PATTERNS = ATTACHMENT_LABEL_PATTERNS + [
    re.compile(r"^Added by\s+", re.IGNORECASE),
    re.compile(r"^(?:Language|TypeScript|Last updated)\b", re.IGNORECASE),
    re.compile(r"^\d+\s+(?:minutes?|hours?|days?|weeks?|months?|years?)\s+ago$", re.I),
    re.compile(r"^!\[[^\]]*\]\(https?://[^)]+\)$", re.IGNORECASE),
    re.compile(r"^[\w.-]+/[\w.-]+$"),
    re.compile(r"^\d+\s+(?:reply|replies|files?)$", re.IGNORECASE),
    re.compile(r"^(?:View thread|Thread:|Last reply)", re.IGNORECASE),
]

THREAD_MARKER_RE = re.compile(
    r"^(?:\d+\s+repl(?:y|ies)\b.*|view\s+thread|thread)$", re.IGNORECASE
)

STANDALONE_TIMESTAMP_PATTERNS = [
    re.compile(
        r"^\[\d{1,2}:\d{2}(?:\s*(?:AM|PM))?\](?:\(https?://[^)\s]+\))?$",
        re.IGNORECASE,
    ),
    re.compile(
        r"^\d{1,2}:\d{2}\s*(?:AM|PM)?\s*(?:\(https?://[^)\s]+\))?$", re.IGNORECASE
    ),
    re.compile(
        r"^(?:Today|Yesterday)\s+at\s+\d{1,2}:\d{2}\s*(?:AM|PM)?$", re.IGNORECASE
    ),
]

TRUNCATION_INDICATOR_RE = re.compile(
    r"^(?:See more|Show more|Show less|Read more|View more|Continue reading|"
    r"\.\.\.|\u2026)$",
    re.IGNORECASE,
)

TIME_TEXT_PATTERNS = [
    re.compile(r"\[([^\]]*\d{1,2}:\d{2}[^\]]*)\]"),
    re.compile(
        rf"\b(?:Today|Yesterday|{WEEKDAYS})\s+at\s+\d{{1,2}}:\d{{2}}(?:\s*(?:AM|PM))?",
        re.IGNORECASE,
    ),
    ISO_DATETIME_RE,
    MONTH_DAY_RE,
    re.compile(r"\d{1,2}:\d{2}(?:\s*(?:AM|PM))?", re.IGNORECASE),
]


def safe_search(pattern: Pattern[str], text: Optional[str]) -> Optional["re.Match[str]"]:
    """
    Search a compiled pattern, treating any failure as "no match".

    Args:
        pattern: Compiled regular expression
        text: Line text to probe

    Returns:
        The match, or None when there is no match or the probe failed
    """
    if not text or not isinstance(text, str):
        return None
    try:
        return pattern.search(text)
    except (re.error, TypeError, ValueError, RecursionError) as e:
        logger.warning(f"Pattern probe {pattern.pattern!r} failed: {e}")
        return None


def matches(pattern: Pattern[str], text: Optional[str]) -> bool:
    return safe_search(pattern, text) is not None


def matches_any(patterns: Sequence[Pattern[str]], text: Optional[str]) -> bool:
    return any(matches(pattern, text) for pattern in patterns)


def is_narrative(text: str) -> bool:
    """True if the line reads like a sentence rather than a header or label."""
    return (
        len(text) > LONG_LINE_LENGTH
        or matches(NARRATIVE_RE, text)
        or matches(WIKI_LINK_RE, text)
    )


def has_timestamp(text: str) -> bool:
    """
    Detect a timestamp on a line.

    High-precision shapes always count. The loose HH:MM / weekday / month
    fallback only counts when the line does not read like narrative text.
    """
    if matches_any(PRECISE_TIMESTAMP_PATTERNS, text):
        return True
    if not matches_any(LOOSE_TIMESTAMP_PATTERNS, text):
        return False
    return not is_narrative(text)


def has_url(text: str) -> bool:
    return matches(URL_RE, text)


def has_avatar(text: str) -> bool:
    return matches(AVATAR_RE, text)


def has_emoji(text: str) -> bool:
    return matches(EMOJI_RE, text)


def is_metadata(text: str) -> bool:
    """True if a trimmed line belongs to the metadata catalog."""
    return matches_any(METADATA_PATTERNS, text)


def is_attachment_label(text: str) -> bool:
    return matches_any(ATTACHMENT_LABEL_PATTERNS, text)


def is_attachment_credit(text: str) -> bool:
    return matches_any(CREDIT_PATTERNS, text)


def is_standalone_timestamp(text: str) -> bool:
    """True if the whole trimmed line is a timestamp with no name attached."""
    return matches_any(STANDALONE_TIMESTAMP_PATTERNS, text)


def is_truncation_indicator(text: str) -> bool:
    return matches(TRUNCATION_INDICATOR_RE, text)


def is_quoted(text: str) -> bool:
    return matches(QUOTE_RE, text)


def is_thread_marker(text: str) -> bool:
    return len(text) < MAX_THREAD_MARKER_LENGTH and matches(THREAD_MARKER_RE, text)


def parse_reaction(text: str) -> Optional[Tuple[str, int]]:
    """
    Parse a reaction counter line such as ":+1: 3" or a glyph followed by a count.

    Returns:
        (symbol, count) with colons stripped from emoji codes, or None
    """
    match = safe_search(REACTION_RE, text)
    if not match:
        return None
    symbol = match.group(1)
    if symbol.startswith(":") and symbol.endswith(":"):
        symbol = symbol[1:-1]
    return symbol, int(match.group(2))


def extract_time_text(text: str) -> Optional[str]:
    """Pull the timestamp text out of a line, without brackets or link targets."""
    for pattern in TIME_TEXT_PATTERNS:
        match = safe_search(pattern, text)
        if match:
            value = match.group(1) if match.groups() else match.group(0)
            return value.strip()
    return None


def timestamp_shape(text: str) -> Optional[str]:
    """
    Reduce the timestamp on a line to a format shape, e.g. "[#:# XM]".

    Digits collapse to "#" and AM/PM to "XM" so that two messages posted at
    different times share a shape.
    """
    for pattern in PRECISE_TIMESTAMP_PATTERNS + LOOSE_TIMESTAMP_PATTERNS:
        match = safe_search(pattern, text)
        if match:
            shape = re.sub(r"\d+", "#", match.group(0).strip())
            return re.sub(r"\b[AaPp][Mm]\b", "XM", shape)
    return None


def split_lines(text: str) -> List[str]:
    """Split transcript text into lines, normalising line endings."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
