"""
Line Classification Step

Turns raw transcript text into immutable LineRecord entries. Each line is
probed independently (timestamps, URLs, avatar markup, emoji, reaction
counters, capitalization) and annotated with its neighbours.
"""

from typing import List

from ..models import (
    LENGTH_BLANK,
    LENGTH_LONG,
    LENGTH_MEDIUM,
    LENGTH_SHORT,
    LineContext,
    LineFeatures,
    LineRecord,
)
from ..strategies.patterns import (
    ALL_CAPS_MIN_LENGTH,
    CAPITAL_START_RE,
    DIGIT_RE,
    LONG_LINE_LENGTH,
    SHORT_LINE_LENGTH,
    has_avatar,
    has_emoji,
    has_timestamp,
    has_url,
    matches,
    parse_reaction,
    split_lines,
)
from .base import BaseParsingStep


def length_class(trimmed: str) -> str:
    if not trimmed:
        return LENGTH_BLANK
    if len(trimmed) < SHORT_LINE_LENGTH:
        return LENGTH_SHORT
    if len(trimmed) > LONG_LINE_LENGTH:
        return LENGTH_LONG
    return LENGTH_MEDIUM


def classify_features(trimmed: str) -> LineFeatures:
    """Run every line probe against a trimmed line."""
    if not trimmed:
        return LineFeatures()
    return LineFeatures(
        has_timestamp=has_timestamp(trimmed),
        has_url=has_url(trimmed),
        has_avatar=has_avatar(trimmed),
        has_emoji=has_emoji(trimmed),
        has_reaction=parse_reaction(trimmed) is not None,
        starts_capital=matches(CAPITAL_START_RE, trimmed),
        is_all_caps=(
            len(trimmed) > ALL_CAPS_MIN_LENGTH
            and trimmed == trimmed.upper()
            and any(char.isalpha() for char in trimmed)
        ),
        has_digits=matches(DIGIT_RE, trimmed),
    )


class LineClassifier(BaseParsingStep):
    """Classify every line of a pasted transcript."""

    def process(self, text: str) -> List[LineRecord]:
        """
        Classify the lines of a transcript.

        Args:
            text: Raw pasted transcript

        Returns:
            One LineRecord per line, in document order
        """
        raw_lines = split_lines(text)
        trimmed_lines = [line.strip() for line in raw_lines]

        records = []
        for index, raw in enumerate(raw_lines):
            trimmed = trimmed_lines[index]
            prev_line = trimmed_lines[index - 1] if index > 0 else None
            next_line = trimmed_lines[index + 1] if index + 1 < len(raw_lines) else None
            context = LineContext(
                prev_line=prev_line,
                next_line=next_line,
                blank_before=prev_line == "",
                blank_after=next_line == "",
            )
            records.append(
                LineRecord(
                    index=index,
                    raw=raw,
                    trimmed=trimmed,
                    is_blank=not trimmed,
                    length_class=length_class(trimmed),
                    features=classify_features(trimmed),
                    context=context,
                )
            )
        return records

    def _log_step_result(self, result: List[LineRecord]):
        for record in result:
            if record.is_blank:
                continue
            flags = [name for name, value in vars(record.features).items() if value]
            self.trace(
                f"line {record.index} ({record.length_class}): "
                f"{', '.join(flags) or 'plain'} | {record.trimmed[:60]!r}"
            )
