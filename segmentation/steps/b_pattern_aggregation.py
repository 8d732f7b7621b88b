"""
Pattern Aggregation Step

One pass over the classified lines that builds the DocumentProfile: which
lines could start a message, which carry timestamps, username shapes or
metadata, which are continuation markers, plus derived statistics used by
the boundary resolver.
"""

from collections import Counter
from typing import List, Optional, Sequence, Set

from ..models import (
    FORMAT_MIXED,
    FORMAT_PLAIN,
    FORMAT_TAGGED,
    DocumentProfile,
    LineRecord,
)
from ..strategies.continuation import is_continuation
from ..strategies.headers import (
    clean_username,
    is_username_line,
    looks_like_username,
    match_same_line_header,
)
from ..strategies.patterns import is_metadata, timestamp_shape
from ..strategies.start_predicates import build_start_chain
from .base import BaseParsingStep

FORMAT_DOMINANCE_RATIO = 0.7
ALIGNMENT_WINDOW = 2


class PatternAggregator(BaseParsingStep):
    """Build the document profile from classified lines."""

    def setup(self):
        self.chain = build_start_chain()
        self.format_dominance = float(
            self.get_config_value("format_dominance_ratio", FORMAT_DOMINANCE_RATIO)
        )

    def process(self, lines: Sequence[LineRecord]) -> DocumentProfile:
        """
        Aggregate document-wide patterns.

        Args:
            lines: Classified lines in document order

        Returns:
            DocumentProfile for the document
        """
        start_candidates: Set[int] = set()
        timestamp_lines: Set[int] = set()
        username_lines: Set[int] = set()
        metadata_lines: Set[int] = set()
        continuation_lines: Set[int] = set()
        shapes: List[str] = []
        names: Counter = Counter()

        for line in lines:
            if line.is_blank:
                continue
            index = line.index

            accepted, rule = self.chain.evaluate(lines, index)
            if accepted:
                start_candidates.add(index)
            self.trace(f"line {index}: start={accepted} ({rule})")

            if line.features.has_timestamp:
                timestamp_lines.add(index)
                shape = timestamp_shape(line.trimmed)
                if shape and shape not in shapes:
                    shapes.append(shape)
            if is_username_line(line.trimmed):
                username_lines.add(index)
                name = self._normalized_name(line.trimmed)
                if name:
                    names[name] += 1
            if is_metadata(line.trimmed):
                metadata_lines.add(index)
            if is_continuation(lines, index):
                continuation_lines.add(index)

        average_length = self._average_message_length(lines, sorted(start_candidates))
        recurring = tuple(sorted(name for name, count in names.items() if count >= 2))
        document_format = self._determine_format(shapes)
        confidence = self._calculate_confidence(
            sorted(start_candidates),
            sorted(timestamp_lines),
            shapes,
            recurring,
            document_format,
        )

        return DocumentProfile(
            start_candidates=frozenset(start_candidates),
            timestamp_lines=frozenset(timestamp_lines),
            username_lines=frozenset(username_lines),
            metadata_lines=frozenset(metadata_lines),
            continuation_lines=frozenset(continuation_lines),
            average_message_length=average_length,
            recurring_usernames=recurring,
            timestamp_formats=tuple(shapes),
            format=document_format,
            confidence=confidence,
        )

    @staticmethod
    def _normalized_name(text: str) -> Optional[str]:
        header = match_same_line_header(text)
        if header:
            return header.author
        if looks_like_username(text):
            return clean_username(text)
        return None

    @staticmethod
    def _average_message_length(
        lines: Sequence[LineRecord], candidates: List[int]
    ) -> int:
        """Average non-blank line count per candidate span, rounded."""
        if not candidates:
            return 0
        boundaries = candidates + [len(lines)]
        counts = []
        for start, end in zip(boundaries, boundaries[1:]):
            counts.append(sum(1 for line in lines[start:end] if not line.is_blank))
        return round(sum(counts) / len(counts))

    def _determine_format(self, shapes: List[str]) -> str:
        """Classify the document as tagged (bracketed times), plain or mixed."""
        if not shapes:
            return FORMAT_MIXED
        tagged = sum(1 for shape in shapes if shape.startswith("["))
        plain = len(shapes) - tagged
        if tagged / len(shapes) > self.format_dominance:
            return FORMAT_TAGGED
        if plain / len(shapes) > self.format_dominance:
            return FORMAT_PLAIN
        return FORMAT_MIXED

    @staticmethod
    def _calculate_confidence(
        candidates: List[int],
        timestamp_lines: List[int],
        shapes: List[str],
        recurring: Sequence[str],
        document_format: str,
    ) -> float:
        """
        Blend five signals into a document confidence in [0, 1].

        Candidate/timestamp ratio band, timestamp format diversity, recurring
        usernames, format clarity and candidate/timestamp alignment each
        contribute up to 0.2.
        """
        if not candidates:
            return 0.0

        confidence = 0.0
        if timestamp_lines:
            ratio = len(candidates) / len(timestamp_lines)
            if 0.5 <= ratio <= 2.0:
                confidence += 0.2
            elif 0.1 <= ratio <= 3.0:
                confidence += 0.1

        if shapes:
            confidence += 0.2 * min(1.0, 3 / len(shapes))

        if recurring:
            confidence += 0.2

        confidence += 0.2 if document_format in (FORMAT_TAGGED, FORMAT_PLAIN) else 0.1

        stamps = set(timestamp_lines)
        aligned = sum(
            1
            for candidate in candidates
            if any(
                candidate + offset in stamps
                for offset in range(-ALIGNMENT_WINDOW, ALIGNMENT_WINDOW + 1)
            )
        )
        confidence += 0.2 * (aligned / len(candidates))

        return max(0.0, min(1.0, confidence))
