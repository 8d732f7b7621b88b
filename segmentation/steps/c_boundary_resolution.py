"""
Boundary Resolution Step

Ranks the start candidates, cuts the document into segments, extends
segments over continuation markers, merges segments a continuation runs
into, and drops low-confidence segments. Segments live in one list and are
adjusted in place.
"""

from typing import List, Sequence

from ..models import DocumentProfile, LineRecord, RankedCandidate, Segment
from ..strategies.continuation import (
    MAX_CONTINUATION_SCAN,
    continuation_end,
    next_non_blank,
)
from .base import BaseParsingStep

DEFAULT_AVERAGE_LENGTH = 5
MIN_SEGMENT_CONFIDENCE = 0.3
MIN_CANDIDATE_SCORE = 1
MERGE_LOOKBACK = 5
RANK_TIMESTAMP_WINDOW = 2

DEFAULT_RANK_WEIGHTS = {
    "timestamp_nearby": 3,
    "blank_before": 2,
    "recurring_username": 2,
    "capital_start": 1,
    "short_line": 1,
    "metadata": -3,
    "typical_spacing": 1,
}

DEFAULT_CONFIDENCE_WEIGHTS = {
    "length_typical": 0.2,
    "length_plausible": 0.15,
    "username": 0.25,
    "timestamp": 0.25,
    "content": 0.2,
}


class BoundaryResolver(BaseParsingStep):
    """Turn start candidates into non-overlapping message segments."""

    def setup(self):
        self.min_confidence = float(
            self.get_config_value("min_segment_confidence", MIN_SEGMENT_CONFIDENCE)
        )
        self.min_score = int(self.get_config_value("min_candidate_score", MIN_CANDIDATE_SCORE))
        self.max_scan = int(self.get_config_value("max_continuation_scan", MAX_CONTINUATION_SCAN))
        self.rank_weights = dict(DEFAULT_RANK_WEIGHTS)
        self.rank_weights.update(self.get_config_value("rank_weights", {}))
        self.confidence_weights = dict(DEFAULT_CONFIDENCE_WEIGHTS)
        self.confidence_weights.update(self.get_config_value("confidence_weights", {}))

    def process(
        self, lines: Sequence[LineRecord], profile: DocumentProfile
    ) -> List[Segment]:
        """
        Resolve message boundaries.

        Args:
            lines: Classified lines in document order
            profile: Document profile from the aggregation step

        Returns:
            Kept segments in document order
        """
        if not lines:
            return []

        ranked = self.rank_candidates(lines, profile)
        starts = sorted(
            candidate.index for candidate in ranked if candidate.score >= self.min_score
        )

        segments = self.build_segments(lines, profile, starts)
        self.extend_segments(lines, profile, segments)
        segments = self.merge_segments(lines, profile, segments)

        kept = []
        for segment in segments:
            if segment.confidence > self.min_confidence:
                kept.append(segment)
            else:
                self.trace(
                    f"dropped segment [{segment.start}, {segment.end}] "
                    f"confidence={segment.confidence:.2f}"
                )
        return kept

    def rank_candidates(
        self, lines: Sequence[LineRecord], profile: DocumentProfile
    ) -> List[RankedCandidate]:
        """
        Score every start candidate.

        Returns:
            Candidates ordered by descending score, ties by ascending index
        """
        average = profile.average_message_length or DEFAULT_AVERAGE_LENGTH
        candidates = sorted(profile.start_candidates)
        weights = self.rank_weights

        ranked = []
        for position, index in enumerate(candidates):
            line = lines[index]
            score = 0

            low = max(0, index - RANK_TIMESTAMP_WINDOW)
            high = min(len(lines) - 1, index + RANK_TIMESTAMP_WINDOW)
            if any(nearby in profile.timestamp_lines for nearby in range(low, high + 1)):
                score += weights["timestamp_nearby"]
            if line.context.blank_before:
                score += weights["blank_before"]
            if any(name in line.trimmed for name in profile.recurring_usernames):
                score += weights["recurring_username"]
            if line.features.starts_capital:
                score += weights["capital_start"]
            if line.is_short:
                score += weights["short_line"]
            if index in profile.metadata_lines:
                score += weights["metadata"]
            if position > 0:
                distance = index - candidates[position - 1]
                if average * 0.5 <= distance <= average * 2:
                    score += weights["typical_spacing"]

            ranked.append(RankedCandidate(index=index, score=score))

        ranked.sort(key=lambda candidate: (-candidate.score, candidate.index))
        for candidate in ranked:
            self.trace(f"candidate line {candidate.index}: score={candidate.score}")
        return ranked

    def build_segments(
        self, lines: Sequence[LineRecord], profile: DocumentProfile, starts: List[int]
    ) -> List[Segment]:
        """Cut [0, n) at every start; lines before the first start form their own segment."""
        segments = []
        current = 0
        for start in starts:
            if start > current:
                segments.append(self._new_segment(lines, profile, current, start - 1))
                current = start
        segments.append(self._new_segment(lines, profile, current, len(lines) - 1))
        return segments

    def extend_segments(
        self,
        lines: Sequence[LineRecord],
        profile: DocumentProfile,
        segments: List[Segment],
    ):
        """
        Grow segments over continuation markers, in place.

        A segment absorbs the reach of markers inside it, then folds in any
        markers that directly follow it. It never grows past the line before
        the next segment; crossing that line is left to the merge pass.
        """
        last_line = len(lines) - 1
        starts = profile.start_candidates
        for position, segment in enumerate(segments):
            limit = segments[position + 1].start - 1 if position + 1 < len(segments) else last_line

            reach = segment.end
            for index in range(segment.start, segment.end + 1):
                if index in profile.continuation_lines:
                    reach = max(reach, continuation_end(lines, index, starts, self.max_scan))

            iterations = 0
            while reach < last_line and iterations < self.max_scan:
                iterations += 1
                following = next_non_blank(lines, reach)
                if following is None or following not in profile.continuation_lines:
                    break
                reach = max(following, continuation_end(lines, following, starts, self.max_scan))

            new_end = max(segment.end, min(reach, limit))
            if new_end != segment.end:
                self.trace(f"extended segment [{segment.start}, {segment.end}] to {new_end}")
                segment.end = new_end

    def merge_segments(
        self,
        lines: Sequence[LineRecord],
        profile: DocumentProfile,
        segments: List[Segment],
    ) -> List[Segment]:
        """Merge a segment with the next one when a trailing continuation runs into it."""
        merged = []
        position = 0
        while position < len(segments):
            current = segments[position]
            while position + 1 < len(segments) and self._continuation_reaches(
                lines, profile, current, segments[position + 1]
            ):
                following = segments[position + 1]
                self.trace(
                    f"merged segment [{following.start}, {following.end}] "
                    f"into [{current.start}, {current.end}]"
                )
                current.end = max(current.end, following.end)
                current.confidence = max(current.confidence, following.confidence)
                position += 1
            merged.append(current)
            position += 1
        return merged

    def _continuation_reaches(
        self,
        lines: Sequence[LineRecord],
        profile: DocumentProfile,
        current: Segment,
        following: Segment,
    ) -> bool:
        first = max(current.start, current.end - MERGE_LOOKBACK + 1)
        for index in range(first, current.end + 1):
            if index not in profile.continuation_lines:
                continue
            reach = continuation_end(lines, index, profile.start_candidates, self.max_scan)
            if reach >= following.start:
                return True
        return False

    def _new_segment(
        self, lines: Sequence[LineRecord], profile: DocumentProfile, start: int, end: int
    ) -> Segment:
        return Segment(start=start, end=end, confidence=self.segment_confidence(lines, profile, start, end))

    def segment_confidence(
        self, lines: Sequence[LineRecord], profile: DocumentProfile, start: int, end: int
    ) -> float:
        """
        Score how much a line range looks like one message.

        Length relative to the document average, a username line or a
        timestamp line among the first two lines, and any non-metadata
        content each add to the score, clamped to [0, 1].
        """
        weights = self.confidence_weights
        average = profile.average_message_length or DEFAULT_AVERAGE_LENGTH
        length = end - start + 1

        confidence = 0.0
        if average * 0.2 <= length <= average * 3:
            confidence += weights["length_typical"]
        elif average * 0.1 <= length <= average * 5:
            confidence += weights["length_plausible"]

        head = range(start, min(end, start + 1) + 1)
        if any(index in profile.username_lines for index in head):
            confidence += weights["username"]
        if any(index in profile.timestamp_lines for index in head):
            confidence += weights["timestamp"]

        if any(
            not lines[index].is_blank and index not in profile.metadata_lines
            for index in range(start, end + 1)
        ):
            confidence += weights["content"]

        return max(0.0, min(1.0, confidence))
