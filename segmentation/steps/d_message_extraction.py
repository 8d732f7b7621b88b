"""
Message Extraction Step

Turns each segment into a Message: finds the header among the first
non-blank lines, then walks the body collecting reactions and the thread
marker, dropping metadata and keeping everything else verbatim.
"""

from typing import List, Optional, Sequence, Tuple

from ..models import NO_HEADER_AUTHOR, LineRecord, Message, Reaction, Segment
from ..strategies.headers import find_header, is_doubled_name
from ..strategies.patterns import is_metadata, is_thread_marker, parse_reaction
from .base import BaseParsingStep


class MessageExtractor(BaseParsingStep):
    """Extract author, timestamp, body, reactions and thread marker per segment."""

    def process(
        self, lines: Sequence[LineRecord], segments: Sequence[Segment]
    ) -> List[Message]:
        """
        Extract one message per segment.

        Args:
            lines: Classified lines in document order
            segments: Kept segments from the boundary resolver

        Returns:
            Messages in segment order
        """
        return [self.extract_segment(lines, segment) for segment in segments]

    def extract_segment(self, lines: Sequence[LineRecord], segment: Segment) -> Message:
        raw_lines = [lines[index].raw for index in range(segment.start, segment.end + 1)]

        header, body_offset = find_header(raw_lines)
        if header:
            author = self.parser_config.resolve_author(header.author)
            timestamp = header.timestamp
            self.trace(
                f"segment [{segment.start}, {segment.end}]: header rule={header.rule} "
                f"author={author!r} timestamp={timestamp!r}"
            )
        else:
            author = NO_HEADER_AUTHOR
            timestamp = None
            self.trace(f"segment [{segment.start}, {segment.end}]: no header")

        body, reactions, thread_marker = self.split_body(raw_lines[body_offset:])
        return Message(
            author=author,
            body=body,
            timestamp=timestamp,
            reactions=tuple(reactions),
            thread_marker=thread_marker,
            start_line=segment.start,
            end_line=segment.end,
        )

    @staticmethod
    def split_body(
        raw_lines: Sequence[str],
    ) -> Tuple[str, List[Reaction], Optional[str]]:
        """
        Separate body text from reactions, thread marker and metadata.

        Args:
            raw_lines: Lines after the header

        Returns:
            (body, reactions, thread_marker)
        """
        kept: List[str] = []
        reactions: List[Reaction] = []
        thread_marker = None
        seen_content = False

        for raw in raw_lines:
            text = raw.strip()
            if not text:
                kept.append("")
                continue
            if not seen_content and is_doubled_name(text):
                continue

            reaction = parse_reaction(text)
            if reaction:
                reactions.append(Reaction(symbol=reaction[0], count=reaction[1]))
                continue
            if is_thread_marker(text):
                thread_marker = thread_marker or text
                continue
            if is_metadata(text):
                continue

            seen_content = True
            kept.append(raw.rstrip())

        return "\n".join(kept).strip(), reactions, thread_marker
