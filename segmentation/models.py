"""
Intermediate representation for transcript segmentation.

Line records and the document profile are immutable once built. Segments are
plain mutable records held in a single list and adjusted in place by the
boundary resolver. Messages are the final, immutable output.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

NO_HEADER_AUTHOR = "Unknown User"

LENGTH_BLANK = "blank"
LENGTH_SHORT = "short"
LENGTH_MEDIUM = "medium"
LENGTH_LONG = "long"

FORMAT_TAGGED = "tagged"
FORMAT_PLAIN = "plain"
FORMAT_MIXED = "mixed"


@dataclass(frozen=True)
class LineFeatures:
    """Boolean probes computed for a single line."""

    has_timestamp: bool = False
    has_url: bool = False
    has_avatar: bool = False
    has_emoji: bool = False
    has_reaction: bool = False
    starts_capital: bool = False
    is_all_caps: bool = False
    has_digits: bool = False


@dataclass(frozen=True)
class LineContext:
    """Neighbouring-line context for a single line."""

    prev_line: Optional[str] = None
    next_line: Optional[str] = None
    blank_before: bool = False
    blank_after: bool = False


@dataclass(frozen=True)
class LineRecord:
    """A classified line of the pasted transcript."""

    index: int
    raw: str
    trimmed: str
    is_blank: bool
    length_class: str
    features: LineFeatures = field(default_factory=LineFeatures)
    context: LineContext = field(default_factory=LineContext)

    @property
    def is_short(self) -> bool:
        return self.length_class == LENGTH_SHORT

    @property
    def is_long(self) -> bool:
        return self.length_class == LENGTH_LONG


@dataclass(frozen=True)
class DocumentProfile:
    """Document-wide statistics gathered in one pass over the lines."""

    start_candidates: FrozenSet[int] = frozenset()
    timestamp_lines: FrozenSet[int] = frozenset()
    username_lines: FrozenSet[int] = frozenset()
    metadata_lines: FrozenSet[int] = frozenset()
    continuation_lines: FrozenSet[int] = frozenset()
    average_message_length: int = 0
    recurring_usernames: Tuple[str, ...] = ()
    timestamp_formats: Tuple[str, ...] = ()
    format: str = FORMAT_MIXED
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_candidates": sorted(self.start_candidates),
            "timestamp_lines": sorted(self.timestamp_lines),
            "username_lines": sorted(self.username_lines),
            "metadata_lines": sorted(self.metadata_lines),
            "continuation_lines": sorted(self.continuation_lines),
            "average_message_length": self.average_message_length,
            "recurring_usernames": list(self.recurring_usernames),
            "timestamp_formats": list(self.timestamp_formats),
            "format": self.format,
            "confidence": round(self.confidence, 3),
        }


@dataclass
class Segment:
    """Inclusive line range believed to hold one message."""

    start: int
    end: int
    confidence: float = 0.0

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid segment range [{self.start}, {self.end}]")

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class RankedCandidate:
    """A start candidate with its ranking score."""

    index: int
    score: int


@dataclass(frozen=True)
class Header:
    """Author and timestamp text recovered from a message header."""

    author: str
    timestamp: Optional[str] = None
    rule: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.author) and bool(self.timestamp)


@dataclass(frozen=True)
class Reaction:
    """A reaction counter attached to a message."""

    symbol: str
    count: int


@dataclass(frozen=True)
class Message:
    """A single chat message recovered from the transcript."""

    author: str
    body: str
    timestamp: Optional[str] = None
    reactions: Tuple[Reaction, ...] = ()
    thread_marker: Optional[str] = None
    start_line: int = 0
    end_line: int = 0

    @property
    def has_header(self) -> bool:
        return self.author != NO_HEADER_AUTHOR

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary for JSON serialization."""
        return {
            "author": self.author,
            "timestamp": self.timestamp,
            "body": self.body,
            "reactions": [asdict(reaction) for reaction in self.reactions],
            "thread_marker": self.thread_marker,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }


@dataclass(frozen=True)
class TranscriptContext:
    """Summary of a parsed transcript, written ahead of the messages."""

    source_name: str
    participants: Tuple[str, ...]
    message_count: int
    format: str
    confidence: float

    @classmethod
    def from_messages(
        cls, source_name: str, messages: List[Message], profile: DocumentProfile
    ) -> "TranscriptContext":
        participants = []
        for message in messages:
            if message.has_header and message.author not in participants:
                participants.append(message.author)
        return cls(
            source_name=source_name,
            participants=tuple(participants),
            message_count=len(messages),
            format=profile.format,
            confidence=profile.confidence,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for JSON serialization."""
        return {
            "source_name": self.source_name,
            "participants": list(self.participants),
            "message_count": self.message_count,
            "format": self.format,
            "confidence": round(self.confidence, 3),
        }


@dataclass
class ParseResult:
    """Messages together with the intermediate state that produced them."""

    messages: List[Message] = field(default_factory=list)
    lines: List[LineRecord] = field(default_factory=list)
    profile: DocumentProfile = field(default_factory=DocumentProfile)
    segments: List[Segment] = field(default_factory=list)
