"""
Transcript Segmentation

Splits text pasted from a chat client's web UI into ordered message records
(author, timestamp text, body, reactions, thread marker).
"""

from .config import ParserConfig
from .exceptions import ConfigurationError, SegmentationError
from .models import NO_HEADER_AUTHOR, Message, ParseResult, Reaction
from .pipeline import TranscriptParser, parse_transcript

__all__ = [
    "ConfigurationError",
    "Message",
    "NO_HEADER_AUTHOR",
    "ParseResult",
    "ParserConfig",
    "Reaction",
    "SegmentationError",
    "TranscriptParser",
    "parse_transcript",
]
