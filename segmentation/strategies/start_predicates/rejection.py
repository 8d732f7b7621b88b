"""
Rejection rules: lines that can never open a message.
"""

from typing import Optional, Sequence

from ...models import LineRecord
from ..continuation import has_header_signal, is_continuation
from ..headers import looks_like_username
from ..patterns import (
    is_attachment_label,
    is_metadata,
    is_quoted,
    is_standalone_timestamp,
)
from .base import StartRule

LINK_PREVIEW_URL_WINDOW = 5
LINK_PREVIEW_QUOTE_WINDOW = 3
MIN_QUOTED_LENGTH = 10


class BlankLineRule(StartRule):
    name = "blank"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        return False if lines[index].is_blank else None


class MetadataLineRule(StartRule):
    """Reaction counters, reply counts, separators, bare URLs, avatar markup."""

    name = "metadata"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        return False if is_metadata(lines[index].trimmed) else None


class AttachmentLabelRule(StartRule):
    """File-type and service labels such as "PDF" or "Google Doc"."""

    name = "attachment-label"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        return False if is_attachment_label(lines[index].trimmed) else None


class ContinuationMarkerRule(StartRule):
    name = "continuation"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        return False if is_continuation(lines, index) else None


class SplitHeaderTimestampRule(StartRule):
    """The time line of a name-above-time header belongs to the name line."""

    name = "split-header-time"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        if index == 0 or not is_standalone_timestamp(lines[index].trimmed):
            return None
        above = lines[index - 1]
        if not above.is_blank and looks_like_username(above.trimmed):
            return False
        return None


class LinkPreviewRule(StartRule):
    """
    Title and description lines unfurled under a shared link or a quote.

    Lines carrying their own header signal are never treated as previews.
    """

    name = "link-preview"

    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        if has_header_signal(lines, index):
            return None

        for position in range(max(0, index - LINK_PREVIEW_URL_WINDOW), index):
            if self._is_shared_url(lines[position]):
                return False

        for position in range(max(0, index - LINK_PREVIEW_QUOTE_WINDOW), index):
            line = lines[position]
            if is_quoted(line.trimmed) and len(line.trimmed) > MIN_QUOTED_LENGTH:
                return False

        return None

    @staticmethod
    def _is_shared_url(line: LineRecord) -> bool:
        features = line.features
        return features.has_url and not features.has_timestamp and not features.has_avatar
