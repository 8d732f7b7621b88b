"""
Could-be-message-start predicate.

The predicate is an ordered chain of small rules. Rejections run first, then
the strong and weak acceptance rules; the first rule with an opinion decides.
"""

from typing import Optional, Sequence, Tuple

from ...models import LineRecord
from .acceptance import StrongIndicatorRule, WeakIndicatorRule
from .base import StartRule
from .rejection import (
    AttachmentLabelRule,
    BlankLineRule,
    ContinuationMarkerRule,
    LinkPreviewRule,
    MetadataLineRule,
    SplitHeaderTimestampRule,
)


def build_start_chain() -> StartRule:
    """Create the rule chain in evaluation order and return its head."""
    head = BlankLineRule()
    (
        head.set_next(MetadataLineRule())
        .set_next(AttachmentLabelRule())
        .set_next(ContinuationMarkerRule())
        .set_next(SplitHeaderTimestampRule())
        .set_next(LinkPreviewRule())
        .set_next(StrongIndicatorRule())
        .set_next(WeakIndicatorRule())
    )
    return head


def explain_message_start(
    lines: Sequence[LineRecord], index: int, chain: Optional[StartRule] = None
) -> Tuple[bool, str]:
    """Evaluate the chain and report which rule decided."""
    return (chain or build_start_chain()).evaluate(lines, index)


def could_be_message_start(
    lines: Sequence[LineRecord], index: int, chain: Optional[StartRule] = None
) -> bool:
    return explain_message_start(lines, index, chain)[0]


__all__ = [
    "StartRule",
    "build_start_chain",
    "could_be_message_start",
    "explain_message_start",
]
