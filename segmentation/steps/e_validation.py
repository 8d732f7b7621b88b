"""
Validation Step

Filters spurious messages. Messages are only ever dropped here, never
modified.
"""

from typing import List, Optional, Sequence

from ..models import Message
from ..strategies.patterns import is_attachment_credit
from .base import BaseParsingStep

MIN_UNATTRIBUTED_LENGTH = 20


class MessageValidator(BaseParsingStep):
    """Drop header-less noise and empty duplicates of the next header."""

    def setup(self):
        self.min_unattributed_length = int(
            self.get_config_value("min_unattributed_length", MIN_UNATTRIBUTED_LENGTH)
        )

    def process(self, messages: Sequence[Message]) -> List[Message]:
        """
        Keep the messages that look real.

        Args:
            messages: Extracted messages in document order

        Returns:
            The subset worth keeping, order preserved
        """
        kept = []
        for position, message in enumerate(messages):
            following = messages[position + 1] if position + 1 < len(messages) else None
            if self.is_valid(message, following):
                kept.append(message)
            else:
                self.trace(
                    f"dropped message lines [{message.start_line}, {message.end_line}] "
                    f"author={message.author!r}"
                )
        return kept

    def is_valid(self, message: Message, following: Optional[Message] = None) -> bool:
        """
        Decide whether a message survives.

        Header-less messages need more than a short fragment of text that is
        not an attachment credit or UI label. Attributed messages need a body,
        except that a bare header with a timestamp is kept unless the next
        message repeats the same author.
        """
        body = message.body.strip()
        if not message.has_header:
            return len(body) > self.min_unattributed_length and not is_attachment_credit(body)

        if body:
            return True
        if not message.timestamp:
            return False
        return following is None or following.author != message.author
