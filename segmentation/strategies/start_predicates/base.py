"""
Base rule class for the message-start Chain of Responsibility.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple

from ...models import LineRecord


class StartRule(ABC):
    """Abstract base class for one link in the could-be-message-start chain."""

    name = "start-rule"

    def __init__(self):
        self._next_rule: Optional["StartRule"] = None

    def set_next(self, rule: "StartRule") -> "StartRule":
        """Set the next rule in the chain."""
        self._next_rule = rule
        return rule

    def evaluate(self, lines: Sequence[LineRecord], index: int) -> Tuple[bool, str]:
        """
        Decide whether a line could start a message, or defer to the next rule.

        Args:
            lines: Classified lines of the document
            index: Line under consideration

        Returns:
            (decision, name of the rule that decided)
        """
        decision = self.decide(lines, index)
        if decision is not None:
            return decision, self.name

        if self._next_rule:
            return self._next_rule.evaluate(lines, index)

        return False, "no-indicator"

    @abstractmethod
    def decide(self, lines: Sequence[LineRecord], index: int) -> Optional[bool]:
        """
        Implement the rule.

        Returns:
            True to accept, False to reject, None to defer to the next rule
        """
        pass
