from __future__ import annotations

"""Answer-quality policies used when scoring Q&A histories."""

from dataclasses import dataclass
from typing import Protocol

DEFAULT_DECLINE_MARKER = "Unfortunately"


class AnswerQualityClassifier(Protocol):
    """Decide whether a stored answer counts as a real answer."""

    def is_answered(self, answer: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class PrefixDeclineClassifier:
    """Treat answers that open with a decline marker as unanswered.

    Only an empty answer is unanswered for lack of text; whitespace alone
    still counts as an answer.
    """
    marker: str = DEFAULT_DECLINE_MARKER

    def is_answered(self, answer: str) -> bool:
        if not answer:
            return False
        return not answer.strip().startswith(self.marker)
