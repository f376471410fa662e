from __future__ import annotations

"""Shortlist scoring over accumulated Q&A histories."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from src.candidates.types import CandidateHistory, CandidateProfile, NotFoundError, UserDirectory
from src.scoring.classifiers import AnswerQualityClassifier, PrefixDeclineClassifier

logger = logging.getLogger(__name__)

DEFAULT_MIN_ACCURACY = 60.0


@dataclass(frozen=True)
class HistoryScore:
    """Raw answer counts for one history, accuracy left unrounded."""
    candidate_id: str
    answered: int
    total_questions: int
    accuracy: float


@dataclass(frozen=True)
class ShortlistEntry:
    """Candidate who met the accuracy threshold."""
    candidate_id: str
    name: str
    email: str
    accuracy: float
    total_questions: int


@dataclass
class ShortlistScorer:
    """Compute shortlist decisions from Q&A histories."""
    classifier: AnswerQualityClassifier = field(default_factory=PrefixDeclineClassifier)
    min_accuracy: float = DEFAULT_MIN_ACCURACY

    def evaluate(self, history: CandidateHistory) -> HistoryScore | None:
        """Count answered questions; None when there is nothing to score."""
        total = len(history.records)
        if total == 0:
            return None
        answered = sum(1 for record in history.records if self.classifier.is_answered(record.answer))
        return HistoryScore(
            candidate_id=history.candidate_id,
            answered=answered,
            total_questions=total,
            accuracy=100.0 * answered / total,
        )

    def score(
        self, history: CandidateHistory, profile: CandidateProfile
    ) -> ShortlistEntry | None:
        """Return a shortlist entry if the history meets the threshold."""
        result = self.evaluate(history)
        if result is None or result.accuracy < self.min_accuracy:
            return None
        return ShortlistEntry(
            candidate_id=history.candidate_id,
            name=profile.name,
            email=profile.email,
            accuracy=round(result.accuracy, 2),
            total_questions=result.total_questions,
        )

    def shortlist(
        self, histories: Iterable[CandidateHistory], directory: UserDirectory
    ) -> list[ShortlistEntry]:
        """Score every history in iteration order; the result is not ranked."""
        entries: list[ShortlistEntry] = []
        scanned = 0
        for history in histories:
            scanned += 1
            if not history.records:
                continue
            try:
                profile = directory.lookup(history.candidate_id)
            except NotFoundError:
                logger.warning(
                    "shortlist_profile_missing",
                    extra={"candidate_id": history.candidate_id},
                )
                continue
            entry = self.score(history, profile)
            if entry is not None:
                entries.append(entry)
        logger.info(
            "shortlist_computed",
            extra={"candidates": scanned, "shortlisted": len(entries)},
        )
        return entries
