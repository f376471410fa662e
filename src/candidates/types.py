from __future__ import annotations

"""Candidate records and the store interfaces the service depends on."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


class NotFoundError(LookupError):
    """Raised when a candidate profile or résumé is missing."""
    pass


@dataclass(frozen=True)
class QARecord:
    """One answered question. Never edited after it is appended."""
    question: str
    answer: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class CandidateHistory:
    """Ordered Q&A records for one candidate."""
    candidate_id: str
    records: tuple[QARecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CandidateProfile:
    """Directory entry for a candidate."""
    candidate_id: str
    name: str
    email: str


@dataclass(frozen=True)
class StoredResume:
    """Résumé as kept on file: extracted text plus the original upload."""
    candidate_id: str
    text: str
    data: bytes
    content_type: str | None
    filename: str | None
    content_hash: str


class DocumentStore(Protocol):
    def get_resume_text(self, candidate_id: str) -> str: ...

    def save_resume(
        self,
        candidate_id: str,
        text: str,
        data: bytes,
        content_type: str | None,
        filename: str | None,
    ) -> str | None: ...


class HistoryStore(Protocol):
    def append(self, candidate_id: str, record: QARecord) -> None: ...

    def get_history(self, candidate_id: str) -> CandidateHistory: ...

    def list_all(self) -> list[CandidateHistory]: ...


class UserDirectory(Protocol):
    def lookup(self, candidate_id: str) -> CandidateProfile: ...
