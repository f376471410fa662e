from __future__ import annotations

"""SQL persistence for candidate profiles, résumés and Q&A history."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    select,
)
from sqlalchemy.exc import IntegrityError

from src.candidates.types import (
    CandidateHistory,
    CandidateProfile,
    NotFoundError,
    QARecord,
    StoredResume,
)
from src.rag.index_cache import content_hash


class CandidateStore:
    """Document store, history store and user directory on one SQL database.

    Every write runs in its own transaction that commits before the method
    returns. Each Q&A record is its own row, so concurrent appends for the
    same candidate cannot overwrite one another.
    """
    def __init__(self, connection_uri: str) -> None:
        """Initialize the store and ensure tables exist."""
        connect_args: dict[str, Any] = {}
        if connection_uri.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self._engine = create_engine(connection_uri, connect_args=connect_args)
        self._metadata = MetaData()
        self._candidates = Table(
            "candidates",
            self._metadata,
            Column("id", String(64), primary_key=True),
            Column("full_name", String(255), nullable=False),
            Column("email", String(255), nullable=False),
            Column("created_at", DateTime(timezone=True), nullable=False),
        )
        self._resumes = Table(
            "resumes",
            self._metadata,
            Column("candidate_id", String(64), primary_key=True),
            Column("text", Text, nullable=False),
            Column("data", LargeBinary, nullable=False),
            Column("content_type", String(128), nullable=True),
            Column("filename", String(255), nullable=True),
            Column("content_hash", String(64), nullable=False),
            Column("updated_at", DateTime(timezone=True), nullable=False),
        )
        self._qa_records = Table(
            "qa_records",
            self._metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("candidate_id", String(64), nullable=False, index=True),
            Column("question", Text, nullable=False),
            Column("answer", Text, nullable=False),
            Column("created_at", DateTime(timezone=True), nullable=False),
        )
        self._metadata.create_all(self._engine)

    def upsert_profile(self, profile: CandidateProfile) -> None:
        """Create or update a directory entry."""
        with self._engine.begin() as conn:
            exists = conn.execute(
                select(self._candidates.c.id).where(self._candidates.c.id == profile.candidate_id)
            ).first()
            if exists:
                conn.execute(
                    self._candidates.update()
                    .where(self._candidates.c.id == profile.candidate_id)
                    .values(full_name=profile.name, email=profile.email)
                )
            else:
                conn.execute(
                    self._candidates.insert().values(
                        id=profile.candidate_id,
                        full_name=profile.name,
                        email=profile.email,
                        created_at=datetime.now(timezone.utc),
                    )
                )

    def lookup(self, candidate_id: str) -> CandidateProfile:
        """Return the directory entry for a candidate."""
        with self._engine.connect() as conn:
            row = conn.execute(
                select(self._candidates).where(self._candidates.c.id == candidate_id)
            ).first()
        if row is None:
            raise NotFoundError(f"Candidate {candidate_id} not found")
        return CandidateProfile(candidate_id=row.id, name=row.full_name, email=row.email)

    def save_resume(
        self,
        candidate_id: str,
        text: str,
        data: bytes,
        content_type: str | None,
        filename: str | None,
    ) -> str | None:
        """Store a résumé, replacing any previous one.

        Returns the content hash of the replaced résumé, if there was one.
        """
        digest = content_hash(text)
        values = {
            "text": text,
            "data": data,
            "content_type": content_type,
            "filename": filename,
            "content_hash": digest,
            "updated_at": datetime.now(timezone.utc),
        }
        try:
            return self._write_resume(candidate_id, values)
        except IntegrityError:
            # A concurrent first upload inserted the row; this pass updates it.
            return self._write_resume(candidate_id, values)

    def _write_resume(self, candidate_id: str, values: dict[str, Any]) -> str | None:
        with self._engine.begin() as conn:
            previous = self._current_resume_hash(conn, candidate_id)
            if previous is None:
                conn.execute(self._resumes.insert().values(candidate_id=candidate_id, **values))
            else:
                conn.execute(
                    self._resumes.update()
                    .where(self._resumes.c.candidate_id == candidate_id)
                    .values(**values)
                )
        return previous

    def _current_resume_hash(self, conn: Any, candidate_id: str) -> str | None:
        return conn.execute(
            select(self._resumes.c.content_hash).where(self._resumes.c.candidate_id == candidate_id)
        ).scalar_one_or_none()

    def get_resume(self, candidate_id: str) -> StoredResume:
        """Return the stored résumé for a candidate."""
        with self._engine.connect() as conn:
            row = conn.execute(
                select(self._resumes).where(self._resumes.c.candidate_id == candidate_id)
            ).first()
        if row is None:
            raise NotFoundError(f"No resume found for candidate {candidate_id}")
        return StoredResume(
            candidate_id=row.candidate_id,
            text=row.text,
            data=row.data,
            content_type=row.content_type,
            filename=row.filename,
            content_hash=row.content_hash,
        )

    def get_resume_text(self, candidate_id: str) -> str:
        return self.get_resume(candidate_id).text

    def append(self, candidate_id: str, record: QARecord) -> None:
        """Append a Q&A record to a candidate's history."""
        created_at = record.created_at or datetime.now(timezone.utc)
        with self._engine.begin() as conn:
            conn.execute(
                self._qa_records.insert().values(
                    candidate_id=candidate_id,
                    question=record.question,
                    answer=record.answer,
                    created_at=created_at,
                )
            )

    def get_history(self, candidate_id: str) -> CandidateHistory:
        """Return a candidate's records in append order (empty if none)."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(self._qa_records)
                .where(self._qa_records.c.candidate_id == candidate_id)
                .order_by(self._qa_records.c.id)
            ).all()
        return CandidateHistory(
            candidate_id=candidate_id,
            records=tuple(self._to_record(row) for row in rows),
        )

    def list_all(self) -> list[CandidateHistory]:
        """Return every non-empty history, ordered by each candidate's first record."""
        with self._engine.connect() as conn:
            rows = conn.execute(select(self._qa_records).order_by(self._qa_records.c.id)).all()
        grouped: dict[str, list[QARecord]] = {}
        for row in rows:
            grouped.setdefault(row.candidate_id, []).append(self._to_record(row))
        return [
            CandidateHistory(candidate_id=candidate_id, records=tuple(records))
            for candidate_id, records in grouped.items()
        ]

    @staticmethod
    def _to_record(row: Any) -> QARecord:
        return QARecord(question=row.question, answer=row.answer, created_at=row.created_at)
