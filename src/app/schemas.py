from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class AskQuestionRequest(BaseModel):
    question: str | None = None


class AskQuestionResponse(BaseModel):
    answer: str


class QARecordResponse(BaseModel):
    question: str
    answer: str
    created_at: datetime | None = None


class HistoryResponse(BaseModel):
    candidate_id: str
    records: list[QARecordResponse]


class ShortlistEntryResponse(BaseModel):
    candidate_id: str
    name: str
    email: str
    accuracy: float
    total_questions: int


class EmbeddingHealthResponse(BaseModel):
    provider: str
    model: str | None
    configured_dimension: int
    expected_dimension: int | None = None
    ok: bool
    status: str
    detail: str | None = None
    action: str | None = None
