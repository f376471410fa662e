from __future__ import annotations

"""FastAPI application entrypoint for the résumé Q&A service."""

import hashlib
import logging
import time
import uuid

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse

from src.app.dependencies import (
    get_candidate_store,
    get_embedding_config_report,
    get_pipeline,
    get_scorer,
)
from src.app.metrics import (
    ANSWER_LATENCY,
    QUESTIONS_TOTAL,
    RESUMES_SUBMITTED,
    metrics_middleware,
    metrics_response,
)
from src.app.schemas import (
    AskQuestionRequest,
    AskQuestionResponse,
    EmbeddingHealthResponse,
    HistoryResponse,
    MessageResponse,
    QARecordResponse,
    ShortlistEntryResponse,
)
from src.app.security import AuthContext, require_authenticated, require_roles, resolve_caller
from src.app.settings import settings
from src.candidates.store import CandidateStore
from src.candidates.types import NotFoundError, QARecord
from src.loaders.chunking import ConfigError
from src.loaders.resume import ResumeLoaderError, load_resume_bytes
from src.rag.embeddings import EmbeddingConfigError, EmbeddingServiceError
from src.rag.index_cache import content_hash
from src.rag.llm import GenerationServiceError
from src.rag.pipeline import QAPipeline
from src.scoring.shortlist import ShortlistScorer
from src.vectorstore.inmemory import VectorIndexError

logger = logging.getLogger(__name__)

app = FastAPI(title="Resume QA Agent", version="0.1.0")

INTERNAL_ERROR = "Internal Server Error"


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


def _safe_error_message(exc: Exception) -> str:
    """Return a safe error type name for logs and responses."""
    return type(exc).__name__


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


async def _read_upload_bytes(upload: UploadFile, max_bytes: int | None) -> bytes:
    """Stream upload bytes with a hard size limit."""
    if not max_bytes or max_bytes <= 0:
        return await upload.read()
    buffer = bytearray()
    while True:
        chunk = await upload.read(65536)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise HTTPException(
                status_code=400,
                detail=f"File exceeds maximum size of {max_bytes} bytes",
            )
    return bytes(buffer)


@app.exception_handler(EmbeddingConfigError)
@app.exception_handler(GenerationServiceError)
@app.exception_handler(ConfigError)
async def backend_setup_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report backends that could not be constructed from settings."""
    logger.error(
        "service_misconfigured",
        extra={"request_id": _request_id(request), "detail": _safe_error_message(exc)},
    )
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR})


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/health")
async def health() -> dict[str, str]:
    """Simple health probe for uptime checks."""
    return {"status": "ok"}


@app.get("/stats/embedding", response_model=EmbeddingHealthResponse)
async def embedding_health(
    auth: AuthContext | None = Depends(resolve_caller),
) -> EmbeddingHealthResponse:
    """Return embedding configuration health checks."""
    require_roles(require_authenticated(auth), {"admin"})
    report = get_embedding_config_report()
    return EmbeddingHealthResponse(**report.__dict__)


@app.post(
    "/submit-resume",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_resume(
    http_request: Request,
    resume: UploadFile | None = File(default=None),
    auth: AuthContext | None = Depends(resolve_caller),
    store: CandidateStore = Depends(get_candidate_store),
    pipeline: QAPipeline = Depends(get_pipeline),
) -> MessageResponse:
    """Store the caller's résumé text and original file."""
    request_id = _request_id(http_request)
    auth = require_authenticated(auth)
    if not auth.candidate_id:
        raise HTTPException(status_code=401, detail="User not authenticated")
    if resume is None:
        raise HTTPException(status_code=400, detail="No resume file uploaded")
    data = await _read_upload_bytes(resume, settings.file_max_bytes)
    if not data:
        raise HTTPException(status_code=400, detail="No resume file uploaded")
    try:
        store.lookup(auth.candidate_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail="User not found") from exc
    try:
        document = load_resume_bytes(
            data,
            candidate_id=auth.candidate_id,
            filename=resume.filename,
            content_type=resume.content_type,
        )
    except ResumeLoaderError as exc:
        logger.warning(
            "resume_rejected",
            extra={"request_id": request_id, "detail": str(exc)},
        )
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    previous_hash = store.save_resume(
        auth.candidate_id,
        text=document.content,
        data=data,
        content_type=resume.content_type,
        filename=resume.filename,
    )
    if previous_hash and previous_hash != content_hash(document.content):
        pipeline.invalidate(previous_hash)
    RESUMES_SUBMITTED.labels(document.metadata.get("source_type", "unknown")).inc()
    logger.info(
        "resume_submitted",
        extra={
            "request_id": request_id,
            "candidate_id": auth.candidate_id,
            "source_type": document.metadata.get("source_type"),
            "text_length": len(document.content),
            "replaced": previous_hash is not None,
        },
    )
    return MessageResponse(message="Resume submitted successfully")


@app.post("/ask-question", response_model=AskQuestionResponse)
async def ask_question(
    http_request: Request,
    request: AskQuestionRequest | None = None,
    auth: AuthContext | None = Depends(resolve_caller),
    store: CandidateStore = Depends(get_candidate_store),
    pipeline: QAPipeline = Depends(get_pipeline),
) -> AskQuestionResponse:
    """Answer a question about the caller's résumé and record it."""
    request_id = _request_id(http_request)
    question = ((request.question if request else None) or "").strip()
    if auth is None or not auth.candidate_id or not question:
        raise HTTPException(status_code=400, detail="User ID and Question are required")
    candidate_id = auth.candidate_id
    try:
        resume_text = store.get_resume_text(candidate_id)
    except NotFoundError as exc:
        QUESTIONS_TOTAL.labels("no_resume").inc()
        raise HTTPException(status_code=404, detail="No resume found") from exc

    logger.info(
        "question_received",
        extra={
            "request_id": request_id,
            "candidate_id": candidate_id,
            "question_length": len(question),
            "question_hash": hashlib.sha256(question.encode("utf-8")).hexdigest(),
        },
    )
    start = time.monotonic()
    try:
        answer = await pipeline.answer_question(resume_text, question)
    except (EmbeddingServiceError, GenerationServiceError, VectorIndexError) as exc:
        QUESTIONS_TOTAL.labels("failed").inc()
        logger.error(
            "question_failed",
            extra={
                "request_id": request_id,
                "candidate_id": candidate_id,
                "detail": _safe_error_message(exc),
            },
        )
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR) from exc
    finally:
        ANSWER_LATENCY.observe(time.monotonic() - start)

    store.append(candidate_id, QARecord(question=question, answer=answer))
    QUESTIONS_TOTAL.labels("answered").inc()
    logger.info(
        "question_answered",
        extra={
            "request_id": request_id,
            "candidate_id": candidate_id,
            "answer_length": len(answer),
        },
    )
    return AskQuestionResponse(answer=answer)


@app.get("/history", response_model=HistoryResponse)
async def history(
    auth: AuthContext | None = Depends(resolve_caller),
    store: CandidateStore = Depends(get_candidate_store),
) -> HistoryResponse:
    """Return the caller's own question/answer history."""
    auth = require_authenticated(auth)
    if not auth.candidate_id:
        raise HTTPException(status_code=400, detail="User ID is required")
    result = store.get_history(auth.candidate_id)
    return HistoryResponse(
        candidate_id=result.candidate_id,
        records=[
            QARecordResponse(
                question=record.question,
                answer=record.answer,
                created_at=record.created_at,
            )
            for record in result.records
        ],
    )


@app.get("/shortlist-candidates", response_model=list[ShortlistEntryResponse])
async def shortlist_candidates(
    http_request: Request,
    auth: AuthContext | None = Depends(resolve_caller),
    store: CandidateStore = Depends(get_candidate_store),
    scorer: ShortlistScorer = Depends(get_scorer),
) -> list[ShortlistEntryResponse]:
    """List candidates whose answer accuracy meets the threshold."""
    require_roles(require_authenticated(auth), {"recruiter", "admin"})
    entries = scorer.shortlist(store.list_all(), store)
    logger.info(
        "shortlist_served",
        extra={"request_id": _request_id(http_request), "shortlisted": len(entries)},
    )
    return [ShortlistEntryResponse(**entry.__dict__) for entry in entries]
