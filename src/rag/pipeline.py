from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from src.loaders.chunking import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    ConfigError,
    split_text,
    validate_chunking,
)
from src.rag.embeddings import Embedder, EmbeddingServiceError, embedder_identity
from src.rag.index_cache import IndexCache, IndexKey, content_hash
from src.rag.llm import AnswerGenerator
from src.rag.prompts import build_prompt
from src.rag.retriever import Retriever
from src.rag.types import EmbeddedChunk
from src.vectorstore.inmemory import VectorIndex

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 4


@dataclass(frozen=True)
class PipelineConfig:
    """Chunking and retrieval parameters for one pipeline instance."""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    top_k: int = DEFAULT_TOP_K

    def __post_init__(self) -> None:
        validate_chunking(self.chunk_size, self.chunk_overlap)
        if self.top_k <= 0:
            raise ConfigError(f"top_k must be greater than zero, got {self.top_k}")


@dataclass
class QAPipeline:
    """Answer questions about a document with retrieval-augmented generation.

    The pipeline holds no per-request state and never persists answers;
    callers record the question/answer pair once ``answer_question`` returns.
    """
    embedder: Embedder
    generator: AnswerGenerator
    config: PipelineConfig = field(default_factory=PipelineConfig)
    index_cache: IndexCache | None = None
    retriever: Retriever = field(init=False)

    def __post_init__(self) -> None:
        self.retriever = Retriever(self.embedder)

    def index_key(self, document_text: str) -> IndexKey:
        return IndexKey(
            content_hash=content_hash(document_text),
            chunk_size=self.config.chunk_size,
            chunk_overlap=self.config.chunk_overlap,
            embedder=embedder_identity(self.embedder),
        )

    async def build_index(self, document_text: str) -> VectorIndex:
        """Chunk, embed and index a document, reusing a cached index when possible."""
        key = self.index_key(document_text) if self.index_cache is not None else None
        if key is not None:
            cached = self.index_cache.get(key)
            if cached is not None:
                return cached
        chunks = split_text(document_text, self.config.chunk_size, self.config.chunk_overlap)
        vectors = await asyncio.to_thread(
            self.embedder.embed, [chunk.content for chunk in chunks]
        )
        if len(vectors) != len(chunks):
            raise EmbeddingServiceError(
                f"Embedding count mismatch: expected {len(chunks)}, got {len(vectors)}"
            )
        index = VectorIndex.build(
            EmbeddedChunk(chunk=chunk, vector=list(vector))
            for chunk, vector in zip(chunks, vectors)
        )
        logger.info(
            "index_built",
            extra={
                "chunks": len(chunks),
                "document_length": len(document_text),
                **index.stats(),
            },
        )
        if key is not None:
            self.index_cache.put(key, index)
        return index

    def invalidate(self, digest: str) -> int:
        """Forget cached indexes built from the document with this content hash."""
        if self.index_cache is None:
            return 0
        return self.index_cache.discard(digest)

    async def answer_question(self, document_text: str, question: str) -> str:
        """Return the generator's answer to a question, grounded in the document."""
        index = await self.build_index(document_text)
        chunks = await asyncio.to_thread(
            self.retriever.retrieve, index, question, self.config.top_k
        )
        prompt = build_prompt(chunks, question)
        answer = await self.generator.generate(prompt)
        logger.info(
            "answer_generated",
            extra={
                "context_chunks": len(chunks),
                "prompt_length": len(prompt),
                "answer_length": len(answer),
            },
        )
        return answer
