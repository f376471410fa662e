from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path
from typing import Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["RAG_ALLOW_ANONYMOUS"] = "false"
os.environ["RAG_LLM_PROVIDER"] = "extractive"
os.environ["EMBEDDING_PROVIDER"] = "hash"
os.environ["EMBEDDING_DIMENSION"] = "256"
os.environ.pop("RAG_API_KEY_MAP", None)
os.environ.pop("COHERE_API_KEY", None)
os.environ.pop("ANTHROPIC_API_KEY", None)
os.environ.pop("OPENAI_API_KEY", None)

from src.candidates.store import CandidateStore  # noqa: E402
from src.rag.embeddings import EmbeddingServiceError, HashEmbedder  # noqa: E402


class CountingEmbedder(HashEmbedder):
    """Hash embedder that records how often each method is called."""

    def __init__(self, dimension: int = 64) -> None:
        super().__init__(dimension=dimension)
        self.embed_calls = 0
        self.query_calls = 0

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        self.embed_calls += 1
        return super().embed(texts)

    def embed_query(self, text: str) -> list[float]:
        self.query_calls += 1
        return super().embed_query(text)


class FailingEmbedder:
    """Embedder whose backend is always down."""
    dimension = 64

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        raise EmbeddingServiceError("embedding backend unavailable")

    def embed_query(self, text: str) -> list[float]:
        raise EmbeddingServiceError("embedding backend unavailable")


class FixedGenerator:
    """Generator that returns a canned answer and remembers its prompts."""

    def __init__(self, answer: str) -> None:
        self.answer = answer
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def store(tmp_path: Path) -> CandidateStore:
    return CandidateStore(f"sqlite:///{tmp_path / 'candidates.db'}")


@pytest.fixture
def counting_embedder() -> CountingEmbedder:
    return CountingEmbedder()


@pytest.fixture
def failing_embedder() -> FailingEmbedder:
    return FailingEmbedder()


@pytest.fixture
def fixed_generator():
    return FixedGenerator


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
