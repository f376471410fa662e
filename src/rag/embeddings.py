from __future__ import annotations

"""Embedding providers and configuration validation."""

import hashlib
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import httpx

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9]+")
_COHERE_MAX_BATCH = 96


class EmbeddingServiceError(RuntimeError):
    """Raised when an embedding backend fails or returns invalid vectors."""
    pass


class EmbeddingConfigError(RuntimeError):
    """Raised when embedding configuration is invalid."""
    pass


class Embedder(Protocol):
    """Protocol for embedding providers."""
    dimension: int

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Return one embedding vector per input text, in order."""
        raise NotImplementedError

    def embed_query(self, text: str) -> list[float]:
        """Return the embedding vector for a search query."""
        raise NotImplementedError


def validate_vector(vector: Sequence[Any], dimension: int) -> list[float]:
    """Validate an embedding vector and coerce it to floats."""
    if len(vector) != dimension:
        raise EmbeddingServiceError(
            f"Embedding dimension mismatch: expected {dimension}, got {len(vector)}"
        )
    cleaned: list[float] = []
    for value in vector:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EmbeddingServiceError("Embedding contains a non-numeric value")
        if not math.isfinite(value):
            raise EmbeddingServiceError("Embedding contains a non-finite value")
        cleaned.append(float(value))
    return cleaned


def validate_batch(
    vectors: Sequence[Sequence[Any]], expected: int, dimension: int
) -> list[list[float]]:
    """Validate a batch response against the number of requested texts."""
    if len(vectors) != expected:
        raise EmbeddingServiceError(
            f"Embedding count mismatch: expected {expected}, got {len(vectors)}"
        )
    return [validate_vector(vector, dimension) for vector in vectors]


def embedder_identity(embedder: Embedder) -> str:
    """Describe an embedder well enough to tell cached indexes apart."""
    model = getattr(embedder, "model", None) or ""
    return f"{type(embedder).__name__}:{model}:{embedder.dimension}"


@dataclass
class HashEmbedder:
    """Deterministic hash-based embedder for testing or offline use."""
    dimension: int = 256

    def __post_init__(self) -> None:
        if self.dimension <= 0:
            raise EmbeddingConfigError("EMBEDDING_DIMENSION must be greater than zero")

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed texts using token hashing and L2 normalization."""
        return [self._embed_one(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed_one(text)

    def _embed_one(self, text: str) -> list[float]:
        tokens = _TOKEN_RE.findall(text.lower())
        vector = [0.0] * self.dimension
        for token in tokens:
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            idx = int.from_bytes(digest[:4], "big") % self.dimension
            vector[idx] += 1.0
        return validate_vector(self._l2_normalize(vector), self.dimension)

    def _l2_normalize(self, vector: list[float]) -> list[float]:
        """Normalize vector magnitude to 1.0."""
        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0.0:
            return vector
        return [value / norm for value in vector]


def resolve_cohere_dimension(model: str) -> int | None:
    """Return expected dimension for a Cohere embedding model."""
    mapping = {
        "embed-english-v3.0": 1024,
        "embed-multilingual-v3.0": 1024,
        "embed-english-light-v3.0": 384,
        "embed-multilingual-light-v3.0": 384,
        "embed-english-v2.0": 4096,
    }
    return mapping.get(model)


def resolve_openai_dimension(model: str) -> int | None:
    """Return expected dimension for OpenAI embedding model."""
    mapping = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }
    return mapping.get(model)


_DIMENSION_RESOLVERS = {
    "cohere": resolve_cohere_dimension,
    "openai": resolve_openai_dimension,
}


@dataclass(frozen=True)
class EmbeddingConfigReport:
    """Validation report for embedding configuration."""
    provider: str
    model: str | None
    configured_dimension: int
    expected_dimension: int | None
    ok: bool
    status: str
    detail: str | None = None
    action: str | None = None


def build_embedding_config_report(
    provider: str, model: str | None, dimension: int
) -> EmbeddingConfigReport:
    """Build a validation report for embedding settings."""
    normalized = provider.lower().strip() or "hash"

    def _report(
        ok: bool,
        status: str,
        expected: int | None,
        detail: str | None = None,
        action: str | None = None,
    ) -> EmbeddingConfigReport:
        return EmbeddingConfigReport(
            provider=normalized,
            model=model if normalized != "hash" else None,
            configured_dimension=dimension,
            expected_dimension=expected,
            ok=ok,
            status=status,
            detail=detail,
            action=action,
        )

    if normalized == "hash":
        if dimension <= 0:
            return _report(
                False,
                "error",
                None,
                detail="EMBEDDING_DIMENSION must be greater than zero for hash embeddings.",
                action="Set EMBEDDING_DIMENSION to a positive integer.",
            )
        return _report(True, "ok", dimension)

    resolver = _DIMENSION_RESOLVERS.get(normalized)
    if resolver is None:
        return _report(
            False,
            "error",
            None,
            detail="Unsupported embedding provider.",
            action="Set EMBEDDING_PROVIDER to hash, cohere, or openai.",
        )
    env_prefix = normalized.upper()
    if not model:
        return _report(
            False,
            "error",
            None,
            detail=f"{env_prefix}_EMBEDDING_MODEL is required for {normalized} embeddings.",
            action=f"Set {env_prefix}_EMBEDDING_MODEL in .env.",
        )
    expected = resolver(model)
    if dimension <= 0:
        action = (
            f"Set EMBEDDING_DIMENSION to {expected}."
            if expected is not None
            else "Set EMBEDDING_DIMENSION based on the model documentation."
        )
        return _report(
            False,
            "error",
            expected,
            detail="EMBEDDING_DIMENSION is missing for the configured model.",
            action=action,
        )
    if expected is not None and dimension != expected:
        return _report(
            False,
            "error",
            expected,
            detail="EMBEDDING_DIMENSION does not match the model dimension.",
            action=f"Set EMBEDDING_DIMENSION to {expected}.",
        )
    if expected is None:
        return _report(
            True,
            "warning",
            None,
            detail="Model dimension cannot be auto-validated. Confirm EMBEDDING_DIMENSION manually.",
        )
    return _report(True, "ok", expected)


def _resolve_dimension(provider: str, model: str, dimension: int) -> int:
    """Resolve the effective dimension or fail on a known mismatch."""
    resolved = _DIMENSION_RESOLVERS[provider](model)
    if dimension <= 0:
        if resolved is None:
            raise EmbeddingConfigError(
                f"EMBEDDING_DIMENSION must be set for {provider} embeddings when model is unknown"
            )
        return resolved
    if resolved is not None and dimension != resolved:
        raise EmbeddingConfigError(f"EMBEDDING_DIMENSION should be {resolved} for model {model}")
    return dimension


@dataclass
class CohereEmbedder:
    """Embedding provider using the Cohere embed API."""
    api_key: str = field(repr=False)
    model: str
    dimension: int
    base_url: str = "https://api.cohere.com"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate Cohere configuration."""
        if not self.api_key:
            raise EmbeddingConfigError("COHERE_API_KEY is required for CohereEmbedder")
        if not self.model:
            raise EmbeddingConfigError("COHERE_EMBEDDING_MODEL is required for CohereEmbedder")
        self.dimension = _resolve_dimension("cohere", self.model, self.dimension)
        self.base_url = self.base_url.rstrip("/")

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed document chunks, batching to the API limit."""
        vectors: list[list[float]] = []
        for start in range(0, len(texts), _COHERE_MAX_BATCH):
            batch = list(texts[start : start + _COHERE_MAX_BATCH])
            vectors.extend(self._request(batch, input_type="search_document"))
        return vectors

    def embed_query(self, text: str) -> list[float]:
        """Embed a question with the query input type."""
        return self._request([text], input_type="search_query")[0]

    def _request(self, texts: list[str], input_type: str) -> list[list[float]]:
        if not texts:
            return []
        payload = {"model": self.model, "texts": texts, "input_type": input_type}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(f"{self.base_url}/v1/embed", json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            logger.error(
                "embedding_request_failed",
                extra={"provider": "cohere", "model": self.model, "detail": type(exc).__name__},
            )
            raise EmbeddingServiceError(str(exc)) from exc
        except ValueError as exc:
            raise EmbeddingServiceError("Cohere response is not valid JSON") from exc
        embeddings = data.get("embeddings") if isinstance(data, dict) else None
        if isinstance(embeddings, dict):
            embeddings = embeddings.get("float")
        if not isinstance(embeddings, list):
            raise EmbeddingServiceError("Cohere embedding response missing embeddings")
        return validate_batch(embeddings, len(texts), self.dimension)


@dataclass
class OpenAIEmbedder:
    """Embedding provider using OpenAI embeddings API."""
    api_key: str = field(repr=False)
    model: str
    dimension: int
    timeout: float = 30.0
    client: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate OpenAI configuration and create a client."""
        if not self.api_key:
            raise EmbeddingConfigError("OPENAI_API_KEY is required for OpenAIEmbedder")
        if not self.model:
            raise EmbeddingConfigError("OPENAI_EMBEDDING_MODEL is required for OpenAIEmbedder")
        self.dimension = _resolve_dimension("openai", self.model, self.dimension)
        from openai import OpenAI

        self.client = OpenAI(api_key=self.api_key, timeout=self.timeout)

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed texts using the OpenAI embeddings API in one request."""
        if not texts:
            return []
        from openai import OpenAIError

        try:
            response = self.client.embeddings.create(model=self.model, input=list(texts))
        except OpenAIError as exc:
            logger.error(
                "embedding_request_failed",
                extra={"provider": "openai", "model": self.model, "detail": type(exc).__name__},
            )
            raise EmbeddingServiceError(str(exc)) from exc
        ordered = sorted(response.data, key=lambda item: item.index)
        return validate_batch([list(item.embedding) for item in ordered], len(texts), self.dimension)

    def embed_query(self, text: str) -> list[float]:
        return self.embed([text])[0]
