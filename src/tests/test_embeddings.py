from __future__ import annotations

"""Embedding provider and configuration tests."""

import json
import math

import httpx
import pytest

from src.rag.embeddings import (
    CohereEmbedder,
    EmbeddingConfigError,
    EmbeddingServiceError,
    HashEmbedder,
    build_embedding_config_report,
    embedder_identity,
    validate_vector,
)


def _patch_client(monkeypatch: pytest.MonkeyPatch, handler) -> None:
    """Route the sync httpx client used by embedders through a mock transport."""
    original = httpx.Client

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return original(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", factory)


def test_hash_embedder_is_deterministic_and_normalized() -> None:
    embedder = HashEmbedder(dimension=64)
    first = embedder.embed(["Python and Go", "Rust"])
    second = embedder.embed(["Python and Go", "Rust"])
    assert first == second
    assert len(first) == 2
    assert all(len(vector) == 64 for vector in first)
    assert math.isclose(math.sqrt(sum(value * value for value in first[0])), 1.0)
    assert embedder.embed_query("Rust") == first[1]


def test_hash_embedder_rejects_non_positive_dimension() -> None:
    with pytest.raises(EmbeddingConfigError):
        HashEmbedder(dimension=0)


def test_validate_vector_rejects_bad_values() -> None:
    with pytest.raises(EmbeddingServiceError):
        validate_vector([1.0, 2.0], dimension=3)
    with pytest.raises(EmbeddingServiceError):
        validate_vector([1.0, float("nan")], dimension=2)
    with pytest.raises(EmbeddingServiceError):
        validate_vector([1.0, "x"], dimension=2)


def test_cohere_embedder_sends_document_and_query_input_types(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        seen.append(payload)
        assert request.headers["authorization"] == "Bearer test-key"
        vectors = [[float(idx + 1)] * 384 for idx in range(len(payload["texts"]))]
        return httpx.Response(200, json={"embeddings": vectors})

    _patch_client(monkeypatch, handler)
    embedder = CohereEmbedder(
        api_key="test-key", model="embed-english-light-v3.0", dimension=0
    )

    vectors = embedder.embed(["chunk one", "chunk two"])
    query = embedder.embed_query("question")

    assert embedder.dimension == 384
    assert [vector[0] for vector in vectors] == [1.0, 2.0]
    assert len(query) == 384
    assert seen[0]["input_type"] == "search_document"
    assert seen[1]["input_type"] == "search_query"


def test_cohere_embedder_wraps_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_client(monkeypatch, lambda request: httpx.Response(429, json={"message": "quota"}))
    embedder = CohereEmbedder(api_key="test-key", model="embed-english-v3.0", dimension=1024)
    with pytest.raises(EmbeddingServiceError):
        embedder.embed(["chunk"])


def test_cohere_embedder_rejects_short_batches(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_client(monkeypatch, lambda request: httpx.Response(200, json={"embeddings": []}))
    embedder = CohereEmbedder(api_key="test-key", model="embed-english-v3.0", dimension=1024)
    with pytest.raises(EmbeddingServiceError):
        embedder.embed(["chunk"])


def test_cohere_embedder_requires_api_key() -> None:
    with pytest.raises(EmbeddingConfigError):
        CohereEmbedder(api_key="", model="embed-english-v3.0", dimension=1024)


def test_cohere_embedder_rejects_known_dimension_mismatch() -> None:
    with pytest.raises(EmbeddingConfigError):
        CohereEmbedder(api_key="k", model="embed-english-v3.0", dimension=256)


def test_embedder_identity_hides_credentials() -> None:
    embedder = CohereEmbedder(api_key="secret", model="embed-english-v3.0", dimension=1024)
    identity = embedder_identity(embedder)
    assert identity == "CohereEmbedder:embed-english-v3.0:1024"
    assert "secret" not in repr(embedder)


def test_config_report_flags_dimension_mismatch() -> None:
    report = build_embedding_config_report("cohere", "embed-english-v3.0", 256)
    assert report.ok is False
    assert report.expected_dimension == 1024
    assert report.action == "Set EMBEDDING_DIMENSION to 1024."


def test_config_report_accepts_hash_defaults() -> None:
    report = build_embedding_config_report("hash", None, 256)
    assert report.ok is True
    assert report.status == "ok"


def test_config_report_rejects_unknown_provider() -> None:
    report = build_embedding_config_report("word2vec", None, 300)
    assert report.ok is False
    assert report.detail == "Unsupported embedding provider."
