from __future__ import annotations

import math

import pytest

from src.rag.embeddings import HashEmbedder
from src.rag.types import Chunk, EmbeddedChunk
from src.vectorstore.inmemory import EmptyIndexError, VectorIndex, VectorIndexError


def _entry(name: str, vector: list[float]) -> EmbeddedChunk:
    return EmbeddedChunk(chunk=Chunk(content=name), vector=vector)


def test_identical_query_ranks_first_with_unit_score() -> None:
    embedder = HashEmbedder(dimension=128)
    texts = [
        "Senior Go engineer with Kubernetes experience",
        "Bachelor of Science in Mathematics",
        "Volunteer at the local animal shelter",
    ]
    index = VectorIndex.build(
        _entry(text, vector) for text, vector in zip(texts, embedder.embed(texts))
    )

    results = index.search(embedder.embed_query(texts[1]), k=3)

    assert results[0].chunk.content == texts[1]
    assert math.isclose(results[0].score, 1.0, rel_tol=1e-9)
    scores = [result.score for result in results]
    assert scores == sorted(scores, reverse=True)


def test_ties_keep_insertion_order() -> None:
    index = VectorIndex.build(
        [
            _entry("first", [1.0, 0.0]),
            _entry("second", [2.0, 0.0]),
            _entry("other", [0.0, 1.0]),
            _entry("third", [3.0, 0.0]),
        ]
    )

    results = index.search([1.0, 0.0], k=4)

    assert [result.chunk.content for result in results] == ["first", "second", "third", "other"]


def test_k_is_clamped_to_entry_count() -> None:
    index = VectorIndex.build([_entry("a", [1.0, 0.0]), _entry("b", [0.0, 1.0])])
    assert len(index.search([1.0, 1.0], k=10)) == 2
    assert index.search([1.0, 1.0], k=0) == []


def test_zero_vectors_score_zero() -> None:
    index = VectorIndex.build([_entry("blank", [0.0, 0.0]), _entry("a", [1.0, 0.0])])
    results = index.search([1.0, 0.0], k=2)
    assert [result.chunk.content for result in results] == ["a", "blank"]
    assert results[1].score == 0.0


def test_build_rejects_empty_entries() -> None:
    with pytest.raises(EmptyIndexError):
        VectorIndex.build([])


def test_build_rejects_mixed_dimensions() -> None:
    with pytest.raises(VectorIndexError):
        VectorIndex.build([_entry("a", [1.0, 0.0]), _entry("b", [1.0, 0.0, 0.0])])


def test_search_rejects_wrong_query_dimension() -> None:
    index = VectorIndex.build([_entry("a", [1.0, 0.0])])
    with pytest.raises(VectorIndexError):
        index.search([1.0, 0.0, 0.0], k=1)


def test_stats_reports_size_and_dimension() -> None:
    index = VectorIndex.build([_entry("a", [1.0, 0.0]), _entry("b", [0.5, 0.5])])
    assert index.stats() == {"backend": "memory", "entry_count": 2, "embedding_dimension": 2}
