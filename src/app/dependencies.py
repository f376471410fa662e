from __future__ import annotations

from functools import lru_cache

from src.app.settings import settings
from src.candidates.store import CandidateStore
from src.rag.embeddings import (
    CohereEmbedder,
    Embedder,
    EmbeddingConfigError,
    EmbeddingConfigReport,
    HashEmbedder,
    OpenAIEmbedder,
    build_embedding_config_report,
)
from src.rag.index_cache import IndexCache
from src.rag.llm import AnswerGenerator, build_generator
from src.rag.pipeline import PipelineConfig, QAPipeline
from src.scoring.classifiers import PrefixDeclineClassifier
from src.scoring.shortlist import ShortlistScorer


@lru_cache
def get_pipeline() -> QAPipeline:
    config = PipelineConfig(
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        top_k=settings.top_k,
    )
    index_cache = IndexCache(settings.index_cache_size) if settings.index_cache_size > 0 else None
    return QAPipeline(
        embedder=build_embedder(),
        generator=build_answer_generator(),
        config=config,
        index_cache=index_cache,
    )


@lru_cache
def get_candidate_store() -> CandidateStore:
    return CandidateStore(settings.database_uri)


def get_scorer() -> ShortlistScorer:
    return ShortlistScorer(
        classifier=PrefixDeclineClassifier(marker=settings.shortlist_decline_marker),
        min_accuracy=settings.shortlist_min_accuracy,
    )


def reset_dependency_caches() -> None:
    get_pipeline.cache_clear()
    get_candidate_store.cache_clear()


def get_embedding_config_report() -> EmbeddingConfigReport:
    provider = settings.embedding_provider.lower().strip()
    model = None
    if provider == "cohere":
        model = settings.cohere_embedding_model
    elif provider == "openai":
        model = settings.openai_embedding_model
    return build_embedding_config_report(provider, model, settings.embedding_dimension)


def build_embedder() -> Embedder:
    provider = settings.embedding_provider.lower().strip()
    if provider == "hash":
        return HashEmbedder(dimension=settings.embedding_dimension)
    if provider == "cohere":
        return CohereEmbedder(
            api_key=settings.cohere_api_key or "",
            model=settings.cohere_embedding_model,
            dimension=settings.embedding_dimension,
            base_url=settings.cohere_base_url,
            timeout=settings.embedding_timeout,
        )
    if provider == "openai":
        return OpenAIEmbedder(
            api_key=settings.openai_api_key or "",
            model=settings.openai_embedding_model or "",
            dimension=settings.embedding_dimension,
            timeout=settings.embedding_timeout,
        )
    raise EmbeddingConfigError(f"Unsupported embedding provider: {provider}")


def build_answer_generator() -> AnswerGenerator:
    return build_generator(
        settings.llm_provider,
        anthropic_api_key=settings.anthropic_api_key,
        anthropic_model=settings.anthropic_model,
        anthropic_base_url=settings.anthropic_base_url,
        openai_api_key=settings.openai_api_key,
        openai_base_url=settings.openai_base_url,
        openai_model=settings.openai_chat_model,
        ollama_base_url=settings.ollama_base_url,
        ollama_model=settings.ollama_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout,
    )
