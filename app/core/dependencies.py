"""Service factories wired from application settings."""

from typing import AsyncGenerator, Optional

from app.core.config import get_settings
from app.repositories.base import ChunkRepository
from app.repositories.neo4j_repository import Neo4jRepository
from app.services.cache_service import CacheService, EmbeddingCache
from app.services.embedding_service import EmbeddingService
from app.services.graph_builder import GraphBuilder
from app.services.graph_traversal import GraphTraversal
from app.services.hybrid_search import HybridSearchEngine
from app.services.temporal_indexer import TemporalIndexer
from app.services.temporal_ranker import TemporalRanker


async def get_neo4j_repository() -> AsyncGenerator[Neo4jRepository, None]:
    """Get Neo4j repository instance."""
    settings = get_settings()
    repository = Neo4jRepository(
        uri=settings.neo4j_uri,
        user=settings.neo4j_user,
        password=settings.neo4j_password,
        database=settings.neo4j_database,
        dimensions=settings.embedding_dimensions,
    )
    await repository.connect()
    try:
        yield repository
    finally:
        await repository.close()


async def get_cache_service() -> CacheService:
    """Get cache service instance."""
    settings = get_settings()
    return CacheService(
        redis_url=settings.redis_url,
        ttl=settings.embedding_cache_ttl,
        max_memory_items=settings.max_memory_cache_items,
    )


async def get_embedding_service(
    cache_service: Optional[CacheService] = None,
) -> EmbeddingService:
    """Get embedding service instance."""
    settings = get_settings()
    cache = None
    if cache_service is not None:
        cache = EmbeddingCache(cache_service, ttl=settings.embedding_cache_ttl)

    return EmbeddingService(
        api_key=settings.openai_api_key,
        model=settings.openai_embedding_model,
        dimensions=settings.embedding_dimensions,
        cache=cache,
    )


async def get_hybrid_search_engine(
    repository: ChunkRepository,
    embedding_service: Optional[EmbeddingService] = None,
) -> HybridSearchEngine:
    """Get hybrid search engine instance."""
    settings = get_settings()
    if embedding_service is None:
        embedding_service = await get_embedding_service(await get_cache_service())

    return HybridSearchEngine(
        repository=repository,
        embedding_service=embedding_service,
        rrf_k=settings.rrf_k,
        overfetch_factor=settings.overfetch_factor,
        max_query_length=settings.max_query_length,
        max_evidence=settings.max_evidence_chunks,
        temporal_ranker=TemporalRanker(half_life_days=settings.temporal_half_life_days),
    )


async def get_graph_builder(repository: ChunkRepository) -> GraphBuilder:
    """Get graph builder instance."""
    settings = get_settings()
    return GraphBuilder(
        repository=repository,
        similarity_threshold=settings.similarity_threshold,
    )


async def get_graph_traversal(repository: ChunkRepository) -> GraphTraversal:
    """Get graph traversal instance."""
    settings = get_settings()
    return GraphTraversal(
        repository=repository,
        default_limit=settings.related_default_limit,
        min_similarity=settings.similarity_threshold,
    )


async def get_temporal_indexer(repository: ChunkRepository) -> TemporalIndexer:
    """Get temporal indexer instance."""
    return TemporalIndexer(repository=repository)
