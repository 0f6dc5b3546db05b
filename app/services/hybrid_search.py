"""Hybrid search combining vector similarity and keyword relevance."""

import asyncio
from typing import Optional, Sequence, Union

from loguru import logger

from app.core.exceptions import EmbeddingError, InvalidInputError
from app.core.validation import validate_limit
from app.domain import SearchMode, SearchResponse, SearchResult
from app.repositories.base import ChunkRepository
from app.services.aggregator import aggregate_by_video
from app.services.embedding_service import EmbeddingService
from app.services.temporal_ranker import TemporalRanker

# Dampens the lead of rank 1 over the following ranks in each list.
RRF_K = 60
# Each sub-search fetches this many times the requested limit before fusion.
OVERFETCH_FACTOR = 3


def reciprocal_rank_fusion(
    *ranked_lists: Sequence[SearchResult],
    k: int = RRF_K,
) -> list[SearchResult]:
    """Combine ranked lists using Reciprocal Rank Fusion (RRF).

    Each chunk scores ``sum(1 / (k + rank))`` over the lists it appears in,
    with 1-based ranks. The fused score replaces ``similarity``. Equal scores
    are ordered by chunk ID so the output is fully deterministic.
    """
    rrf_scores: dict[int, float] = {}
    chunk_map: dict[int, SearchResult] = {}

    for results in ranked_lists:
        seen: set[int] = set()
        for rank, result in enumerate(results, start=1):
            if result.chunk_id in seen:
                continue
            seen.add(result.chunk_id)
            rrf_scores[result.chunk_id] = rrf_scores.get(result.chunk_id, 0.0) + 1 / (k + rank)
            chunk_map.setdefault(result.chunk_id, result)

    fused = [
        chunk_map[chunk_id].model_copy(update={"similarity": score})
        for chunk_id, score in rrf_scores.items()
    ]
    fused.sort(key=lambda result: (-result.similarity, result.chunk_id))

    logger.debug(f"RRF fusion produced {len(fused)} results from {len(ranked_lists)} lists")
    return fused


class HybridSearchEngine:
    """Service for hybrid search combining vector and lexical retrieval."""

    def __init__(
        self,
        repository: ChunkRepository,
        embedding_service: EmbeddingService,
        rrf_k: int = RRF_K,
        overfetch_factor: int = OVERFETCH_FACTOR,
        max_query_length: int = 500,
        max_evidence: int = 3,
        temporal_ranker: Optional[TemporalRanker] = None,
    ) -> None:
        """Initialize hybrid search engine."""
        self.repository = repository
        self.embedding_service = embedding_service
        self.rrf_k = rrf_k
        self.overfetch_factor = overfetch_factor
        self.max_query_length = max_query_length
        self.max_evidence = max_evidence
        self.temporal_ranker = temporal_ranker or TemporalRanker()
        logger.info(
            f"Initialized HybridSearchEngine (rrf_k={rrf_k}, overfetch_factor={overfetch_factor})"
        )

    def _validate(self, mode: Union[SearchMode, str], limit: int) -> SearchMode:
        validate_limit(limit)
        try:
            return SearchMode(mode)
        except ValueError as e:
            raise InvalidInputError(f"Unknown search mode: {mode!r}") from e

    async def _embed_query(self, query: str) -> Optional[list[float]]:
        """Embed the query, returning None when the embedding function fails."""
        try:
            return await self.embedding_service.generate_embedding(query)
        except EmbeddingError as e:
            logger.warning(f"Query embedding failed, falling back to keyword search: {e}")
            return None

    async def search(
        self,
        query: str,
        mode: Union[SearchMode, str] = SearchMode.HYBRID,
        limit: int = 10,
        temporal_decay: bool = False,
        half_life_days: Optional[float] = None,
    ) -> SearchResponse:
        """Rank chunks for a free-text query.

        ``vector`` ranks by cosine similarity, ``keyword`` by lexical relevance
        and ``hybrid`` fuses both with RRF. A failed query embedding degrades
        vector and hybrid modes to keyword results and sets ``degraded``.
        With ``temporal_decay`` the scores are multiplied by each video's age
        decay before truncation to ``limit``.
        """
        mode = self._validate(mode, limit)
        response = SearchResponse(query=query, mode=mode)
        if not query or not query.strip():
            return response
        if len(query) > self.max_query_length:
            raise InvalidInputError(
                f"Search query must be {self.max_query_length} characters or fewer"
            )

        candidate_limit = limit * self.overfetch_factor

        if mode == SearchMode.KEYWORD:
            candidates = await self.repository.keyword_search(query, candidate_limit)
        else:
            embedding = await self._embed_query(query)
            if embedding is None:
                candidates = await self.repository.keyword_search(query, candidate_limit)
                response.degraded = True
                response.degraded_reason = "embedding_unavailable"
            elif mode == SearchMode.VECTOR:
                candidates = await self.repository.vector_search(embedding, candidate_limit)
                response.has_embeddings = bool(candidates)
            else:
                vector_results, keyword_results = await asyncio.gather(
                    self.repository.vector_search(embedding, candidate_limit),
                    self.repository.keyword_search(query, candidate_limit),
                )
                if not vector_results:
                    logger.warning("No embedded chunks available, hybrid search is keyword-only")
                    response.has_embeddings = False
                    response.degraded = True
                    response.degraded_reason = "no_embeddings"
                candidates = reciprocal_rank_fusion(
                    vector_results, keyword_results, k=self.rrf_k
                )

        if temporal_decay:
            candidates = self.temporal_ranker.apply_temporal_decay(
                candidates, half_life_days=half_life_days
            )

        response.results = candidates[:limit]
        logger.info(
            f"{mode.value} search for '{query[:50]}' returned {len(response.results)} results"
            + (f" (degraded: {response.degraded_reason})" if response.degraded else "")
        )
        return response

    async def search_videos(
        self,
        query: str,
        mode: Union[SearchMode, str] = SearchMode.HYBRID,
        limit: int = 10,
        temporal_decay: bool = False,
        half_life_days: Optional[float] = None,
    ) -> SearchResponse:
        """Search and also aggregate the hits by video.

        More chunks than ``limit`` are ranked so that aggregation sees several
        hits per video; both lists are then trimmed to ``limit``.
        """
        mode = self._validate(mode, limit)
        response = await self.search(
            query,
            mode=mode,
            limit=limit * self.overfetch_factor,
            temporal_decay=temporal_decay,
            half_life_days=half_life_days,
        )
        videos = aggregate_by_video(response.results, max_evidence=self.max_evidence)
        return response.model_copy(
            update={"results": response.results[:limit], "videos": videos[:limit]}
        )
