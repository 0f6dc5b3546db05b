"""Traversal of the precomputed chunk similarity graph."""

from typing import Optional

from loguru import logger

from app.core.validation import validate_limit, validate_similarity, validate_video_id
from app.domain import RelatedChunk, RelatedVideoResult
from app.repositories.base import ChunkRepository


class GraphTraversal:
    """Service answering "related content" queries from stored edges.

    Reads only; results are as fresh as the last graph build for the video.
    """

    def __init__(
        self,
        repository: ChunkRepository,
        default_limit: int = 10,
        min_similarity: float = 0.75,
    ) -> None:
        """Initialize graph traversal."""
        self.repository = repository
        self.default_limit = default_limit
        self.min_similarity = min_similarity

    async def get_related_chunks(
        self,
        video_id: int,
        limit: Optional[int] = None,
        min_similarity: Optional[float] = None,
        include_within_video: bool = False,
    ) -> list[RelatedChunk]:
        """Highest-similarity chunks linked from a video's chunks.

        Chunks of the same video are excluded unless ``include_within_video``.
        """
        validate_video_id(video_id)
        limit = self.default_limit if limit is None else limit
        min_similarity = self.min_similarity if min_similarity is None else min_similarity
        validate_limit(limit)
        validate_similarity("min_similarity", min_similarity, allow_one=True)

        chunks = await self.repository.get_chunks_for_video(video_id)
        if not chunks:
            logger.debug(f"Video {video_id} has no chunks")
            return []

        related = await self.repository.get_related_chunks(
            chunk_ids=[chunk.id for chunk in chunks],
            video_id=video_id,
            min_similarity=min_similarity,
            include_within_video=include_within_video,
            limit=limit,
        )
        logger.info(f"Found {len(related)} related chunks for video {video_id}")
        return related

    async def get_related_videos(
        self,
        video_id: int,
        limit: Optional[int] = None,
        min_similarity: Optional[float] = None,
    ) -> list[RelatedVideoResult]:
        """Other videos reachable through the graph, best edge first."""
        limit = self.default_limit if limit is None else limit
        validate_limit(limit)

        related = await self.get_related_chunks(
            video_id,
            limit=limit * 5,
            min_similarity=min_similarity,
        )

        groups: dict[int, RelatedVideoResult] = {}
        for chunk in related:
            existing = groups.get(chunk.video.id)
            if existing is None:
                groups[chunk.video.id] = RelatedVideoResult(
                    video=chunk.video,
                    score=chunk.similarity,
                    matched_chunks=1,
                    best_chunk=chunk,
                )
            else:
                existing.matched_chunks += 1

        # related is already sorted by similarity, so first seen is best
        return list(groups.values())[:limit]
