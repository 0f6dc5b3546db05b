"""Process-local repository backed by numpy and BM25."""

import re
from typing import Optional, Sequence

import numpy as np
from loguru import logger
from rank_bm25 import BM25Okapi

from app.core.similarity import cosine_similarities
from app.domain import (
    Chunk,
    GraphStats,
    RelatedChunk,
    RelatedVideo,
    Relationship,
    SearchResult,
    TemporalMetadata,
    Video,
)
from app.repositories.base import ChunkRepository

TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens used for BM25 indexing and querying."""
    return TOKEN_PATTERN.findall(text.lower())


class InMemoryRepository(ChunkRepository):
    """Repository keeping videos, chunks, edges and metadata in dictionaries.

    Vector work is done with a numpy matrix of the valid embeddings and
    keyword ranking with ``BM25Okapi``. Used by tests, scripts and local
    development where no Neo4j instance is available.
    """

    def __init__(self, dimensions: int = 384) -> None:
        """Initialize an empty repository."""
        self.dimensions = dimensions
        self.videos: dict[int, Video] = {}
        self.chunks: dict[int, Chunk] = {}
        self.relationships: dict[tuple[int, int], float] = {}
        self.temporal_metadata: dict[int, TemporalMetadata] = {}
        self._bm25_index: Optional[BM25Okapi] = None
        self._bm25_chunk_ids: list[int] = []
        self._bm25_tokens: list[set[str]] = []
        logger.info(f"Initialized InMemoryRepository (dimensions={dimensions})")

    # Seeding
    def add_video(self, video: Video) -> Video:
        """Add or replace a video."""
        self.videos[video.id] = video
        return video

    def add_chunk(self, chunk: Chunk) -> Chunk:
        """Add or replace a chunk."""
        self.chunks[chunk.id] = chunk
        self._bm25_index = None
        return chunk

    def delete_chunk(self, chunk_id: int) -> None:
        """Remove a chunk, leaving any edges that point at it in place."""
        self.chunks.pop(chunk_id, None)
        self._bm25_index = None

    # Helpers
    def _valid_embedding(self, chunk: Chunk) -> bool:
        if not chunk.has_embedding:
            return False
        if len(chunk.embedding) != self.dimensions:
            logger.warning(
                f"Skipping chunk {chunk.id}: embedding has {len(chunk.embedding)} "
                f"dimensions, expected {self.dimensions}"
            )
            return False
        return True

    def _embedded_chunks(self, exclude_id: Optional[int] = None) -> list[Chunk]:
        return [
            chunk
            for chunk_id, chunk in sorted(self.chunks.items())
            if chunk_id != exclude_id and self._valid_embedding(chunk)
        ]

    def _to_search_result(self, chunk: Chunk, score: float) -> Optional[SearchResult]:
        video = self.videos.get(chunk.video_id)
        if video is None:
            return None
        return SearchResult(
            chunk_id=chunk.id,
            content=chunk.content,
            start_time=chunk.start_time,
            end_time=chunk.end_time,
            video_id=video.id,
            video_title=video.title,
            channel=video.channel,
            youtube_id=video.youtube_id,
            thumbnail=video.thumbnail,
            published_at=video.published_at,
            similarity=score,
        )

    def _build_bm25_index(self) -> None:
        """Build BM25 index from chunks."""
        ordered = sorted(self.chunks.items())
        self._bm25_chunk_ids = [chunk_id for chunk_id, _ in ordered]
        tokenized_corpus = [tokenize(chunk.content) for _, chunk in ordered]
        self._bm25_tokens = [set(tokens) for tokens in tokenized_corpus]
        self._bm25_index = BM25Okapi(tokenized_corpus)
        logger.debug(f"Built BM25 index with {len(ordered)} chunks")

    # Videos and chunks
    async def get_video(self, video_id: int) -> Optional[Video]:
        return self.videos.get(video_id)

    async def get_chunks_for_video(
        self, video_id: int, with_embeddings_only: bool = False
    ) -> list[Chunk]:
        return [
            chunk
            for _, chunk in sorted(self.chunks.items())
            if chunk.video_id == video_id
            and (not with_embeddings_only or chunk.has_embedding)
        ]

    async def list_video_ids_with_embeddings(self) -> list[int]:
        return sorted({chunk.video_id for chunk in self.chunks.values() if chunk.has_embedding})

    # Search
    async def vector_search(
        self, embedding: Sequence[float], limit: int
    ) -> list[SearchResult]:
        candidates = self._embedded_chunks()
        if not candidates:
            return []

        matrix = np.asarray([chunk.embedding for chunk in candidates], dtype=np.float64)
        scores = cosine_similarities(embedding, matrix)
        ranked = sorted(
            zip(candidates, scores.tolist()), key=lambda item: (-item[1], item[0].id)
        )

        results = []
        for chunk, score in ranked:
            result = self._to_search_result(chunk, score)
            if result is not None:
                results.append(result)
            if len(results) >= limit:
                break
        logger.debug(f"Vector search returned {len(results)} results")
        return results

    async def keyword_search(self, query: str, limit: int) -> list[SearchResult]:
        query_tokens = tokenize(query)
        if not query_tokens or not self.chunks:
            return []
        if self._bm25_index is None:
            self._build_bm25_index()

        scores = self._bm25_index.get_scores(query_tokens)
        wanted = set(query_tokens)
        matched = [
            (chunk_id, float(score))
            for chunk_id, tokens, score in zip(self._bm25_chunk_ids, self._bm25_tokens, scores)
            if tokens & wanted
        ]
        matched.sort(key=lambda item: (-item[1], item[0]))

        results = []
        for chunk_id, score in matched:
            result = self._to_search_result(self.chunks[chunk_id], score)
            if result is not None:
                results.append(result)
            if len(results) >= limit:
                break
        logger.debug(f"BM25 search returned {len(results)} results")
        return results

    # Similarity graph
    async def find_similar_chunks(
        self, chunk_id: int, embedding: Sequence[float], threshold: float
    ) -> list[tuple[int, float]]:
        candidates = self._embedded_chunks(exclude_id=chunk_id)
        if not candidates:
            return []

        matrix = np.asarray([chunk.embedding for chunk in candidates], dtype=np.float64)
        scores = cosine_similarities(embedding, matrix)
        similar = [
            (chunk.id, float(score))
            for chunk, score in zip(candidates, scores.tolist())
            if score > threshold
        ]
        similar.sort(key=lambda item: (-item[1], item[0]))
        return similar

    async def create_relationships(self, relationships: Sequence[Relationship]) -> int:
        created = 0
        for relationship in relationships:
            key = (relationship.source_chunk_id, relationship.target_chunk_id)
            if key in self.relationships:
                continue
            if key[0] not in self.chunks or key[1] not in self.chunks:
                logger.debug(f"Ignoring edge {key[0]} -> {key[1]}: chunk not found")
                continue
            self.relationships[key] = relationship.similarity
            created += 1
        return created

    async def delete_all_relationships(self) -> int:
        deleted = len(self.relationships)
        self.relationships.clear()
        logger.warning(f"Deleted all {deleted} similarity relationships")
        return deleted

    async def get_related_chunks(
        self,
        chunk_ids: Sequence[int],
        video_id: int,
        min_similarity: float,
        include_within_video: bool,
        limit: int,
    ) -> list[RelatedChunk]:
        sources = set(chunk_ids)
        best: dict[int, float] = {}
        for (source_id, target_id), similarity in self.relationships.items():
            if source_id not in sources or similarity < min_similarity:
                continue
            # Edges to deleted or un-embedded chunks are stale
            target = self.chunks.get(target_id)
            if target is None or not target.has_embedding:
                continue
            if not include_within_video and target.video_id == video_id:
                continue
            if target.video_id not in self.videos:
                continue
            best[target_id] = max(similarity, best.get(target_id, similarity))

        ranked = sorted(best.items(), key=lambda item: (-item[1], item[0]))[:limit]
        related = []
        for target_id, similarity in ranked:
            chunk = self.chunks[target_id]
            video = self.videos[chunk.video_id]
            related.append(
                RelatedChunk(
                    chunk_id=chunk.id,
                    content=chunk.content,
                    start_time=chunk.start_time or 0.0,
                    end_time=chunk.end_time or 0.0,
                    similarity=similarity,
                    video=RelatedVideo(
                        id=video.id,
                        title=video.title,
                        channel=video.channel,
                        youtube_id=video.youtube_id,
                    ),
                )
            )
        return related

    # Temporal metadata
    async def create_temporal_metadata(self, metadata: TemporalMetadata) -> bool:
        if metadata.chunk_id not in self.chunks or metadata.chunk_id in self.temporal_metadata:
            return False
        self.temporal_metadata[metadata.chunk_id] = metadata
        return True

    async def get_temporal_metadata(self, chunk_id: int) -> Optional[TemporalMetadata]:
        return self.temporal_metadata.get(chunk_id)

    # Statistics
    async def get_graph_stats(self) -> GraphStats:
        stats = GraphStats(
            total_videos=len(self.videos),
            total_chunks=len(self.chunks),
            embedded_chunks=sum(1 for chunk in self.chunks.values() if chunk.has_embedding),
            total_relationships=len(self.relationships),
            temporal_metadata=len(self.temporal_metadata),
        )
        if stats.total_chunks > 0:
            stats.avg_degree = stats.total_relationships / stats.total_chunks
        return stats
