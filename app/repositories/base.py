"""Storage interface used by the retrieval and graph services."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from app.domain import (
    Chunk,
    GraphStats,
    RelatedChunk,
    Relationship,
    SearchResult,
    TemporalMetadata,
    Video,
)


class ChunkRepository(ABC):
    """Chunk/embedding store, similarity edge store and temporal metadata store.

    Implementations raise :class:`app.core.exceptions.StorageError` when the
    backing store fails. Chunks whose embedding is missing or does not have
    ``dimensions`` components never take part in vector or graph operations.
    """

    dimensions: int

    # Videos and chunks
    @abstractmethod
    async def get_video(self, video_id: int) -> Optional[Video]:
        """Get a video by ID."""

    @abstractmethod
    async def get_chunks_for_video(
        self, video_id: int, with_embeddings_only: bool = False
    ) -> list[Chunk]:
        """Get a video's chunks ordered by chunk ID."""

    @abstractmethod
    async def list_video_ids_with_embeddings(self) -> list[int]:
        """Distinct IDs of videos owning at least one embedded chunk, ascending."""

    # Search
    @abstractmethod
    async def vector_search(
        self, embedding: Sequence[float], limit: int
    ) -> list[SearchResult]:
        """Rank embedded chunks by cosine similarity to ``embedding``."""

    @abstractmethod
    async def keyword_search(self, query: str, limit: int) -> list[SearchResult]:
        """Rank chunks by lexical relevance to ``query``."""

    # Similarity graph
    @abstractmethod
    async def find_similar_chunks(
        self, chunk_id: int, embedding: Sequence[float], threshold: float
    ) -> list[tuple[int, float]]:
        """Corpus chunks other than ``chunk_id`` with similarity > ``threshold``."""

    @abstractmethod
    async def create_relationships(self, relationships: Sequence[Relationship]) -> int:
        """Insert edges, ignoring ones that already exist. Returns the number created."""

    @abstractmethod
    async def delete_all_relationships(self) -> int:
        """Delete every similarity edge. Returns the number deleted."""

    @abstractmethod
    async def get_related_chunks(
        self,
        chunk_ids: Sequence[int],
        video_id: int,
        min_similarity: float,
        include_within_video: bool,
        limit: int,
    ) -> list[RelatedChunk]:
        """Follow edges out of ``chunk_ids`` to existing target chunks."""

    # Temporal metadata
    @abstractmethod
    async def create_temporal_metadata(self, metadata: TemporalMetadata) -> bool:
        """Insert metadata for a chunk once. Returns False if a row already existed."""

    @abstractmethod
    async def get_temporal_metadata(self, chunk_id: int) -> Optional[TemporalMetadata]:
        """Get temporal metadata for a chunk."""

    # Statistics
    @abstractmethod
    async def get_graph_stats(self) -> GraphStats:
        """Get statistics about the store."""
