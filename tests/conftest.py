"""Test configuration and fixtures."""

from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.domain import Chunk, SearchResult, Video
from app.repositories.memory_repository import InMemoryRepository
from app.services.embedding_service import EmbeddingService

DIMENSIONS = 3

VIDEOS = [
    Video(
        id=1,
        title="React Hooks Tutorial",
        channel="Frontend Weekly",
        youtube_id="hooks101",
        published_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    ),
    Video(
        id=2,
        title="Django in Production",
        channel="Backend Notes",
        youtube_id="djangoprod",
        published_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
    ),
    Video(
        id=3,
        title="Vue for React Developers",
        channel="Frontend Weekly",
        youtube_id="vueforreact",
        published_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
    ),
]

CHUNKS = [
    Chunk(id=1, video_id=1, content="react hooks tutorial for beginners",
          start_time=0.0, end_time=30.0, embedding=[1.0, 0.0, 0.0]),
    Chunk(id=2, video_id=1, content="managing component state without classes",
          start_time=30.0, end_time=60.0, embedding=[0.9, 0.1, 0.0]),
    Chunk(id=3, video_id=2, content="django models and database migrations",
          start_time=0.0, end_time=45.0, embedding=[0.0, 1.0, 0.0]),
    Chunk(id=4, video_id=2, content="building a frontend on top of django",
          start_time=45.0, end_time=90.0, embedding=[0.8, 0.2, 0.0]),
    Chunk(id=5, video_id=3, content="vue composition api compared with react hooks in depth",
          start_time=0.0, end_time=40.0, embedding=[0.95, 0.0, 0.05]),
    Chunk(id=6, video_id=3, content="vue templates and directives",
          start_time=40.0, end_time=80.0, embedding=None),
]


@pytest.fixture
def repository():
    """In-memory repository seeded with three videos and six chunks.

    Chunks 1, 2, 4 and 5 point in nearly the same direction and are pairwise
    above 0.75 cosine similarity; chunk 3 is orthogonal to chunk 1 and chunk 6
    has no embedding.
    """
    repo = InMemoryRepository(dimensions=DIMENSIONS)
    for video in VIDEOS:
        repo.add_video(video)
    for chunk in CHUNKS:
        repo.add_chunk(chunk.model_copy(deep=True))
    return repo


@pytest.fixture
def empty_repository():
    """Repository without any data."""
    return InMemoryRepository(dimensions=DIMENSIONS)


@pytest.fixture
def embedding_service():
    """Mock embedding service."""
    service = MagicMock(spec=EmbeddingService)
    service.generate_embedding = AsyncMock(return_value=[1.0, 0.0, 0.0])
    service.generate_embeddings = AsyncMock(return_value=[[1.0, 0.0, 0.0]])
    service.compute_similarity = AsyncMock(return_value=0.8)
    return service


def _make_result(chunk_id, video_id, similarity, published_at=None):
    return SearchResult(
        chunk_id=chunk_id,
        content=f"chunk {chunk_id}",
        video_id=video_id,
        video_title=f"Video {video_id}",
        published_at=published_at,
        similarity=similarity,
    )


@pytest.fixture
def make_result():
    """Factory for search hits with placeholder video metadata."""
    return _make_result
