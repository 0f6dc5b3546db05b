"""Tests for the similarity graph builder."""

import pytest
from unittest.mock import AsyncMock

from app.core.exceptions import InvalidInputError, StorageError
from app.domain import Chunk
from app.services.graph_builder import GraphBuilder


@pytest.fixture
def graph_builder(repository):
    """Graph builder over the seeded repository."""
    return GraphBuilder(repository=repository, similarity_threshold=0.75)


def assert_symmetric(repository):
    for (source, target), similarity in repository.relationships.items():
        assert repository.relationships[(target, source)] == similarity


class TestComputeRelationships:
    """Test per-video edge computation."""

    @pytest.mark.asyncio
    async def test_creates_bidirectional_edges(self, graph_builder, repository):
        result = await graph_builder.compute_relationships(1)

        # Pairs {1,2}, {1,4}, {1,5}, {2,4}, {2,5}, both directions
        assert result.created == 10
        assert result.skipped == 0
        assert (1, 5) in repository.relationships
        assert (5, 1) in repository.relationships
        assert_symmetric(repository)

    @pytest.mark.asyncio
    async def test_threshold_excludes_dissimilar_chunks(self, graph_builder, repository):
        await graph_builder.compute_relationships(2)

        assert all(3 not in pair for pair in repository.relationships)

    @pytest.mark.asyncio
    async def test_no_self_edges(self, graph_builder, repository):
        for video_id in (1, 2, 3):
            await graph_builder.compute_relationships(video_id, threshold=-1.0)

        assert all(source != target for source, target in repository.relationships)
        assert_symmetric(repository)

    @pytest.mark.asyncio
    async def test_second_run_is_idempotent(self, graph_builder):
        first = await graph_builder.compute_relationships(1)
        second = await graph_builder.compute_relationships(1)

        assert second.created == 0
        assert second.skipped == first.created

    @pytest.mark.asyncio
    async def test_existing_edges_counted_as_skipped(self, graph_builder):
        await graph_builder.compute_relationships(1)

        result = await graph_builder.compute_relationships(3)

        # {1,5} and {2,5} exist already, {4,5} is new
        assert result.created == 2
        assert result.skipped == 4

    @pytest.mark.asyncio
    async def test_edge_weight_is_cosine_similarity(self, graph_builder, repository):
        await graph_builder.compute_relationships(1)

        assert repository.relationships[(1, 2)] == pytest.approx(0.9 / (0.82 ** 0.5))

    @pytest.mark.asyncio
    async def test_video_without_embeddings(self, graph_builder, repository):
        repository.chunks[5].embedding = None

        result = await graph_builder.compute_relationships(3)

        assert result.created == 0
        assert result.skipped == 0

    @pytest.mark.asyncio
    async def test_wrong_dimension_chunk_skipped(self, graph_builder, repository):
        repository.add_chunk(
            Chunk(id=7, video_id=3, content="broken vector", embedding=[1.0, 0.0])
        )

        await graph_builder.compute_relationships(3)

        assert all(7 not in pair for pair in repository.relationships)

    @pytest.mark.asyncio
    async def test_progress_reported_per_chunk(self, graph_builder):
        progress = []

        await graph_builder.compute_relationships(
            1, on_progress=lambda done, total: progress.append((done, total))
        )

        assert progress == [(1, 2), (2, 2)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("video_id", [0, -3, "1", True])
    async def test_invalid_video_id(self, graph_builder, repository, video_id):
        repository.get_chunks_for_video = AsyncMock()

        with pytest.raises(InvalidInputError):
            await graph_builder.compute_relationships(video_id)

        repository.get_chunks_for_video.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold", [1.0, 1.5, -1.1])
    async def test_invalid_threshold(self, graph_builder, threshold):
        with pytest.raises(InvalidInputError):
            await graph_builder.compute_relationships(1, threshold=threshold)

    def test_invalid_default_threshold(self, repository):
        with pytest.raises(InvalidInputError):
            GraphBuilder(repository, similarity_threshold=2.0)


class TestBackfill:
    """Test full graph rebuilds."""

    @pytest.mark.asyncio
    async def test_rebuilds_every_video(self, graph_builder, repository):
        report = await graph_builder.backfill()

        assert report.videos_total == 3
        assert report.videos_processed == 3
        assert report.videos_failed == 0
        # Six similar pairs among chunks 1, 2, 4 and 5
        assert report.relationships_created == 12
        assert len(repository.relationships) == 12
        assert_symmetric(repository)

    @pytest.mark.asyncio
    async def test_clears_existing_edges_first(self, graph_builder, repository):
        await graph_builder.backfill(threshold=-1.0)
        loose = len(repository.relationships)

        report = await graph_builder.backfill()

        assert report.deleted == loose
        assert len(repository.relationships) == 12

    @pytest.mark.asyncio
    async def test_failed_video_does_not_stop_backfill(self, graph_builder, repository):
        original = repository.find_similar_chunks

        async def flaky(chunk_id, embedding, threshold):
            if chunk_id == 3:
                raise StorageError("similarity query timed out")
            return await original(chunk_id, embedding, threshold)

        repository.find_similar_chunks = flaky

        report = await graph_builder.backfill()

        assert report.videos_failed == 1
        assert 2 in report.failures
        assert "timed out" in report.failures[2]
        assert report.videos_processed == 2

    @pytest.mark.asyncio
    async def test_cancellation_between_videos(self, graph_builder):
        progress = []

        report = await graph_builder.backfill(
            on_progress=lambda done, total: progress.append(done),
            should_stop=lambda: len(progress) >= 1,
        )

        assert report.cancelled is True
        assert report.videos_processed == 1
        assert report.relationships_created == 10
        assert progress == [1]

    @pytest.mark.asyncio
    async def test_empty_corpus(self, empty_repository):
        report = await GraphBuilder(empty_repository).backfill()

        assert report.videos_total == 0
        assert report.relationships_created == 0
