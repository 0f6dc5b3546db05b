"""Tests for the in-memory repository."""

import pytest

from app.domain import Chunk, Relationship, TemporalMetadata
from app.repositories.memory_repository import tokenize


class TestTokenize:
    def test_lowercases_and_splits(self):
        assert tokenize("React-Hooks, in 2024!") == ["react", "hooks", "in", "2024"]

    def test_empty(self):
        assert tokenize("  ") == []


class TestSearch:
    """Test vector and keyword ranking."""

    @pytest.mark.asyncio
    async def test_vector_search_orders_by_cosine(self, repository):
        results = await repository.vector_search([0.0, 1.0, 0.0], limit=2)

        assert [result.chunk_id for result in results] == [3, 4]
        assert results[0].similarity == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_vector_search_skips_wrong_dimensions(self, repository):
        repository.add_chunk(Chunk(id=7, video_id=1, content="bad", embedding=[1.0, 0.0]))

        results = await repository.vector_search([1.0, 0.0, 0.0], limit=10)

        assert 7 not in [result.chunk_id for result in results]

    @pytest.mark.asyncio
    async def test_vector_search_skips_orphan_chunks(self, repository):
        repository.add_chunk(Chunk(id=8, video_id=42, content="orphan", embedding=[1.0, 0.0, 0.0]))

        results = await repository.vector_search([1.0, 0.0, 0.0], limit=10)

        assert 8 not in [result.chunk_id for result in results]

    @pytest.mark.asyncio
    async def test_keyword_search_requires_overlap(self, repository):
        results = await repository.keyword_search("django", limit=10)

        assert {result.chunk_id for result in results} == {3, 4}

    @pytest.mark.asyncio
    async def test_keyword_search_reindexes_after_insert(self, repository):
        await repository.keyword_search("react", limit=10)
        repository.add_chunk(Chunk(id=9, video_id=1, content="svelte stores"))

        results = await repository.keyword_search("svelte", limit=10)

        assert [result.chunk_id for result in results] == [9]

    @pytest.mark.asyncio
    async def test_keyword_search_empty(self, repository, empty_repository):
        assert await repository.keyword_search("!!!", limit=10) == []
        assert await empty_repository.keyword_search("react", limit=10) == []


class TestRelationships:
    """Test the edge store."""

    @pytest.mark.asyncio
    async def test_insert_is_idempotent(self, repository):
        edge = Relationship(source_chunk_id=1, target_chunk_id=2, similarity=0.9)

        assert await repository.create_relationships([edge, edge.reversed()]) == 2
        assert await repository.create_relationships([edge]) == 0

    @pytest.mark.asyncio
    async def test_existing_weight_kept(self, repository):
        await repository.create_relationships(
            [Relationship(source_chunk_id=1, target_chunk_id=2, similarity=0.9)]
        )
        await repository.create_relationships(
            [Relationship(source_chunk_id=1, target_chunk_id=2, similarity=0.8)]
        )

        assert repository.relationships[(1, 2)] == 0.9

    @pytest.mark.asyncio
    async def test_missing_chunk_ignored(self, repository):
        edge = Relationship(source_chunk_id=1, target_chunk_id=404, similarity=0.9)

        assert await repository.create_relationships([edge]) == 0

    def test_self_edge_rejected(self):
        with pytest.raises(ValueError):
            Relationship(source_chunk_id=3, target_chunk_id=3, similarity=1.0)

    @pytest.mark.asyncio
    async def test_delete_all(self, repository):
        edge = Relationship(source_chunk_id=1, target_chunk_id=2, similarity=0.9)
        await repository.create_relationships([edge, edge.reversed()])

        assert await repository.delete_all_relationships() == 2
        assert repository.relationships == {}

    @pytest.mark.asyncio
    async def test_find_similar_excludes_self(self, repository):
        similar = await repository.find_similar_chunks(1, [1.0, 0.0, 0.0], 0.5)

        assert [chunk_id for chunk_id, _ in similar] == [5, 2, 4]


class TestTemporalMetadataAndStats:
    """Test temporal metadata rows and statistics."""

    @pytest.mark.asyncio
    async def test_insert_once(self, repository):
        metadata = TemporalMetadata(chunk_id=1, version_mention="React 18", confidence=0.4)

        assert await repository.create_temporal_metadata(metadata) is True
        assert await repository.create_temporal_metadata(
            metadata.model_copy(update={"confidence": 0.9})
        ) is False
        stored = await repository.get_temporal_metadata(1)
        assert stored.confidence == 0.4

    @pytest.mark.asyncio
    async def test_unknown_chunk(self, repository):
        metadata = TemporalMetadata(chunk_id=404, confidence=0.6)

        assert await repository.create_temporal_metadata(metadata) is False
        assert await repository.get_temporal_metadata(404) is None

    @pytest.mark.asyncio
    async def test_graph_stats(self, repository):
        edge = Relationship(source_chunk_id=1, target_chunk_id=2, similarity=0.9)
        await repository.create_relationships([edge, edge.reversed()])

        stats = await repository.get_graph_stats()

        assert stats.total_videos == 3
        assert stats.total_chunks == 6
        assert stats.embedded_chunks == 5
        assert stats.total_relationships == 2
        assert stats.avg_degree == pytest.approx(2 / 6)

    @pytest.mark.asyncio
    async def test_list_video_ids_with_embeddings(self, repository):
        repository.chunks[5].embedding = None

        assert await repository.list_video_ids_with_embeddings() == [1, 2]
