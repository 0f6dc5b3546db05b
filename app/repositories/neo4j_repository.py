"""Neo4j database repository for chunks, similarity edges and temporal metadata."""

import re
from datetime import datetime
from typing import Any, Optional, Sequence

from loguru import logger
from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession
from neo4j.exceptions import DriverError, Neo4jError, ServiceUnavailable
from neo4j.time import DateTime as Neo4jDateTime

from app.core.exceptions import StorageError
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

FULLTEXT_INDEX = "chunk_content"

LUCENE_TOKEN = re.compile(r"\w+", re.UNICODE)


def neo4j_datetime_to_python(dt: Any) -> Optional[datetime]:
    """Convert Neo4j DateTime to Python datetime."""
    if isinstance(dt, Neo4jDateTime):
        return dt.to_native()
    return dt


def to_lucene_query(text: str) -> str:
    """Turn free text into an OR query of plain terms, free of Lucene syntax."""
    return " OR ".join(LUCENE_TOKEN.findall(text.lower()))


class Neo4jRepository(ChunkRepository):
    """Repository for Neo4j graph database operations.

    Graph layout::

        (:Video)-[:HAS_CHUNK]->(:Chunk)
        (:Chunk)-[:SIMILAR_TO {similarity}]->(:Chunk)
        (:Chunk)-[:HAS_TEMPORAL]->(:TemporalMetadata)

    Cosine similarity is computed inside the database with
    ``gds.similarity.cosine`` (Graph Data Science plugin) and keyword ranking
    uses a Lucene full-text index over chunk content.
    """

    def __init__(
        self,
        uri: str,
        user: str,
        password: str,
        database: str = "neo4j",
        dimensions: int = 384,
    ) -> None:
        """Initialize Neo4j repository."""
        self.uri = uri
        self.user = user
        self.password = password
        self.database = database
        self.dimensions = dimensions
        self._driver: Optional[AsyncDriver] = None

    async def connect(self) -> None:
        """Establish connection to Neo4j."""
        try:
            self._driver = AsyncGraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
            )
            await self._driver.verify_connectivity()
            logger.info(f"Connected to Neo4j at {self.uri}")
        except ServiceUnavailable as e:
            logger.error(f"Failed to connect to Neo4j: {e}")
            raise StorageError(f"Neo4j unavailable at {self.uri}") from e
        await self.create_indexes()

    async def close(self) -> None:
        """Close Neo4j connection."""
        if self._driver:
            await self._driver.close()
            self._driver = None
            logger.info("Closed Neo4j connection")

    def _session(self) -> AsyncSession:
        if self._driver is None:
            raise StorageError("Neo4j repository is not connected")
        return self._driver.session(database=self.database)

    async def _fetch(self, query: str, params: Optional[dict[str, Any]] = None) -> list:
        """Run a read query and return all records."""
        try:
            async with self._session() as session:
                result = await session.run(query, params or {})
                return [record async for record in result]
        except (Neo4jError, DriverError) as e:
            logger.error(f"Neo4j query failed: {type(e).__name__}: {e}")
            raise StorageError(f"Neo4j query failed: {e}") from e

    async def _write(self, query: str, params: Optional[dict[str, Any]] = None):
        """Run a write query and return its summary counters."""
        try:
            async with self._session() as session:
                result = await session.run(query, params or {})
                summary = await result.consume()
                return summary.counters
        except (Neo4jError, DriverError) as e:
            logger.error(f"Neo4j write failed: {type(e).__name__}: {e}")
            raise StorageError(f"Neo4j write failed: {e}") from e

    async def create_indexes(self) -> None:
        """Create constraints and indexes used by the retrieval queries."""
        statements = [
            "CREATE CONSTRAINT video_id IF NOT EXISTS FOR (v:Video) REQUIRE v.id IS UNIQUE",
            "CREATE CONSTRAINT chunk_id IF NOT EXISTS FOR (c:Chunk) REQUIRE c.id IS UNIQUE",
            "CREATE CONSTRAINT temporal_chunk_id IF NOT EXISTS "
            "FOR (m:TemporalMetadata) REQUIRE m.chunk_id IS UNIQUE",
            "CREATE INDEX similar_to_similarity IF NOT EXISTS "
            "FOR ()-[r:SIMILAR_TO]-() ON (r.similarity)",
            f"CREATE FULLTEXT INDEX {FULLTEXT_INDEX} IF NOT EXISTS "
            "FOR (c:Chunk) ON EACH [c.content]",
        ]
        for statement in statements:
            await self._write(statement)
        logger.info("Created database constraints and indexes")

    # Row mapping
    def _node_to_video(self, node: Any) -> Video:
        return Video(
            id=node["id"],
            title=node["title"],
            channel=node.get("channel"),
            youtube_id=node.get("youtube_id"),
            thumbnail=node.get("thumbnail"),
            published_at=neo4j_datetime_to_python(node.get("published_at")),
        )

    def _node_to_chunk(self, node: Any, video_id: int) -> Chunk:
        return Chunk(
            id=node["id"],
            video_id=video_id,
            content=node["content"],
            start_time=node.get("start_time"),
            end_time=node.get("end_time"),
            embedding=node.get("embedding"),
        )

    def _record_to_search_result(self, record: Any) -> SearchResult:
        chunk = record["c"]
        video = record["v"]
        return SearchResult(
            chunk_id=chunk["id"],
            content=chunk["content"],
            start_time=chunk.get("start_time"),
            end_time=chunk.get("end_time"),
            video_id=video["id"],
            video_title=video["title"],
            channel=video.get("channel"),
            youtube_id=video.get("youtube_id"),
            thumbnail=video.get("thumbnail"),
            published_at=neo4j_datetime_to_python(video.get("published_at")),
            similarity=float(record["score"]),
        )

    # Video and chunk writes (used by seeding scripts)
    async def create_video(self, video: Video) -> Video:
        """Create or update a video node."""
        query = """
        MERGE (v:Video {id: $id})
        SET v.title = $title,
            v.channel = $channel,
            v.youtube_id = $youtube_id,
            v.thumbnail = $thumbnail,
            v.published_at = CASE WHEN $published_at IS NULL THEN NULL
                                  ELSE datetime($published_at) END
        """
        params = {
            "id": video.id,
            "title": video.title,
            "channel": video.channel,
            "youtube_id": video.youtube_id,
            "thumbnail": video.thumbnail,
            "published_at": video.published_at.isoformat() if video.published_at else None,
        }
        await self._write(query, params)
        logger.info(f"Created video: {video.id}")
        return video

    async def create_chunk(self, chunk: Chunk) -> Chunk:
        """Create or update a chunk node and link it to its video."""
        query = """
        MATCH (v:Video {id: $video_id})
        MERGE (c:Chunk {id: $id})
        SET c.content = $content,
            c.start_time = $start_time,
            c.end_time = $end_time,
            c.embedding = $embedding
        MERGE (v)-[:HAS_CHUNK]->(c)
        """
        params = {
            "id": chunk.id,
            "video_id": chunk.video_id,
            "content": chunk.content,
            "start_time": chunk.start_time,
            "end_time": chunk.end_time,
            "embedding": chunk.embedding,
        }
        await self._write(query, params)
        logger.debug(f"Created chunk: {chunk.id}")
        return chunk

    async def set_chunk_embedding(self, chunk_id: int, embedding: list[float]) -> None:
        """Set embedding vector for a chunk."""
        query = """
        MATCH (c:Chunk {id: $id})
        SET c.embedding = $embedding
        """
        await self._write(query, {"id": chunk_id, "embedding": embedding})

    # Videos and chunks
    async def get_video(self, video_id: int) -> Optional[Video]:
        records = await self._fetch("MATCH (v:Video {id: $id}) RETURN v", {"id": video_id})
        if not records:
            return None
        return self._node_to_video(records[0]["v"])

    async def get_chunks_for_video(
        self, video_id: int, with_embeddings_only: bool = False
    ) -> list[Chunk]:
        query = """
        MATCH (v:Video {id: $video_id})-[:HAS_CHUNK]->(c:Chunk)
        WHERE NOT $with_embeddings_only OR c.embedding IS NOT NULL
        RETURN c
        ORDER BY c.id
        """
        records = await self._fetch(
            query, {"video_id": video_id, "with_embeddings_only": with_embeddings_only}
        )
        return [self._node_to_chunk(record["c"], video_id) for record in records]

    async def list_video_ids_with_embeddings(self) -> list[int]:
        query = """
        MATCH (v:Video)-[:HAS_CHUNK]->(c:Chunk)
        WHERE c.embedding IS NOT NULL
        RETURN DISTINCT v.id AS video_id
        ORDER BY video_id
        """
        records = await self._fetch(query)
        return [record["video_id"] for record in records]

    # Search
    async def vector_search(
        self, embedding: Sequence[float], limit: int
    ) -> list[SearchResult]:
        query = """
        MATCH (v:Video)-[:HAS_CHUNK]->(c:Chunk)
        WHERE c.embedding IS NOT NULL AND size(c.embedding) = $dimensions
        WITH c, v, gds.similarity.cosine(c.embedding, $embedding) AS score
        RETURN c, v, score
        ORDER BY score DESC, c.id ASC
        LIMIT $limit
        """
        records = await self._fetch(
            query,
            {"embedding": list(embedding), "dimensions": self.dimensions, "limit": limit},
        )
        results = [self._record_to_search_result(record) for record in records]
        logger.debug(f"Vector search returned {len(results)} results")
        return results

    async def keyword_search(self, query: str, limit: int) -> list[SearchResult]:
        lucene_query = to_lucene_query(query)
        if not lucene_query:
            return []

        cypher = """
        CALL db.index.fulltext.queryNodes($index, $query) YIELD node, score
        MATCH (v:Video)-[:HAS_CHUNK]->(node)
        RETURN node AS c, v, score
        ORDER BY score DESC, c.id ASC
        LIMIT $limit
        """
        records = await self._fetch(
            cypher, {"index": FULLTEXT_INDEX, "query": lucene_query, "limit": limit}
        )
        results = [self._record_to_search_result(record) for record in records]
        logger.debug(f"Full-text search returned {len(results)} results")
        return results

    # Similarity graph
    async def find_similar_chunks(
        self, chunk_id: int, embedding: Sequence[float], threshold: float
    ) -> list[tuple[int, float]]:
        query = """
        MATCH (other:Chunk)
        WHERE other.id <> $chunk_id
          AND other.embedding IS NOT NULL
          AND size(other.embedding) = $dimensions
        WITH other, gds.similarity.cosine(other.embedding, $embedding) AS similarity
        WHERE similarity > $threshold
        RETURN other.id AS chunk_id, similarity
        ORDER BY similarity DESC, chunk_id ASC
        """
        records = await self._fetch(
            query,
            {
                "chunk_id": chunk_id,
                "embedding": list(embedding),
                "dimensions": self.dimensions,
                "threshold": threshold,
            },
        )
        return [
            (record["chunk_id"], max(-1.0, min(1.0, float(record["similarity"]))))
            for record in records
        ]

    async def create_relationships(self, relationships: Sequence[Relationship]) -> int:
        if not relationships:
            return 0
        query = """
        UNWIND $rows AS row
        MATCH (s:Chunk {id: row.source}), (t:Chunk {id: row.target})
        MERGE (s)-[r:SIMILAR_TO]->(t)
        ON CREATE SET r.similarity = row.similarity, r.created_at = datetime()
        """
        rows = [
            {
                "source": relationship.source_chunk_id,
                "target": relationship.target_chunk_id,
                "similarity": relationship.similarity,
            }
            for relationship in relationships
        ]
        counters = await self._write(query, {"rows": rows})
        logger.debug(
            f"Inserted {counters.relationships_created}/{len(rows)} similarity relationships"
        )
        return counters.relationships_created

    async def delete_all_relationships(self) -> int:
        counters = await self._write("MATCH ()-[r:SIMILAR_TO]->() DELETE r")
        logger.warning(f"Deleted all {counters.relationships_deleted} similarity relationships")
        return counters.relationships_deleted

    async def get_related_chunks(
        self,
        chunk_ids: Sequence[int],
        video_id: int,
        min_similarity: float,
        include_within_video: bool,
        limit: int,
    ) -> list[RelatedChunk]:
        # Targets that were deleted or lost their embedding are dropped here
        query = """
        MATCH (s:Chunk)-[r:SIMILAR_TO]->(t:Chunk)
        WHERE s.id IN $chunk_ids
          AND r.similarity >= $min_similarity
          AND t.embedding IS NOT NULL
        MATCH (v:Video)-[:HAS_CHUNK]->(t)
        WHERE $include_within_video OR v.id <> $video_id
        WITH t, v, max(r.similarity) AS similarity
        RETURN t, v, similarity
        ORDER BY similarity DESC, t.id ASC
        LIMIT $limit
        """
        records = await self._fetch(
            query,
            {
                "chunk_ids": list(chunk_ids),
                "video_id": video_id,
                "min_similarity": min_similarity,
                "include_within_video": include_within_video,
                "limit": limit,
            },
        )

        related = []
        for record in records:
            chunk = record["t"]
            video = record["v"]
            related.append(
                RelatedChunk(
                    chunk_id=chunk["id"],
                    content=chunk["content"],
                    start_time=chunk.get("start_time") or 0.0,
                    end_time=chunk.get("end_time") or 0.0,
                    similarity=float(record["similarity"]),
                    video=RelatedVideo(
                        id=video["id"],
                        title=video["title"],
                        channel=video.get("channel"),
                        youtube_id=video.get("youtube_id"),
                    ),
                )
            )
        return related

    # Temporal metadata
    async def create_temporal_metadata(self, metadata: TemporalMetadata) -> bool:
        query = """
        MATCH (c:Chunk {id: $chunk_id})
        MERGE (m:TemporalMetadata {chunk_id: $chunk_id})
        ON CREATE SET
            m.version_mention = $version_mention,
            m.release_date_mention = $release_date_mention,
            m.confidence = $confidence
        MERGE (c)-[:HAS_TEMPORAL]->(m)
        """
        counters = await self._write(query, metadata.model_dump())
        return counters.nodes_created > 0

    async def get_temporal_metadata(self, chunk_id: int) -> Optional[TemporalMetadata]:
        records = await self._fetch(
            "MATCH (m:TemporalMetadata {chunk_id: $chunk_id}) RETURN m",
            {"chunk_id": chunk_id},
        )
        if not records:
            return None
        node = records[0]["m"]
        return TemporalMetadata(
            chunk_id=node["chunk_id"],
            version_mention=node.get("version_mention"),
            release_date_mention=node.get("release_date_mention"),
            confidence=node["confidence"],
        )

    # Statistics
    async def get_graph_stats(self) -> GraphStats:
        """Get statistics about the chunk store and similarity graph."""
        query = """
        CALL { MATCH (v:Video) RETURN count(v) AS videos }
        CALL { MATCH (c:Chunk) RETURN count(c) AS chunks,
                    count(c.embedding) AS embedded }
        CALL { MATCH ()-[r:SIMILAR_TO]->() RETURN count(r) AS relationships }
        CALL { MATCH (m:TemporalMetadata) RETURN count(m) AS temporal }
        RETURN videos, chunks, embedded, relationships, temporal
        """
        records = await self._fetch(query)
        stats = GraphStats()
        if records:
            record = records[0]
            stats.total_videos = record["videos"]
            stats.total_chunks = record["chunks"]
            stats.embedded_chunks = record["embedded"]
            stats.total_relationships = record["relationships"]
            stats.temporal_metadata = record["temporal"]
            if stats.total_chunks > 0:
                stats.avg_degree = stats.total_relationships / stats.total_chunks

        logger.info(
            f"Graph stats: {stats.total_chunks} chunks, {stats.total_relationships} relationships"
        )
        return stats

    async def clear_all(self) -> None:
        """Clear all data from the database (use with caution!)."""
        await self._write("MATCH (n) DETACH DELETE n")
        logger.warning("Cleared all data from Neo4j")
