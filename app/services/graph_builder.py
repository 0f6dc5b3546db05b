"""Graph builder service for the chunk similarity graph."""

from typing import Callable, Optional

from loguru import logger

from app.core.exceptions import RetrievalError
from app.core.validation import validate_similarity, validate_video_id
from app.domain import BackfillReport, Chunk, Relationship, RelationshipBuildResult
from app.repositories.base import ChunkRepository

ProgressCallback = Callable[[int, int], None]


class GraphBuilder:
    """Service for materialising similarity edges between chunks.

    Each video's embedded chunks are compared against every embedded chunk in
    the corpus using the store's cosine operator. Pairs above the threshold
    are stored in both directions; existing edges are left untouched.
    """

    def __init__(
        self,
        repository: ChunkRepository,
        similarity_threshold: float = 0.75,
    ) -> None:
        """Initialize graph builder."""
        validate_similarity("similarity_threshold", similarity_threshold)
        self.repository = repository
        self.similarity_threshold = similarity_threshold
        logger.info(f"Initialized GraphBuilder (threshold={similarity_threshold})")

    def _usable(self, chunk: Chunk) -> bool:
        if not chunk.has_embedding:
            return False
        if len(chunk.embedding) != self.repository.dimensions:
            logger.warning(
                f"Skipping chunk {chunk.id}: embedding has {len(chunk.embedding)} "
                f"dimensions, expected {self.repository.dimensions}"
            )
            return False
        return True

    async def compute_relationships(
        self,
        video_id: int,
        threshold: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> RelationshipBuildResult:
        """Create similarity edges for one video's chunks.

        Returns how many edges were newly created and how many already existed.
        """
        validate_video_id(video_id)
        threshold = self.similarity_threshold if threshold is None else threshold
        validate_similarity("threshold", threshold)

        video_chunks = await self.repository.get_chunks_for_video(
            video_id, with_embeddings_only=True
        )
        sources = [chunk for chunk in video_chunks if self._usable(chunk)]
        if not sources:
            logger.info(f"Video {video_id} has no embedded chunks, nothing to link")
            return RelationshipBuildResult()

        # Unordered pairs; the same pair is found from both ends when both
        # chunks belong to this video
        pairs: dict[tuple[int, int], float] = {}
        for processed, chunk in enumerate(sources, start=1):
            similar = await self.repository.find_similar_chunks(
                chunk.id, chunk.embedding, threshold
            )
            for target_id, similarity in similar:
                if target_id == chunk.id:
                    continue
                key = (min(chunk.id, target_id), max(chunk.id, target_id))
                pairs.setdefault(key, similarity)
            if on_progress:
                on_progress(processed, len(sources))

        relationships: list[Relationship] = []
        for (first_id, second_id), similarity in sorted(pairs.items()):
            edge = Relationship(
                source_chunk_id=first_id,
                target_chunk_id=second_id,
                similarity=similarity,
            )
            relationships.extend([edge, edge.reversed()])

        created = await self.repository.create_relationships(relationships)
        result = RelationshipBuildResult(created=created, skipped=len(relationships) - created)
        logger.info(
            f"Video {video_id}: {len(pairs)} similar pairs, "
            f"{result.created} edges created, {result.skipped} skipped"
        )
        return result

    async def backfill(
        self,
        threshold: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> BackfillReport:
        """Rebuild the whole similarity graph.

        Deletes every edge, then recomputes relationships one video at a time.
        A video that fails is recorded and skipped. ``should_stop`` is checked
        between videos; the report then holds the totals reached so far.
        Must not run alongside any other relationship computation.
        """
        threshold = self.similarity_threshold if threshold is None else threshold
        validate_similarity("threshold", threshold)

        logger.info("Rebuilding similarity graph")
        report = BackfillReport()
        report.deleted = await self.repository.delete_all_relationships()

        video_ids = await self.repository.list_video_ids_with_embeddings()
        report.videos_total = len(video_ids)

        for index, video_id in enumerate(video_ids, start=1):
            if should_stop and should_stop():
                report.cancelled = True
                logger.warning(
                    f"Backfill cancelled after {report.videos_processed}/{report.videos_total} videos"
                )
                break

            try:
                result = await self.compute_relationships(video_id, threshold=threshold)
            except RetrievalError as e:
                logger.error(f"Failed to compute relationships for video {video_id}: {e}")
                report.videos_failed += 1
                report.failures[video_id] = str(e)
            else:
                report.videos_processed += 1
                report.relationships_created += result.created
                report.relationships_skipped += result.skipped

            if on_progress:
                on_progress(index, report.videos_total)

        logger.info(
            f"Backfill finished: {report.videos_processed} videos processed, "
            f"{report.videos_failed} failed, {report.relationships_created} edges created"
        )
        return report
