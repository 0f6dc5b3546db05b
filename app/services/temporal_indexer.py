"""Batch extraction of temporal metadata for stored chunks."""

from typing import Callable, Optional

from loguru import logger

from app.core.validation import validate_video_id
from app.domain import TemporalExtractionResult, TemporalMetadata
from app.repositories.base import ChunkRepository
from app.services.temporal_extractor import extract_temporal_metadata


class TemporalIndexer:
    """Runs temporal extraction over a video's chunks and stores the results.

    Only chunks with a non-zero confidence get a metadata row.
    """

    def __init__(self, repository: ChunkRepository) -> None:
        """Initialize temporal indexer."""
        self.repository = repository

    async def extract_for_video(
        self,
        video_id: int,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> TemporalExtractionResult:
        """Extract and store temporal metadata for every chunk of a video."""
        validate_video_id(video_id)
        chunks = await self.repository.get_chunks_for_video(video_id)
        result = TemporalExtractionResult()

        for processed, chunk in enumerate(chunks, start=1):
            extraction = extract_temporal_metadata(chunk.content)
            if extraction.confidence > 0:
                metadata = TemporalMetadata(
                    chunk_id=chunk.id,
                    version_mention=", ".join(extraction.versions) or None,
                    release_date_mention=", ".join(extraction.dates) or None,
                    confidence=extraction.confidence,
                )
                if await self.repository.create_temporal_metadata(metadata):
                    result.extracted += 1
                else:
                    # Row already stored for this chunk
                    result.skipped += 1
            else:
                result.skipped += 1

            if on_progress:
                on_progress(processed, len(chunks))

        logger.info(
            f"Temporal extraction for video {video_id}: "
            f"{result.extracted} extracted, {result.skipped} skipped"
        )
        return result

    async def extract_all(self) -> TemporalExtractionResult:
        """Run extraction for every video that has embedded chunks."""
        total = TemporalExtractionResult()
        for video_id in await self.repository.list_video_ids_with_embeddings():
            result = await self.extract_for_video(video_id)
            total.extracted += result.extracted
            total.skipped += result.skipped
        return total
