"""Domain models for the chunk similarity graph."""

from typing import Optional

from pydantic import BaseModel, Field


class RelatedVideo(BaseModel):
    """Video metadata attached to a related chunk."""

    id: int
    title: str
    channel: Optional[str] = None
    youtube_id: Optional[str] = None


class RelatedChunk(BaseModel):
    """A chunk reached by following a similarity edge."""

    chunk_id: int
    content: str
    start_time: float = 0.0
    end_time: float = 0.0
    similarity: float
    video: RelatedVideo


class RelatedVideoResult(BaseModel):
    """Related chunks grouped by the video that owns them."""

    video: RelatedVideo
    score: float  # max edge similarity
    matched_chunks: int
    best_chunk: RelatedChunk


class RelationshipBuildResult(BaseModel):
    """Outcome of computing relationships for a single video."""

    created: int = 0
    skipped: int = 0


class BackfillReport(BaseModel):
    """Aggregate outcome of a full-corpus graph rebuild."""

    deleted: int = 0
    videos_total: int = 0
    videos_processed: int = 0
    videos_failed: int = 0
    relationships_created: int = 0
    relationships_skipped: int = 0
    cancelled: bool = False
    failures: dict[int, str] = Field(default_factory=dict)


class GraphStats(BaseModel):
    """Statistics about the chunk store and its similarity graph."""

    total_videos: int = 0
    total_chunks: int = 0
    embedded_chunks: int = 0
    total_relationships: int = 0
    temporal_metadata: int = 0
    avg_degree: float = 0.0
