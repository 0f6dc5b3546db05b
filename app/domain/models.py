"""Domain models for videos, transcript chunks and their graph edges."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Video(BaseModel):
    """Owning aggregate for transcript chunks. Read-only for this engine."""

    id: int = Field(gt=0)
    title: str
    channel: Optional[str] = None
    youtube_id: Optional[str] = None
    thumbnail: Optional[str] = None
    published_at: Optional[datetime] = None


class Chunk(BaseModel):
    """A contiguous transcript segment, the atomic unit of retrieval."""

    id: int = Field(gt=0)
    video_id: int = Field(gt=0)
    content: str
    start_time: Optional[float] = None  # seconds
    end_time: Optional[float] = None  # seconds
    embedding: Optional[list[float]] = None

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None and len(self.embedding) > 0


class Relationship(BaseModel):
    """A directed, weighted similarity edge between two chunks."""

    source_chunk_id: int = Field(gt=0)
    target_chunk_id: int = Field(gt=0)
    similarity: float = Field(ge=-1.0, le=1.0)

    @model_validator(mode="after")
    def _reject_self_edge(self) -> "Relationship":
        if self.source_chunk_id == self.target_chunk_id:
            raise ValueError(f"Self-edge on chunk {self.source_chunk_id} is not allowed")
        return self

    def reversed(self) -> "Relationship":
        """Return the opposite direction with the same weight."""
        return Relationship(
            source_chunk_id=self.target_chunk_id,
            target_chunk_id=self.source_chunk_id,
            similarity=self.similarity,
        )


class TemporalMetadata(BaseModel):
    """Version and release-date mentions extracted from one chunk."""

    chunk_id: int = Field(gt=0)
    version_mention: Optional[str] = None  # comma-joined
    release_date_mention: Optional[str] = None  # comma-joined
    confidence: float = Field(ge=0.0, le=1.0)
