"""Domain models for search requests and ranked results."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SearchMode(str, Enum):
    """Ranking strategy used by the hybrid search engine."""

    VECTOR = "vector"
    KEYWORD = "keyword"
    HYBRID = "hybrid"


class SearchResult(BaseModel):
    """Single ranked chunk hit.

    ``similarity`` is whatever score produced the ranking: a cosine value in
    vector mode, a lexical score in keyword mode and an RRF score in hybrid
    mode. It is not a probability.
    """

    chunk_id: int
    content: str
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    video_id: int
    video_title: str
    channel: Optional[str] = None
    youtube_id: Optional[str] = None
    thumbnail: Optional[str] = None
    published_at: Optional[datetime] = None
    similarity: float


class EvidenceChunk(BaseModel):
    """A chunk hit kept as evidence for a video-level result."""

    chunk_id: int
    content: str
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    similarity: float


class VideoResult(BaseModel):
    """Chunk hits collapsed into one row per source video."""

    video_id: int
    youtube_id: Optional[str] = None
    title: str
    channel: Optional[str] = None
    thumbnail: Optional[str] = None
    published_at: Optional[datetime] = None
    score: float  # max chunk score
    matched_chunks: int
    best_chunk: EvidenceChunk
    chunks: list[EvidenceChunk] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Search output plus flags describing how it was produced."""

    query: str
    mode: SearchMode
    results: list[SearchResult] = Field(default_factory=list)
    videos: list[VideoResult] = Field(default_factory=list)
    degraded: bool = False
    degraded_reason: Optional[str] = None
    has_embeddings: bool = True
