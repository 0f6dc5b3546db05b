"""Domain models initialization."""

from app.domain.graph import (
    BackfillReport,
    GraphStats,
    RelatedChunk,
    RelatedVideo,
    RelatedVideoResult,
    RelationshipBuildResult,
)
from app.domain.models import Chunk, Relationship, TemporalMetadata, Video
from app.domain.query import (
    EvidenceChunk,
    SearchMode,
    SearchResponse,
    SearchResult,
    VideoResult,
)
from app.domain.temporal import TemporalExtraction, TemporalExtractionResult

__all__ = [
    # Models
    "Video",
    "Chunk",
    "Relationship",
    "TemporalMetadata",
    # Graph
    "RelatedVideo",
    "RelatedChunk",
    "RelatedVideoResult",
    "RelationshipBuildResult",
    "BackfillReport",
    "GraphStats",
    # Query
    "SearchMode",
    "SearchResult",
    "EvidenceChunk",
    "VideoResult",
    "SearchResponse",
    # Temporal
    "TemporalExtraction",
    "TemporalExtractionResult",
]
