"""Services layer initialization."""

from app.services.aggregator import aggregate_by_video
from app.services.cache_service import CacheService, EmbeddingCache
from app.services.embedding_service import EmbeddingService
from app.services.graph_builder import GraphBuilder
from app.services.graph_traversal import GraphTraversal
from app.services.hybrid_search import HybridSearchEngine, reciprocal_rank_fusion
from app.services.temporal_extractor import extract_temporal_metadata
from app.services.temporal_indexer import TemporalIndexer
from app.services.temporal_ranker import TemporalRanker, calculate_temporal_decay

__all__ = [
    "CacheService",
    "EmbeddingCache",
    "EmbeddingService",
    "GraphBuilder",
    "GraphTraversal",
    "HybridSearchEngine",
    "TemporalIndexer",
    "TemporalRanker",
    "aggregate_by_video",
    "calculate_temporal_decay",
    "extract_temporal_metadata",
    "reciprocal_rank_fusion",
]
