"""Core configuration settings for the retrieval engine."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="Gold Miner Retrieval", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # OpenAI embeddings
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_embedding_model: str = Field(
        default="text-embedding-3-small", alias="OPENAI_EMBEDDING_MODEL"
    )
    embedding_dimensions: int = Field(default=384, alias="EMBEDDING_DIMENSIONS", gt=0)

    # Neo4j
    neo4j_uri: str = Field(default="bolt://localhost:7687", alias="NEO4J_URI")
    neo4j_user: str = Field(default="neo4j", alias="NEO4J_USER")
    neo4j_password: str = Field(default="", alias="NEO4J_PASSWORD")
    neo4j_database: str = Field(default="neo4j", alias="NEO4J_DATABASE")

    # Cache
    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")
    embedding_cache_ttl: int = Field(default=86400, alias="EMBEDDING_CACHE_TTL")
    max_memory_cache_items: int = Field(default=10000, alias="MAX_MEMORY_CACHE_ITEMS")

    # Hybrid search
    rrf_k: int = Field(default=60, alias="RRF_K", gt=0)
    overfetch_factor: int = Field(default=3, alias="OVERFETCH_FACTOR", ge=1)
    max_query_length: int = Field(default=500, alias="MAX_QUERY_LENGTH")
    search_default_limit: int = Field(default=10, alias="SEARCH_DEFAULT_LIMIT")
    max_evidence_chunks: int = Field(default=3, alias="MAX_EVIDENCE_CHUNKS")

    # Similarity graph
    similarity_threshold: float = Field(default=0.75, alias="SIMILARITY_THRESHOLD")
    related_default_limit: int = Field(default=10, alias="RELATED_DEFAULT_LIMIT")

    # Temporal
    temporal_half_life_days: float = Field(
        default=365.0, alias="TEMPORAL_HALF_LIFE_DAYS", gt=0
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
