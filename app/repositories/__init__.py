"""Repositories initialization."""

from app.repositories.base import ChunkRepository
from app.repositories.memory_repository import InMemoryRepository
from app.repositories.neo4j_repository import Neo4jRepository

__all__ = ["ChunkRepository", "InMemoryRepository", "Neo4jRepository"]
