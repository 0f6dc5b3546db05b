"""Core module initialization."""

from app.core.config import Settings, get_settings
from app.core.exceptions import (
    DataIntegrityError,
    EmbeddingError,
    InvalidInputError,
    RetrievalError,
    StorageError,
)
from app.core.logging import setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "RetrievalError",
    "InvalidInputError",
    "StorageError",
    "EmbeddingError",
    "DataIntegrityError",
]
