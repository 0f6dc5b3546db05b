"""Domain models for temporal extraction."""

from pydantic import BaseModel, Field


class TemporalExtraction(BaseModel):
    """Version and date signals detected in a piece of text."""

    versions: list[str] = Field(default_factory=list)
    dates: list[str] = Field(default_factory=list)
    confidence: float = 0.0


class TemporalExtractionResult(BaseModel):
    """Counts from a temporal metadata batch run."""

    extracted: int = 0
    skipped: int = 0
