"""Temporal ranking service for time-aware retrieval."""

import math
from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from app.core.exceptions import InvalidInputError
from app.domain import SearchResult

SECONDS_PER_DAY = 86400.0


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def calculate_temporal_decay(
    published_at: Optional[datetime],
    half_life_days: float = 365.0,
    now: Optional[datetime] = None,
) -> float:
    """Exponential age penalty in (0, 1].

    ``decay = exp(-ln(2) / half_life_days * age_days)``. Unknown publication
    dates and dates in the future yield 1.0. Naive datetimes are read as UTC.
    """
    if half_life_days <= 0:
        raise InvalidInputError(f"half_life_days must be positive, got {half_life_days}")
    if published_at is None:
        return 1.0

    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    age_days = (now - _as_utc(published_at)).total_seconds() / SECONDS_PER_DAY
    age_days = max(age_days, 0.0)

    decay_rate = math.log(2) / half_life_days
    return math.exp(-decay_rate * age_days)


class TemporalRanker:
    """Re-ranks search results by multiplying scores with a temporal decay."""

    def __init__(self, half_life_days: float = 365.0) -> None:
        """Initialize temporal ranker."""
        if half_life_days <= 0:
            raise InvalidInputError(f"half_life_days must be positive, got {half_life_days}")
        self.half_life_days = half_life_days
        logger.info(f"Initialized TemporalRanker with half_life_days={half_life_days}")

    def apply_temporal_decay(
        self,
        results: list[SearchResult],
        now: Optional[datetime] = None,
        half_life_days: Optional[float] = None,
    ) -> list[SearchResult]:
        """Return decayed copies of ``results`` re-sorted by adjusted score.

        Only positive scores are decayed; negative scores (possible for cosine
        and BM25) are left unchanged. Ties keep a deterministic order by
        chunk ID.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        half_life = half_life_days if half_life_days is not None else self.half_life_days

        decayed = []
        for result in results:
            score = result.similarity
            if score > 0:
                score *= calculate_temporal_decay(result.published_at, half_life, now)
            decayed.append(result.model_copy(update={"similarity": score}))
        decayed.sort(key=lambda result: (-result.similarity, result.chunk_id))

        logger.debug(f"Applied temporal decay to {len(decayed)} results")
        return decayed
