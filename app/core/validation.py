"""Argument checks shared by the graph and temporal services."""

from app.core.exceptions import InvalidInputError


def validate_video_id(video_id: int) -> None:
    if isinstance(video_id, bool) or not isinstance(video_id, int) or video_id <= 0:
        raise InvalidInputError(f"video_id must be a positive integer, got {video_id!r}")


def validate_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidInputError(f"limit must be a positive integer, got {limit!r}")


def validate_similarity(name: str, value: float, allow_one: bool = False) -> None:
    """Check a similarity bound lies in [-1, 1), or [-1, 1] with ``allow_one``.

    Use ``allow_one`` for inclusive filters (``similarity >= value``); strict
    thresholds (``similarity > value``) must stay below 1.0.
    """
    upper_ok = value <= 1.0 if allow_one else value < 1.0
    if not (-1.0 <= value and upper_ok):
        bound = "]" if allow_one else ")"
        raise InvalidInputError(f"{name} must be in [-1, 1{bound}, got {value}")
