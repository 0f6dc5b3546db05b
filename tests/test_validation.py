"""Tests for shared argument checks."""

import pytest

from app.core.exceptions import InvalidInputError
from app.core.validation import validate_limit, validate_similarity, validate_video_id


@pytest.mark.parametrize("video_id", [0, -1, "3", 2.0, True, None])
def test_invalid_video_ids(video_id):
    with pytest.raises(InvalidInputError):
        validate_video_id(video_id)


def test_valid_video_id():
    validate_video_id(7)


@pytest.mark.parametrize("limit", [0, -2, 1.5, False])
def test_invalid_limits(limit):
    with pytest.raises(InvalidInputError):
        validate_limit(limit)


def test_strict_threshold_excludes_one():
    validate_similarity("threshold", -1.0)
    validate_similarity("threshold", 0.99)
    with pytest.raises(InvalidInputError):
        validate_similarity("threshold", 1.0)


def test_inclusive_filter_accepts_one():
    validate_similarity("min_similarity", 1.0, allow_one=True)
    with pytest.raises(InvalidInputError):
        validate_similarity("min_similarity", 1.01, allow_one=True)
    with pytest.raises(InvalidInputError):
        validate_similarity("min_similarity", -1.5, allow_one=True)
