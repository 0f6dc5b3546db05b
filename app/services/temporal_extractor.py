"""Temporal signal extraction from transcript text.

Detects version numbers and release-date mentions with regular expressions
and scores how strongly a chunk is anchored in time.
"""

import re
from typing import Iterable, Iterator

from app.domain import TemporalExtraction

TECHNOLOGIES = (
    "React|Node|Python|Java|Ruby|Go|Rust|TypeScript|JavaScript|PHP|Swift|Kotlin"
    "|Vue|Angular|Next|Express|Django|Rails|Spring|Laravel"
)

MONTHS = (
    "January|February|March|April|May|June|July|August|September|October"
    "|November|December"
)

VERSION_PATTERNS = [
    # Semantic versions: v2.0, 2.0.1, 3.2
    re.compile(r"v?(\d+\.\d+(?:\.\d+)?)", re.IGNORECASE),
    # Version keywords: version 3.2, ver. 4.1
    re.compile(r"(?:version|ver\.?)\s+(\d+(?:\.\d+)*)", re.IGNORECASE),
    # Technology versions: React 18, Node 20.5
    re.compile(rf"\b({TECHNOLOGIES})\s+(\d+(?:\.\d+)*)", re.IGNORECASE),
]

DATE_PATTERNS = [
    # released in 2024, updated 2025
    re.compile(r"(?:released?|updated?)\s+(?:in\s+)?(\d{4})", re.IGNORECASE),
    # January 2024
    re.compile(rf"({MONTHS})\s+(\d{{4}})", re.IGNORECASE),
    # 2024 release, 2025 update, 2023 version
    re.compile(r"(\d{4})\s+(?:release|update|version)", re.IGNORECASE),
]


def _is_fraction(content: str, start: int, end: int) -> bool:
    """True when the match touches a slash, as in scores like ``8.5/10``."""
    before = content[start - 1] if start > 0 else ""
    after = content[end] if end < len(content) else ""
    return before == "/" or after == "/"


def _mentions(
    patterns: Iterable[re.Pattern], content: str, reject_fractions: bool = False
) -> Iterator[str]:
    for pattern in patterns:
        for match in pattern.finditer(content):
            if reject_fractions and _is_fraction(content, match.start(), match.end()):
                continue
            if match.lastindex and match.lastindex >= 2:
                yield f"{match.group(1)} {match.group(2)}"
            else:
                yield match.group(1)


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def extract_versions(content: str) -> list[str]:
    """Extract version mentions, deduplicated in first-seen order."""
    return _unique(_mentions(VERSION_PATTERNS, content, reject_fractions=True))


def extract_dates(content: str) -> list[str]:
    """Extract release-date mentions, deduplicated in first-seen order."""
    return _unique(_mentions(DATE_PATTERNS, content))


def calculate_confidence(versions: list[str], dates: list[str]) -> float:
    """Score temporal signal strength from mention counts.

    Rules are evaluated top to bottom and the first match wins.
    """
    version_count = len(versions)
    date_count = len(dates)

    if version_count == 0 and date_count == 0:
        return 0.0
    if version_count >= 2 and date_count >= 1:
        return 1.0
    if version_count >= 3 or date_count >= 2:
        return 1.0
    if version_count >= 2:
        return 0.7
    # Single version with a minor/patch component
    if version_count == 1 and "." in versions[0]:
        return 0.7
    if version_count >= 1 and date_count >= 1:
        return 0.8
    if date_count >= 1:
        return 0.6
    # Single bare major version
    if version_count == 1:
        return 0.4
    return 0.5


def extract_temporal_metadata(content: str) -> TemporalExtraction:
    """Extract version numbers, release dates and a confidence score from text.

    >>> extract_temporal_metadata("React 18 was released in 2022")
    TemporalExtraction(versions=['React 18'], dates=['2022'], confidence=0.8)
    """
    if not content or not content.strip():
        return TemporalExtraction()

    versions = extract_versions(content)
    dates = extract_dates(content)
    return TemporalExtraction(
        versions=versions,
        dates=dates,
        confidence=calculate_confidence(versions, dates),
    )
