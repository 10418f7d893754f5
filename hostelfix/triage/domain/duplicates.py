"""
Duplicate Detection
===================

Advisory, pre-submission check that flags a title as a likely re-report of
a recent issue. It never blocks submission.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, List, Optional

MIN_TITLE_LENGTH = 6
SIMILARITY_THRESHOLD = 0.6
WINDOW_HOURS = 24

_MS_IN_HOUR = 60 * 60 * 1000
_DISALLOWED = re.compile(r"[^a-z0-9 ]")


@dataclass(frozen=True)
class DuplicateMatch:
    """A recent issue the candidate title looks like."""
    issue_id: Optional[str]
    title: str
    similarity: float


def _field(candidate: Any, name: str, default=None):
    if isinstance(candidate, Mapping):
        return candidate.get(name, default)
    return getattr(candidate, name, default)


def normalize_title(title: str) -> FrozenSet[str]:
    """Lower-case, drop everything outside ``[a-z0-9 ]`` and tokenize."""
    cleaned = _DISALLOWED.sub("", (title or "").lower())
    return frozenset(cleaned.split())


def title_similarity(a: str, b: str) -> float:
    """Shared tokens over the larger token set (denominator never zero)."""
    tokens_a, tokens_b = normalize_title(a), normalize_title(b)
    return len(tokens_a & tokens_b) / max(len(tokens_a), len(tokens_b), 1)


def recent_window(
    issues: Iterable[Any],
    now: int,
    hours: int = WINDOW_HOURS
) -> List[Any]:
    """Issues created within the prior ``hours`` that are not deleted."""
    since = now - hours * _MS_IN_HOUR
    return [
        issue for issue in issues
        if not _field(issue, "is_deleted", False)
        and since <= (_field(issue, "created_at", 0) or 0) <= now
    ]


def find_duplicate(
    candidate_title: str,
    recent_issues: Iterable[Any],
    threshold: float = SIMILARITY_THRESHOLD,
    min_length: int = MIN_TITLE_LENGTH
) -> Optional[DuplicateMatch]:
    """
    First recent issue whose title is similar enough to the candidate.

    First-found, not best-found: the result depends on the order of
    ``recent_issues``. Titles shorter than ``min_length`` are never checked.

    Args:
        candidate_title: Title being typed by the reporter
        recent_issues: ``Issue`` objects or mappings with ``id``/``title``
        threshold: Similarity that must be strictly exceeded
        min_length: Minimum candidate length (after trimming)

    Returns:
        DuplicateMatch or None
    """
    if len((candidate_title or "").strip()) < min_length:
        return None

    for issue in recent_issues:
        title = _field(issue, "title", "") or ""
        similarity = title_similarity(candidate_title, title)
        if similarity > threshold:
            return DuplicateMatch(
                issue_id=_field(issue, "id"),
                title=title,
                similarity=similarity,
            )
    return None
