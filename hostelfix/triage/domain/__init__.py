"""
Triage Domain Layer
===================

Domain layer for issue triage.

Contains:
- Entities: ClassificationResult, keyword classifier, routing
- Duplicate detection over a recent-issue window

This layer is framework-agnostic and contains pure business logic.
"""

from hostelfix.triage.domain.entities import (
    ClassificationResult,
    KeywordRules,
    KeywordClassifier,
    classify_and_route,
    route_category,
    urgency_to_score,
)
from hostelfix.triage.domain.duplicates import (
    DuplicateMatch,
    normalize_title,
    title_similarity,
    recent_window,
    find_duplicate,
)

__all__ = [
    "ClassificationResult",
    "KeywordRules",
    "KeywordClassifier",
    "classify_and_route",
    "route_category",
    "urgency_to_score",
    "DuplicateMatch",
    "normalize_title",
    "title_similarity",
    "recent_window",
    "find_duplicate",
]
