"""
Triage Application Services
============================

Application services for issue classification and duplicate detection.

Orchestrates the pure triage domain against stored issues and settings.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from hostelfix.config import settings
from hostelfix.shared.domain.timestamps import MS_IN_HOUR
from hostelfix.shared.infrastructure.logging import get_logger
from hostelfix.triage.domain import (
    ClassificationResult,
    DuplicateMatch,
    classify_and_route,
    find_duplicate,
    recent_window,
)

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IRecentIssueSource(ABC):
    """Read side the duplicate check needs; the issue repository satisfies it."""

    @abstractmethod
    async def list_created_since(self, since: int) -> List[Any]:
        """Non-deleted issues created at or after ``since``, newest first."""


# ========== Application Services ==========

class TriageService:
    """
    Service for classification previews and advisory duplicate checks.

    Window, threshold and minimum title length come from settings unless
    given explicitly.
    """

    def __init__(
        self,
        recent_issues: IRecentIssueSource,
        window_hours: Optional[int] = None,
        threshold: Optional[float] = None,
        min_title_length: Optional[int] = None
    ):
        self._recent = recent_issues
        self._window_hours = window_hours or settings.duplicate_window_hours
        self._threshold = settings.duplicate_threshold if threshold is None else threshold
        self._min_length = min_title_length or settings.duplicate_min_title_length

    def classify(
        self,
        title: str,
        description: str = "",
        category: Optional[str] = None,
        urgency: Optional[str] = None
    ) -> ClassificationResult:
        """
        Classification the submission would receive.

        Raises:
            ValidationException: Unknown explicit category/urgency
        """
        return classify_and_route(title, description, category, urgency)

    async def check_duplicate(self, now: int, title: str) -> Optional[DuplicateMatch]:
        """
        Advisory re-report check against the recent-issue window.

        Args:
            now: Instant the window ends at (epoch millis)
            title: Candidate title

        Returns:
            First recent issue whose title is similar enough, or None
        """
        if len((title or "").strip()) < self._min_length:
            return None

        since = now - self._window_hours * MS_IN_HOUR
        candidates = recent_window(
            await self._recent.list_created_since(since),
            now,
            self._window_hours,
        )
        match = find_duplicate(
            title,
            candidates,
            threshold=self._threshold,
            min_length=self._min_length,
        )

        if match is not None:
            logger.info(
                "Possible duplicate found",
                extra={"issue_id": match.issue_id, "similarity": round(match.similarity, 4)}
            )
        return match
