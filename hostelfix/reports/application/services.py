"""
Reports Application Services
============================

Weekly summary: statistics always, narration when the narrator cooperates.

Following SOLID principles:
- Dependency Inversion: depends on the issue repository and narrator
  abstractions, not on SQLAlchemy or OpenAI
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from hostelfix.config import settings
from hostelfix.core import RequestContext, SummaryNarrationException
from hostelfix.issues.application.services import IIssueRepository
from hostelfix.reports.domain import (
    IssueStatistics,
    PLACEHOLDER_NARRATION,
    compute_statistics,
    rank_counts,
)
from hostelfix.shared.domain.timestamps import MS_IN_DAY
from hostelfix.shared.infrastructure.logging import get_context_logger, log_latency, get_logger
from hostelfix.sla.domain import ISLAPolicyProvider

logger = get_logger(__name__)


# ========== Collaborator Interfaces ==========

class INarrator(ABC):
    """Turns aggregate statistics into free-text narration."""

    @abstractmethod
    async def narrate(self, statistics: IssueStatistics) -> str:
        """
        Narrate the statistics.

        Raises:
            SummaryNarrationException: Narration failed
        """


# ========== Results ==========

@dataclass(frozen=True)
class WeeklySummary:
    """Statistics plus narration; ``narrated`` False means the placeholder was used."""
    statistics: IssueStatistics
    narration: str
    narrated: bool
    narration_error: Optional[str] = None


# ========== Application Services ==========

class SummaryService:
    """
    Service for administrator reports.

    Narration is best-effort: a missing or failing narrator yields the
    statistics with a placeholder narration, never an error.
    """

    def __init__(
        self,
        repository: IIssueRepository,
        narrator: Optional[INarrator] = None,
        policy_provider: Optional[ISLAPolicyProvider] = None,
        window_days: Optional[int] = None
    ):
        self._repo = repository
        self._narrator = narrator
        self._policy_provider = policy_provider
        self._window_days = window_days or settings.summary_window_days

    async def generate(self, ctx: RequestContext) -> WeeklySummary:
        """Build the summary for the window ending at ``ctx.now``."""
        log = get_context_logger(__name__, ctx.correlation_id)
        window_start = ctx.now - self._window_days * MS_IN_DAY
        policy = self._policy_provider.get_policy() if self._policy_provider else None

        issues = await self._repo.list_created_since(window_start)
        statistics = compute_statistics(issues, ctx.now, window_start, policy)

        if self._narrator is None:
            log.info("No narrator configured, using placeholder narration")
            return WeeklySummary(statistics, PLACEHOLDER_NARRATION, narrated=False)

        try:
            with log_latency(logger, "weekly_summary", total_issues=statistics.total_issues):
                narration = await self._narrator.narrate(statistics)
        except SummaryNarrationException as e:
            log.warning("Summary narration failed, using placeholder", extra={"error": e.message})
            return WeeklySummary(statistics, PLACEHOLDER_NARRATION, narrated=False, narration_error=e.message)

        return WeeklySummary(statistics, narration, narrated=True)

    async def distribution(self) -> Dict[str, int]:
        """Non-deleted issue count per hostel, busiest first."""
        return rank_counts(await self._repo.count_by_location())
