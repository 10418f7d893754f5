"""
SLA Application Services
=========================

Application services orchestrate SLA evaluation over stored issues.

Following SOLID principles:
- Single Responsibility: SLAService only reads and evaluates
- Dependency Inversion: Depend on abstractions (repository, policy provider),
  not concrete implementations
"""

from dataclasses import dataclass
from typing import List, Optional

from hostelfix.config import Category, IssueStatus, SLAFlag, settings
from hostelfix.core import ResourceNotFoundException, ValidationException
from hostelfix.issues.application.services import IIssueRepository
from hostelfix.issues.domain import Issue, IssueFilter
from hostelfix.sla.domain import (
    ColorClass,
    ISLAPolicyProvider,
    SLAAssessment,
    sort_by_attention,
)


@dataclass(frozen=True)
class BoardSummary:
    """Counts over one board evaluation."""
    total_issues: int
    overdue_count: int
    delayed_count: int
    on_time_count: int
    breached_count: int
    at_risk_count: int
    escalated_count: int
    timed_count: int

    @property
    def breach_rate(self) -> float:
        """Percentage of issues with a running deadline that are past it."""
        if self.timed_count == 0:
            return 0.0
        return round(self.breached_count / self.timed_count * 100, 2)

    @classmethod
    def from_assessments(cls, assessments: List[SLAAssessment]) -> "BoardSummary":
        flags = [a.flag for a in assessments]
        return cls(
            total_issues=len(assessments),
            timed_count=sum(1 for a in assessments if a.display.deadline is not None),
            overdue_count=flags.count(SLAFlag.OVERDUE),
            delayed_count=flags.count(SLAFlag.DELAYED),
            on_time_count=flags.count(SLAFlag.ON_TIME),
            breached_count=sum(1 for a in assessments if a.display.breached),
            at_risk_count=sum(1 for a in assessments if a.display.color_class == ColorClass.AT_RISK),
            escalated_count=sum(1 for a in assessments if a.issue.escalated),
        )


@dataclass(frozen=True)
class SLABoard:
    """Attention-ordered assessments plus their summary."""
    assessments: List[SLAAssessment]
    summary: BoardSummary
    evaluated_at: int


class SLAService:
    """
    Service for SLA evaluation and the admin board.

    Everything is recomputed from persisted timestamps against the caller's
    ``now``; nothing derived is stored.
    """

    def __init__(
        self,
        issue_repository: IIssueRepository,
        policy_provider: ISLAPolicyProvider
    ):
        self._issue_repo = issue_repository
        self._policy_provider = policy_provider

    async def assess(self, issue_id: str, now: int) -> SLAAssessment:
        """
        SLA state of one issue.

        Raises:
            ResourceNotFoundException: Unknown issue
        """
        issue = await self._issue_repo.get_by_id(issue_id)
        if issue is None:
            raise ResourceNotFoundException("Issue", issue_id)
        return SLAAssessment.evaluate(issue, now, self._policy_provider.get_policy())

    async def _load_all(self, filters: IssueFilter) -> List[Issue]:
        """Every issue matching ``filters``, read page by page."""
        page_size = settings.feed_snapshot_limit
        issues: List[Issue] = []
        while True:
            page = await self._issue_repo.list(filters, limit=page_size, offset=len(issues))
            issues.extend(page)
            if len(page) < page_size:
                return issues

    async def board(
        self,
        now: int,
        status: Optional[str] = None,
        category: Optional[str] = None,
        flag: Optional[str] = None,
        limit: Optional[int] = None
    ) -> SLABoard:
        """
        Evaluate and order the non-deleted issues for the admin board.

        Every matching issue is evaluated and ordered; ``limit`` only cuts
        the returned assessments, so the summary counts the whole set.

        Args:
            now: Evaluation instant (epoch millis)
            status: Only issues in this lifecycle status
            category: Only issues in this category
            flag: Only issues carrying this coarse flag
            limit: Max assessments returned, defaults to the feed snapshot limit
        """
        try:
            filters = IssueFilter(
                status=IssueStatus(status) if status else None,
                category=Category(category) if category else None,
            )
            wanted_flag = SLAFlag(flag) if flag else None
        except ValueError as e:
            raise ValidationException(str(e), {"status": status, "category": category, "flag": flag})

        policy = self._policy_provider.get_policy()
        issues = await self._load_all(filters)

        by_id = {issue.id: SLAAssessment.evaluate(issue, now, policy) for issue in issues}
        ordered = [by_id[issue.id] for issue in sort_by_attention(issues, now, policy)]
        if wanted_flag is not None:
            ordered = [a for a in ordered if a.flag == wanted_flag]

        return SLABoard(
            assessments=ordered[:limit or settings.feed_snapshot_limit],
            summary=BoardSummary.from_assessments(ordered),
            evaluated_at=now,
        )
