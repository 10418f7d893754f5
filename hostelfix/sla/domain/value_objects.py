"""
SLA Value Objects
==================

Immutable value objects and pure calculations for the SLA domain.

Two independent outputs are derived from the same deadline rules:
- a coarse triage flag (on-time / delayed / overdue) used for ordering
- a fine display (remaining or breached-since) used for humans

Both are pure functions of ``(issue, now)``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from hostelfix.config import IssueStatus, SLAFlag
from hostelfix.issues.domain.entities import Issue
from hostelfix.shared.domain.timestamps import MS_IN_HOUR, MS_IN_MINUTE


class SLAPolicy(BaseModel):
    """
    SLA policy loaded from YAML.

    This is a value object - immutable and defined by its attributes.
    """
    open_hours: int = Field(default=24, ge=1, description="Time allowed to pick up an open issue")
    assigned_hours: int = Field(default=48, ge=1, description="Time allowed to finish an assigned issue")
    warning_threshold_percent: int = Field(
        default=15, ge=0, le=100,
        description="Remaining share of the window that counts as at risk"
    )

    model_config = {"frozen": True}

    def window_ms(self, status: IssueStatus) -> Optional[int]:
        """Length of the SLA window for a status, None when untimed."""
        if status == IssueStatus.OPEN:
            return self.open_hours * MS_IN_HOUR
        if status in (IssueStatus.ASSIGNED, IssueStatus.IN_PROGRESS):
            return self.assigned_hours * MS_IN_HOUR
        return None


DEFAULT_POLICY = SLAPolicy()


class ISLAPolicyProvider(ABC):
    """Interface for SLA policy access."""

    @abstractmethod
    def get_policy(self) -> SLAPolicy:
        """Get current SLA policy."""


class ColorClass:
    """CSS classes handed to front-ends with each display."""
    OK = "sla-ok"
    AT_RISK = "sla-at-risk"
    BREACHED = "sla-breached"
    COMPLETE = "sla-complete"
    NONE = "sla-none"


@dataclass(frozen=True)
class SLADisplay:
    """Human-readable SLA state of one issue at one instant."""
    label: str
    breached: bool
    color_class: str
    deadline: Optional[int] = None
    remaining_ms: Optional[int] = None


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class following DRY principle -
    all SLA calculation logic in one place.
    """

    FLAG_RANK = {SLAFlag.OVERDUE: 0, SLAFlag.DELAYED: 1, SLAFlag.ON_TIME: 2}

    @staticmethod
    def format_duration(ms: int) -> str:
        """
        Render a duration as ``"Nm"`` or ``"Hh Nm"``.

        Whole minutes are truncated; the sign is ignored.
        """
        total_minutes = abs(ms) // MS_IN_MINUTE
        hours, minutes = divmod(total_minutes, 60)
        if hours == 0:
            return f"{minutes}m"
        return f"{hours}h {minutes}m"

    @staticmethod
    def deadline_anchor(issue: Issue) -> Optional[int]:
        """Instant the current SLA window started, None when untimed."""
        if issue.status == IssueStatus.OPEN:
            return issue.created_at
        if issue.status in (IssueStatus.ASSIGNED, IssueStatus.IN_PROGRESS):
            assigned_at = issue.first_assigned_at
            return assigned_at if assigned_at is not None else issue.created_at
        return None

    @classmethod
    def compute_deadline(
        cls,
        issue: Issue,
        policy: Optional[SLAPolicy] = None
    ) -> Optional[int]:
        """
        Calculate the SLA deadline for an issue.

        open: created_at + open window.
        assigned/in_progress: first 'assigned' entry (or created_at) + assigned window.
        resolved: no deadline.
        """
        policy = policy or DEFAULT_POLICY
        anchor = cls.deadline_anchor(issue)
        window = policy.window_ms(issue.status)
        if anchor is None or window is None:
            return None
        return anchor + window

    @staticmethod
    def compute_coarse_flag(
        issue: Issue,
        now: int,
        policy: Optional[SLAPolicy] = None
    ) -> SLAFlag:
        """
        Coarse triage flag.

        ``delayed`` only applies to open issues and ``overdue`` only to
        assigned ones; they are two separate windows, not a severity ladder.
        """
        policy = policy or DEFAULT_POLICY

        if issue.status == IssueStatus.OPEN:
            if now - issue.opened_at > policy.open_hours * MS_IN_HOUR:
                return SLAFlag.DELAYED

        if issue.status == IssueStatus.ASSIGNED:
            assigned_at = issue.first_assigned_at
            if assigned_at is not None and now - assigned_at > policy.assigned_hours * MS_IN_HOUR:
                return SLAFlag.OVERDUE

        return SLAFlag.ON_TIME

    @classmethod
    def compute_display(
        cls,
        issue: Issue,
        now: int,
        policy: Optional[SLAPolicy] = None
    ) -> SLADisplay:
        """
        Fine SLA display.

        Returns:
            "<duration> left" while within the deadline,
            "BREACHED: <duration> ago" once past it,
            a fixed label for resolved issues.
        """
        policy = policy or DEFAULT_POLICY

        if issue.status == IssueStatus.RESOLVED:
            if issue.is_deleted:
                return SLADisplay(label="Deleted", breached=False, color_class=ColorClass.NONE)
            return SLADisplay(label="Complete", breached=False, color_class=ColorClass.COMPLETE)

        deadline = cls.compute_deadline(issue, policy)
        if deadline is None:
            return SLADisplay(label="No SLA", breached=False, color_class=ColorClass.NONE)

        remaining = deadline - now
        if remaining < 0:
            return SLADisplay(
                label=f"BREACHED: {cls.format_duration(remaining)} ago",
                breached=True,
                color_class=ColorClass.BREACHED,
                deadline=deadline,
                remaining_ms=remaining,
            )

        window = policy.window_ms(issue.status)
        at_risk = remaining * 100 <= window * policy.warning_threshold_percent
        return SLADisplay(
            label=f"{cls.format_duration(remaining)} left",
            breached=False,
            color_class=ColorClass.AT_RISK if at_risk else ColorClass.OK,
            deadline=deadline,
            remaining_ms=remaining,
        )


def compute_coarse_flag(issue: Issue, now: int, policy: Optional[SLAPolicy] = None) -> SLAFlag:
    """Module-level shortcut for ``SLACalculator.compute_coarse_flag``."""
    return SLACalculator.compute_coarse_flag(issue, now, policy)


def compute_display(issue: Issue, now: int, policy: Optional[SLAPolicy] = None) -> SLADisplay:
    """Module-level shortcut for ``SLACalculator.compute_display``."""
    return SLACalculator.compute_display(issue, now, policy)
