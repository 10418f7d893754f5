"""
SLA Domain Entities
====================

Per-issue SLA assessment as seen at one instant.

An assessment is derived, never stored: it bundles the coarse flag and
the fine display so read models compute both from the same ``now``.
"""

from dataclasses import dataclass
from typing import Optional

from hostelfix.config import SLAFlag
from hostelfix.issues.domain.entities import Issue
from hostelfix.shared.domain.timestamps import format_time_ago
from hostelfix.sla.domain.value_objects import SLACalculator, SLADisplay, SLAPolicy


@dataclass(frozen=True)
class SLAAssessment:
    """
    SLA state of one issue at ``evaluated_at``.

    Contains the coarse triage flag, the human display and the age label
    shown next to each issue on the board.
    """

    issue: Issue
    flag: SLAFlag
    display: SLADisplay
    age_label: str
    evaluated_at: int

    @classmethod
    def evaluate(
        cls,
        issue: Issue,
        now: int,
        policy: Optional[SLAPolicy] = None
    ) -> "SLAAssessment":
        """Assess one issue."""
        return cls(
            issue=issue,
            flag=SLACalculator.compute_coarse_flag(issue, now, policy),
            display=SLACalculator.compute_display(issue, now, policy),
            age_label=format_time_ago(issue.created_at, now),
            evaluated_at=now,
        )

    @property
    def can_escalate(self) -> bool:
        """Whether the escalate action would currently be accepted."""
        return (
            self.display.breached
            and not self.issue.escalated
            and not self.issue.is_deleted
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "issue_id": self.issue.id,
            "flag": self.flag.value,
            "label": self.display.label,
            "breached": self.display.breached,
            "color_class": self.display.color_class,
            "deadline": self.display.deadline,
            "remaining_ms": self.display.remaining_ms,
            "age_label": self.age_label,
            "can_escalate": self.can_escalate,
            "evaluated_at": self.evaluated_at,
        }
