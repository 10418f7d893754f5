"""
Attention Ordering
==================

Orders issues for the admin board: whatever needs attention first comes
first. All sorts are stable, so equal keys keep their input order.
"""

from typing import Iterable, List, Optional

from hostelfix.issues.domain.entities import Issue
from hostelfix.sla.domain.value_objects import SLACalculator, SLAPolicy


def attention_key(issue: Issue, now: int, policy: Optional[SLAPolicy] = None) -> tuple:
    """(flag rank asc, urgency score desc, created_at desc)."""
    flag = SLACalculator.compute_coarse_flag(issue, now, policy)
    return (
        SLACalculator.FLAG_RANK[flag],
        -issue.effective_urgency_score,
        -issue.created_at,
    )


def sort_by_attention(
    issues: Iterable[Issue],
    now: int,
    policy: Optional[SLAPolicy] = None
) -> List[Issue]:
    """
    Overdue first, then delayed, then on-time.

    Within a bucket: higher urgency first, then newest first.
    """
    return sorted(issues, key=lambda issue: attention_key(issue, now, policy))


def sort_newest(issues: Iterable[Issue]) -> List[Issue]:
    """Newest first."""
    return sorted(issues, key=lambda issue: -issue.created_at)


def sort_by_priority(issues: Iterable[Issue]) -> List[Issue]:
    """Highest urgency first, newest first within equal urgency."""
    return sorted(
        issues,
        key=lambda issue: (-issue.effective_urgency_score, -issue.created_at)
    )
