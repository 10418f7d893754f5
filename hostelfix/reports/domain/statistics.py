"""
Report Statistics
=================

Aggregate counts over a window of issues, and the prompt that turns them
into a short narration for administrators.
"""

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional

from hostelfix.config import IssueStatus
from hostelfix.issues.domain import Issue
from hostelfix.sla.domain import SLAPolicy, compute_display

UNASSIGNED = "unassigned"

PLACEHOLDER_NARRATION = (
    "Most issues are concentrated in hostel infrastructure, particularly water and electricity.\n"
    "High urgency issues should be prioritized in the busiest hostels.\n"
    "Focus admin resources on recurring maintenance issues to reduce SLA delays."
)


@dataclass(frozen=True)
class IssueStatistics:
    """
    Counts over the non-deleted issues created inside a window.

    ``breached_count`` is evaluated against ``generated_at``; resolved
    issues never count as breached.
    """
    window_start: int
    generated_at: int
    total_issues: int = 0
    resolved_count: int = 0
    breached_count: int = 0
    escalated_count: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    by_urgency: Dict[str, int] = field(default_factory=dict)
    by_location: Dict[str, int] = field(default_factory=dict)
    by_assignee: Dict[str, int] = field(default_factory=dict)

    @property
    def open_count(self) -> int:
        """Issues still needing work."""
        return self.total_issues - self.resolved_count

    def to_dict(self) -> dict:
        """Plain mapping, used for the narration prompt and logging."""
        return {
            "window_start": self.window_start,
            "generated_at": self.generated_at,
            "total_issues": self.total_issues,
            "resolved_count": self.resolved_count,
            "open_count": self.open_count,
            "breached_count": self.breached_count,
            "escalated_count": self.escalated_count,
            "by_category": dict(self.by_category),
            "by_urgency": dict(self.by_urgency),
            "by_location": dict(self.by_location),
            "by_assignee": dict(self.by_assignee),
        }


def rank_counts(counts: Mapping[str, int]) -> Dict[str, int]:
    """Counts busiest first, ties broken by name so the output is deterministic."""
    return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))


def compute_statistics(
    issues: Iterable[Issue],
    now: int,
    window_start: int,
    policy: Optional[SLAPolicy] = None
) -> IssueStatistics:
    """
    Aggregate issues created in ``[window_start, now]``.

    Deleted issues are skipped. Pure function of its inputs.
    """
    selected = [
        issue for issue in issues
        if not issue.is_deleted and window_start <= issue.created_at <= now
    ]

    by_category, by_urgency = Counter(), Counter()
    by_location, by_assignee = Counter(), Counter()
    resolved = breached = escalated = 0

    for issue in selected:
        by_category[issue.category.value] += 1
        by_urgency[issue.urgency.value] += 1
        by_location[issue.location] += 1
        by_assignee[issue.assigned_to.value if issue.assigned_to else UNASSIGNED] += 1

        if issue.status == IssueStatus.RESOLVED:
            resolved += 1
        if issue.escalated:
            escalated += 1
        if compute_display(issue, now, policy).breached:
            breached += 1

    return IssueStatistics(
        window_start=window_start,
        generated_at=now,
        total_issues=len(selected),
        resolved_count=resolved,
        breached_count=breached,
        escalated_count=escalated,
        by_category=rank_counts(by_category),
        by_urgency=rank_counts(by_urgency),
        by_location=rank_counts(by_location),
        by_assignee=rank_counts(by_assignee),
    )


class SummaryPromptBuilder:
    """
    Builds prompts for the weekly summary narration.

    Following DRY principle - all prompt logic in one place.
    """

    SYSTEM_PROMPT = """You are an assistant for hostel facility administrators.

You receive aggregate statistics about maintenance issues reported over the
past week. Write a short summary (at most 5 sentences) that:
1. Names the categories and hostels with the most issues
2. Calls out SLA breaches and escalations, if any
3. Suggests where admin resources should be focused next

Use plain text, no markdown, no invented numbers."""

    @classmethod
    def build_prompt(cls, statistics: IssueStatistics) -> str:
        """Build the narration prompt from the statistics."""
        return f"""Weekly issue statistics (JSON):

{json.dumps(statistics.to_dict(), indent=2)}

Write the weekly summary:"""

    @classmethod
    def get_system_prompt(cls) -> str:
        """Get the system prompt for narration."""
        return cls.SYSTEM_PROMPT
