"""
Issues Domain Layer
===================

Domain layer for the issue aggregate and its status ledger.

Contains:
- Entities: Issue, HistoryEntry, EvidenceImage, IssueFilter
- Ledger: the issue state machine (open -> assigned -> in_progress -> resolved,
  plus escalation and soft-deletion flags)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from hostelfix.issues.domain.entities import (
    Issue,
    HistoryEntry,
    EvidenceImage,
    IssueFilter,
    status_label,
    assignee_label,
)
from hostelfix.issues.domain.ledger import (
    seed_history,
    open_issue,
    apply_transition,
    BreachCheck,
)

__all__ = [
    # Entities
    "Issue",
    "HistoryEntry",
    "EvidenceImage",
    "IssueFilter",
    "status_label",
    "assignee_label",
    # Ledger
    "seed_history",
    "open_issue",
    "apply_transition",
    "BreachCheck",
]
