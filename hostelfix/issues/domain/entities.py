"""
Issue Domain Entities
=====================

Pure Python domain entities for facility issues.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns. Timestamps are
epoch milliseconds throughout.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from hostelfix.config import (
    Category, Urgency, IssueStatus, HistoryTag, StaffRole,
    STATUS_LABELS, ASSIGNEE_LABELS
)
from hostelfix.triage.domain.entities import urgency_to_score

LedgerStatus = Union[IssueStatus, HistoryTag]


def status_label(status: Optional[str]) -> str:
    """Human label for a ledger status or tag."""
    if not status:
        return "Unknown"
    value = getattr(status, "value", status)
    return STATUS_LABELS.get(value, value)


def assignee_label(assignee: Optional[str]) -> str:
    """Human label for a staff role (or the system actor)."""
    if not assignee:
        return "Unassigned"
    value = getattr(assignee, "value", assignee)
    return ASSIGNEE_LABELS.get(value, value)


@dataclass(frozen=True)
class HistoryEntry:
    """One immutable line of the status ledger."""
    status: LedgerStatus
    at: int
    note: Optional[str] = None

    @property
    def is_lifecycle(self) -> bool:
        """True for core lifecycle states, False for escalation/deletion tags."""
        return isinstance(self.status, IssueStatus)


@dataclass(frozen=True)
class EvidenceImage:
    """Opaque reference to an uploaded evidence attachment."""
    url: str
    path: str
    name: str


@dataclass(frozen=True)
class Issue:
    """
    Issue aggregate representing one reported facility problem.

    Instances are immutable snapshots; the status ledger produces the next
    snapshot rather than mutating this one, so a rejected transition can
    never leave a half-applied change behind.
    """

    # Core attributes
    id: str
    title: str
    description: str
    category: Category
    urgency: Urgency
    urgency_score: Optional[int]
    location: str
    status: IssueStatus
    created_by: str

    # Timestamps
    created_at: int
    updated_at: int

    # Ledger
    status_history: tuple = ()

    # Assignment
    assigned_to: Optional[StaffRole] = None
    assigned_by: Optional[str] = None
    assigned_at: Optional[int] = None

    # Orthogonal flags
    escalated: bool = False
    escalated_at: Optional[int] = None
    escalated_by: Optional[str] = None
    is_deleted: bool = False
    deleted_at: Optional[int] = None
    deleted_by: Optional[str] = None

    evidence_image: Optional[EvidenceImage] = None
    auto_reason: str = ""

    def __post_init__(self):
        """Validate ledger invariants on every snapshot."""
        # Lists handed in by callers are frozen into tuples
        if not isinstance(self.status_history, tuple):
            object.__setattr__(self, "status_history", tuple(self.status_history))

        if not self.status_history:
            raise ValueError("status_history must not be empty")

        head = self.status_history[0]
        if head.status != IssueStatus.OPEN or head.at != self.created_at:
            raise ValueError("status_history must start with 'open' at created_at")

        if self.lifecycle_status != self.status:
            raise ValueError(
                f"status '{self.status.value}' does not match ledger "
                f"'{self.lifecycle_status.value}'"
            )

        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")

        if self.is_deleted and self.status != IssueStatus.RESOLVED:
            raise ValueError("only resolved issues can be deleted")

    @property
    def lifecycle_status(self) -> IssueStatus:
        """Status of the last lifecycle-typed ledger entry."""
        for entry in reversed(self.status_history):
            if entry.is_lifecycle:
                return entry.status
        return IssueStatus.OPEN

    @property
    def opened_at(self) -> int:
        """Timestamp of the first ledger entry."""
        return self.status_history[0].at

    @property
    def first_assigned_at(self) -> Optional[int]:
        """Timestamp of the first 'assigned' entry, if any."""
        for entry in self.status_history:
            if entry.status == IssueStatus.ASSIGNED:
                return entry.at
        return None

    @property
    def effective_urgency_score(self) -> int:
        """Persisted score, falling back to the urgency label."""
        if self.urgency_score is not None:
            return self.urgency_score
        return urgency_to_score(self.urgency)

    @property
    def is_active(self) -> bool:
        """Check if issue still needs work."""
        return self.status != IssueStatus.RESOLVED

    def timeline(self) -> List[HistoryEntry]:
        """Ledger entries newest first, for display."""
        return list(reversed(self.status_history))


@dataclass(frozen=True)
class IssueFilter:
    """
    Selection criteria for issue listings and live-feed subscriptions.

    ``None`` means "any". Deleted issues are hidden unless asked for.
    """
    status: Optional[IssueStatus] = None
    category: Optional[Category] = None
    created_by: Optional[str] = None
    created_since: Optional[int] = None
    include_deleted: bool = False

    def matches(self, issue: Issue) -> bool:
        """Check a single issue against every criterion."""
        if self.status is not None and issue.status != self.status:
            return False
        if self.category is not None and issue.category != self.category:
            return False
        if self.created_by is not None and issue.created_by != self.created_by:
            return False
        if self.created_since is not None and issue.created_at < self.created_since:
            return False
        if not self.include_deleted and issue.is_deleted:
            return False
        return True
