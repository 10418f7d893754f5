"""
Status Ledger
=============

The issue state machine.

    open -> assigned -> in_progress -> resolved

``escalated`` and ``is_deleted`` are flags layered on top; each gets its own
timestamp and ledger entry but never changes ``status``.

Every accepted transition produces a new ``Issue`` snapshot carrying the
updated field(s), exactly one appended ledger entry and ``updated_at=now``.
Rejected transitions raise ``TransitionException`` and the input snapshot is
left as it was.
"""

from dataclasses import replace
from typing import Callable, Dict, Optional

from hostelfix.config import (
    IssueStatus, HistoryTag, StaffRole, TransitionAction, SYSTEM_ACTOR
)
from hostelfix.core.exceptions import TransitionException, ValidationException
from hostelfix.issues.domain.entities import Issue, HistoryEntry, EvidenceImage
from hostelfix.triage.domain.entities import ClassificationResult

# SLA evaluation lives in the sla context, which imports this package;
# callers pass the breach check in instead.
BreachCheck = Callable[[Issue, int], bool]


def seed_history(created_at: int, assigned_to: Optional[StaffRole] = None) -> tuple:
    """Initial ledger for a freshly submitted issue."""
    entries = [HistoryEntry(status=IssueStatus.OPEN, at=created_at)]
    if assigned_to is not None:
        entries.append(HistoryEntry(
            status=IssueStatus.ASSIGNED,
            at=created_at,
            note=f"Auto-assigned to {assigned_to.value}"
        ))
    return tuple(entries)


def open_issue(
    issue_id: str,
    title: str,
    description: str,
    classification: ClassificationResult,
    location: str,
    created_by: str,
    now: int,
    evidence_image: Optional[EvidenceImage] = None
) -> Issue:
    """
    Build a new issue from a classification result.

    Auto-routed issues start out ``assigned`` with a two-entry ledger;
    everything else starts ``open`` with a single entry.
    """
    if not title or not title.strip():
        raise ValidationException("Please enter a title.", {"field": "title"})

    routed_to = classification.assigned_to

    return Issue(
        id=issue_id,
        title=title.strip(),
        description=(description or "").strip(),
        category=classification.category,
        urgency=classification.urgency,
        urgency_score=classification.urgency_score,
        location=location,
        status=IssueStatus.ASSIGNED if routed_to else IssueStatus.OPEN,
        created_by=created_by,
        created_at=now,
        updated_at=now,
        status_history=seed_history(now, routed_to),
        assigned_to=routed_to,
        assigned_by=SYSTEM_ACTOR if routed_to else None,
        assigned_at=now if routed_to else None,
        evidence_image=evidence_image,
        auto_reason=classification.reason,
    )


def _append(issue: Issue, entry: HistoryEntry, **changes) -> Issue:
    return replace(
        issue,
        status_history=issue.status_history + (entry,),
        updated_at=entry.at,
        **changes
    )


def _reject(issue: Issue, action: TransitionAction, reason: str) -> TransitionException:
    return TransitionException(issue.id, action.value, reason)


def _assign(issue, now, note, assignee, actor, breached) -> Issue:
    action = TransitionAction.ASSIGN
    if issue.status != IssueStatus.OPEN:
        raise _reject(issue, action, f"only open issues can be assigned (status is {issue.status.value})")
    if not assignee:
        raise _reject(issue, action, "a staff role is required")
    try:
        role = StaffRole(assignee)
    except ValueError:
        raise ValidationException(f"Unknown staff role '{assignee}'", {"field": "assignee"})

    entry = HistoryEntry(IssueStatus.ASSIGNED, now, note or f"Assigned to {role.value}")
    return _append(
        issue, entry,
        status=IssueStatus.ASSIGNED,
        assigned_to=role,
        assigned_at=now,
        assigned_by=actor or SYSTEM_ACTOR,
    )


def _start(issue, now, note, assignee, actor, breached) -> Issue:
    if issue.status != IssueStatus.ASSIGNED:
        raise _reject(
            issue, TransitionAction.START,
            f"work can only start on assigned issues (status is {issue.status.value})"
        )
    return _append(issue, HistoryEntry(IssueStatus.IN_PROGRESS, now, note), status=IssueStatus.IN_PROGRESS)


def _resolve(issue, now, note, assignee, actor, breached) -> Issue:
    if issue.status not in (IssueStatus.ASSIGNED, IssueStatus.IN_PROGRESS):
        raise _reject(
            issue, TransitionAction.RESOLVE,
            f"only assigned or in-progress issues can be resolved (status is {issue.status.value})"
        )
    return _append(issue, HistoryEntry(IssueStatus.RESOLVED, now, note), status=IssueStatus.RESOLVED)


def _escalate(issue, now, note, assignee, actor, breached) -> Issue:
    action = TransitionAction.ESCALATE
    if issue.is_deleted:
        raise _reject(issue, action, "deleted issues cannot be escalated")
    if issue.escalated:
        raise _reject(issue, action, "issue is already escalated")
    if breached is None or not breached(issue, now):
        raise _reject(issue, action, "SLA is not breached")

    entry = HistoryEntry(HistoryTag.ESCALATED, now, note or "Escalated after SLA breach")
    return _append(
        issue, entry,
        escalated=True,
        escalated_at=now,
        escalated_by=actor or SYSTEM_ACTOR,
    )


def _delete(issue, now, note, assignee, actor, breached) -> Issue:
    action = TransitionAction.DELETE
    if issue.is_deleted:
        raise _reject(issue, action, "issue is already deleted")
    if issue.status != IssueStatus.RESOLVED:
        raise _reject(issue, action, f"only resolved issues can be deleted (status is {issue.status.value})")

    entry = HistoryEntry(HistoryTag.DELETED, now, note or "Removed from listings")
    return _append(
        issue, entry,
        is_deleted=True,
        deleted_at=now,
        deleted_by=actor or SYSTEM_ACTOR,
    )


_HANDLERS: Dict[TransitionAction, Callable[..., Issue]] = {
    TransitionAction.ASSIGN: _assign,
    TransitionAction.START: _start,
    TransitionAction.RESOLVE: _resolve,
    TransitionAction.ESCALATE: _escalate,
    TransitionAction.DELETE: _delete,
}


def apply_transition(
    issue: Issue,
    action,
    now: int,
    note: Optional[str] = None,
    assignee: Optional[str] = None,
    actor: Optional[str] = None,
    breached: Optional[BreachCheck] = None
) -> Issue:
    """
    Apply one ledger transition.

    Args:
        issue: Current snapshot
        action: ``TransitionAction`` or its string value
        now: Transition instant (epoch millis)
        note: Optional note stored on the new ledger entry
        assignee: Staff role, required for ``assign``
        actor: Acting identity recorded in audit fields
        breached: SLA breach check used by the escalation guard; without
            one, escalation is refused

    Returns:
        The next snapshot

    Raises:
        TransitionException: Precondition violated
        ValidationException: Unknown action or staff role
    """
    try:
        action = TransitionAction(action)
    except ValueError:
        raise ValidationException(f"Unknown action '{action}'", {"field": "action"})

    if now < issue.created_at:
        raise _reject(issue, action, "transition time precedes issue creation")

    return _HANDLERS[action](issue, now, note, assignee, actor, breached)
