from dataclasses import replace

import pytest

from hostelfix.config import HistoryTag, IssueStatus, StaffRole, SYSTEM_ACTOR
from hostelfix.core import TransitionException, ValidationException
from hostelfix.issues.domain import HistoryEntry, apply_transition, open_issue, seed_history
from hostelfix.sla.domain import SLAPolicy, compute_display
from hostelfix.triage.domain import classify_and_route

from tests.fakes import HOUR, MINUTE, NOW, build_issue


def breached(issue, at):
    return compute_display(issue, at).breached


def assert_ledger_invariants(issue):
    head = issue.status_history[0]
    assert head.status == IssueStatus.OPEN
    assert head.at == issue.created_at
    lifecycle = [entry for entry in issue.status_history if entry.is_lifecycle]
    assert lifecycle[-1].status == issue.status


class TestCreation:
    def test_water_issue_is_auto_assigned_to_plumber(self):
        classification = classify_and_route("Water leakage in room 203", "")
        issue = open_issue("i-1", "Water leakage in room 203", "", classification, "Hostel B", "student-1", NOW)

        assert classification.assigned_to == StaffRole.PLUMBER
        assert issue.status == IssueStatus.ASSIGNED
        assert issue.assigned_to == StaffRole.PLUMBER
        assert issue.assigned_by == SYSTEM_ACTOR
        assert issue.assigned_at == NOW
        assert [e.status for e in issue.status_history] == [IssueStatus.OPEN, IssueStatus.ASSIGNED]
        assert issue.status_history[1].note == "Auto-assigned to plumber"
        assert_ledger_invariants(issue)

    def test_other_category_stays_open(self):
        classification = classify_and_route("Lost my ID card", "")
        issue = open_issue("i-2", "Lost my ID card", "", classification, "Hostel A", "student-1", NOW)

        assert issue.status == IssueStatus.OPEN
        assert issue.assigned_to is None
        assert issue.status_history == (HistoryEntry(IssueStatus.OPEN, NOW),)

    def test_blank_title_rejected(self):
        classification = classify_and_route("x", "")
        with pytest.raises(ValidationException):
            open_issue("i-3", "   ", "", classification, "Hostel A", "student-1", NOW)

    def test_seed_history_without_role(self):
        assert seed_history(NOW) == (HistoryEntry(IssueStatus.OPEN, NOW),)


class TestLifecycle:
    def test_full_path(self):
        issue = build_issue(created_at=NOW - 2 * HOUR)

        issue = apply_transition(issue, "assign", NOW - HOUR, assignee="plumber", actor="admin-1")
        assert issue.status == IssueStatus.ASSIGNED
        assert issue.assigned_at == NOW - HOUR
        assert issue.assigned_by == "admin-1"

        issue = apply_transition(issue, "start", NOW - 30 * MINUTE)
        assert issue.status == IssueStatus.IN_PROGRESS

        issue = apply_transition(issue, "resolve", NOW, note="Tap replaced")
        assert issue.status == IssueStatus.RESOLVED
        assert issue.updated_at == NOW
        assert issue.status_history[-1] == HistoryEntry(IssueStatus.RESOLVED, NOW, "Tap replaced")
        assert len(issue.status_history) == 4
        assert_ledger_invariants(issue)

    def test_resolve_directly_from_assigned(self):
        issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - HOUR)
        assert apply_transition(issue, "resolve", NOW).status == IssueStatus.RESOLVED

    def test_each_success_appends_exactly_one_entry(self):
        issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - HOUR)
        updated = apply_transition(issue, "start", NOW)

        assert updated.status_history[:-1] == issue.status_history
        assert len(updated.status_history) == len(issue.status_history) + 1
        assert updated.updated_at == NOW

    def test_input_snapshot_untouched(self):
        issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - HOUR)
        snapshot = replace(issue)
        apply_transition(issue, "start", NOW)
        assert issue == snapshot


class TestRejections:
    @pytest.mark.parametrize("status,action,kwargs", [
        (IssueStatus.OPEN, "start", {}),
        (IssueStatus.OPEN, "resolve", {}),
        (IssueStatus.ASSIGNED, "assign", {"assignee": "plumber"}),
        (IssueStatus.IN_PROGRESS, "start", {}),
        (IssueStatus.RESOLVED, "resolve", {}),
        (IssueStatus.ASSIGNED, "delete", {}),
    ])
    def test_skip_state_rejected_without_change(self, status, action, kwargs):
        issue = build_issue(status=status, created_at=NOW - HOUR)

        with pytest.raises(TransitionException) as exc:
            apply_transition(issue, action, NOW, **kwargs)

        assert exc.value.issue_id == issue.id
        assert exc.value.action == action
        assert exc.value.reason
        assert issue.updated_at != NOW

    def test_assign_requires_staff_role(self):
        issue = build_issue(created_at=NOW - HOUR)
        with pytest.raises(TransitionException, match="staff role is required"):
            apply_transition(issue, "assign", NOW)

    def test_unknown_staff_role(self):
        issue = build_issue(created_at=NOW - HOUR)
        with pytest.raises(ValidationException):
            apply_transition(issue, "assign", NOW, assignee="janitor")

    def test_unknown_action(self):
        with pytest.raises(ValidationException):
            apply_transition(build_issue(), "reopen", NOW)

    def test_time_before_creation_rejected(self):
        issue = build_issue(created_at=NOW)
        with pytest.raises(TransitionException):
            apply_transition(issue, "assign", NOW - HOUR, assignee="plumber")


class TestEscalation:
    def test_breached_issue_escalates(self):
        issue = build_issue(created_at=NOW - 25 * HOUR)

        escalated = apply_transition(issue, "escalate", NOW, actor="admin-1", note="Warden informed", breached=breached)

        assert escalated.escalated is True
        assert escalated.escalated_at == NOW
        assert escalated.escalated_by == "admin-1"
        assert escalated.status == IssueStatus.OPEN
        assert escalated.status_history[-1] == HistoryEntry(HistoryTag.ESCALATED, NOW, "Warden informed")
        assert_ledger_invariants(escalated)

    def test_not_breached_rejected(self):
        issue = build_issue(created_at=NOW - HOUR)
        with pytest.raises(TransitionException, match="not breached"):
            apply_transition(issue, "escalate", NOW, breached=breached)

    def test_without_breach_check_rejected(self):
        issue = build_issue(created_at=NOW - 100 * HOUR)
        with pytest.raises(TransitionException, match="not breached"):
            apply_transition(issue, "escalate", NOW)

    def test_breach_check_sees_caller_policy(self):
        issue = build_issue(created_at=NOW - 3 * HOUR)
        strict = SLAPolicy(open_hours=2)

        escalated = apply_transition(
            issue, "escalate", NOW,
            breached=lambda current, at: compute_display(current, at, strict).breached
        )

        assert escalated.escalated is True
        with pytest.raises(TransitionException, match="not breached"):
            apply_transition(issue, "escalate", NOW, breached=breached)

    def test_twice_rejected(self):
        issue = apply_transition(build_issue(created_at=NOW - 25 * HOUR), "escalate", NOW, breached=breached)
        with pytest.raises(TransitionException, match="already escalated"):
            apply_transition(issue, "escalate", NOW + MINUTE, breached=breached)


class TestDeletion:
    def test_delete_twice_second_rejected(self):
        issue = build_issue(status=IssueStatus.RESOLVED, created_at=NOW - 5 * HOUR)

        deleted = apply_transition(issue, "delete", NOW, actor="admin-1")
        assert deleted.is_deleted is True
        assert deleted.deleted_at == NOW
        assert deleted.deleted_by == "admin-1"
        assert deleted.status == IssueStatus.RESOLVED
        assert deleted.status_history[-1].status == HistoryTag.DELETED

        with pytest.raises(TransitionException, match="already deleted"):
            apply_transition(deleted, "delete", NOW + MINUTE)
        assert deleted.updated_at == NOW

    def test_deleted_cannot_be_escalated(self):
        issue = build_issue(status=IssueStatus.RESOLVED, is_deleted=True, created_at=NOW - 100 * HOUR)
        with pytest.raises(TransitionException, match="deleted"):
            apply_transition(issue, "escalate", NOW, breached=breached)


class TestEntityInvariants:
    def test_history_must_start_open_at_created(self):
        issue = build_issue()
        with pytest.raises(ValueError):
            replace(issue, status_history=(HistoryEntry(IssueStatus.ASSIGNED, issue.created_at),))
        with pytest.raises(ValueError):
            replace(issue, status_history=(HistoryEntry(IssueStatus.OPEN, issue.created_at + 1),))

    def test_status_must_match_ledger(self):
        with pytest.raises(ValueError):
            replace(build_issue(), status=IssueStatus.RESOLVED)

    def test_only_resolved_can_be_deleted(self):
        with pytest.raises(ValueError):
            replace(build_issue(), is_deleted=True)

    def test_timeline_newest_first(self):
        issue = build_issue(status=IssueStatus.RESOLVED)
        assert [e.status for e in issue.timeline()] == [
            IssueStatus.RESOLVED, IssueStatus.IN_PROGRESS, IssueStatus.ASSIGNED, IssueStatus.OPEN
        ]
