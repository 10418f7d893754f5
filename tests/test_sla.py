import pytest

from hostelfix.config import IssueStatus, SLAFlag, Urgency, settings
from hostelfix.core import ResourceNotFoundException
from hostelfix.sla.application import SLAService
from hostelfix.sla.domain import (
    ColorClass,
    SLAAssessment,
    SLACalculator,
    SLAPolicy,
    compute_coarse_flag,
    compute_display,
)

from hostelfix.sla.infrastructure import StaticPolicyProvider

from tests.fakes import HOUR, MINUTE, NOW, InMemoryIssueRepository, build_issue


class TestFormatDuration:
    @pytest.mark.parametrize("ms,expected", [
        (0, "0m"),
        (59 * 1000, "0m"),
        (45 * MINUTE, "45m"),
        (HOUR, "1h 0m"),
        (3 * HOUR + 12 * MINUTE + 59 * 1000, "3h 12m"),
        (-(HOUR + 5 * MINUTE), "1h 5m"),
        (49 * HOUR, "49h 0m"),
    ])
    def test_format(self, ms, expected):
        assert SLACalculator.format_duration(ms) == expected


class TestOpenIssues:
    def test_delayed_and_breached_after_25h(self):
        issue = build_issue(created_at=NOW - 25 * HOUR)

        assert compute_coarse_flag(issue, NOW) == SLAFlag.DELAYED
        display = compute_display(issue, NOW)
        assert display.breached is True
        assert display.label.startswith("BREACHED:")
        assert display.label == "BREACHED: 1h 0m ago"
        assert display.color_class == ColorClass.BREACHED

    def test_exactly_24h_is_not_delayed(self):
        issue = build_issue(created_at=NOW - 24 * HOUR)

        assert compute_coarse_flag(issue, NOW) == SLAFlag.ON_TIME
        display = compute_display(issue, NOW)
        assert display.breached is False
        assert display.label == "0m left"

    def test_fresh_issue_has_time_left(self):
        issue = build_issue(created_at=NOW - 2 * HOUR)

        display = compute_display(issue, NOW)
        assert display.label == "22h 0m left"
        assert display.color_class == ColorClass.OK
        assert display.deadline == NOW + 22 * HOUR
        assert display.remaining_ms == 22 * HOUR

    def test_at_risk_inside_warning_threshold(self):
        # 15% of 24h is 3h 36m
        issue = build_issue(created_at=NOW - 21 * HOUR)
        assert compute_display(issue, NOW).color_class == ColorClass.AT_RISK


class TestAssignedIssues:
    def test_47h_after_assignment_is_on_time(self):
        issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - 60 * HOUR, assigned_at=NOW - 47 * HOUR)

        assert compute_coarse_flag(issue, NOW) == SLAFlag.ON_TIME
        assert compute_display(issue, NOW).label == "1h 0m left"

    def test_49h_after_assignment_is_overdue(self):
        issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - 60 * HOUR, assigned_at=NOW - 49 * HOUR)

        assert compute_coarse_flag(issue, NOW) == SLAFlag.OVERDUE
        display = compute_display(issue, NOW)
        assert display.breached is True
        assert display.label == "BREACHED: 1h 0m ago"

    def test_in_progress_is_never_overdue_but_can_breach(self):
        issue = build_issue(status=IssueStatus.IN_PROGRESS, created_at=NOW - 60 * HOUR, assigned_at=NOW - 50 * HOUR)

        assert compute_coarse_flag(issue, NOW) == SLAFlag.ON_TIME
        assert compute_display(issue, NOW).breached is True

    def test_deadline_anchors_on_first_assignment(self):
        issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - 10 * HOUR, assigned_at=NOW - 5 * HOUR)
        assert SLACalculator.compute_deadline(issue) == NOW - 5 * HOUR + 48 * HOUR

    def test_delayed_never_applies_to_assigned(self):
        issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - 30 * HOUR, assigned_at=NOW - 30 * HOUR)
        assert compute_coarse_flag(issue, NOW) == SLAFlag.ON_TIME


class TestResolvedIssues:
    def test_resolved_is_complete(self):
        issue = build_issue(status=IssueStatus.RESOLVED, created_at=NOW - 100 * HOUR)

        display = compute_display(issue, NOW)
        assert display.label == "Complete"
        assert display.breached is False
        assert display.color_class == ColorClass.COMPLETE
        assert SLACalculator.compute_deadline(issue) is None
        assert compute_coarse_flag(issue, NOW) == SLAFlag.ON_TIME

    def test_deleted_is_not_complete(self):
        issue = build_issue(status=IssueStatus.RESOLVED, is_deleted=True)
        display = compute_display(issue, NOW)
        assert display.label == "Deleted"
        assert display.color_class == ColorClass.NONE


def test_custom_policy_windows():
    policy = SLAPolicy(open_hours=4, assigned_hours=8, warning_threshold_percent=0)
    issue = build_issue(created_at=NOW - 5 * HOUR)

    assert compute_coarse_flag(issue, NOW, policy) == SLAFlag.DELAYED
    assert compute_display(issue, NOW, policy).label == "BREACHED: 1h 0m ago"


def test_evaluation_is_pure_and_idempotent():
    issue = build_issue(status=IssueStatus.ASSIGNED, created_at=NOW - 60 * HOUR, assigned_at=NOW - 49 * HOUR)
    before = issue

    assert compute_coarse_flag(issue, NOW) == compute_coarse_flag(issue, NOW)
    assert compute_display(issue, NOW) == compute_display(issue, NOW)
    assert issue == before


class TestAssessment:
    def test_breached_unescalated_can_escalate(self):
        issue = build_issue(created_at=NOW - 30 * HOUR)
        assessment = SLAAssessment.evaluate(issue, NOW)

        assert assessment.flag == SLAFlag.DELAYED
        assert assessment.can_escalate is True
        data = assessment.to_dict()
        assert data["issue_id"] == issue.id
        assert data["flag"] == "delayed"
        assert data["age_label"] == "1d ago"
        assert data["evaluated_at"] == NOW

    def test_escalated_cannot_escalate_again(self):
        issue = build_issue(created_at=NOW - 30 * HOUR, escalated=True)
        assert SLAAssessment.evaluate(issue, NOW).can_escalate is False

    def test_on_time_cannot_escalate(self):
        assert SLAAssessment.evaluate(build_issue(), NOW).can_escalate is False


class TestSLABoard:
    @pytest.fixture
    def crowded_repo(self):
        overdue = build_issue(
            issue_id="overdue-low",
            urgency=Urgency.LOW,
            status=IssueStatus.ASSIGNED,
            created_at=NOW - 50 * HOUR,
            assigned_at=NOW - 49 * HOUR,
        )
        fresh = [
            build_issue(issue_id=f"fresh-{i}", urgency=Urgency.HIGH, created_at=NOW - i * MINUTE)
            for i in range(2)
        ]
        return InMemoryIssueRepository([overdue, *fresh])

    async def test_limit_applies_after_attention_order(self, crowded_repo):
        board = await SLAService(crowded_repo, StaticPolicyProvider()).board(NOW, limit=2)

        assert [a.issue.id for a in board.assessments] == ["overdue-low", "fresh-0"]
        assert board.summary.total_issues == 3
        assert board.summary.overdue_count == 1

    async def test_reads_past_one_page(self, crowded_repo, monkeypatch):
        monkeypatch.setattr(settings, "feed_snapshot_limit", 1)

        board = await SLAService(crowded_repo, StaticPolicyProvider()).board(NOW)

        assert [a.issue.id for a in board.assessments] == ["overdue-low"]
        assert board.summary.total_issues == 3

    async def test_flag_filter(self, crowded_repo):
        board = await SLAService(crowded_repo, StaticPolicyProvider()).board(NOW, flag="on-time")

        assert [a.issue.id for a in board.assessments] == ["fresh-0", "fresh-1"]
        assert board.summary.on_time_count == 2

    async def test_assess_unknown_issue(self, crowded_repo):
        with pytest.raises(ResourceNotFoundException):
            await SLAService(crowded_repo, StaticPolicyProvider()).assess("missing", NOW)
