import json

import pytest

from hostelfix.config import Category, IssueStatus, StaffRole, Urgency, settings
from hostelfix.core import LLMException, SummaryNarrationException
from hostelfix.infrastructure.llm import ChatCompletionResult, ILLMClient, MockLLMClient
from hostelfix.reports.application import SummaryService
from hostelfix.reports.domain import (
    PLACEHOLDER_NARRATION,
    UNASSIGNED,
    SummaryPromptBuilder,
    compute_statistics,
    rank_counts,
)
from hostelfix.reports.infrastructure import LLMNarrator
from hostelfix.shared.domain.timestamps import MS_IN_DAY

from tests.fakes import (
    HOUR,
    NOW,
    FailingNarrator,
    InMemoryIssueRepository,
    StaticNarrator,
    build_issue,
)

WEEK_START = NOW - 7 * MS_IN_DAY


@pytest.fixture
def week_of_issues():
    return [
        build_issue(category=Category.WATER, urgency=Urgency.HIGH, location="Hostel A", created_at=NOW - HOUR),
        build_issue(
            category=Category.WATER, status=IssueStatus.RESOLVED,
            location="Hostel B", created_at=NOW - 2 * MS_IN_DAY,
        ),
        # Open for 30 hours, past the 24h window
        build_issue(category=Category.OTHER, location="Hostel A", created_at=NOW - 30 * HOUR, escalated=True),
        build_issue(
            category=Category.WIFI, status=IssueStatus.ASSIGNED, assigned_to=StaffRole.WIFI_TEAM,
            location="Hostel A", created_at=NOW - 3 * HOUR,
        ),
        build_issue(status=IssueStatus.RESOLVED, is_deleted=True, created_at=NOW - HOUR),
        build_issue(location="Hostel C", created_at=NOW - 8 * MS_IN_DAY),
    ]


class TestComputeStatistics:
    def test_counts(self, week_of_issues):
        stats = compute_statistics(week_of_issues, NOW, WEEK_START)

        assert stats.total_issues == 4
        assert stats.resolved_count == 1
        assert stats.open_count == 3
        assert stats.breached_count == 1
        assert stats.escalated_count == 1
        assert stats.by_category == {"water": 2, "other": 1, "wifi": 1}
        assert stats.by_location == {"Hostel A": 3, "Hostel B": 1}
        assert stats.by_assignee[UNASSIGNED] == 2

    def test_empty_window(self):
        stats = compute_statistics([], NOW, WEEK_START)

        assert stats.total_issues == 0
        assert stats.by_category == {}
        assert stats.to_dict()["open_count"] == 0

    def test_prompt_carries_statistics(self, week_of_issues):
        stats = compute_statistics(week_of_issues, NOW, WEEK_START)

        prompt = SummaryPromptBuilder.build_prompt(stats)
        payload = json.loads(prompt.split("(JSON):", 1)[1].rsplit("Write the weekly summary:", 1)[0])

        assert payload["total_issues"] == 4
        assert payload["by_location"]["Hostel A"] == 3


def test_rank_counts_busiest_first_then_name():
    assert list(rank_counts({"Hostel C": 1, "Hostel A": 3, "Hostel B": 1})) == ["Hostel A", "Hostel B", "Hostel C"]


class TestSummaryService:
    async def test_narrated(self, week_of_issues, ctx):
        narrator = StaticNarrator()
        service = SummaryService(InMemoryIssueRepository(week_of_issues), narrator=narrator)

        summary = await service.generate(ctx)

        assert summary.narrated is True
        assert summary.narration == "Water issues dominate this week."
        assert summary.statistics.total_issues == 4
        assert narrator.seen == [summary.statistics]

    async def test_failing_narrator_falls_back(self, week_of_issues, ctx):
        service = SummaryService(InMemoryIssueRepository(week_of_issues), narrator=FailingNarrator())

        summary = await service.generate(ctx)

        assert summary.narrated is False
        assert summary.narration == PLACEHOLDER_NARRATION
        assert summary.narration_error == "Narrator: quota exceeded"
        assert summary.statistics.total_issues == 4

    async def test_no_narrator(self, ctx):
        summary = await SummaryService(InMemoryIssueRepository()).generate(ctx)

        assert summary.narrated is False
        assert summary.narration_error is None
        assert summary.narration == PLACEHOLDER_NARRATION

    async def test_window_days(self, week_of_issues, ctx):
        service = SummaryService(InMemoryIssueRepository(week_of_issues), window_days=1)

        summary = await service.generate(ctx)

        assert summary.statistics.window_start == NOW - MS_IN_DAY
        assert summary.statistics.total_issues == 2

    async def test_distribution(self, week_of_issues):
        service = SummaryService(InMemoryIssueRepository(week_of_issues))

        assert await service.distribution() == {"Hostel A": 3, "Hostel B": 1, "Hostel C": 1}

    async def test_distribution_counts_past_snapshot_limit(self, monkeypatch):
        monkeypatch.setattr(settings, "feed_snapshot_limit", 2)
        issues = [build_issue(location="Hostel A", created_at=NOW - i * HOUR) for i in range(5)]
        issues.append(build_issue(location="Hostel B"))
        service = SummaryService(InMemoryIssueRepository(issues))

        assert await service.distribution() == {"Hostel A": 5, "Hostel B": 1}


class _ErroringLLM(ILLMClient):
    async def chat_completion(self, messages, temperature=None, max_tokens=None, operation="chat_completion"):
        raise LLMException("rate limited")


class _BlankLLM(ILLMClient):
    async def chat_completion(self, messages, temperature=None, max_tokens=None, operation="chat_completion"):
        return ChatCompletionResult(content="  ", model="m", prompt_tokens=1, completion_tokens=0, latency_ms=0)


class TestLLMNarrator:
    async def test_mock_client(self, week_of_issues):
        stats = compute_statistics(week_of_issues, NOW, WEEK_START)

        narration = await LLMNarrator(MockLLMClient()).narrate(stats)

        assert "water and electricity" in narration

    async def test_client_error_wrapped(self):
        stats = compute_statistics([], NOW, WEEK_START)

        with pytest.raises(SummaryNarrationException, match="rate limited"):
            await LLMNarrator(_ErroringLLM()).narrate(stats)

    async def test_blank_narration_rejected(self):
        stats = compute_statistics([], NOW, WEEK_START)

        with pytest.raises(SummaryNarrationException):
            await LLMNarrator(_BlankLLM()).narrate(stats)
