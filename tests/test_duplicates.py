from hostelfix.config import IssueStatus
from hostelfix.triage.application import TriageService
from hostelfix.triage.domain import find_duplicate, normalize_title, recent_window, title_similarity

from tests.fakes import HOUR, NOW, InMemoryIssueRepository, build_issue


class TestSimilarity:
    def test_normalize_strips_punctuation_and_case(self):
        assert normalize_title("Water LEAK!! (room #203)") == frozenset({"water", "leak", "room", "203"})

    def test_shared_tokens_over_larger_set(self):
        assert title_similarity("Water leakage in room 203", "Water leak room 203") == 3 / 5

    def test_empty_titles_do_not_divide_by_zero(self):
        assert title_similarity("", "!!!") == 0.0


class TestFindDuplicate:
    def test_threshold_is_strict(self):
        assert find_duplicate("Water leakage in room 203", [{"title": "Water leak room 203"}]) is None

    def test_one_more_shared_token_matches(self):
        match = find_duplicate("Water leakage in room 203", [{"id": "a1", "title": "Water leakage room 203"}])

        assert match is not None
        assert match.issue_id == "a1"
        assert match.similarity == 4 / 5

    def test_short_titles_never_checked(self):
        assert find_duplicate("Wifi", [{"title": "Wifi"}]) is None
        assert find_duplicate("  Wifi  ", [{"title": "Wifi"}]) is None

    def test_first_found_not_best_found(self):
        candidates = [
            {"id": "first", "title": "no water in block c today"},
            {"id": "best", "title": "no water in block c"},
        ]
        match = find_duplicate("no water in block c", candidates)
        assert match.issue_id == "first"

    def test_accepts_issue_objects(self):
        issue = build_issue(title="Tap leaking in washroom")
        match = find_duplicate("tap leaking in the washroom", [issue])
        assert match.issue_id == issue.id


def test_recent_window_drops_old_and_deleted():
    fresh = build_issue(created_at=NOW - 2 * HOUR)
    stale = build_issue(created_at=NOW - 25 * HOUR)
    deleted = build_issue(created_at=NOW - HOUR, status=IssueStatus.RESOLVED, is_deleted=True)

    assert recent_window([fresh, stale, deleted], NOW) == [fresh]


class TestTriageService:
    async def test_check_duplicate_uses_recent_issues(self):
        existing = build_issue(title="Water leakage room 203", created_at=NOW - HOUR)
        service = TriageService(InMemoryIssueRepository([existing]))

        match = await service.check_duplicate(NOW, "Water leakage in room 203")

        assert match is not None
        assert match.issue_id == existing.id

    async def test_outside_window_is_not_a_duplicate(self):
        existing = build_issue(title="Water leakage room 203", created_at=NOW - 30 * HOUR)
        service = TriageService(InMemoryIssueRepository([existing]))

        assert await service.check_duplicate(NOW, "Water leakage in room 203") is None

    async def test_custom_threshold(self):
        existing = build_issue(title="Water leak room 203", created_at=NOW - HOUR)
        service = TriageService(InMemoryIssueRepository([existing]), threshold=0.5)

        assert await service.check_duplicate(NOW, "Water leakage in room 203") is not None
