from hostelfix.config import Category, IssueStatus, Urgency
from hostelfix.issues.domain import IssueFilter
from hostelfix.issues.infrastructure import IssueFeed, server_order

from tests.fakes import HOUR, NOW, build_issue


def ids(issues):
    return [issue.id for issue in issues]


class Collector:
    def __init__(self):
        self.snapshots = []

    def __call__(self, issues):
        self.snapshots.append(issues)


def test_server_order():
    low = build_issue(urgency=Urgency.LOW, created_at=NOW)
    high_old = build_issue(urgency=Urgency.HIGH, created_at=NOW - HOUR)
    high_new = build_issue(urgency=Urgency.HIGH, created_at=NOW)
    legacy = build_issue(urgency=Urgency.HIGH, urgency_score=None, created_at=NOW - 2 * HOUR)

    assert ids(server_order([low, legacy, high_old, high_new])) == [
        high_new.id, high_old.id, legacy.id, low.id
    ]


async def test_subscriber_receives_filtered_snapshots():
    feed = IssueFeed()
    open_issue = build_issue(created_at=NOW - HOUR)
    assigned = build_issue(status=IssueStatus.ASSIGNED)
    collector = Collector()

    await feed.subscribe(IssueFilter(status=IssueStatus.OPEN)).attach(collector)
    await feed.publish([assigned, open_issue])

    assert [ids(s) for s in collector.snapshots] == [[open_issue.id]]


async def test_deleted_issues_hidden_by_default():
    feed = IssueFeed()
    deleted = build_issue(status=IssueStatus.RESOLVED, is_deleted=True)
    kept = build_issue(category=Category.WIFI)
    everything, visible = Collector(), Collector()

    await feed.subscribe(IssueFilter(include_deleted=True)).attach(everything)
    await feed.subscribe().attach(visible)
    await feed.publish([deleted, kept])

    assert set(ids(everything.snapshots[0])) == {deleted.id, kept.id}
    assert ids(visible.snapshots[0]) == [kept.id]


async def test_late_subscriber_gets_latest_snapshot():
    feed = IssueFeed()
    issue = build_issue()
    await feed.publish([issue])
    collector = Collector()

    await feed.subscribe().attach(collector)

    assert [ids(s) for s in collector.snapshots] == [[issue.id]]


async def test_unsubscribe_stops_delivery():
    feed = IssueFeed()
    collector = Collector()
    unsubscribe = await feed.subscribe().attach(collector)

    unsubscribe()
    unsubscribe()
    await feed.publish([build_issue()])

    assert collector.snapshots == []
    assert feed.subscriber_count == 0


async def test_failing_subscriber_does_not_block_others():
    feed = IssueFeed()
    collector = Collector()

    def explode(issues):
        raise RuntimeError("render failed")

    await feed.subscribe().attach(explode)
    await feed.subscribe().attach(collector)
    await feed.publish([build_issue()])

    assert len(collector.snapshots) == 1


async def test_async_callbacks_awaited():
    feed = IssueFeed()
    received = []

    async def on_snapshot(issues):
        received.append(len(issues))

    await feed.subscribe().attach(on_snapshot)
    await feed.publish([build_issue(), build_issue()])

    assert received == [2]


async def test_close_drops_subscribers():
    feed = IssueFeed()
    await feed.subscribe().attach(Collector())
    await feed.publish([build_issue()])

    feed.close()

    assert feed.subscriber_count == 0
    assert feed.last_snapshot is None
