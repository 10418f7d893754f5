from datetime import datetime, timedelta, timezone

import pytest

from hostelfix.shared.domain.timestamps import format_time_ago, from_millis, to_millis

from tests.fakes import HOUR, MINUTE, NOW


class FirestoreLikeTimestamp:
    def __init__(self, millis):
        self._millis = millis

    def toMillis(self):
        return self._millis


class SecondsOnly:
    def __init__(self, seconds):
        self.seconds = seconds


class TestToMillis:
    def test_numbers_pass_through(self):
        assert to_millis(NOW) == NOW
        assert to_millis(float(NOW)) == NOW

    def test_millis_accessor(self):
        assert to_millis(FirestoreLikeTimestamp(NOW)) == NOW

    def test_seconds_object_and_mapping(self):
        assert to_millis(SecondsOnly(1_718_000_000)) == NOW
        assert to_millis({"seconds": 1_718_000_000, "nanoseconds": 0}) == NOW
        assert to_millis({"_seconds": 1_718_000_000}) == NOW

    def test_aware_and_naive_datetimes_agree(self):
        aware = from_millis(NOW)
        naive = aware.replace(tzinfo=None)
        assert to_millis(aware) == NOW
        assert to_millis(naive) == NOW

    def test_non_utc_datetime(self):
        plus_two = from_millis(NOW).astimezone(timezone(timedelta(hours=2)))
        assert to_millis(plus_two) == NOW

    @pytest.mark.parametrize("value", [None, True, False, "2024-06-10", object(), {"seconds": "x"}])
    def test_unrecognised_input_is_zero(self, value):
        assert to_millis(value) == 0

    def test_accessor_returning_garbage_is_zero(self):
        assert to_millis(FirestoreLikeTimestamp("soon")) == 0


def test_from_millis_is_utc():
    assert from_millis(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestFormatTimeAgo:
    def test_unknown(self):
        assert format_time_ago(0, NOW) == "—"

    def test_ranges(self):
        assert format_time_ago(NOW - 30 * 1000, NOW) == "30s ago"
        assert format_time_ago(NOW - 12 * MINUTE, NOW) == "12 min ago"
        assert format_time_ago(NOW - 5 * HOUR, NOW) == "5h ago"
        assert format_time_ago(NOW - 50 * HOUR, NOW) == "2d ago"

    def test_future_clamps_to_zero(self):
        assert format_time_ago(NOW + MINUTE, NOW) == "0s ago"
