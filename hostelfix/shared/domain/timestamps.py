"""
Time Normalization
==================

Converts the timestamp shapes that reach us from upstream stores into one
canonical instant: integer epoch milliseconds.

Accepted inputs:
- numbers (already epoch millis)
- ``datetime`` objects (naive values are taken as UTC)
- objects exposing a millis accessor (``to_millis()`` / ``toMillis()``)
- objects or mappings exposing epoch ``seconds``

Anything else, including ``None``, normalizes to 0.
"""

from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

MS_IN_MINUTE = 60 * 1000
MS_IN_HOUR = 60 * MS_IN_MINUTE
MS_IN_DAY = 24 * MS_IN_HOUR

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLIS_ACCESSORS = ("to_millis", "toMillis")
_SECONDS_KEYS = ("seconds", "_seconds")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_millis(value: Any) -> int:
    """
    Normalize a timestamp to epoch milliseconds.

    Args:
        value: Any supported timestamp representation

    Returns:
        Epoch millis, or 0 for absent/unrecognized input
    """
    if value is None or isinstance(value, bool):
        return 0

    if _is_number(value):
        return int(value)

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - _EPOCH) // timedelta(milliseconds=1)

    for accessor in _MILLIS_ACCESSORS:
        method = getattr(value, accessor, None)
        if callable(method):
            millis = method()
            return int(millis) if _is_number(millis) else 0

    for key in _SECONDS_KEYS:
        if isinstance(value, Mapping):
            seconds = value.get(key)
        else:
            seconds = getattr(value, key, None)
        if _is_number(seconds):
            return int(seconds * 1000)

    return 0


def from_millis(ms: int) -> datetime:
    """Epoch millis to an aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=ms)


def now_millis() -> int:
    """Current wall-clock instant in epoch millis."""
    return to_millis(datetime.now(timezone.utc))


def format_time_ago(ms: int, now: int) -> str:
    """Relative age such as ``"12 min ago"``; ``"—"`` when unknown."""
    if not ms:
        return "—"

    seconds = max(0, now - ms) // 1000
    if seconds < 60:
        return f"{seconds}s ago"

    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} min ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"

    return f"{hours // 24}d ago"
