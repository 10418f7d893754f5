"""
Shared Domain Kernel
====================

Representation-agnostic helpers every bounded context relies on.
"""

from hostelfix.shared.domain.timestamps import (
    MS_IN_MINUTE,
    MS_IN_HOUR,
    MS_IN_DAY,
    to_millis,
    from_millis,
    now_millis,
    format_time_ago,
)

__all__ = [
    "MS_IN_MINUTE",
    "MS_IN_HOUR",
    "MS_IN_DAY",
    "to_millis",
    "from_millis",
    "now_millis",
    "format_time_ago",
]
