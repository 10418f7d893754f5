"""
Request Context
===============

Explicit carrier for the acting identity and the evaluation instant.

Every application-service call receives one of these instead of reaching
into ambient auth or clock singletons.
"""

from dataclasses import dataclass, field

from hostelfix.shared.domain.timestamps import now_millis


@dataclass(frozen=True)
class RequestContext:
    """Who is acting, and as of which instant (epoch millis)."""
    actor_id: str
    now: int = field(default_factory=now_millis)
    correlation_id: str = "unknown"

    def __post_init__(self):
        if not self.actor_id or not self.actor_id.strip():
            raise ValueError("actor_id must not be blank")
