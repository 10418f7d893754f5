"""
SLA Domain Layer
================

Domain layer for SLA evaluation.

Contains:
- Value Objects: SLAPolicy, SLADisplay
- Domain Services: SLACalculator (coarse flag and fine display)
- Entities: SLAAssessment
- Attention ordering for the admin board

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from hostelfix.sla.domain.value_objects import (
    SLACalculator,
    SLAPolicy,
    ISLAPolicyProvider,
    SLADisplay,
    ColorClass,
    DEFAULT_POLICY,
    compute_coarse_flag,
    compute_display,
)
from hostelfix.sla.domain.entities import SLAAssessment
from hostelfix.sla.domain.attention import (
    attention_key,
    sort_by_attention,
    sort_newest,
    sort_by_priority,
)

__all__ = [
    # Value Objects & Services
    "SLACalculator",
    "SLAPolicy",
    "ISLAPolicyProvider",
    "SLADisplay",
    "ColorClass",
    "DEFAULT_POLICY",
    "compute_coarse_flag",
    "compute_display",
    # Entities
    "SLAAssessment",
    # Ordering
    "attention_key",
    "sort_by_attention",
    "sort_newest",
    "sort_by_priority",
]
