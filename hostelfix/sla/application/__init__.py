"""
SLA Application Layer
======================

Application layer for SLA evaluation.

Contains:
- Services: Evaluate stored issues against the SLA policy
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from hostelfix.sla.application.dto import (
    SLAStatusResponse,
    BoardItemResponse,
    DashboardSummary,
    DashboardResponse,
)
from hostelfix.sla.application.services import (
    SLAService,
    SLABoard,
    BoardSummary,
)

__all__ = [
    # DTOs
    "SLAStatusResponse",
    "BoardItemResponse",
    "DashboardSummary",
    "DashboardResponse",
    # Services
    "SLAService",
    "SLABoard",
    "BoardSummary",
]
