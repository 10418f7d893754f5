"""
Reports Application Layer
=========================

Contains:
- Services: Weekly summary and hostel distribution
- DTOs: Data transfer objects for API serialization
"""

from hostelfix.reports.application.services import (
    INarrator,
    SummaryService,
    WeeklySummary,
)
from hostelfix.reports.application.dto import (
    StatisticsResponse,
    WeeklySummaryResponse,
    DistributionResponse,
)

__all__ = [
    # DTOs
    "StatisticsResponse",
    "WeeklySummaryResponse",
    "DistributionResponse",
    # Services
    "SummaryService",
    "WeeklySummary",
    # Collaborator Interfaces
    "INarrator",
]
