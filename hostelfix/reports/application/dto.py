"""
Reports Application DTOs
========================

Pydantic response models for the reports API.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from hostelfix.reports.application.services import WeeklySummary


class StatisticsResponse(BaseModel):
    """Aggregate counts over the summary window."""
    window_start: int = Field(..., description="Window start (epoch millis)")
    generated_at: int = Field(..., description="Window end and evaluation instant (epoch millis)")
    total_issues: int
    resolved_count: int
    open_count: int
    breached_count: int
    escalated_count: int
    by_category: Dict[str, int]
    by_urgency: Dict[str, int]
    by_location: Dict[str, int]
    by_assignee: Dict[str, int]


class WeeklySummaryResponse(BaseModel):
    """Response model for the weekly summary."""
    statistics: StatisticsResponse
    narration: str
    narrated: bool = Field(..., description="False when the placeholder narration was used")
    narration_error: Optional[str] = None

    @classmethod
    def from_summary(cls, summary: WeeklySummary) -> "WeeklySummaryResponse":
        return cls(
            statistics=StatisticsResponse(**summary.statistics.to_dict()),
            narration=summary.narration,
            narrated=summary.narrated,
            narration_error=summary.narration_error,
        )


class DistributionResponse(BaseModel):
    """Issue count per hostel, busiest first."""
    by_location: Dict[str, int]
    total_issues: int
