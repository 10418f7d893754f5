"""
SLA Application DTOs
=====================

Data Transfer Objects for SLA API layer.

These Pydantic models handle serialization for the SLA dashboard and
per-issue SLA endpoints. Following YAGNI - only what's needed.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from hostelfix.issues.application.dto import IssueResponse
from hostelfix.sla.domain import SLAAssessment


# ========== Type Aliases for Literals ==========
SLAFlagStr = Literal["on-time", "delayed", "overdue"]
ColorClassStr = Literal["sla-ok", "sla-at-risk", "sla-breached", "sla-complete", "sla-none"]


# ========== Response DTOs ==========

class SLAStatusResponse(BaseModel):
    """SLA state of one issue at ``evaluated_at``."""
    issue_id: str = Field(..., description="Issue ID")
    flag: SLAFlagStr = Field(..., description="Coarse triage flag used for ordering")
    label: str = Field(..., description="e.g. '3h 12m left' or 'BREACHED: 1h 5m ago'")
    breached: bool = Field(..., description="Whether the current deadline has passed")
    color_class: ColorClassStr = Field(..., description="CSS class for front-ends")
    deadline: Optional[int] = Field(None, description="Deadline (epoch millis), None when untimed")
    remaining_ms: Optional[int] = Field(None, description="Negative once breached")
    age_label: str = Field(..., description="Relative age, e.g. '2h ago'")
    can_escalate: bool = Field(..., description="Whether 'escalate' would be accepted now")
    evaluated_at: int = Field(..., description="Evaluation instant (epoch millis)")

    @classmethod
    def from_assessment(cls, assessment: SLAAssessment) -> "SLAStatusResponse":
        return cls(**assessment.to_dict())


class BoardItemResponse(BaseModel):
    """One row of the SLA board."""
    issue: IssueResponse
    sla: SLAStatusResponse

    @classmethod
    def from_assessment(cls, assessment: SLAAssessment) -> "BoardItemResponse":
        return cls(
            issue=IssueResponse.from_domain(assessment.issue, assessment.evaluated_at),
            sla=SLAStatusResponse.from_assessment(assessment),
        )


class DashboardSummary(BaseModel):
    """Summary statistics for the board."""
    total_issues: int
    overdue_count: int
    delayed_count: int
    on_time_count: int
    breached_count: int
    at_risk_count: int
    escalated_count: int
    breach_rate: float = Field(..., description="Percentage of timed issues past their deadline")


class DashboardResponse(BaseModel):
    """Response model for the SLA board, in attention order."""
    issues: List[BoardItemResponse] = Field(..., description="Issues, most urgent first")
    total_count: int = Field(..., description="Number of issues on the board")
    summary: DashboardSummary = Field(..., description="Summary statistics")
    evaluated_at: int = Field(..., description="Evaluation instant (epoch millis)")
