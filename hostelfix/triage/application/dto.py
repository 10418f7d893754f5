"""
Triage Application DTOs
========================

Data Transfer Objects for Triage API layer.

Pydantic models for request/response validation.
"""

from typing import Optional, Union

from pydantic import BaseModel, Field

from hostelfix.issues.application.dto import CategoryStr, UrgencyStr, NotChosen, StaffRoleStr
from hostelfix.triage.domain import ClassificationResult, DuplicateMatch


# ========== Request DTOs ==========

class ClassifyRequest(BaseModel):
    """Request model for a classification preview."""
    title: str = Field(..., max_length=200, description="Issue title")
    description: str = Field("", max_length=5000, description="Issue description")
    category: Optional[Union[CategoryStr, NotChosen]] = Field(None, description="Explicit category, empty for auto")
    urgency: Optional[Union[UrgencyStr, NotChosen]] = Field(None, description="Explicit urgency, empty for auto")


class DuplicateCheckRequest(BaseModel):
    """Request model for the advisory duplicate check."""
    title: str = Field(..., max_length=200, description="Title being typed by the reporter")


# ========== Response DTOs ==========

class ClassificationResponse(BaseModel):
    """Category, urgency and routing the submission would get."""
    category: CategoryStr
    urgency: UrgencyStr
    urgency_score: int = Field(..., ge=0, le=3)
    assigned_to: Optional[StaffRoleStr] = Field(None, description="Owning staff team, None for 'other'")
    reason: str

    @classmethod
    def from_domain(cls, result: ClassificationResult) -> "ClassificationResponse":
        return cls(
            category=result.category.value,
            urgency=result.urgency.value,
            urgency_score=result.urgency_score,
            assigned_to=result.assigned_to.value if result.assigned_to else None,
            reason=result.reason,
        )


class DuplicateCheckResponse(BaseModel):
    """Advisory duplicate result; ``is_duplicate`` False means nothing similar."""
    is_duplicate: bool
    issue_id: Optional[str] = None
    title: Optional[str] = None
    similarity: Optional[float] = Field(None, ge=0.0, le=1.0)

    @classmethod
    def from_domain(cls, match: Optional[DuplicateMatch]) -> "DuplicateCheckResponse":
        if match is None:
            return cls(is_duplicate=False)
        return cls(
            is_duplicate=True,
            issue_id=match.issue_id,
            title=match.title,
            similarity=round(match.similarity, 4),
        )
