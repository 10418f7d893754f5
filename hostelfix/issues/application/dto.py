"""
Issue Application DTOs
======================

Data Transfer Objects for the issues API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses. Unknown enum values are rejected here,
before they reach the domain.
"""

import base64
import binascii
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from hostelfix.issues.domain import Issue, HistoryEntry, status_label, assignee_label
from hostelfix.shared.domain.timestamps import format_time_ago


# ========== Type Aliases for Literals ==========
CategoryStr = Literal["water", "electricity", "wifi", "mess", "maintenance", "other"]
UrgencyStr = Literal["low", "medium", "high"]
StatusStr = Literal["open", "assigned", "in_progress", "resolved"]
StaffRoleStr = Literal["plumber", "electrician", "wifi_team", "mess_supervisor", "maintenance"]
ActionStr = Literal["assign", "start", "resolve", "escalate", "delete"]
SortStr = Literal["newest", "priority"]

# An empty string from a form select means "let the classifier decide"
NotChosen = Literal[""]


# ========== Request DTOs ==========

class AttachmentDTO(BaseModel):
    """Evidence image sent inline as base64."""
    filename: str = Field(..., min_length=1, max_length=255, description="Original file name")
    content_type: str = Field(default="application/octet-stream", description="MIME type")
    data_base64: str = Field(..., min_length=1, description="File content, base64 encoded")

    @field_validator("data_base64")
    @classmethod
    def validate_base64(cls, v: str) -> str:
        """Reject payloads that do not decode."""
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("data_base64 is not valid base64")
        return v

    def decoded(self) -> bytes:
        """Raw file bytes."""
        return base64.b64decode(self.data_base64)


class IssueCreateRequest(BaseModel):
    """Request model for reporting an issue."""
    title: str = Field(..., max_length=200, description="Short summary of the problem")
    description: str = Field(default="", max_length=5000, description="Details")
    category: Optional[Union[CategoryStr, NotChosen]] = Field(
        None, description="Explicit category; omitted or empty lets keywords decide"
    )
    urgency: Optional[Union[UrgencyStr, NotChosen]] = Field(
        None, description="Explicit urgency; omitted or empty lets keywords decide"
    )
    location: Optional[str] = Field(None, max_length=200, description="Site, e.g. 'Hostel A'")
    evidence: Optional[AttachmentDTO] = Field(None, description="Optional evidence image")


class TransitionRequest(BaseModel):
    """Request model for an administrative action."""
    action: ActionStr = Field(..., description="Ledger action")
    note: Optional[str] = Field(None, max_length=500, description="Note stored on the ledger entry")
    assignee: Optional[StaffRoleStr] = Field(None, description="Staff role, required for 'assign'")


# ========== Response DTOs ==========

class EvidenceImageResponse(BaseModel):
    """Stored evidence attachment reference."""
    url: str
    path: str
    name: str


class HistoryEntryResponse(BaseModel):
    """One ledger line."""
    status: str
    label: str
    at: int = Field(..., description="Epoch millis")
    note: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: HistoryEntry) -> "HistoryEntryResponse":
        return cls(
            status=entry.status.value,
            label=status_label(entry.status),
            at=entry.at,
            note=entry.note,
        )


class IssueResponse(BaseModel):
    """Response model for a single issue."""
    id: str
    title: str
    description: str
    category: CategoryStr
    urgency: UrgencyStr
    urgency_score: int
    location: str
    status: StatusStr
    status_label: str
    created_by: str
    created_at: int
    updated_at: int
    age_label: Optional[str] = None

    assigned_to: Optional[StaffRoleStr] = None
    assignee_label: str
    assigned_by: Optional[str] = None
    assigned_at: Optional[int] = None

    escalated: bool = False
    escalated_at: Optional[int] = None
    escalated_by: Optional[str] = None
    is_deleted: bool = False
    deleted_at: Optional[int] = None
    deleted_by: Optional[str] = None

    evidence_image: Optional[EvidenceImageResponse] = None
    auto_reason: str = ""
    status_history: List[HistoryEntryResponse] = Field(
        default_factory=list, description="Ledger, oldest first"
    )

    @classmethod
    def from_domain(cls, issue: Issue, now: Optional[int] = None) -> "IssueResponse":
        """Create from domain entity."""
        evidence = None
        if issue.evidence_image is not None:
            evidence = EvidenceImageResponse(
                url=issue.evidence_image.url,
                path=issue.evidence_image.path,
                name=issue.evidence_image.name,
            )

        return cls(
            id=issue.id,
            title=issue.title,
            description=issue.description,
            category=issue.category.value,
            urgency=issue.urgency.value,
            urgency_score=issue.effective_urgency_score,
            location=issue.location,
            status=issue.status.value,
            status_label=status_label(issue.status),
            created_by=issue.created_by,
            created_at=issue.created_at,
            updated_at=issue.updated_at,
            age_label=format_time_ago(issue.created_at, now) if now is not None else None,
            assigned_to=issue.assigned_to.value if issue.assigned_to else None,
            assignee_label=assignee_label(issue.assigned_to),
            assigned_by=issue.assigned_by,
            assigned_at=issue.assigned_at,
            escalated=issue.escalated,
            escalated_at=issue.escalated_at,
            escalated_by=issue.escalated_by,
            is_deleted=issue.is_deleted,
            deleted_at=issue.deleted_at,
            deleted_by=issue.deleted_by,
            evidence_image=evidence,
            auto_reason=issue.auto_reason,
            status_history=[HistoryEntryResponse.from_domain(e) for e in issue.status_history],
        )


class DuplicateMatchResponse(BaseModel):
    """A recent issue the submitted title resembles."""
    issue_id: Optional[str] = None
    title: str
    similarity: float


class SubmissionResponse(BaseModel):
    """Response model for issue submission."""
    issue: IssueResponse
    possible_duplicate: Optional[DuplicateMatchResponse] = None
    attachment_error: Optional[str] = Field(
        None, description="Set when the evidence upload failed; the issue was still created"
    )


class IssueListResponse(BaseModel):
    """Response model for issue listings."""
    issues: List[IssueResponse]
    total_count: int
