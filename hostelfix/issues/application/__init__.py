"""
Issues Application Layer
========================

Application layer for the issues module.

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and collaborator interfaces,
but not on concrete infrastructure implementations.
"""

from hostelfix.issues.application.dto import (
    AttachmentDTO,
    IssueCreateRequest,
    TransitionRequest,
    EvidenceImageResponse,
    HistoryEntryResponse,
    IssueResponse,
    DuplicateMatchResponse,
    SubmissionResponse,
    IssueListResponse,
)
from hostelfix.issues.application.services import (
    Attachment,
    IIssueRepository,
    IBlobStore,
    IIssuePublisher,
    IssueService,
    SubmissionResult,
    TransitionDecision,
)

__all__ = [
    # DTOs
    "AttachmentDTO",
    "IssueCreateRequest",
    "TransitionRequest",
    "EvidenceImageResponse",
    "HistoryEntryResponse",
    "IssueResponse",
    "DuplicateMatchResponse",
    "SubmissionResponse",
    "IssueListResponse",
    # Services
    "IssueService",
    "SubmissionResult",
    "Attachment",
    "TransitionDecision",
    # Collaborator Interfaces
    "IIssueRepository",
    "IBlobStore",
    "IIssuePublisher",
]
