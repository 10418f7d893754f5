"""
Triage Application Layer
=========================

Application layer for issue triage module.

Contains:
- Services: Classification preview and duplicate checks
- DTOs: Data transfer objects for API serialization
"""

from hostelfix.triage.application.services import (
    TriageService,
    IRecentIssueSource,
)
from hostelfix.triage.application.dto import (
    ClassifyRequest,
    ClassificationResponse,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
)

__all__ = [
    # DTOs
    "ClassifyRequest",
    "ClassificationResponse",
    "DuplicateCheckRequest",
    "DuplicateCheckResponse",
    # Services
    "TriageService",
    # Repository Interfaces
    "IRecentIssueSource",
]
