"""
Triage Controllers (API Routes)
================================

FastAPI routes for classification previews and duplicate checks.

Both endpoints are advisory: nothing is written.
"""

from fastapi import APIRouter, Depends

from hostelfix.core import RequestContext
from hostelfix.issues.application import IIssueRepository
from hostelfix.issues.interfaces.controllers import get_issue_repository
from hostelfix.shared.api.dependencies import get_request_context
from hostelfix.triage.application import (
    TriageService,
    ClassifyRequest,
    ClassificationResponse,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
)

router = APIRouter(prefix="/triage", tags=["Issue Triage"])


# ========== Example payloads for Swagger ==========

CLASSIFY_REQUEST_EXAMPLE = {
    "title": "Power cut in block B",
    "description": "No electricity since 6am, sparking near the main switch",
    "category": "",
    "urgency": ""
}

CLASSIFY_RESPONSE_EXAMPLE = {
    "category": "electricity",
    "urgency": "high",
    "urgency_score": 3,
    "assigned_to": "electrician",
    "reason": "Category 'electricity' from keywords: electricity, power, switch, sparking; "
              "urgency 'high' from keywords: sparking, no electricity; routed to electrician"
}

DUPLICATE_RESPONSE_EXAMPLE = {
    "is_duplicate": True,
    "issue_id": "123e4567-e89b-12d3-a456-426614174000",
    "title": "Water leakage in room 203",
    "similarity": 0.8
}


# ========== Dependencies ==========

async def get_triage_service(
    repository: IIssueRepository = Depends(get_issue_repository)
) -> TriageService:
    """Get triage service reading recent issues from the issue repository."""
    return TriageService(repository)


# ========== Route Handlers ==========

@router.post(
    "/classify",
    response_model=ClassificationResponse,
    summary="Preview classification and routing",
    description="""
    Classify issue text the way submission would:

    - **Category**: explicit value wins, otherwise the category with the most
      keyword hits (no hit means `other`)
    - **Urgency**: explicit value wins, otherwise high-signal words give
      `high`, medium-signal words `medium`, else `low`
    - **Routing**: looked up from the final category only
    """,
    responses={
        200: {"content": {"application/json": {"example": CLASSIFY_RESPONSE_EXAMPLE}}},
        422: {"description": "Unknown category or urgency"}
    },
    openapi_extra={"requestBody": {"content": {"application/json": {"example": CLASSIFY_REQUEST_EXAMPLE}}}}
)
async def classify_issue(
    payload: ClassifyRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: TriageService = Depends(get_triage_service)
):
    result = service.classify(payload.title, payload.description, payload.category, payload.urgency)
    return ClassificationResponse.from_domain(result)


@router.post(
    "/duplicates",
    response_model=DuplicateCheckResponse,
    summary="Check a title for likely re-reports",
    description="""
    Compare a title against issues reported in the last 24 hours.

    Titles shorter than 6 characters are never checked. The first recent
    issue sharing more than 60% of its words is returned. Advisory only.
    """,
    responses={200: {"content": {"application/json": {"example": DUPLICATE_RESPONSE_EXAMPLE}}}}
)
async def check_duplicate(
    payload: DuplicateCheckRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: TriageService = Depends(get_triage_service)
):
    match = await service.check_duplicate(ctx.now, payload.title)
    return DuplicateCheckResponse.from_domain(match)


# Export router for inclusion in main app
triage_router = router
