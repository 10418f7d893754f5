"""
Issue Controllers (API Routes)
==============================

FastAPI routes for reporting issues and driving the status ledger.

Controllers are thin - they delegate to application services. Application
exceptions are turned into HTTP errors by the handlers registered in main.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from hostelfix.core import RequestContext
from hostelfix.infrastructure.database import get_session
from hostelfix.issues.application import (
    Attachment,
    IIssueRepository,
    IssueService,
    IssueCreateRequest,
    TransitionRequest,
    IssueResponse,
    IssueListResponse,
    SubmissionResponse,
    DuplicateMatchResponse,
)
from hostelfix.issues.application.dto import CategoryStr, SortStr, StatusStr
from hostelfix.issues.infrastructure.repositories import SQLAlchemyIssueRepository
from hostelfix.shared.api.dependencies import get_policy_provider, get_request_context
from hostelfix.shared.infrastructure.logging import get_context_logger
from hostelfix.sla.domain import ISLAPolicyProvider

router = APIRouter(prefix="/issues", tags=["Issues"])


# ========== Example payloads for Swagger ==========

SUBMIT_REQUEST_EXAMPLE = {
    "title": "Water leakage in room 203",
    "description": "The tap in the washroom has been leaking since morning.",
    "category": "",
    "urgency": "",
    "location": "Hostel A"
}

TRANSITION_REQUEST_EXAMPLE = {
    "action": "assign",
    "assignee": "plumber",
    "note": "Plumber on duty informed"
}


# ========== Dependencies ==========

async def get_issue_repository(
    session: AsyncSession = Depends(get_session)
) -> IIssueRepository:
    """Get issue repository bound to the request's session."""
    return SQLAlchemyIssueRepository(session)


async def get_issue_service(
    request: Request,
    repository: IIssueRepository = Depends(get_issue_repository),
    policy_provider: ISLAPolicyProvider = Depends(get_policy_provider)
) -> IssueService:
    """Get issue service wired to the app's blob store and live feed."""
    return IssueService(
        repository,
        policy_provider=policy_provider,
        blob_store=getattr(request.app.state, "blob_store", None),
        publisher=getattr(request.app.state, "issue_feed", None),
    )


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report an issue",
    description="""
    Report a facility issue.

    Category and urgency are inferred from the title and description unless
    given explicitly (an empty string counts as not given). Categories with
    an owning team are assigned to it immediately.

    The evidence image is optional; if its upload fails the issue is still
    created and `attachment_error` explains why.

    `possible_duplicate` is advisory: a recent issue with a similar title.
    """,
    responses={201: {"content": {"application/json": {"example": {"issue": {}, "possible_duplicate": None}}}}},
    openapi_extra={"requestBody": {"content": {"application/json": {"example": SUBMIT_REQUEST_EXAMPLE}}}}
)
async def submit_issue(
    payload: IssueCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: IssueService = Depends(get_issue_service)
):
    attachment = None
    if payload.evidence is not None:
        attachment = Attachment(
            filename=payload.evidence.filename,
            content=payload.evidence.decoded(),
            content_type=payload.evidence.content_type,
        )

    result = await service.submit(
        ctx,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        urgency=payload.urgency,
        location=payload.location,
        attachment=attachment,
    )

    duplicate = None
    if result.possible_duplicate is not None:
        duplicate = DuplicateMatchResponse(
            issue_id=result.possible_duplicate.issue_id,
            title=result.possible_duplicate.title,
            similarity=result.possible_duplicate.similarity,
        )

    return SubmissionResponse(
        issue=IssueResponse.from_domain(result.issue, ctx.now),
        possible_duplicate=duplicate,
        attachment_error=result.attachment_error,
    )


@router.get(
    "/mine",
    response_model=IssueListResponse,
    summary="List my issues",
    description="""
    Issues reported by the calling user.

    - `newest`: most recent first
    - `priority`: highest urgency first, newest first within equal urgency
    """
)
async def list_my_issues(
    sort: SortStr = Query("newest", description="newest or priority"),
    ctx: RequestContext = Depends(get_request_context),
    service: IssueService = Depends(get_issue_service)
):
    issues = await service.list_for_reporter(ctx, sort=sort)
    return IssueListResponse(
        issues=[IssueResponse.from_domain(issue, ctx.now) for issue in issues],
        total_count=len(issues),
    )


@router.get(
    "",
    response_model=IssueListResponse,
    summary="List issues (admin)",
    description="""
    All non-deleted issues, ordered by urgency score then newest first.
    Use `GET /sla/dashboard` for the SLA attention order.
    """
)
async def list_issues(
    issue_status: Optional[StatusStr] = Query(None, alias="status", description="Filter by status"),
    category: Optional[CategoryStr] = Query(None, description="Filter by category"),
    limit: int = Query(100, ge=1, le=1000, description="Results per page"),
    offset: int = Query(0, ge=0, description="Page offset"),
    ctx: RequestContext = Depends(get_request_context),
    service: IssueService = Depends(get_issue_service)
):
    issues = await service.list_for_admin(issue_status, category, limit=limit, offset=offset)
    return IssueListResponse(
        issues=[IssueResponse.from_domain(issue, ctx.now) for issue in issues],
        total_count=len(issues),
    )


@router.get(
    "/{issue_id}",
    response_model=IssueResponse,
    summary="Get an issue",
    responses={404: {"description": "Issue not found"}}
)
async def get_issue(
    issue_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: IssueService = Depends(get_issue_service)
):
    issue = await service.get(issue_id)
    return IssueResponse.from_domain(issue, ctx.now)


@router.post(
    "/{issue_id}/transitions",
    response_model=IssueResponse,
    summary="Apply a ledger action",
    description="""
    Apply one administrative action to an issue.

    | action | allowed when |
    |---|---|
    | assign | status is open; `assignee` required |
    | start | status is assigned |
    | resolve | status is assigned or in_progress |
    | escalate | SLA breached, not yet escalated, not deleted |
    | delete | status is resolved, not yet deleted |

    A rejected action answers 409 and leaves the issue unchanged.
    """,
    responses={
        404: {"description": "Issue not found"},
        409: {"description": "Action not allowed in the issue's current state"}
    },
    openapi_extra={"requestBody": {"content": {"application/json": {"example": TRANSITION_REQUEST_EXAMPLE}}}}
)
async def transition_issue(
    issue_id: str,
    payload: TransitionRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: IssueService = Depends(get_issue_service)
):
    logger = get_context_logger(__name__, ctx.correlation_id)
    logger.info("Transition requested", extra={"issue_id": issue_id, "action": payload.action})

    issue = await service.transition(
        ctx,
        issue_id,
        payload.action,
        note=payload.note,
        assignee=payload.assignee,
    )
    return IssueResponse.from_domain(issue, ctx.now)


# Export router for inclusion in main app
issues_router = router
