"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA monitoring endpoints.

Controllers are thin - they delegate to application services.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from hostelfix.core import RequestContext
from hostelfix.issues.application import IIssueRepository
from hostelfix.issues.application.dto import CategoryStr, StatusStr
from hostelfix.issues.interfaces.controllers import get_issue_repository
from hostelfix.shared.api.dependencies import get_policy_provider, get_request_context
from hostelfix.sla.application import (
    SLAService,
    SLAStatusResponse,
    BoardItemResponse,
    DashboardSummary,
    DashboardResponse,
)
from hostelfix.sla.application.dto import SLAFlagStr
from hostelfix.sla.domain import ISLAPolicyProvider

router = APIRouter(prefix="/sla", tags=["SLA Monitoring"])


# ========== Example payloads for Swagger ==========

SLA_STATUS_RESPONSE_EXAMPLE = {
    "issue_id": "123e4567-e89b-12d3-a456-426614174000",
    "flag": "on-time",
    "label": "3h 12m left",
    "breached": False,
    "color_class": "sla-at-risk",
    "deadline": 1718445600000,
    "remaining_ms": 11520000,
    "age_label": "1d ago",
    "can_escalate": False,
    "evaluated_at": 1718434080000
}

DASHBOARD_RESPONSE_EXAMPLE = {
    "issues": [],
    "total_count": 0,
    "summary": {
        "total_issues": 0,
        "overdue_count": 0,
        "delayed_count": 0,
        "on_time_count": 0,
        "breached_count": 0,
        "at_risk_count": 0,
        "escalated_count": 0,
        "breach_rate": 0.0
    },
    "evaluated_at": 1718434080000
}


# ========== Dependencies ==========

async def get_sla_service(
    repository: IIssueRepository = Depends(get_issue_repository),
    policy_provider: ISLAPolicyProvider = Depends(get_policy_provider)
) -> SLAService:
    """Get SLA service instance."""
    return SLAService(repository, policy_provider)


# ========== Route Handlers ==========

@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="SLA board in attention order",
    description="""
    Every non-deleted issue with its SLA state, most urgent first:

    1. overdue, then delayed, then on-time
    2. higher urgency score first
    3. newest first

    Labels are computed against the request instant; nothing derived is stored.
    """,
    responses={200: {"content": {"application/json": {"example": DASHBOARD_RESPONSE_EXAMPLE}}}}
)
async def get_dashboard(
    issue_status: Optional[StatusStr] = Query(None, alias="status", description="Filter by status"),
    category: Optional[CategoryStr] = Query(None, description="Filter by category"),
    flag: Optional[SLAFlagStr] = Query(None, description="Filter by coarse SLA flag"),
    limit: int = Query(500, ge=1, le=1000, description="Max issues returned"),
    ctx: RequestContext = Depends(get_request_context),
    service: SLAService = Depends(get_sla_service)
):
    board = await service.board(ctx.now, status=issue_status, category=category, flag=flag, limit=limit)
    summary = board.summary

    return DashboardResponse(
        issues=[BoardItemResponse.from_assessment(a) for a in board.assessments],
        total_count=len(board.assessments),
        summary=DashboardSummary(
            total_issues=summary.total_issues,
            overdue_count=summary.overdue_count,
            delayed_count=summary.delayed_count,
            on_time_count=summary.on_time_count,
            breached_count=summary.breached_count,
            at_risk_count=summary.at_risk_count,
            escalated_count=summary.escalated_count,
            breach_rate=summary.breach_rate,
        ),
        evaluated_at=board.evaluated_at,
    )


@router.get(
    "/issues/{issue_id}",
    response_model=SLAStatusResponse,
    summary="SLA state of one issue",
    responses={
        200: {"content": {"application/json": {"example": SLA_STATUS_RESPONSE_EXAMPLE}}},
        404: {"description": "Issue not found"}
    }
)
async def get_issue_sla(
    issue_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: SLAService = Depends(get_sla_service)
):
    assessment = await service.assess(issue_id, ctx.now)
    return SLAStatusResponse.from_assessment(assessment)


# Export router for inclusion in main app
sla_router = router
