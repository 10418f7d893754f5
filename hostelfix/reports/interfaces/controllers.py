"""
Reports Controllers (API Routes)
================================

FastAPI routes for administrator reports.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from hostelfix.core import RequestContext
from hostelfix.issues.application import IIssueRepository
from hostelfix.issues.interfaces.controllers import get_issue_repository
from hostelfix.reports.application import (
    INarrator,
    SummaryService,
    WeeklySummaryResponse,
    DistributionResponse,
)
from hostelfix.shared.api.dependencies import get_policy_provider, get_request_context
from hostelfix.sla.domain import ISLAPolicyProvider

router = APIRouter(prefix="/reports", tags=["Reports"])


# ========== Example payloads for Swagger ==========

WEEKLY_SUMMARY_RESPONSE_EXAMPLE = {
    "statistics": {
        "window_start": 1717829280000,
        "generated_at": 1718434080000,
        "total_issues": 12,
        "resolved_count": 5,
        "open_count": 7,
        "breached_count": 2,
        "escalated_count": 1,
        "by_category": {"water": 5, "electricity": 4, "wifi": 3},
        "by_urgency": {"medium": 6, "high": 4, "low": 2},
        "by_location": {"Hostel A": 8, "Hostel B": 4},
        "by_assignee": {"plumber": 5, "electrician": 4, "wifi_team": 3}
    },
    "narration": "Most issues this week are concentrated in water and electricity...",
    "narrated": True,
    "narration_error": None
}


# ========== Dependencies ==========

def get_narrator(request: Request) -> Optional[INarrator]:
    """Narrator from app state; None disables narration."""
    return getattr(request.app.state, "narrator", None)


async def get_summary_service(
    repository: IIssueRepository = Depends(get_issue_repository),
    narrator: Optional[INarrator] = Depends(get_narrator),
    policy_provider: ISLAPolicyProvider = Depends(get_policy_provider)
) -> SummaryService:
    """Get summary service instance."""
    return SummaryService(repository, narrator=narrator, policy_provider=policy_provider)


# ========== Route Handlers ==========

@router.post(
    "/weekly-summary",
    response_model=WeeklySummaryResponse,
    summary="Generate the weekly summary",
    description="""
    Aggregate the issues reported in the last 7 days (counts by category,
    urgency, hostel and assignee; resolved, breached and escalated counts)
    and narrate them with the LLM.

    Narration is best-effort: on failure the statistics are still returned
    with a placeholder narration and `narrated=false`.
    """,
    responses={200: {"content": {"application/json": {"example": WEEKLY_SUMMARY_RESPONSE_EXAMPLE}}}}
)
async def generate_weekly_summary(
    ctx: RequestContext = Depends(get_request_context),
    service: SummaryService = Depends(get_summary_service)
):
    summary = await service.generate(ctx)
    return WeeklySummaryResponse.from_summary(summary)


@router.get(
    "/distribution",
    response_model=DistributionResponse,
    summary="Issue distribution per hostel"
)
async def get_distribution(
    ctx: RequestContext = Depends(get_request_context),
    service: SummaryService = Depends(get_summary_service)
):
    counts = await service.distribution()
    return DistributionResponse(by_location=counts, total_issues=sum(counts.values()))


# Export router for inclusion in main app
reports_router = router
