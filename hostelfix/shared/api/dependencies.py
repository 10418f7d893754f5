"""
Shared API Dependencies
=======================

FastAPI dependencies used by more than one router.
"""

from typing import Optional

from fastapi import Header, HTTPException, Request, status

from hostelfix.core import RequestContext
from hostelfix.shared.domain.timestamps import now_millis
from hostelfix.sla.domain import ISLAPolicyProvider
from hostelfix.sla.infrastructure import StaticPolicyProvider


def get_request_context(
    request: Request,
    x_actor_id: Optional[str] = Header(None, description="Acting user, set by the identity gateway")
) -> RequestContext:
    """
    Build the explicit request context.

    The identity provider sits in front of this service and forwards the
    authenticated actor in ``X-Actor-Id``.
    """
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Id header is required"
        )

    return RequestContext(
        actor_id=x_actor_id.strip(),
        now=now_millis(),
        correlation_id=getattr(request.state, "correlation_id", "unknown"),
    )


def get_policy_provider(request: Request) -> ISLAPolicyProvider:
    """SLA policy provider from app state, defaults when not configured."""
    provider = getattr(request.app.state, "policy_provider", None)
    if provider is None:
        return StaticPolicyProvider()
    return provider
