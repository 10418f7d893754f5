"""
HostelFix - Main Application
============================

Facility issue tracking for hostels: report, triage, SLA and audit trail.

Modules:
- Issues: Reporting, status ledger, live feed
- Triage: Keyword classification, routing, duplicate detection
- SLA Monitoring: Deadlines, breach labels, attention ordering
- Reports: Weekly summary and hostel distribution

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, blob store, LLM
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

# Configuration and Core
from hostelfix.config import settings
from hostelfix.core import ApplicationException, ConfigurationException

# Infrastructure
from hostelfix.infrastructure.database import init_database, close_database, create_tables
from hostelfix.infrastructure.llm import get_llm_client
from hostelfix.infrastructure.storage import HTTPBlobStore

# Module infrastructure
from hostelfix.issues.infrastructure import IssueFeed
from hostelfix.reports.infrastructure import LLMNarrator
from hostelfix.sla.infrastructure import YAMLPolicyProvider

# Module Routers
from hostelfix.issues.interfaces import issues_router
from hostelfix.triage.interfaces import triage_router
from hostelfix.sla.interfaces import sla_router
from hostelfix.reports.interfaces import reports_router

# Shared API
from hostelfix.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from hostelfix.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database (create tables outside production)
    3. Load SLA policy and watch it for changes
    4. Blob store, live feed and narrator

    SHUTDOWN:
    1. Stop policy watcher
    2. Close feed and blob store
    3. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting HostelFix", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    app.state.settings = settings

    logger.info("Initializing database")
    init_database()

    # Development convenience; production uses migrations
    if settings.environment != "production":
        try:
            await create_tables()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                "Database not available - running in degraded mode",
                extra={"error": str(e)}
            )

    logger.info("Loading SLA policy", extra={"path": str(settings.sla_policy_path)})
    policy_provider = YAMLPolicyProvider(settings.sla_policy_path)
    policy_provider.start_watching()
    app.state.policy_provider = policy_provider

    if settings.blob_upload_url:
        app.state.blob_store = HTTPBlobStore(settings.blob_upload_url)
    else:
        logger.info("Blob store not configured - evidence uploads disabled")
        app.state.blob_store = None

    app.state.issue_feed = IssueFeed()

    try:
        llm_client = get_llm_client()
    except ConfigurationException as e:
        logger.warning("LLM client initialization failed", extra={"error": e.message})
        llm_client = None
    app.state.narrator = LLMNarrator(llm_client) if llm_client else None
    if app.state.narrator is None:
        logger.info("Narrator not configured - weekly summaries use placeholder narration")

    logger.info("HostelFix started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down HostelFix")

    policy_provider.stop_watching()
    app.state.issue_feed.close()
    if app.state.blob_store is not None:
        await app.state.blob_store.close()

    await close_database()

    logger.info("HostelFix shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="HostelFix API",
    description="""
    ## Hostel Facility Issue Tracking

    Report facility problems, route them to the right staff team and keep
    them inside their SLA.

    ---

    ### Issues Module

    - `POST /issues` - Report an issue (auto classification and routing)
    - `GET /issues/mine` - My issues, newest or by priority
    - `GET /issues` - All issues (admin)
    - `POST /issues/{id}/transitions` - assign, start, resolve, escalate, delete

    ### Triage Module

    - `POST /triage/classify` - Preview category, urgency and routing
    - `POST /triage/duplicates` - Check a title against recent reports

    ### SLA Monitoring Module

    - `GET /sla/dashboard` - Board in attention order
    - `GET /sla/issues/{id}` - SLA state of one issue

    ### Reports Module

    - `POST /reports/weekly-summary` - Weekly statistics with narration
    - `GET /reports/distribution` - Issues per hostel

    ---

    ### SLA Windows

    | Status | Window | Anchor |
    |--------|--------|--------|
    | open | 24h | created |
    | assigned / in_progress | 48h | first assignment |

    Every request must carry the acting user in `X-Actor-Id`.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(issues_router)
app.include_router(triage_router)
app.include_router(sla_router)
app.include_router(reports_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "sla_policy": "loaded (24h open / 48h assigned)",
                        "blob_store": "configured",
                        "narrator": "not_configured",
                        "live_feed": "2 subscribers"
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Returns service health status including:
    - SLA policy in effect
    - Blob store and narrator availability
    - Live feed subscribers
    """
    state = request.app.state
    checks = {
        "sla_policy": "not_loaded",
        "blob_store": "configured" if getattr(state, "blob_store", None) else "not_configured",
        "narrator": "available" if getattr(state, "narrator", None) else "not_configured",
        "live_feed": "not_started",
    }

    provider = getattr(state, "policy_provider", None)
    if provider is not None:
        policy = provider.get_policy()
        checks["sla_policy"] = f"loaded ({policy.open_hours}h open / {policy.assigned_hours}h assigned)"

    feed = getattr(state, "issue_feed", None)
    if feed is not None:
        checks["live_feed"] = f"{feed.subscriber_count} subscribers"

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "HostelFix",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "issues": {"prefix": "/issues"},
            "triage": {"prefix": "/triage"},
            "sla": {"prefix": "/sla"},
            "reports": {"prefix": "/reports"}
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hostelfix.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
