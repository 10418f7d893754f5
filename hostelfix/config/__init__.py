"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Also holds the closed vocabularies (categories, urgencies, statuses,
staff roles) shared by every bounded context.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="hostelfix", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/hostelfix",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== SLA Configuration ==========
    sla_policy_path: Path = Field(
        default=Path("sla_policy.yaml"),
        description="Path to SLA policy YAML file"
    )

    # ========== Intake ==========
    default_location: str = Field(
        default="Hostel A",
        description="Location stamped on issues that do not name one"
    )
    duplicate_window_hours: int = Field(
        default=24,
        description="Only issues created within this window are duplicate candidates",
        ge=1
    )
    duplicate_threshold: float = Field(
        default=0.6,
        description="Similarity a candidate must exceed to count as a duplicate",
        ge=0.0,
        le=1.0
    )
    duplicate_min_title_length: int = Field(
        default=6,
        description="Shorter titles are never checked for duplicates",
        ge=1
    )

    # ========== Blob Store ==========
    blob_upload_url: Optional[str] = Field(
        default=None,
        description="Upload endpoint for evidence images"
    )
    blob_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for blob uploads",
        ge=0.1,
        le=120
    )

    # ========== LLM Narrator ==========
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key for weekly summary narration"
    )
    mock_llm: bool = Field(
        default=False,
        description="Use mock LLM responses for testing (no API calls)"
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model used for summary narration"
    )
    llm_temperature: float = Field(
        default=0.3,
        description="Default temperature for LLM",
        ge=0.0,
        le=1.0
    )
    llm_max_tokens: int = Field(
        default=600,
        description="Default max tokens for LLM generation",
        ge=1,
        le=8000
    )
    summary_window_days: int = Field(
        default=7,
        description="Days of issues covered by the weekly summary",
        ge=1
    )

    # ========== Live Feed ==========
    feed_snapshot_limit: int = Field(
        default=500,
        description="Max issues delivered per live-feed snapshot",
        ge=1
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "test", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Category(str, Enum):
    """Facility areas an issue can belong to."""
    WATER = "water"
    ELECTRICITY = "electricity"
    WIFI = "wifi"
    MESS = "mess"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class Urgency(str, Enum):
    """Reporter-facing urgency levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IssueStatus(str, Enum):
    """Core lifecycle states of an issue."""
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class HistoryTag(str, Enum):
    """Ledger entries layered on top of the lifecycle; they never change status."""
    ESCALATED = "escalated"
    DELETED = "deleted"


class StaffRole(str, Enum):
    """Staff teams an issue can be routed to."""
    PLUMBER = "plumber"
    ELECTRICIAN = "electrician"
    WIFI_TEAM = "wifi_team"
    MESS_SUPERVISOR = "mess_supervisor"
    MAINTENANCE = "maintenance"


class SLAFlag(str, Enum):
    """Coarse triage bucket used for attention ordering."""
    ON_TIME = "on-time"
    DELAYED = "delayed"
    OVERDUE = "overdue"


class TransitionAction(str, Enum):
    """Administrative actions accepted by the status ledger."""
    ASSIGN = "assign"
    START = "start"
    RESOLVE = "resolve"
    ESCALATE = "escalate"
    DELETE = "delete"


SYSTEM_ACTOR = "system"

URGENCY_SCORES: Dict[Urgency, int] = {
    Urgency.HIGH: 3,
    Urgency.MEDIUM: 2,
    Urgency.LOW: 1,
}

# Routing is keyed on category only
CATEGORY_ROUTES: Dict[Category, Optional[StaffRole]] = {
    Category.WATER: StaffRole.PLUMBER,
    Category.ELECTRICITY: StaffRole.ELECTRICIAN,
    Category.WIFI: StaffRole.WIFI_TEAM,
    Category.MESS: StaffRole.MESS_SUPERVISOR,
    Category.MAINTENANCE: StaffRole.MAINTENANCE,
    Category.OTHER: None,
}

STATUS_LABELS: Dict[str, str] = {
    "open": "Open",
    "assigned": "Assigned",
    "in_progress": "In Progress",
    "resolved": "Resolved",
    "deleted": "Deleted",
    "escalated": "Escalated",
}

ASSIGNEE_LABELS: Dict[str, str] = {
    "plumber": "Plumber",
    "electrician": "Electrician",
    "wifi_team": "WiFi/Network Team",
    "mess_supervisor": "Mess Supervisor",
    "maintenance": "Maintenance/Carpenter",
    SYSTEM_ACTOR: "Auto-Routed",
}


# ========== Lists for validation ==========

VALID_CATEGORIES = [c.value for c in Category]
VALID_URGENCIES = [u.value for u in Urgency]
VALID_STATUSES = [s.value for s in IssueStatus]
VALID_STAFF_ROLES = [r.value for r in StaffRole]
LIFECYCLE_STATUSES = frozenset(IssueStatus)
