"""
Issue Infrastructure Models
===========================

SQLAlchemy ORM models for the issues module.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.

Instants are stored as epoch milliseconds (BIGINT) so the database holds
exactly what the domain computes with.
"""

from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    BigInteger, Boolean, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostelfix.infrastructure.database import Base


class IssueModel(Base):
    """
    Database model for the Issue aggregate root.

    Maps to the 'issues' table.
    """
    __tablename__ = "issues"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Report
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    urgency: Mapped[str] = mapped_column(String(16), nullable=False)
    urgency_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    auto_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Lifecycle
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Assignment
    assigned_to: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    assigned_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    assigned_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    # Flags
    escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    escalated_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    escalated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    deleted_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Evidence
    evidence_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evidence_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evidence_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Ledger
    history: Mapped[List["StatusHistoryModel"]] = relationship(
        back_populates="issue",
        order_by="StatusHistoryModel.seq",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        # Server-side ordering used by listings and the live feed
        Index("ix_issues_score_created", "urgency_score", "created_at"),
    )


class StatusHistoryModel(Base):
    """
    Database model for one status ledger entry.

    Maps to the 'issue_status_history' table. Rows are only ever inserted;
    ``(issue_id, seq)`` is unique so two writers appending from the same
    stale read collide instead of both succeeding.
    """
    __tablename__ = "issue_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    issue_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    issue: Mapped[IssueModel] = relationship(back_populates="history")

    __table_args__ = (
        UniqueConstraint("issue_id", "seq", name="uq_issue_history_seq"),
    )
