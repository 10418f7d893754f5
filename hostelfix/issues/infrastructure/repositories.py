"""
Issue Infrastructure Repositories
=================================

Concrete implementation of the issue repository using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
issues and their ledgers from the database.
"""

from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostelfix.config import Category, HistoryTag, IssueStatus, StaffRole, Urgency
from hostelfix.core import (
    ConcurrentTransitionException,
    RepositoryException,
    ResourceNotFoundException,
)
from hostelfix.issues.application.services import IIssueRepository, TransitionDecision
from hostelfix.issues.domain import EvidenceImage, HistoryEntry, Issue, IssueFilter
from hostelfix.issues.infrastructure.models import IssueModel, StatusHistoryModel
from hostelfix.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def _parse_uuid(issue_id: str) -> Optional[UUID]:
    try:
        return UUID(str(issue_id))
    except ValueError:
        return None


def _ledger_status(value: str):
    try:
        return IssueStatus(value)
    except ValueError:
        return HistoryTag(value)


def to_domain(model: IssueModel) -> Issue:
    """Rebuild the aggregate from its rows."""
    evidence = None
    if model.evidence_url:
        evidence = EvidenceImage(
            url=model.evidence_url,
            path=model.evidence_path or "",
            name=model.evidence_name or "",
        )

    return Issue(
        id=str(model.id),
        title=model.title,
        description=model.description,
        category=Category(model.category),
        urgency=Urgency(model.urgency),
        urgency_score=model.urgency_score,
        location=model.location,
        status=IssueStatus(model.status),
        created_by=model.created_by,
        created_at=model.created_at,
        updated_at=model.updated_at,
        status_history=tuple(
            HistoryEntry(status=_ledger_status(row.status), at=row.at, note=row.note)
            for row in model.history
        ),
        assigned_to=StaffRole(model.assigned_to) if model.assigned_to else None,
        assigned_by=model.assigned_by,
        assigned_at=model.assigned_at,
        escalated=model.escalated,
        escalated_at=model.escalated_at,
        escalated_by=model.escalated_by,
        is_deleted=model.is_deleted,
        deleted_at=model.deleted_at,
        deleted_by=model.deleted_by,
        evidence_image=evidence,
        auto_reason=model.auto_reason,
    )


def _copy_fields(model: IssueModel, issue: Issue) -> None:
    """Write every mutable scalar of the aggregate onto its row."""
    model.status = issue.status.value
    model.updated_at = issue.updated_at
    model.assigned_to = issue.assigned_to.value if issue.assigned_to else None
    model.assigned_by = issue.assigned_by
    model.assigned_at = issue.assigned_at
    model.escalated = issue.escalated
    model.escalated_at = issue.escalated_at
    model.escalated_by = issue.escalated_by
    model.is_deleted = issue.is_deleted
    model.deleted_at = issue.deleted_at
    model.deleted_by = issue.deleted_by


def _history_row(seq: int, entry: HistoryEntry) -> StatusHistoryModel:
    return StatusHistoryModel(seq=seq, status=entry.status.value, at=entry.at, note=entry.note)


class SQLAlchemyIssueRepository(IIssueRepository):
    """
    SQLAlchemy implementation of the issue repository.

    Handles persistence of Issue aggregates using async SQLAlchemy.
    Ledger entries are rows, so a transition is an UPDATE of the issue row
    plus INSERTs of the new entries; existing entries are never rewritten.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _load(self, issue_uuid: UUID, for_update: bool = False) -> Optional[IssueModel]:
        stmt = select(IssueModel).where(IssueModel.id == issue_uuid)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, issue_id: str) -> Optional[Issue]:
        """Get issue by ID."""
        issue_uuid = _parse_uuid(issue_id)
        if issue_uuid is None:
            return None

        model = await self._load(issue_uuid)
        return to_domain(model) if model else None

    async def create(self, issue: Issue) -> Issue:
        """Persist a new issue with its seeded ledger."""
        issue_uuid = _parse_uuid(issue.id)
        if issue_uuid is None:
            raise RepositoryException(f"Invalid issue ID: {issue.id}")

        evidence = issue.evidence_image
        model = IssueModel(
            id=issue_uuid,
            title=issue.title,
            description=issue.description,
            category=issue.category.value,
            urgency=issue.urgency.value,
            urgency_score=issue.effective_urgency_score,
            location=issue.location,
            auto_reason=issue.auto_reason,
            created_by=issue.created_by,
            created_at=issue.created_at,
            evidence_url=evidence.url if evidence else None,
            evidence_path=evidence.path if evidence else None,
            evidence_name=evidence.name if evidence else None,
            history=[_history_row(seq, entry) for seq, entry in enumerate(issue.status_history)],
        )
        _copy_fields(model, issue)

        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise RepositoryException(f"Could not create issue {issue.id}", {"error": str(e.orig)})

        return issue

    async def list(
        self,
        filters: Optional[IssueFilter] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Issue]:
        """List issues ordered by urgency score desc, created_at desc."""
        filters = filters or IssueFilter()
        stmt = select(IssueModel)

        conditions = []
        if filters.status is not None:
            conditions.append(IssueModel.status == filters.status.value)
        if filters.category is not None:
            conditions.append(IssueModel.category == filters.category.value)
        if filters.created_by is not None:
            conditions.append(IssueModel.created_by == filters.created_by)
        if filters.created_since is not None:
            conditions.append(IssueModel.created_at >= filters.created_since)
        if not filters.include_deleted:
            conditions.append(IssueModel.is_deleted.is_(False))

        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(IssueModel.urgency_score.desc(), IssueModel.created_at.desc())
        stmt = stmt.limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        return [to_domain(model) for model in result.scalars().all()]

    async def list_created_since(self, since: int) -> List[Issue]:
        """Non-deleted issues created at or after ``since``, newest first."""
        stmt = (
            select(IssueModel)
            .where(and_(IssueModel.created_at >= since, IssueModel.is_deleted.is_(False)))
            .order_by(IssueModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [to_domain(model) for model in result.scalars().all()]

    async def apply_transition(
        self,
        issue_id: str,
        decide: TransitionDecision
    ) -> Issue:
        """
        Lock the issue row, decide, and append the new ledger rows.

        Raises:
            ResourceNotFoundException: Unknown issue
            ConcurrentTransitionException: Another writer appended first
            RepositoryException: The decision rewrote existing entries
        """
        issue_uuid = _parse_uuid(issue_id)
        model = await self._load(issue_uuid, for_update=True) if issue_uuid else None
        if model is None:
            raise ResourceNotFoundException("Issue", issue_id)

        current = to_domain(model)
        updated = decide(current)

        known = len(current.status_history)
        if updated.id != current.id or updated.status_history[:known] != current.status_history:
            raise RepositoryException(
                f"Ledger of issue {issue_id} may only be appended to",
                {"issue_id": issue_id}
            )

        _copy_fields(model, updated)
        for seq, entry in enumerate(updated.status_history[known:], start=known):
            model.history.append(_history_row(seq, entry))

        try:
            await self._session.flush()
        except IntegrityError:
            logger.warning(
                "Concurrent ledger append rejected",
                extra={"issue_id": issue_id, "seq": known}
            )
            raise ConcurrentTransitionException(issue_id)

        return updated

    async def count_by_location(self) -> Dict[str, int]:
        """Non-deleted issue count per location, grouped in SQL."""
        stmt = (
            select(IssueModel.location, func.count(IssueModel.id))
            .where(IssueModel.is_deleted.is_(False))
            .group_by(IssueModel.location)
        )
        result = await self._session.execute(stmt)
        return {location: count for location, count in result.all()}

    async def commit(self) -> None:
        """
        Commit the session's transaction.

        Raises:
            RepositoryException: The database refused the commit
        """
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException("Could not commit issue changes", {"error": str(e)})
