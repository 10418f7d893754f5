"""
Issue Application Services
==========================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: IssueService owns the issue lifecycle use cases
- Dependency Inversion: Depend on abstractions (repositories, blob store),
  not concrete implementations
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from hostelfix.config import settings, Category, IssueStatus
from hostelfix.core import (
    RequestContext,
    AttachmentException,
    ResourceNotFoundException,
    ValidationException,
)
from hostelfix.issues.domain import (
    Issue,
    EvidenceImage,
    IssueFilter,
    open_issue,
    apply_transition,
)
from hostelfix.shared.infrastructure.logging import get_logger, log_latency
from hostelfix.sla.domain import (
    ISLAPolicyProvider,
    SLAPolicy,
    compute_display,
    sort_newest,
    sort_by_priority,
)
from hostelfix.triage.application.services import IRecentIssueSource, TriageService
from hostelfix.triage.domain import DuplicateMatch, classify_and_route

logger = get_logger(__name__)

TransitionDecision = Callable[[Issue], Issue]

_WHITESPACE = re.compile(r"\s+")


def evidence_filename(filename: str) -> str:
    """
    Blob-safe name for a reporter's upload.

    Whitespace runs become ``_``. Names that could leave the issue's
    folder (path separators, ``..``) are refused.

    Raises:
        ValidationException: Empty name or one that is not a plain file name
    """
    name = _WHITESPACE.sub("_", (filename or "").strip())
    if not name or "/" in name or "\\" in name or ".." in name:
        raise ValidationException(
            "Attachment name must be a plain file name",
            {"field": "attachment.filename", "filename": filename}
        )
    return name


# ========== Collaborator Interfaces (Dependency Inversion) ==========

@dataclass(frozen=True)
class Attachment:
    """Raw evidence upload handed in by the reporter."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class IIssueRepository(IRecentIssueSource):
    """Interface for issue data access."""

    @abstractmethod
    async def get_by_id(self, issue_id: str) -> Optional[Issue]:
        """Get issue by ID."""

    @abstractmethod
    async def create(self, issue: Issue) -> Issue:
        """Persist a new issue with its seeded ledger."""

    @abstractmethod
    async def list(
        self,
        filters: Optional[IssueFilter] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Issue]:
        """List issues ordered by urgency score desc, created_at desc."""

    @abstractmethod
    async def list_created_since(self, since: int) -> List[Issue]:
        """Non-deleted issues created at or after ``since``, newest first."""

    @abstractmethod
    async def apply_transition(
        self,
        issue_id: str,
        decide: TransitionDecision
    ) -> Issue:
        """
        Atomically read, decide and append.

        ``decide`` receives the freshly read issue and returns its successor
        (or raises). Implementations must make the read, the decision and
        the write indivisible per issue.
        """

    @abstractmethod
    async def count_by_location(self) -> Dict[str, int]:
        """Non-deleted issue count per location, over the whole store."""

    @abstractmethod
    async def commit(self) -> None:
        """
        Make the pending writes durable.

        Raises:
            RepositoryException: The store refused the commit
        """


class IBlobStore(ABC):
    """Interface for evidence attachment storage."""

    @abstractmethod
    async def upload(self, path: str, attachment: Attachment) -> str:
        """
        Store an attachment and return its retrievable URL.

        Raises:
            AttachmentException: Upload failed
        """


class IIssuePublisher(ABC):
    """Receives a fresh, ordered issue snapshot after every change."""

    @abstractmethod
    async def publish(self, issues: List[Issue]) -> None:
        """Deliver a full snapshot to subscribers."""


# ========== Results ==========

@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submission: the stored issue plus advisory notes."""
    issue: Issue
    possible_duplicate: Optional[DuplicateMatch] = None
    attachment_error: Optional[str] = None


# ========== Application Services ==========

class IssueService:
    """
    Service for the issue lifecycle.

    Submission runs classification and routing, seeds the ledger and
    persists; administrative actions go through the status ledger inside
    the repository's atomic unit. Each use case commits before the live
    feed is told about it.
    """

    def __init__(
        self,
        repository: IIssueRepository,
        policy_provider: Optional[ISLAPolicyProvider] = None,
        blob_store: Optional[IBlobStore] = None,
        publisher: Optional[IIssuePublisher] = None,
        id_factory: Callable[[], str] = lambda: str(uuid4())
    ):
        self._repo = repository
        self._policy_provider = policy_provider
        self._blob_store = blob_store
        self._publisher = publisher
        self._id_factory = id_factory
        self._triage = TriageService(repository)

    def _policy(self) -> Optional[SLAPolicy]:
        if self._policy_provider is None:
            return None
        return self._policy_provider.get_policy()

    # ---------- Submission ----------

    async def submit(
        self,
        ctx: RequestContext,
        title: str,
        description: str = "",
        category: Optional[str] = None,
        urgency: Optional[str] = None,
        location: Optional[str] = None,
        attachment: Optional[Attachment] = None
    ) -> SubmissionResult:
        """
        Report a new issue.

        Args:
            ctx: Acting reporter and submission instant
            title: Required, non-blank
            description: Free text used by the keyword heuristic
            category: Explicit category, overrides the heuristic
            urgency: Explicit urgency, overrides the heuristic
            location: Site identifier, defaults from settings
            attachment: Optional evidence image

        Returns:
            SubmissionResult with the stored issue

        Raises:
            ValidationException: Blank title, unknown category/urgency or an
                attachment name that is not a plain file name
        """
        if not title or not title.strip():
            raise ValidationException("Please enter a title.", {"field": "title"})
        if attachment is not None:
            evidence_filename(attachment.filename)

        classification = classify_and_route(title, description, category, urgency)
        issue_id = self._id_factory()

        evidence, attachment_error = None, None
        if attachment is not None:
            evidence, attachment_error = await self._upload_evidence(ctx, issue_id, attachment)

        possible_duplicate = await self.check_duplicate(ctx.now, title)

        issue = open_issue(
            issue_id=issue_id,
            title=title,
            description=description,
            classification=classification,
            location=(location or "").strip() or settings.default_location,
            created_by=ctx.actor_id,
            now=ctx.now,
            evidence_image=evidence,
        )
        saved = await self._repo.create(issue)
        await self._repo.commit()

        logger.info(
            "Issue submitted",
            extra={
                "correlation_id": ctx.correlation_id,
                "issue_id": saved.id,
                "category": saved.category.value,
                "urgency": saved.urgency.value,
                "assigned_to": saved.assigned_to.value if saved.assigned_to else None,
                "has_evidence": saved.evidence_image is not None,
            }
        )

        await self._publish()
        return SubmissionResult(
            issue=saved,
            possible_duplicate=possible_duplicate,
            attachment_error=attachment_error,
        )

    async def _upload_evidence(
        self,
        ctx: RequestContext,
        issue_id: str,
        attachment: Attachment
    ):
        if self._blob_store is None:
            return None, "No blob store configured"

        name = evidence_filename(attachment.filename)
        path = f"issues/{ctx.actor_id}/{issue_id}/{name}"
        try:
            url = await self._blob_store.upload(path, attachment)
        except AttachmentException as e:
            logger.warning(
                "Evidence upload failed, continuing without attachment",
                extra={"correlation_id": ctx.correlation_id, "issue_id": issue_id, "error": e.message}
            )
            return None, e.message

        return EvidenceImage(url=url, path=path, name=name), None

    async def check_duplicate(
        self,
        now: int,
        title: str
    ) -> Optional[DuplicateMatch]:
        """Advisory re-report check against the recent-issue window."""
        return await self._triage.check_duplicate(now, title)

    # ---------- Ledger transitions ----------

    async def transition(
        self,
        ctx: RequestContext,
        issue_id: str,
        action: str,
        note: Optional[str] = None,
        assignee: Optional[str] = None
    ) -> Issue:
        """
        Apply one administrative action.

        Raises:
            ResourceNotFoundException: Unknown issue
            TransitionException: Ledger precondition violated
            ConcurrentTransitionException: Lost a race with another writer
        """
        policy = self._policy()

        def breached(issue: Issue, at: int) -> bool:
            return compute_display(issue, at, policy).breached

        def decide(current: Issue) -> Issue:
            return apply_transition(
                current, action, ctx.now,
                note=note, assignee=assignee, actor=ctx.actor_id, breached=breached
            )

        with log_latency(logger, "issue_transition", issue_id=issue_id, action=str(action)):
            updated = await self._repo.apply_transition(issue_id, decide)
            await self._repo.commit()

        logger.info(
            "Issue transitioned",
            extra={
                "correlation_id": ctx.correlation_id,
                "issue_id": issue_id,
                "action": str(action),
                "status": updated.status.value,
                "actor_id": ctx.actor_id,
            }
        )

        await self._publish()
        return updated

    # ---------- Queries ----------

    async def get(self, issue_id: str) -> Issue:
        """Get one issue or raise ResourceNotFoundException."""
        issue = await self._repo.get_by_id(issue_id)
        if issue is None:
            raise ResourceNotFoundException("Issue", issue_id)
        return issue

    async def list_for_reporter(
        self,
        ctx: RequestContext,
        sort: str = "newest"
    ) -> List[Issue]:
        """
        Issues reported by the acting user.

        Args:
            sort: ``newest`` (created desc) or ``priority`` (urgency desc, then newest)
        """
        if sort not in ("newest", "priority"):
            raise ValidationException(f"Unknown sort '{sort}'", {"field": "sort"})

        issues = await self._repo.list(IssueFilter(created_by=ctx.actor_id), limit=settings.feed_snapshot_limit)
        if sort == "priority":
            return sort_by_priority(issues)
        return sort_newest(issues)

    async def list_for_admin(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Issue]:
        """Every non-deleted issue, optionally narrowed by status and category."""
        try:
            filters = IssueFilter(
                status=IssueStatus(status) if status else None,
                category=Category(category) if category else None,
            )
        except ValueError as e:
            raise ValidationException(str(e), {"status": status, "category": category})

        return await self._repo.list(filters, limit=limit, offset=offset)

    async def _publish(self) -> None:
        # Only ever called after commit; a snapshot never shows rolled-back writes
        if self._publisher is None:
            return
        snapshot = await self._repo.list(IssueFilter(include_deleted=True), limit=settings.feed_snapshot_limit)
        await self._publisher.publish(snapshot)
