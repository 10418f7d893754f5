"""
Issues Infrastructure Layer
===========================

Infrastructure implementations for the issues module:
- Models: SQLAlchemy ORM models (issue row + ledger rows)
- Repositories: Data access with per-issue atomic ledger appends
- Feed: In-process live snapshot publisher
"""

from hostelfix.issues.infrastructure.models import IssueModel, StatusHistoryModel
from hostelfix.issues.infrastructure.repositories import SQLAlchemyIssueRepository, to_domain
from hostelfix.issues.infrastructure.feed import IssueFeed, Subscription, server_order

__all__ = [
    "IssueModel",
    "StatusHistoryModel",
    "SQLAlchemyIssueRepository",
    "to_domain",
    "IssueFeed",
    "Subscription",
    "server_order",
]
