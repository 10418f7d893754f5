"""
Reports Domain Layer
====================

Pure aggregation over issue snapshots for the admin summary.
"""

from hostelfix.reports.domain.statistics import (
    IssueStatistics,
    SummaryPromptBuilder,
    PLACEHOLDER_NARRATION,
    UNASSIGNED,
    compute_statistics,
    rank_counts,
)

__all__ = [
    "IssueStatistics",
    "SummaryPromptBuilder",
    "PLACEHOLDER_NARRATION",
    "UNASSIGNED",
    "compute_statistics",
    "rank_counts",
]
