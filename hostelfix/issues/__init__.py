"""
Issues Module
=============

Bounded Context for the issue aggregate, from report to resolution.

Responsibilities:
- Accept issue reports (classification, routing, evidence upload)
- Enforce the status ledger on every administrative action
- Persist issues with per-issue atomic ledger appends
- Serve reporter and admin listings
- Push ordered snapshots to live-feed subscribers
"""

__version__ = "1.0.0"
