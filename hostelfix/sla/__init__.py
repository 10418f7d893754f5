"""
SLA Monitoring Module
=====================

Bounded Context for deadline tracking on reported issues.

Responsibilities:
- Compute per-status deadlines from the persisted ledger timestamps
- Derive the coarse flag (on-time, delayed, overdue) and display labels
- Order the admin board by attention
- Hot-reload the SLA policy file via watchdog
"""

__version__ = "1.0.0"
