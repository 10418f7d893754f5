"""
Shared Kernel Module
====================

Shared infrastructure and domain elements used across all bounded contexts
(Issues, Triage, SLA and Reports).

Architecture Pattern: Modular Monolith
- Each module (issues, triage, sla, reports) is a bounded context
- Shared kernel contains only generic infrastructure and time handling
- Domain models live within each module

DO NOT add business logic from a bounded context to the shared kernel.
"""

__version__ = "1.0.0"
