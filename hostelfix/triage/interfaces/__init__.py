"""
Triage Interfaces Layer
========================

Interface adapters (controllers) for issue triage module.

Contains:
- Controllers: FastAPI route handlers
"""

from hostelfix.triage.interfaces.controllers import triage_router

__all__ = ["triage_router"]
