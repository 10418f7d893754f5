"""
Reports Interfaces Layer
========================

Interface adapters (controllers) for the reports module.
"""

from hostelfix.reports.interfaces.controllers import reports_router

__all__ = ["reports_router"]
