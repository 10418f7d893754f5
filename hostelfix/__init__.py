"""
HostelFix
=========

Triage-and-SLA engine for hostel facility issues, served as a FastAPI
modular monolith.
"""

__version__ = "1.0.0"
