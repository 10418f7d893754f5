"""
Reports Module
==============

Bounded Context for administrator reporting.

Responsibilities:
- Aggregate weekly issue statistics (category, urgency, hostel, assignee)
- Narrate them through the LLM, degrading to statistics only on failure
- Per-hostel issue distribution
"""

__version__ = "1.0.0"
