"""
Triage Module
=============

Bounded Context for classifying, routing and de-duplicating new issues.

Responsibilities:
- Infer category and urgency from the issue text (keyword heuristic)
- Route the final category to the owning staff team
- Flag likely re-reports of recent issues (advisory only)
"""

__version__ = "1.0.0"
