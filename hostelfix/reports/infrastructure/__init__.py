"""
Reports Infrastructure Layer
============================

- Narrator: LLM-backed weekly summary narration
"""

from hostelfix.reports.infrastructure.narrator import LLMNarrator

__all__ = ["LLMNarrator"]
