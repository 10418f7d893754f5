"""
Shared Infrastructure
=====================

Low-level technical concerns used by every module:
- Structured logging
"""
