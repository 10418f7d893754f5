"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA evaluation:
- YAML policy provider with file-watch hot reload
"""

from hostelfix.sla.infrastructure.repositories import (
    YAMLPolicyProvider,
    StaticPolicyProvider,
    PolicyFileHandler,
    load_policy,
)

__all__ = [
    "YAMLPolicyProvider",
    "StaticPolicyProvider",
    "PolicyFileHandler",
    "load_policy",
]
