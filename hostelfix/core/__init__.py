"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from hostelfix.core.context import RequestContext
from hostelfix.core.exceptions import (
    ApplicationException,
    DomainException,
    RepositoryException,
    ValidationException,
    ResourceNotFoundException,
    ConfigurationException,
    TransitionException,
    ConcurrentTransitionException,
    ExternalServiceException,
    LLMException,
    AttachmentException,
    SummaryNarrationException,
)

__all__ = [
    "RequestContext",
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "ValidationException",
    "ResourceNotFoundException",
    "ConfigurationException",
    "TransitionException",
    "ConcurrentTransitionException",
    "ExternalServiceException",
    "LLMException",
    "AttachmentException",
    "SummaryNarrationException",
]
