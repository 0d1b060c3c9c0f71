"""
Access checker module for publishgate.

This module decides whether content may be shown to the current identity.

Key concepts:
    - AccessChecker: grants VIEW to holders of the bypass role, and asks
      the decision engine for everything else
    - VIEW_ANONYMOUS: like VIEW, but never bypassed
    - IdentitySource/PrivilegeChecker/DecisionEngine: the capabilities the
      checker is built from

The checker never hides collaborator failures: an exception from the
engine propagates, it is not turned into a denial.
"""

from publishgate.checker.base import DecisionEngine, IdentitySource, PrivilegeChecker
from publishgate.checker.providers import (
    ContextIdentitySource,
    IdentityPrivilegeChecker,
    StaticDecisionEngine,
    StaticIdentitySource,
    create_checker,
)
from publishgate.checker.workflow import AccessChecker, normalize_attributes

__all__ = [
    "AccessChecker",
    "ContextIdentitySource",
    "DecisionEngine",
    "IdentityPrivilegeChecker",
    "IdentitySource",
    "PrivilegeChecker",
    "StaticDecisionEngine",
    "StaticIdentitySource",
    "create_checker",
    "normalize_attributes",
]
