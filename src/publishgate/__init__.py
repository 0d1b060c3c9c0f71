"""
publishgate - Decide whether content may be shown.

publishgate answers "may the current identity view this content now?"
on top of any decision engine (such as a set of publication voters):
- VIEW: granted to holders of a configurable bypass role, so editors can
  preview unpublished content
- VIEW_ANONYMOUS: always decided by the engine, never bypassed
- Everything else: passed through to the engine untouched

Example usage:
    $ publishgate check VIEW --bypass-role ROLE_PREVIEW --user alice --role ROLE_PREVIEW
    $ publishgate validate-config publishgate.yaml
"""

__version__ = "0.1.0"
__author__ = "publishgate Contributors"

from publishgate.checker import AccessChecker
from publishgate.schema import (
    DEFAULT_BYPASS_ROLE,
    VIEW,
    VIEW_ANONYMOUS,
    AccessDecision,
    AnonymousIdentity,
    CheckerConfig,
    DisabledBypass,
    Identity,
    RoleBypass,
)

__all__ = [
    "__version__",
    "__author__",
    "AccessChecker",
    "AccessDecision",
    "AnonymousIdentity",
    "CheckerConfig",
    "DEFAULT_BYPASS_ROLE",
    "DisabledBypass",
    "Identity",
    "RoleBypass",
    "VIEW",
    "VIEW_ANONYMOUS",
]
