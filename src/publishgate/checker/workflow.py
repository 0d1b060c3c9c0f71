"""
Publish workflow access checker.

The AccessChecker decides whether content may be shown. It sits in front
of a decision engine (typically a set of publication voters) and adds a
single rule of its own:

    If exactly the VIEW attribute is requested and the current identity
    holds the configured bypass role, access is granted without asking
    the engine. This lets editors preview unpublished content through the
    normal "can I view this" path.

VIEW_ANONYMOUS, and any attribute set with more than one element, always
goes to the engine, so callers can opt out of the bypass explicitly.

How it works:
    1. Normalize attributes (anything but a list, tuple or set becomes a
       one-element list)
    2. Check the bypass rule; grant immediately on a match
    3. Otherwise ask the engine, with an AnonymousIdentity if nobody is
       logged in

The checker keeps no per-request state and catches nothing: faults from
the collaborators reach the caller unchanged. A raised fault means the
decision could not be made and must not be read as a denial.
"""

import logging
from typing import Any

from publishgate.checker.base import DecisionEngine, IdentitySource, PrivilegeChecker
from publishgate.schema import (
    BYPASS_DISABLED,
    RULE_BYPASS_ROLE,
    RULE_DECISION_ENGINE,
    VIEW,
    AccessDecision,
    AnonymousIdentity,
    BypassRole,
    Identity,
    parse_bypass_role,
)


logger = logging.getLogger(__name__)


def normalize_attributes(attributes: Any) -> list[Any]:
    """
    Turn a single attribute or a collection of attributes into a list.

    Only lists, tuples and sets count as collections. Anything else,
    including str, bytes and enum members, is one attribute.
    """
    if isinstance(attributes, (list, tuple, set, frozenset)):
        return list(attributes)
    return [attributes]


class AccessChecker:
    """
    Decides if content may be shown to the current identity.

    Usage:
        checker = AccessChecker(identities, privileges, engine, "ROLE_PREVIEW")
        if checker.is_granted(VIEW, page):
            # render the page

    Attributes:
        bypass_role: Role allowed to skip the publication check on VIEW
    """

    def __init__(
        self,
        identity_source: IdentitySource,
        privilege_checker: PrivilegeChecker,
        decision_engine: DecisionEngine,
        bypass_role: BypassRole | str | bool | None = BYPASS_DISABLED,
    ) -> None:
        """
        Initialize the checker.

        Args:
            identity_source: Provides the current identity, if any
            privilege_checker: Checks the current identity for the bypass role
            decision_engine: Makes the actual access decision
            bypass_role: Role allowed to bypass the publication check when
                VIEW is requested. A role token, a BypassRole, or
                None/False to never bypass. Ignored for VIEW_ANONYMOUS.
        """
        self._identity_source = identity_source
        self._privilege_checker = privilege_checker
        self._decision_engine = decision_engine
        self._bypass_role = parse_bypass_role(bypass_role)

    @property
    def bypass_role(self) -> BypassRole:
        return self._bypass_role

    def supports_class(self, cls: type) -> bool:
        """Whether the decision engine can evaluate objects of this class."""
        return self._decision_engine.supports_class(cls)

    def is_granted(self, attributes: Any, obj: Any = None) -> bool:
        """
        Check if the current identity may access obj for the attributes.

        Args:
            attributes: A single attribute or an ordered collection of them
            obj: The content being checked (forwarded, never inspected)

        Returns:
            True on a bypass match, otherwise the engine's answer as is
        """
        attributes = normalize_attributes(attributes)
        identity = self._identity_source.current_identity()

        if self._bypass_applies(attributes, identity):
            return True

        return self._decide(identity, attributes, obj)

    def explain(self, attributes: Any, obj: Any = None) -> AccessDecision:
        """
        Same as is_granted(), but report which rule produced the answer.

        Returns:
            AccessDecision with the rule that decided ("bypass_role" or
            "decision_engine") and a readable reason
        """
        attributes = normalize_attributes(attributes)
        identity = self._identity_source.current_identity()

        if self._bypass_applies(attributes, identity):
            return AccessDecision.allow(
                f"{getattr(identity, 'username', '') or 'Identity'} holds bypass role {self._bypass_role}",
                rule=RULE_BYPASS_ROLE,
            )

        if self._decide(identity, attributes, obj):
            return AccessDecision.allow(
                f"Decision engine granted {', '.join(map(str, attributes))}",
                rule=RULE_DECISION_ENGINE,
            )
        return AccessDecision.deny(
            f"Decision engine denied {', '.join(map(str, attributes))}",
            rule=RULE_DECISION_ENGINE,
        )

    def _bypass_applies(self, attributes: list[str], identity: Identity | None) -> bool:
        """
        Check the bypass rule.

        All four must hold: exactly one attribute, that attribute is VIEW,
        there is a real identity, and it holds the bypass role.
        """
        if len(attributes) != 1 or attributes[0] != VIEW:
            return False
        if identity is None:
            return False
        # A disabled role never grants, so there is nothing to ask
        if not self._bypass_role.enabled:
            return False

        if self._privilege_checker.is_granted(self._bypass_role):
            logger.debug(
                "Granting %s to %r through bypass role %s",
                VIEW,
                getattr(identity, "username", identity),
                self._bypass_role,
            )
            return True
        return False

    def _decide(self, identity: Identity | None, attributes: list[str], obj: Any) -> bool:
        """Ask the decision engine, substituting an anonymous identity."""
        anonymous = identity is None
        if anonymous:
            identity = AnonymousIdentity()

        granted = self._decision_engine.decide(identity, attributes, obj)
        logger.debug(
            "Decision engine answered %r for %s (anonymous=%s)",
            granted,
            attributes,
            anonymous,
        )
        return granted

    def __repr__(self) -> str:
        return f"<AccessChecker bypass_role={self._bypass_role}>"
