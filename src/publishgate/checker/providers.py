"""
Ready-made collaborators for the access checker.

These cover the common cases without a surrounding security framework:

- StaticIdentitySource: a fixed identity (or nobody), handy for scripts and tests
- ContextIdentitySource: the identity of the current request, kept in a ContextVar
- IdentityPrivilegeChecker: role check against the roles carried by the identity
- StaticDecisionEngine: always answers the same way

Usage:
    identities = ContextIdentitySource()
    checker = create_checker(load_config("publishgate.yaml"), identities, engine)

    with identities.scope(Identity(username="editor", roles={"ROLE_PREVIEW"})):
        checker.is_granted(VIEW, page)
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any

from publishgate.checker.base import DecisionEngine, IdentitySource, PrivilegeChecker
from publishgate.checker.workflow import AccessChecker
from publishgate.schema import BypassRole, CheckerConfig, Identity, parse_bypass_role


# =============================================================================
# Identity Sources
# =============================================================================


class StaticIdentitySource(IdentitySource):
    """Identity source that always reports the same identity (or None)."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity

    def current_identity(self) -> Identity | None:
        return self.identity


class ContextIdentitySource(IdentitySource):
    """
    Request-scoped identity source.

    Each thread or asyncio task sees the identity set in its own context,
    so one source can be shared by every request handler.

    Attributes:
        _current: ContextVar holding the identity of the current context
    """

    def __init__(self, name: str = "publishgate_identity") -> None:
        self._current: ContextVar[Identity | None] = ContextVar(name, default=None)

    def current_identity(self) -> Identity | None:
        return self._current.get()

    def set(self, identity: Identity | None) -> Token:
        """Set the identity for the current context; returns a reset token."""
        return self._current.set(identity)

    def reset(self, token: Token) -> None:
        """Restore the identity that was current before set()."""
        self._current.reset(token)

    @contextmanager
    def scope(self, identity: Identity | None) -> Iterator[Identity | None]:
        """Make identity current for the duration of a with block."""
        token = self.set(identity)
        try:
            yield identity
        finally:
            self.reset(token)


# =============================================================================
# Privilege Checkers
# =============================================================================


class IdentityPrivilegeChecker(PrivilegeChecker):
    """
    Grants a role when the current identity carries it.

    A disabled bypass role, or no identity at all, is never granted.
    """

    def __init__(self, identity_source: IdentitySource) -> None:
        self.identity_source = identity_source

    def is_granted(self, role: BypassRole | str | bool | None) -> bool:
        role = parse_bypass_role(role)
        if not role.enabled:
            return False

        identity = self.identity_source.current_identity()
        if identity is None:
            return False
        return identity.has_role(role.token)


# =============================================================================
# Decision Engines
# =============================================================================


class StaticDecisionEngine(DecisionEngine):
    """
    Decision engine with a fixed answer.

    Useful for "what if" checks: it shows what the checker does on top of
    an engine that grants or denies.

    Attributes:
        granted: The answer returned by every decide() call
        supported_classes: Classes accepted by supports_class(), None for all
        call_count: Number of decide() calls so far, safe to read while the
            engine is shared between threads
    """

    def __init__(
        self,
        granted: bool = False,
        supported_classes: Iterable[type] | None = None,
    ) -> None:
        self.granted = granted
        self.supported_classes = (
            tuple(supported_classes) if supported_classes is not None else None
        )
        self.call_count = 0
        self._lock = threading.Lock()

    def decide(self, identity: Identity, attributes: list[str], obj: Any = None) -> bool:
        with self._lock:
            self.call_count += 1
        return self.granted

    def supports_class(self, cls: type) -> bool:
        if self.supported_classes is None:
            return True
        return issubclass(cls, self.supported_classes)

    def __repr__(self) -> str:
        return f"<StaticDecisionEngine granted={self.granted}>"


# =============================================================================
# Factory
# =============================================================================


def create_checker(
    config: CheckerConfig,
    identity_source: IdentitySource,
    decision_engine: DecisionEngine,
    privilege_checker: PrivilegeChecker | None = None,
) -> AccessChecker:
    """
    Wire an AccessChecker from a loaded configuration.

    Args:
        config: Loaded checker configuration
        identity_source: Source of the current identity
        decision_engine: Engine making the actual decision
        privilege_checker: Role checker; defaults to checking the roles
            of the identity reported by identity_source

    Returns:
        A configured AccessChecker
    """
    if privilege_checker is None:
        privilege_checker = IdentityPrivilegeChecker(identity_source)

    return AccessChecker(
        identity_source,
        privilege_checker,
        decision_engine,
        bypass_role=config.bypass_role,
    )
