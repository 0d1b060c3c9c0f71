"""
Capability interfaces consumed by the access checker.

The checker never talks to a concrete security framework. It depends on
three narrow capabilities, each of which can be backed by sessions, tokens,
voters or a test fake:

- IdentitySource: who is the current caller, if anyone
- PrivilegeChecker: does the current caller hold a given role
- DecisionEngine: the real access decision (e.g. a set of publication voters)

How the decision engine aggregates its voters (unanimous, affirmative,
consensus) is the engine's business.

Why ABC over Protocol?
    - ABCs document the contract in one place, with a clear base to inherit
    - Implementations get an early TypeError when a method is missing
    - The checker still only calls the methods, so duck-typed fakes work too
"""

from abc import ABC, abstractmethod
from typing import Any

from publishgate.schema import BypassRole, Identity


class IdentitySource(ABC):
    """Read-only access to the identity of the current caller."""

    @abstractmethod
    def current_identity(self) -> Identity | None:
        """
        Return the current identity.

        Returns:
            The resolved identity, or None when nobody is authenticated.
            None is not the same as an anonymous identity.
        """
        ...


class PrivilegeChecker(ABC):
    """Role check for the current caller."""

    @abstractmethod
    def is_granted(self, role: BypassRole) -> bool:
        """
        Check whether the current caller holds a role.

        Implementations must return False, not raise, for a disabled role.
        """
        ...


class DecisionEngine(ABC):
    """
    The underlying access decision.

    Subclasses must implement:
    - decide(): the grant/deny answer for an identity and attribute set
    - supports_class(): whether objects of a class can be evaluated at all
    """

    @abstractmethod
    def decide(self, identity: Identity, attributes: list[str], obj: Any = None) -> bool:
        """
        Decide whether the identity is granted the attributes on obj.

        Args:
            identity: Always a concrete identity (anonymous when nobody is logged in)
            attributes: The requested attributes, in request order
            obj: The content being checked, or None

        Returns:
            True if access is granted
        """
        ...

    @abstractmethod
    def supports_class(self, cls: type) -> bool:
        """Whether objects of the given class can be decided on."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
