"""
Pytest configuration and fixtures for publishgate tests.

This module provides shared fixtures and recording fakes for the
checker's collaborators, used across unit and integration tests.
"""

from pathlib import Path
from typing import Any

import pytest

from publishgate.schema import Identity


class RecordingEngine:
    """Decision engine fake that records every call."""

    def __init__(self, granted: bool = False, error: Exception | None = None) -> None:
        self.granted = granted
        self.error = error
        self.calls: list[tuple[Any, list[str], Any]] = []
        self.class_queries: list[type] = []

    def decide(self, identity: Any, attributes: list[str], obj: Any = None) -> bool:
        self.calls.append((identity, attributes, obj))
        if self.error is not None:
            raise self.error
        return self.granted

    def supports_class(self, cls: type) -> bool:
        self.class_queries.append(cls)
        return cls is not int


class RecordingPrivilegeChecker:
    """Privilege checker fake granting a fixed set of role tokens."""

    def __init__(self, granted_roles: set[str] | None = None) -> None:
        self.granted_roles = granted_roles or set()
        self.queries: list[Any] = []

    def is_granted(self, role: Any) -> bool:
        self.queries.append(role)
        if not role.enabled:
            return False
        return role.token in self.granted_roles


class FixedIdentitySource:
    """Identity source fake with a call counter."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity
        self.calls = 0

    def current_identity(self) -> Identity | None:
        self.calls += 1
        return self.identity


@pytest.fixture
def editor() -> Identity:
    """An identity holding the preview role."""
    return Identity(username="editor", roles=frozenset({"ROLE_PREVIEW", "ROLE_USER"}))


@pytest.fixture
def visitor() -> Identity:
    """An identity without any privileged role."""
    return Identity(username="visitor", roles=frozenset({"ROLE_USER"}))


@pytest.fixture
def engine() -> RecordingEngine:
    """A denying decision engine that records calls."""
    return RecordingEngine(granted=False)


@pytest.fixture
def make_engine():
    """Factory for recording engines with a given answer or error."""
    return RecordingEngine


@pytest.fixture
def make_privileges():
    """Factory for privilege checkers granting given roles."""
    return RecordingPrivilegeChecker


@pytest.fixture
def make_identities():
    """Factory for fixed identity sources."""
    return FixedIdentitySource


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a config YAML enabling the preview bypass."""
    return """
version: "1.0"
bypass_role: ROLE_PREVIEW
"""


@pytest.fixture
def disabled_config_yaml() -> str:
    """Return a config YAML with the bypass disabled."""
    return """
version: "1.0"
bypass_role: false
"""


@pytest.fixture
def config_file(tmp_path: Path, sample_config_yaml: str) -> Path:
    """Write the sample config to a temporary file."""
    path = tmp_path / "publishgate.yaml"
    path.write_text(sample_config_yaml)
    return path
