"""
Schema definitions for publishgate.

This module defines the Pydantic models shared across publishgate:
- Attribute constants: VIEW and VIEW_ANONYMOUS
- Identity/AnonymousIdentity: who is asking
- DisabledBypass/RoleBypass: the configured bypass role (tagged by ``kind``)
- AccessDecision: an explained grant/deny result
- CheckerConfig: the YAML-loadable configuration

Design Decisions:
    - Models are immutable (frozen=True) so a configured checker can be
      shared across threads
    - Unknown keys are rejected (extra="forbid") to catch typos in YAML
    - "No identity" is None, never an AnonymousIdentity; the anonymous
      placeholder only exists for the decision engine call
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from publishgate.errors import ConfigNotFoundError, ConfigValidationError


# =============================================================================
# Attributes
# =============================================================================

# The content may be shown, either because it is published or because the
# current identity is granted the bypass role.
VIEW = "VIEW"

# The content may be shown to anonymous users. The bypass role is never
# honoured for this attribute. Voters should treat it exactly like VIEW.
VIEW_ANONYMOUS = "VIEW_ANONYMOUS"

# Role name conventionally granted to editors who preview unpublished content.
DEFAULT_BYPASS_ROLE = "ROLE_CAN_VIEW_NON_PUBLISHED"

# Rule names reported in AccessDecision.rule_matched
RULE_BYPASS_ROLE = "bypass_role"
RULE_DECISION_ENGINE = "decision_engine"


# =============================================================================
# Identity Models
# =============================================================================


class Identity(BaseModel):
    """
    The principal a decision is made for.

    Attributes:
        username: Identifier of the principal
        roles: Role tokens held by the principal
        attributes: Free-form extra data for decision engines
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str = Field(..., description="Identifier of the principal")
    roles: frozenset[str] = Field(
        default_factory=frozenset,
        description="Role tokens held by the principal",
    )
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra data available to decision engines",
    )

    @property
    def is_anonymous(self) -> bool:
        """Whether this is the anonymous placeholder."""
        return False

    def has_role(self, role: str) -> bool:
        """Check whether the identity holds a role token."""
        return role in self.roles

    # attributes is a dict, so it stays out of the hash
    def __hash__(self) -> int:
        return hash((type(self), self.username, self.roles))


class AnonymousIdentity(Identity):
    """
    Placeholder identity with no credentials and no roles.

    Handed to the decision engine when nobody is logged in, so engines
    never have to deal with a missing identity.
    """

    username: str = ""
    secret: str = ""

    @property
    def is_anonymous(self) -> bool:
        return True


# =============================================================================
# Bypass Role
# =============================================================================


class DisabledBypass(BaseModel):
    """No bypass role configured: the publication check is never skipped."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["disabled"] = "disabled"

    @property
    def enabled(self) -> bool:
        return False

    def __str__(self) -> str:
        return "disabled"


class RoleBypass(BaseModel):
    """
    A role whose holders may see unpublished content through VIEW.

    Attributes:
        token: The role token, e.g. "ROLE_CAN_VIEW_NON_PUBLISHED"
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["role"] = "role"
    token: str = Field(..., min_length=1, description="Role token")

    @property
    def enabled(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.token


BypassRole = DisabledBypass | RoleBypass

BYPASS_DISABLED = DisabledBypass()


def parse_bypass_role(value: Any) -> BypassRole:
    """
    Build a bypass role from a configuration value.

    Accepted values:
        - A DisabledBypass or RoleBypass instance (returned as is)
        - None, False or "" for "no bypass"
        - A non-empty role token string
        - A mapping with an explicit ``kind`` ("disabled" or "role")

    Raises:
        ValueError: For anything else (including True, which names no role)
    """
    if isinstance(value, (DisabledBypass, RoleBypass)):
        return value
    if value is None or value is False or value == "":
        return BYPASS_DISABLED
    if isinstance(value, str):
        return RoleBypass(token=value)
    if isinstance(value, dict):
        kind = value.get("kind")
        if kind == "disabled":
            return DisabledBypass.model_validate(value)
        if kind == "role":
            return RoleBypass.model_validate(value)
        msg = f"Unknown bypass role kind: {kind!r}"
        raise ValueError(msg)

    msg = f"Bypass role must be a role name or false, got {value!r}"
    raise ValueError(msg)


# =============================================================================
# Decisions
# =============================================================================


class AccessDecision(BaseModel):
    """
    Explained result of an access check.

    Attributes:
        allowed: Whether access is granted
        reason: Human-readable explanation of the decision
        rule_matched: Which path produced the decision
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: bool = Field(..., description="Whether access is granted")
    reason: str = Field(..., description="Human-readable explanation")
    rule_matched: str | None = Field(
        default=None,
        description="Which path produced the decision",
    )

    @classmethod
    def allow(cls, reason: str, rule: str | None = None) -> "AccessDecision":
        """Create an ALLOW decision."""
        return cls(allowed=True, reason=reason, rule_matched=rule)

    @classmethod
    def deny(cls, reason: str, rule: str | None = None) -> "AccessDecision":
        """Create a DENY decision."""
        return cls(allowed=False, reason=reason, rule_matched=rule)


# =============================================================================
# Configuration
# =============================================================================


class CheckerConfig(BaseModel):
    """
    Configuration for an AccessChecker.

    Attributes:
        version: Schema version for forward compatibility
        bypass_role: Role allowed to skip the publication check on VIEW
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(default="1.0", description="Config schema version")
    bypass_role: BypassRole = Field(
        default=BYPASS_DISABLED,
        description="Role allowed to bypass the publication check on VIEW",
    )

    @field_validator("bypass_role", mode="before")
    @classmethod
    def coerce_bypass_role(cls, v: Any) -> BypassRole:
        """Accept plain role names and false/null from YAML."""
        return parse_bypass_role(v)


def load_config(path: Path | str) -> CheckerConfig:
    """
    Load a checker configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated CheckerConfig object

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigValidationError: If the YAML is malformed or doesn't match the schema
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigNotFoundError(path=str(path))

    with path.open() as f:
        content = f.read()

    return load_config_from_string(content, path=str(path))


def load_config_from_string(content: str, path: str | None = None) -> CheckerConfig:
    """Load a checker configuration from a YAML string."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigValidationError(path=path, errors=[f"Invalid YAML: {e}"]) from e

    # An empty document means "all defaults"
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            path=path,
            errors=[f"Top level must be a mapping, got {type(data).__name__}"],
        )

    try:
        return CheckerConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigValidationError(path=path, errors=errors) from e
