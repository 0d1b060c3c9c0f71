"""
Exception hierarchy for publishgate.

All publishgate exceptions inherit from PublishGateError, allowing callers
to catch them with a single except clause.

The access checker itself raises nothing of its own: faults from the
identity source, privilege checker or decision engine reach the caller
unchanged. A raised fault means "could not decide", which is different
from a denial. The errors here cover configuration loading only.

Exception Categories:
    - ConfigNotFoundError: Config file missing
    - ConfigValidationError: Config file malformed or invalid
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Config errors: 1xxx
ERROR_CONFIG_NOT_FOUND = 1001
ERROR_CONFIG_INVALID = 1002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class PublishGateError(Exception):
    """
    Base class for configuration and CLI failures.

    Never raised while deciding access. The CLI turns these into exit
    code 2 for `check` and 1 for `validate-config`, printing either the
    string form or to_dict() under --json.

    Attributes:
        message: What went wrong, shown after the [E<code>] prefix
        code: Number from the block of the error family (1xxx for config)
        suggestion: What the user can change, printed on its own line
        context: Details such as the offending path, kept for --json output
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        text = f"[E{self.code}] {self.message}"
        if self.suggestion:
            text += f"\nSuggestion: {self.suggestion}"
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used by the --json error output."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Config Errors
# =============================================================================


@dataclass
class ConfigError(PublishGateError):
    """
    Base class for configuration errors.

    Attributes:
        path: The config file involved, if loaded from disk
    """

    path: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Invalid configuration"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context["path"] = self.path


@dataclass
class ConfigNotFoundError(ConfigError):
    """Raised when a config file does not exist."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Config file not found: {self.path}"
        if self.code == 0:
            self.code = ERROR_CONFIG_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Check the path passed to --config"
        super().__post_init__()


@dataclass
class ConfigValidationError(ConfigError):
    """
    Raised when a config file cannot be parsed or fails validation.

    Attributes:
        errors: One message per problem found
    """

    errors: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            where = f" in {self.path}" if self.path else ""
            self.message = f"Invalid configuration{where}: {'; '.join(self.errors)}"
        if not self.suggestion:
            self.suggestion = "bypass_role must be a role name, or false to disable"
        super().__post_init__()
        self.context["errors"] = self.errors
