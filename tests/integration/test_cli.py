"""
Integration tests for the publishgate CLI.

Tests cover:
- check: bypass, VIEW_ANONYMOUS, anonymous requests, JSON output
- validate-config: valid, invalid and missing files
- --version
"""

import json
from pathlib import Path

from typer.testing import CliRunner

from publishgate import __version__
from publishgate.cli import EXIT_CONFIG_ERROR, EXIT_DENIED, EXIT_GRANTED, app


runner = CliRunner()


def _check_json(*args: str) -> tuple[int, dict]:
    result = runner.invoke(app, ["check", *args, "--json"])
    return result.exit_code, json.loads(result.stdout)


# =============================================================================
# check
# =============================================================================


class TestCheckCommand:
    """Tests for `publishgate check`."""

    def test_bypass_grants_view(self) -> None:
        """The bypass role grants VIEW without asking the engine."""
        code, data = _check_json(
            "VIEW", "--bypass-role", "ROLE_PREVIEW", "--user", "alice", "--role", "ROLE_PREVIEW"
        )
        assert code == EXIT_GRANTED
        assert data["allowed"] is True
        assert data["rule_matched"] == "bypass_role"
        assert data["engine_called"] is False
        assert data["identity"] == {"username": "alice", "roles": ["ROLE_PREVIEW"]}

    def test_view_anonymous_asks_engine(self) -> None:
        """VIEW_ANONYMOUS is left to the engine."""
        code, data = _check_json(
            "VIEW_ANONYMOUS",
            "--bypass-role", "ROLE_PREVIEW",
            "--user", "alice",
            "--role", "ROLE_PREVIEW",
        )
        assert code == EXIT_DENIED
        assert data["allowed"] is False
        assert data["rule_matched"] == "decision_engine"
        assert data["engine_called"] is True

    def test_engine_allow(self) -> None:
        """--engine allow makes the engine grant."""
        code, data = _check_json("VIEW_ANONYMOUS", "--engine", "allow")
        assert code == EXIT_GRANTED
        assert data["allowed"] is True

    def test_no_user_is_anonymous(self) -> None:
        """Without --user there is no identity and no bypass."""
        code, data = _check_json("VIEW", "--bypass-role", "ROLE_PREVIEW")
        assert code == EXIT_DENIED
        assert data["identity"] is None
        assert data["engine_called"] is True

    def test_compound_attributes(self) -> None:
        """Several attributes are never bypassed."""
        code, data = _check_json(
            "VIEW", "EDIT", "--bypass-role", "ROLE_PREVIEW", "--user", "alice", "--role", "ROLE_PREVIEW"
        )
        assert code == EXIT_DENIED
        assert data["attributes"] == ["VIEW", "EDIT"]
        assert data["rule_matched"] == "decision_engine"

    def test_config_file_role(self, config_file: Path) -> None:
        """The bypass role can come from a config file."""
        code, data = _check_json(
            "VIEW", "--config", str(config_file), "--user", "alice", "--role", "ROLE_PREVIEW"
        )
        assert code == EXIT_GRANTED
        assert data["bypass_role"] == "ROLE_PREVIEW"

    def test_empty_bypass_role_overrides_config(self, config_file: Path) -> None:
        """--bypass-role '' disables the bypass from the config."""
        code, data = _check_json(
            "VIEW",
            "--config", str(config_file),
            "--bypass-role", "",
            "--user", "alice",
            "--role", "ROLE_PREVIEW",
        )
        assert code == EXIT_DENIED
        assert data["bypass_role"] is None

    def test_missing_config(self, tmp_path: Path) -> None:
        """A missing config file is a config error."""
        result = runner.invoke(
            app, ["check", "VIEW", "--config", str(tmp_path / "nope.yaml"), "--json"]
        )
        assert result.exit_code == EXIT_CONFIG_ERROR
        data = json.loads(result.stdout)
        assert data["error"] is True
        assert data["error_type"] == "ConfigNotFoundError"

    def test_pretty_output(self) -> None:
        """Console output shows the decision."""
        result = runner.invoke(
            app,
            ["check", "VIEW", "--bypass-role", "ROLE_PREVIEW", "--user", "alice", "--role", "ROLE_PREVIEW"],
        )
        assert result.exit_code == EXIT_GRANTED
        assert "granted" in result.stdout
        assert "bypass_role" in result.stdout

    def test_pretty_output_denied(self) -> None:
        """Console output shows a denial."""
        result = runner.invoke(app, ["check", "VIEW"])
        assert result.exit_code == EXIT_DENIED
        assert "denied" in result.stdout

    def test_role_without_user_rejected(self) -> None:
        """--role has nobody to attach to without --user."""
        result = runner.invoke(app, ["check", "VIEW", "--role", "ROLE_PREVIEW", "--json"])
        assert result.exit_code == 2
        assert "--user" in result.output
        assert '"allowed"' not in result.output


# =============================================================================
# validate-config
# =============================================================================


class TestValidateConfigCommand:
    """Tests for `publishgate validate-config`."""

    def test_valid_config(self, config_file: Path) -> None:
        """A valid config passes."""
        result = runner.invoke(app, ["validate-config", str(config_file)])
        assert result.exit_code == 0
        assert "ROLE_PREVIEW" in result.stdout

    def test_valid_config_json(self, config_file: Path) -> None:
        """JSON output includes the parsed config."""
        result = runner.invoke(app, ["validate-config", str(config_file), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["config"]["bypass_role"] == {"kind": "role", "token": "ROLE_PREVIEW"}

    def test_disabled_config(self, tmp_path: Path, disabled_config_yaml: str) -> None:
        """A disabled bypass is reported."""
        path = tmp_path / "disabled.yaml"
        path.write_text(disabled_config_yaml)
        result = runner.invoke(app, ["validate-config", str(path)])
        assert result.exit_code == 0
        assert "disabled" in result.stdout

    def test_invalid_config(self, tmp_path: Path) -> None:
        """An invalid config fails with the problems listed."""
        path = tmp_path / "bad.yaml"
        path.write_text("bypass_role: true\n")
        result = runner.invoke(app, ["validate-config", str(path), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert data["error_type"] == "ConfigValidationError"
        assert data["context"]["errors"]

    def test_missing_config(self, tmp_path: Path) -> None:
        """A missing file fails."""
        result = runner.invoke(app, ["validate-config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "not found" in result.stdout


# =============================================================================
# --version
# =============================================================================


class TestVersion:
    """Tests for --version."""

    def test_version(self) -> None:
        """--version prints the package version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_short_version_flag(self) -> None:
        """-v is the short form of --version."""
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert f"publishgate {__version__}" in result.stdout
