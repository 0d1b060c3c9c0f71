"""
CLI entry point for publishgate.

This module provides the Typer-based command-line interface for publishgate.

Commands:
    check            Show what the access checker decides for a request
    validate-config  Validate a checker configuration file

Architecture Note:
    The CLI is intentionally thin - it builds collaborators from the
    options and delegates to AccessChecker. The `check` command uses a
    fixed-answer decision engine, so it shows what the checker adds on top
    of an engine that grants or denies.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from publishgate import __version__
from publishgate.checker import (
    StaticDecisionEngine,
    StaticIdentitySource,
    create_checker,
)
from publishgate.errors import PublishGateError
from publishgate.schema import CheckerConfig, Identity, load_config

# Initialize Typer app with metadata
app = typer.Typer(
    name="publishgate",
    help="Decide whether content may be shown to the current identity.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()

# Exit codes for `check`
EXIT_GRANTED = 0
EXIT_DENIED = 1
EXIT_CONFIG_ERROR = 2


class EngineAnswer(str, Enum):
    """Fixed answer of the decision engine used by `check`."""

    ALLOW = "allow"
    DENY = "deny"


def version_callback(value: bool) -> None:
    if not value:
        return
    console.print(f"publishgate {__version__}")
    raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Print the publishgate version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Preview access for unpublished content.

    `check` evaluates one request against a fixed-answer engine;
    `validate-config` loads a config file and reports its bypass role.
    """


@app.command()
def check(
    attributes: Annotated[
        list[str],
        typer.Argument(help="Attributes to check, e.g. VIEW or VIEW_ANONYMOUS."),
    ],
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to the checker config YAML file.",
            resolve_path=True,
        ),
    ] = None,
    bypass_role: Annotated[
        Optional[str],
        typer.Option(
            "--bypass-role",
            help='Bypass role to use (overrides the config file, "" disables).',
        ),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option(
            "--user",
            "-u",
            help="Username of the current identity. Omit for no identity.",
        ),
    ] = None,
    roles: Annotated[
        Optional[list[str]],
        typer.Option(
            "--role",
            "-r",
            help="Role held by the current identity (repeatable, needs --user).",
        ),
    ] = None,
    engine: Annotated[
        EngineAnswer,
        typer.Option(
            "--engine",
            help="What the decision engine answers when asked.",
            case_sensitive=False,
        ),
    ] = EngineAnswer.DENY,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """
    Show what the access checker decides for a request.

    The decision engine is replaced by one that always answers --engine,
    so the output shows whether the bypass role kicked in.

    Example:
        $ publishgate check VIEW --bypass-role ROLE_PREVIEW --user alice --role ROLE_PREVIEW
    """
    if roles and user is None:
        raise typer.BadParameter("--role needs --user", param_hint="--role")

    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        config = load_config(config_path) if config_path else CheckerConfig()
        if bypass_role is not None:
            config = CheckerConfig(version=config.version, bypass_role=bypass_role)
    except PublishGateError as e:
        _output_error(e, json_output)
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    identity = None
    if user is not None:
        identity = Identity(username=user, roles=frozenset(roles or []))

    identities = StaticIdentitySource(identity)
    decision_engine = StaticDecisionEngine(granted=engine == EngineAnswer.ALLOW)
    checker = create_checker(config, identities, decision_engine)

    decision = checker.explain(attributes)

    if json_output:
        output = {
            "allowed": decision.allowed,
            "reason": decision.reason,
            "rule_matched": decision.rule_matched,
            "attributes": attributes,
            "identity": (
                {"username": identity.username, "roles": sorted(identity.roles)}
                if identity
                else None
            ),
            "bypass_role": str(config.bypass_role) if config.bypass_role.enabled else None,
            "engine_called": decision_engine.call_count > 0,
        }
        print(json.dumps(output, indent=2))
    else:
        _display_decision(decision, attributes, identity, config, decision_engine)

    raise typer.Exit(code=EXIT_GRANTED if decision.allowed else EXIT_DENIED)


def _display_decision(decision, attributes, identity, config, decision_engine) -> None:
    """Display a decision in a formatted way."""
    if decision.allowed:
        console.print("[green]✓[/green] Access [green]granted[/green]")
    else:
        console.print("[red]✗[/red] Access [red]denied[/red]")
    console.print()

    table = Table(show_header=False)
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("Attributes", ", ".join(attributes))
    if identity is None:
        table.add_row("Identity", "[dim]none (anonymous)[/dim]")
    else:
        roles = ", ".join(sorted(identity.roles)) or "-"
        table.add_row("Identity", f"[cyan]{identity.username}[/cyan] ({roles})")
    table.add_row("Bypass role", str(config.bypass_role))
    table.add_row("Rule", decision.rule_matched or "-")
    table.add_row("Reason", decision.reason)
    table.add_row("Engine called", "yes" if decision_engine.call_count else "no")

    console.print(table)


def _output_error(error: PublishGateError, json_output: bool) -> None:
    """Report a publishgate error on the console or as JSON."""
    if json_output:
        output = {"error": True, **error.to_dict()}
        print(json.dumps(output, indent=2))
    else:
        console.print(f"[red]Error: {error.message}[/red]")
        if error.suggestion:
            console.print(f"[dim]Suggestion: {error.suggestion}[/dim]")


@app.command("validate-config")
def validate_config(
    config_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the checker config YAML file.",
            resolve_path=True,
        ),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
) -> None:
    """Validate a checker configuration file."""
    try:
        config = load_config(config_path)
    except PublishGateError as e:
        if json_output:
            output = {"valid": False, **e.to_dict()}
            print(json.dumps(output, indent=2))
        else:
            _output_error(e, json_output=False)
        raise typer.Exit(code=1)

    if json_output:
        output = {
            "valid": True,
            "config_path": str(config_path),
            "config": config.model_dump(mode="json"),
        }
        print(json.dumps(output, indent=2))
    else:
        if config.bypass_role.enabled:
            detail = f"bypass role [cyan]{config.bypass_role}[/cyan]"
        else:
            detail = "bypass [yellow]disabled[/yellow]"
        console.print(f"[green]✓[/green] Config {config_path.name} is valid: {detail}")

    raise typer.Exit(code=0)
