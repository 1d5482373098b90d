"""Policy command group for fcrepo-pep CLI.

Provides policy table subcommands.
"""

from __future__ import annotations

__all__ = ["policy"]

import sys
from pathlib import Path

import click

from fcrepo_pep.config import load_pep_config
from fcrepo_pep.exceptions import ConfigurationError
from fcrepo_pep.pdp.factory import build_engine, load_rule_table
from fcrepo_pep.utils.file_helpers import compute_file_checksum

from ..styling import style_dim, style_error, style_label, style_success


@click.group()
def policy() -> None:
    """Policy management commands."""
    pass


@policy.command("validate")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Validate the engine described by this configuration file",
)
@click.option(
    "--rules",
    "-p",
    "rules_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Validate a standalone rule table",
)
def policy_validate(config_path: Path | None, rules_path: Path | None) -> None:
    """Validate a configuration or a rule table.

    With --config, builds the engine exactly as activation would, so a
    config that validates here will activate.

    Exit codes:
        0: Valid
        1: Invalid or not found
    """
    if (config_path is None) == (rules_path is None):
        click.echo(style_error("Specify exactly one of --config or --rules"), err=True)
        sys.exit(1)

    if rules_path is not None:
        try:
            rules = load_rule_table(rules_path)
        except ConfigurationError as e:
            click.echo(style_error(str(e)), err=True)
            sys.exit(1)
        click.echo(style_success(f"Rule table valid: {rules_path}"))
        click.echo(f"  {len(rules)} rule{'s' if len(rules) != 1 else ''} defined")
        click.echo(style_dim(f"  {compute_file_checksum(rules_path)}"))
        return

    try:
        config = load_pep_config(config_path)
        engine = build_engine(config.engine)
    except ConfigurationError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    click.echo(style_success(f"Configuration valid: {config_path}"))
    click.echo(f"  {style_label('Engine')} {engine!r}")
    click.echo(f"  {style_label('Default decision')} {config.engine.default_decision.value}")
    if config.engine.timeout_seconds is not None:
        click.echo(f"  {style_label('Timeout')} {config.engine.timeout_seconds}s")
    else:
        click.echo(style_dim("  No evaluation timeout"))
    close = getattr(engine, "close", None)
    if close is not None:
        close()
