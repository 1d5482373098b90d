"""Main CLI entry point for fcrepo-pep.

Defines the CLI group and registers all subcommands.

Commands:
    check   - Enforce one request against the configured engine
    policy  - Policy table management (validate)

Subcommand help:
    fcrepo-pep COMMAND -h      Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from fcrepo_pep import __version__

from .commands.check import check
from .commands.policy import policy


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Examples:
  fcrepo-pep policy validate --config pep.json
  fcrepo-pep check --config pep.json \\
    --subject fedoraAdmin --action getDatastream --api API-A \\
    --resource obj:42@demo --resource obj:43@demo

Exit codes (check):
  0   All resources permitted
  1   Denied
  2   Operational error or no engine
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """fcrepo-pep: Policy Enforcement Point for digital object repositories."""
    if version:
        click.echo(f"fcrepo-pep {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(check)
cli.add_command(policy)


def main() -> None:
    """CLI entry point."""
    cli()
