"""Check command for fcrepo-pep CLI.

Runs one enforcement call against the engine built from a config file,
the same way the repository would at request time.
"""

from __future__ import annotations

__all__ = ["check", "parse_resource"]

import json
import sys
from pathlib import Path

import click

from fcrepo_pep.config import load_pep_config
from fcrepo_pep.context.resource import ResourceRef
from fcrepo_pep.exceptions import (
    AuthorizationDeniedError,
    AuthorizationOperationalError,
    ConfigurationError,
    EngineUnavailableError,
)
from fcrepo_pep.pep.enforcement import PolicyEnforcementPoint

from ..styling import style_dim, style_error, style_label, style_success

EXIT_ALLOW = 0
EXIT_DENY = 1
EXIT_ERROR = 2


def parse_resource(value: str) -> ResourceRef:
    """Parse PID[@NAMESPACE] into a ResourceRef.

    The namespace is everything after the last '@', so PIDs may not contain
    '@' when a namespace is given. Without '@' the namespace is empty.
    """
    resource_id, sep, namespace = value.rpartition("@")
    if not sep:
        return ResourceRef(value, "")
    return ResourceRef(resource_id, namespace)


@click.command("check")
@click.option(
    "--config",
    "-c",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="PEP configuration file",
)
@click.option("--subject", "-s", default="", help="Subject login id (empty for anonymous)")
@click.option("--action", "-a", "action_id", required=True, help="Action id (e.g. getDatastream)")
@click.option("--api", "action_api", default="", help="Action API (e.g. API-A)")
@click.option("--context", "context_index", default="", help="Context index")
@click.option(
    "--resource",
    "-r",
    "resources",
    multiple=True,
    help="Resource as PID[@NAMESPACE]; repeat for a batch",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check(
    config_path: Path,
    subject: str,
    action_id: str,
    action_api: str,
    context_index: str,
    resources: tuple[str, ...],
    as_json: bool,
) -> None:
    """Enforce one request and print the decision.

    Exit codes:
        0: Allowed
        1: Denied
        2: Configuration error, operational error, or no engine
    """
    refs = [parse_resource(value) for value in resources] or [ResourceRef("", "")]

    try:
        config = load_pep_config(config_path)
        pep = PolicyEnforcementPoint.from_config(config)
        pep.activate()
        engine = pep.handle.acquire()
    except ConfigurationError as e:
        click.echo(style_error(f"Invalid configuration: {e}"), err=True)
        sys.exit(EXIT_ERROR)

    try:
        pep.enforce_or_raise(subject, action_id, action_api, context_index, refs)
    except AuthorizationDeniedError as e:
        if as_json:
            click.echo(json.dumps({"allowed": False, **e.to_dict()}, indent=2))
        else:
            click.echo(style_error(f"DENY ({e.reason})"))
            if e.tally is not None:
                click.echo(f"  {style_label('Tally')} {_format_tally(e.tally.as_dict())}")
        sys.exit(EXIT_DENY)
    except EngineUnavailableError as e:
        click.echo(style_error(f"Decision engine unavailable: {e}"), err=True)
        sys.exit(EXIT_ERROR)
    except AuthorizationOperationalError as e:
        click.echo(style_error(f"Enforcement failed: {e}"), err=True)
        sys.exit(EXIT_ERROR)
    finally:
        pep.deactivate()
        close = getattr(engine, "close", None)
        if close is not None:
            close()

    if as_json:
        click.echo(json.dumps({"allowed": True, "action_id": action_id, "subject_id": subject}, indent=2))
    else:
        click.echo(style_success("ALLOW"))
        click.echo(style_dim(f"  {len(refs)} resource{'s' if len(refs) != 1 else ''} checked"))
    sys.exit(EXIT_ALLOW)


def _format_tally(counts: dict[str, int]) -> str:
    return ", ".join(f"{name}={count}" for name, count in counts.items())
