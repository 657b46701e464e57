"""Main CLI entry point for orgauthz.

Defines the CLI group and registers all subcommands.

Commands:
    policy    - Policy file tooling (validate, show, evaluate, permissions)

Subcommand help:
    orgauthz COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from orgauthz import __version__
from orgauthz.config import LoggingConfig
from orgauthz.utils.logging.logger_setup import configure_logging

from .commands.policy import policy


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="WARNING",
    show_default=True,
    help="Level for diagnostic output on stderr",
)
@click.pass_context
def cli(ctx: click.Context, version: bool, log_level: str) -> None:
    """orgauthz: organization-scoped ABAC policy engine."""
    if version:
        click.echo(f"orgauthz {__version__}")
        sys.exit(0)
    configure_logging(LoggingConfig(log_level=log_level))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(policy)


def main() -> None:
    """CLI entry point."""
    cli()
