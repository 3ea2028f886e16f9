"""Main CLI entry point for acp-identity.

Defines the CLI group and registers all subcommands.

Commands:
    check   - Run discovery for every configured backend
    groups  - Resolve a user's groups from an access token
    revoke  - Revoke an access token

Usage:
    acp-identity -h, --help                      Show help message
    acp-identity -v, --version                   Show version
    acp-identity check                           Verify configured backends
    acp-identity groups -p gitlab -t TOKEN       Print group IDs
    acp-identity revoke -p gitlab -t TOKEN       Revoke the token

Subcommand help:
    acp-identity COMMAND -h      Show help for a specific command
"""

import sys
from pathlib import Path

import click

from acp_identity import __version__

from .commands.providers import check, groups, revoke


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file path (default: OS config directory)",
)
@click.pass_context
def cli(ctx: click.Context, version: bool, config_path: Path | None) -> None:
    """acp-identity: identity-provider backends for access control."""
    if version:
        click.echo(f"acp-identity {__version__}")
        sys.exit(0)
    ctx.obj = {"config_path": config_path}
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(check)
cli.add_command(groups)
cli.add_command(revoke)


def main() -> None:
    """CLI entry point."""
    cli()
