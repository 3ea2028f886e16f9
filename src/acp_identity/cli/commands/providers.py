"""Identity backend commands for acp-identity CLI.

Commands:
    check  - Construct every configured backend (runs OIDC discovery)
    groups - Resolve group IDs for an access token
    revoke - Revoke an access token
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from acp_identity.config import AppConfig, get_config_path
from acp_identity.exceptions import IdentityError
from acp_identity.idp.registry import build_backends, create_identity_backend
from acp_identity.sessions import OAuthToken, SessionState
from acp_identity.telemetry.system_logger import configure_system_logger
from acp_identity.utils.http_client import HTTPClient


def _load_config(ctx: click.Context) -> AppConfig:
    """Load configuration from --config or the default path.

    Raises:
        click.ClickException: If config not found or invalid.
    """
    config_path: Path = (ctx.obj or {}).get("config_path") or get_config_path()

    if not config_path.exists():
        raise click.ClickException(f"Configuration not found at {config_path}")

    try:
        config = AppConfig.load_from_files(config_path)
    except ValueError as e:
        raise click.ClickException(f"Failed to load configuration: {e}") from e

    configure_system_logger(config.logging)
    return config


def _http_client(config: AppConfig) -> HTTPClient:
    return HTTPClient(timeout=config.http.timeout)


def _provider_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--provider",
        "-p",
        "provider_name",
        required=True,
        help="Configured backend name",
    )(func)


def _token_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--access-token",
        "-t",
        required=True,
        envvar="ACP_IDENTITY_ACCESS_TOKEN",
        help="OAuth access token (or ACP_IDENTITY_ACCESS_TOKEN)",
    )(func)


@click.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Run discovery for every configured backend and show its endpoints."""
    config = _load_config(ctx)

    if not config.providers:
        raise click.ClickException("No identity providers configured.")

    async def _run() -> None:
        async with _http_client(config) as http_client:
            backends = await build_backends(config, http_client)

        for name, backend in backends.items():
            core = backend.core
            click.echo(click.style(name, fg="cyan", bold=True))
            click.echo(f"  Provider URL:   {core.provider_url}")
            click.echo(f"  Authorization:  {core.metadata.authorization_endpoint}")
            click.echo(f"  Token:          {core.metadata.token_endpoint}")
            click.echo(f"  Scopes:         {' '.join(core.scopes)}")

    try:
        asyncio.run(_run())
    except (IdentityError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(click.style("All identity providers OK", fg="green"))


@click.command()
@_provider_option
@_token_option
@click.pass_context
def groups(ctx: click.Context, provider_name: str, access_token: str) -> None:
    """Print the group IDs of the user owning ACCESS_TOKEN, one per line."""
    config = _load_config(ctx)

    try:
        provider_config = config.get_provider(provider_name)
    except KeyError:
        raise click.ClickException(f"Unknown identity provider: {provider_name}") from None

    async def _run() -> list[str]:
        async with _http_client(config) as http_client:
            backend = await create_identity_backend(provider_config, http_client)
            session = SessionState(access_token=OAuthToken(access_token=access_token))
            return await backend.resolve_groups(session)

    try:
        group_ids = asyncio.run(_run())
    except IdentityError as e:
        raise click.ClickException(str(e)) from e

    for group_id in group_ids:
        click.echo(group_id)


@click.command()
@_provider_option
@_token_option
@click.pass_context
def revoke(ctx: click.Context, provider_name: str, access_token: str) -> None:
    """Revoke ACCESS_TOKEN at the provider."""
    config = _load_config(ctx)

    try:
        provider_config = config.get_provider(provider_name)
    except KeyError:
        raise click.ClickException(f"Unknown identity provider: {provider_name}") from None

    async def _run() -> None:
        async with _http_client(config) as http_client:
            backend = await create_identity_backend(provider_config, http_client)
            await backend.revoke(OAuthToken(access_token=access_token))

    try:
        asyncio.run(_run())
    except IdentityError as e:
        raise click.ClickException(str(e)) from e

    click.echo("Token revoked.")
