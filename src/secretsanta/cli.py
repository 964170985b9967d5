"""Command-line interface for SecretSanta.

This module provides the CLI commands for running and managing the
SecretSanta server, plus a ``client`` command group that talks to a
running server over HTTP.
"""

import json
from typing import Any, NoReturn

import click

from secretsanta import __version__
from secretsanta.core.config import get_settings
from secretsanta.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="SecretSanta")
def cli() -> None:
    """SecretSanta - Secret Santa gift exchange coordinator.

    Settings are read from SECRETSANTA_* environment variables or a .env file.
    """


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the SecretSanta server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if settings.is_sqlite and bind_workers > 1:
        click.echo("ERROR: SQLite does not support multiple workers.", err=True)
        raise SystemExit(1)

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting SecretSanta server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "secretsanta.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates all database tables. Use this only in development.
    In production, use migrations instead.
    """
    import asyncio

    from secretsanta.infrastructure.persistence.database import (
        get_db_manager,
        init_database,
    )

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize():
        try:
            await init_database(create_tables=True)
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command()
def info() -> None:
    """Display SecretSanta configuration."""
    settings = get_settings()

    click.echo(f"""
SecretSanta v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}
  Actor Header: {settings.actor_header}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


@cli.group()
@click.option(
    "--url",
    type=str,
    default=None,
    envvar="SECRETSANTA_API_URL",
    help="Server URL (defaults to SECRETSANTA_API_URL)",
)
@click.option(
    "-u",
    "--username",
    type=str,
    default=None,
    envvar="SECRETSANTA_USERNAME",
    help="Acting username",
)
@click.pass_context
def client(ctx: click.Context, url: str | None, username: str | None) -> None:
    """Talk to a running SecretSanta server."""
    from secretsanta.client import SantaClient

    ctx.obj = SantaClient(base_url=url, username=username)


def _run(ctx: click.Context, call, *args: Any, needs_user: bool = True) -> None:
    """Invoke a client method and print its JSON result."""
    from secretsanta.client import ClientError

    santa = ctx.obj
    if needs_user and not santa.username:
        raise click.UsageError("--username is required for this command")

    try:
        result = call(*args)
    except ClientError as e:
        if e.status_code is None:
            click.echo(f"Error: {e.detail}", err=True)
        else:
            click.echo(f"Error ({e.status_code}): {e.detail}", err=True)
        raise SystemExit(1)

    if result is not None:
        click.echo(json.dumps(result, indent=2))


@client.command()
@click.argument("name", required=False)
@click.pass_context
def register(ctx: click.Context, name: str | None) -> None:
    """Register a user (defaults to --username)."""
    name = name or ctx.obj.username
    if not name:
        raise click.UsageError("Provide NAME or --username")
    _run(ctx, ctx.obj.register, name, needs_user=False)


@client.command()
@click.pass_context
def groups(ctx: click.Context) -> None:
    """List open groups."""
    _run(ctx, ctx.obj.list_groups, needs_user=False)


@client.command("create-group")
@click.argument("group_name")
@click.pass_context
def create_group(ctx: click.Context, group_name: str) -> None:
    """Create a group and become its admin."""
    _run(ctx, ctx.obj.create_group, group_name)


@client.command()
@click.argument("group_name")
@click.pass_context
def join(ctx: click.Context, group_name: str) -> None:
    """Join an open group."""
    _run(ctx, ctx.obj.join_group, group_name)


@client.command()
@click.argument("group_name")
@click.pass_context
def members(ctx: click.Context, group_name: str) -> None:
    """List the members of a group (admins only)."""
    _run(ctx, ctx.obj.list_members, group_name)


@client.command("delete-group")
@click.argument("group_name")
@click.pass_context
def delete_group(ctx: click.Context, group_name: str) -> None:
    """Delete a group (admins only)."""
    _run(ctx, ctx.obj.delete_group, group_name)
    click.echo(f"Group '{group_name}' deleted.")


@client.command()
@click.argument("group_name")
@click.pass_context
def recipient(ctx: click.Context, group_name: str) -> None:
    """Show who you give a present to in a closed group."""
    _run(ctx, ctx.obj.get_recipient, group_name)


@client.command("add-admin")
@click.argument("group_name")
@click.argument("new_admin")
@click.pass_context
def add_admin(ctx: click.Context, group_name: str, new_admin: str) -> None:
    """Make another member an admin (admins only)."""
    _run(ctx, ctx.obj.add_admin, group_name, new_admin)


@client.command()
@click.argument("group_name")
@click.pass_context
def start(ctx: click.Context, group_name: str) -> None:
    """Close a group and draw the santas (admins only)."""
    _run(ctx, ctx.obj.close_group, group_name)


@client.command("revoke-admin")
@click.argument("group_name")
@click.pass_context
def revoke_admin(ctx: click.Context, group_name: str) -> None:
    """Give up your own admin rights."""
    _run(ctx, ctx.obj.revoke_admin, group_name)


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `secretsanta` command is run
    or when using `python -m secretsanta`.
    """
    cli()


if __name__ == "__main__":
    main()
