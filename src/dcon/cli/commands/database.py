"""Database management commands: list, create, drop, info."""

from __future__ import annotations

from typing import Annotated

import typer

from dcon.cli.commands._shared import (
    confirm_action,
    echo_status,
    get_client,
    output_records,
)
from dcon.core.models import DatabaseInfo

database_app = typer.Typer(help="Database operations", no_args_is_help=True)


@database_app.command("list")
def database_list(ctx: typer.Context) -> None:
    """List all databases that accept connections."""
    with get_client(ctx) as client:
        databases = client.list_databases()

    output_records(ctx, DatabaseInfo, databases)


@database_app.command("create")
def database_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", "-n", help="Database name")],
    owner: Annotated[
        str | None,
        typer.Option("--owner", "-o", help="Database owner"),
    ] = None,
    encoding: Annotated[
        str,
        typer.Option("--encoding", "-e", help="Database encoding"),
    ] = "UTF8",
) -> None:
    """Create a new database."""
    with get_client(ctx) as client:
        client.create_database(name, owner, encoding)

    echo_status(ctx, f"Database '{name}' created successfully!", typer.colors.GREEN)


@database_app.command("drop")
def database_drop(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", "-n", help="Database name")],
    confirm: Annotated[
        bool,
        typer.Option("--confirm", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Drop a database. Asks for confirmation unless --confirm is given."""
    if not confirm_action(
        ctx, f"Are you sure you want to drop database '{name}'?", confirm
    ):
        return

    with get_client(ctx) as client:
        client.drop_database(name)

    echo_status(ctx, f"Database '{name}' dropped successfully!", typer.colors.GREEN)


@database_app.command("info")
def database_info(
    ctx: typer.Context,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Database name (default: current)"),
    ] = None,
) -> None:
    """Show information about one database."""
    with get_client(ctx) as client:
        info = client.get_database_info(name)

    output_records(ctx, DatabaseInfo, [info])
