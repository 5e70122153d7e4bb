"""Generic CRUD commands against arbitrary tables."""

from __future__ import annotations

import json
from typing import Annotated, Any

import typer

from dcon.cli.commands._shared import (
    confirm_action,
    echo_status,
    get_client,
    output_result,
)
from dcon.core.exceptions import SerializationError
from dcon.formatters.base import RenderMode

crud_app = typer.Typer(help="CRUD operations", no_args_is_help=True)

TableOption = Annotated[str, typer.Option("--table", "-t", help="Table name")]
DatabaseOption = Annotated[
    str | None,
    typer.Option("--database", "-d", help="Target database (overrides global)"),
]
ConfirmOption = Annotated[
    bool,
    typer.Option("--confirm", help="Skip confirmation prompt"),
]


def parse_json_data(data: str) -> Any:
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON data: {e}") from e


@crud_app.command("create")
def crud_create(
    ctx: typer.Context,
    table: TableOption,
    data: Annotated[
        str,
        typer.Option("--data", help='JSON object to insert, e.g. \'{"name": "a"}\''),
    ],
    database: DatabaseOption = None,
) -> None:
    """Insert one row built from a JSON object."""
    payload = parse_json_data(data)
    with get_client(ctx, database=database) as client:
        affected = client.insert_data(table, payload)

    echo_status(
        ctx, f"Inserted {affected} row(s) into table '{table}'", typer.colors.GREEN
    )


@crud_app.command("read")
def crud_read(
    ctx: typer.Context,
    table: TableOption,
    filter: Annotated[
        str | None,
        typer.Option("--filter", "-w", help="WHERE clause (spliced verbatim)"),
    ] = None,
    columns: Annotated[
        str | None,
        typer.Option("--columns", "-c", help="Comma-separated column list"),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", help="Maximum number of rows"),
    ] = None,
    offset: Annotated[
        int | None,
        typer.Option("--offset", help="Rows to skip"),
    ] = None,
    order: Annotated[
        str | None,
        typer.Option("--order", "-o", help="ORDER BY clause (spliced verbatim)"),
    ] = None,
    database: DatabaseOption = None,
) -> None:
    """Select rows from a table."""
    with get_client(ctx, database=database) as client:
        result = client.select_data(table, columns, filter, order, limit, offset)

    if not result.rows:
        echo_status(ctx, "No data found.", typer.colors.YELLOW)
        return
    output_result(ctx, result, RenderMode.CRUD)


@crud_app.command("update")
def crud_update(
    ctx: typer.Context,
    table: TableOption,
    data: Annotated[str, typer.Option("--data", help="JSON object with new values")],
    filter: Annotated[
        str,
        typer.Option("--filter", "-w", help="WHERE clause (required)"),
    ],
    database: DatabaseOption = None,
    confirm: ConfirmOption = False,
) -> None:
    """Update rows matching a WHERE clause."""
    payload = parse_json_data(data)
    if not confirm_action(ctx, f"Update table '{table}' WHERE {filter}?", confirm):
        return

    with get_client(ctx, database=database) as client:
        affected = client.update_data(table, payload, filter)

    echo_status(
        ctx, f"Updated {affected} row(s) in table '{table}'", typer.colors.GREEN
    )


@crud_app.command("delete")
def crud_delete(
    ctx: typer.Context,
    table: TableOption,
    filter: Annotated[
        str,
        typer.Option("--filter", "-w", help="WHERE clause (required)"),
    ],
    database: DatabaseOption = None,
    confirm: ConfirmOption = False,
) -> None:
    """Delete rows matching a WHERE clause."""
    if not confirm_action(ctx, f"Delete from table '{table}' WHERE {filter}?", confirm):
        return

    with get_client(ctx, database=database) as client:
        affected = client.delete_data(table, filter)

    echo_status(
        ctx, f"Deleted {affected} row(s) from table '{table}'", typer.colors.GREEN
    )
