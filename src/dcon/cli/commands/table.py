"""Table commands: list, describe, create, drop."""

from __future__ import annotations

from typing import Annotated

import typer

from dcon.cli.commands._shared import (
    confirm_action,
    echo_status,
    get_client,
    output_records,
    output_result,
)
from dcon.core.models import ColumnInfo, TableInfo

table_app = typer.Typer(help="Table operations", no_args_is_help=True)

DatabaseOption = Annotated[
    str | None,
    typer.Option("--database", "-d", help="Target database (overrides global)"),
]


def parse_table_arg(table_arg: str) -> tuple[str | None, str]:
    """Split ``schema.table``; a bare name leaves the schema unset."""
    if "." in table_arg:
        schema, table = table_arg.split(".", 1)
        return schema, table
    return None, table_arg


@table_app.command("list")
def table_list(
    ctx: typer.Context,
    database: DatabaseOption = None,
    system: Annotated[
        bool,
        typer.Option("--system", help="Include system schemas"),
    ] = False,
) -> None:
    """List tables and views with row counts."""
    with get_client(ctx, database=database) as client:
        tables = client.list_tables(include_system=system)

    output_records(ctx, TableInfo, tables)


@table_app.command("describe")
def table_describe(
    ctx: typer.Context,
    table: Annotated[
        str,
        typer.Option("--table", "-t", help="Table name (schema.table or table)"),
    ],
    database: DatabaseOption = None,
) -> None:
    """Show column definitions for a table."""
    schema, table_name = parse_table_arg(table)
    with get_client(ctx, database=database) as client:
        columns = client.describe_table(table_name, schema)

    output_records(ctx, ColumnInfo, columns)


@table_app.command("create")
def table_create(
    ctx: typer.Context,
    sql: Annotated[
        str,
        typer.Option("--sql", "-s", help="CREATE TABLE statement"),
    ],
    database: DatabaseOption = None,
) -> None:
    """Create a table from a CREATE TABLE statement."""
    with get_client(ctx, database=database) as client:
        result = client.create_table(sql)

    if result.columns:
        output_result(ctx, result)
    else:
        echo_status(ctx, "Table created successfully!", typer.colors.GREEN)


@table_app.command("drop")
def table_drop(
    ctx: typer.Context,
    table: Annotated[str, typer.Option("--table", "-t", help="Table name")],
    database: DatabaseOption = None,
    confirm: Annotated[
        bool,
        typer.Option("--confirm", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Drop a table. Asks for confirmation unless --confirm is given."""
    if not confirm_action(ctx, f"Are you sure you want to drop table '{table}'?", confirm):
        return

    with get_client(ctx, database=database) as client:
        client.drop_table(table)

    echo_status(ctx, f"Table '{table}' dropped successfully!", typer.colors.GREEN)
