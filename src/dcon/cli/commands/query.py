from __future__ import annotations

import sys
from typing import Annotated

import typer

from dcon.cli.commands._shared import echo_status, get_client, output_result
from dcon.core.exceptions import InputError
from dcon.core.exit_codes import ExitCode
from dcon.core.query_source import resolve_query_source


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to execute"),
    ] = None,
    sql: Annotated[
        str | None,
        typer.Option("--sql", "-s", help="Execute inline SQL query"),
    ] = None,
    database: Annotated[
        str | None,
        typer.Option("--database", "-d", help="Target database (overrides global)"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Query timeout in seconds"),
    ] = None,
) -> None:
    """Execute a SQL query from --sql, a file, or stdin."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if sql is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        text = resolve_query_source(inline=sql, file_path=file)
    except InputError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(ExitCode.INPUT_ERROR) from exc

    with get_client(ctx, database=database, timeout=timeout) as client:
        result = client.execute_query(text)

    if not result.rows:
        echo_status(
            ctx, "Query executed successfully. No rows returned.", typer.colors.GREEN
        )
        return
    output_result(ctx, result)
