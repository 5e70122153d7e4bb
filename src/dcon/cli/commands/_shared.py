"""Shared CLI plumbing for command modules.

Client creation, output helpers, status lines and confirmation prompts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import typer

from dcon.cli.output import get_formatter, write_output
from dcon.core.client import PgClient
from dcon.core.config import load_config, resolve_config
from dcon.core.models import records_to_result
from dcon.formatters.base import RenderMode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pydantic import BaseModel

    from dcon.core.config import ResolvedConfig
    from dcon.core.models import QueryResult

_CONNECTION_KEYS = ("host", "port", "database", "user", "password", "sslmode")


def get_resolved_config(
    ctx: typer.Context,
    database: str | None = None,
    timeout: float | None = None,
) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in _CONNECTION_KEYS:
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val
    if timeout is not None:
        cli_overrides["timeout"] = timeout

    resolved = resolve_config(
        config,
        profile_name=obj.get("profile"),
        url=obj.get("url"),
        **cli_overrides,
    )
    if database is not None:
        resolved = resolved.model_copy(
            update={
                "connection": resolved.connection.with_database(database),
                "sources": {**resolved.sources, "database": "cli: subcommand --database"},
            }
        )
    obj["default_format"] = resolved.default_format
    return resolved


def get_client(
    ctx: typer.Context,
    database: str | None = None,
    timeout: float | None = None,
) -> PgClient:
    return PgClient(get_resolved_config(ctx, database=database, timeout=timeout))


def format_options(ctx: typer.Context) -> dict[str, Any]:
    obj = ctx.ensure_object(dict)
    return {
        "format_flag": obj.get("format"),
        "default": obj.get("default_format", "table"),
        "compact": obj.get("compact", False),
        "width": obj.get("width", 40),
        "no_header": obj.get("no_header", False),
        "color": not obj.get("no_color", False),
    }


def output_result(
    ctx: typer.Context, result: QueryResult, mode: RenderMode = RenderMode.ROWS
) -> None:
    formatter = get_formatter(mode=mode, **format_options(ctx))
    write_output(formatter, result)


def output_records(
    ctx: typer.Context, model: type[BaseModel], records: Sequence[BaseModel]
) -> None:
    """Render catalog records (databases, tables, columns, session facts)."""
    output_result(ctx, records_to_result(model, records), RenderMode.RECORDS)


def echo_status(ctx: typer.Context, message: str, color: str | None = None) -> None:
    """Print a one-line status message, colored unless --no-color."""
    obj = ctx.ensure_object(dict)
    if color is None or obj.get("no_color"):
        typer.echo(message)
    else:
        typer.secho(message, fg=color)


def confirm_action(ctx: typer.Context, message: str, confirmed: bool) -> bool:
    """Return True when --confirm was given or the y/N prompt is answered yes.

    Prints "Operation cancelled." when the prompt is declined.
    """
    if confirmed:
        return True
    if typer.confirm(message, default=False):
        return True
    echo_status(ctx, "Operation cancelled.", typer.colors.YELLOW)
    return False
