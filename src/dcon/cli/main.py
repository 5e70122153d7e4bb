"""dcon main entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from dcon.__about__ import __version__
from dcon.cli.commands.config import config_app
from dcon.cli.commands.connect import connect_command
from dcon.cli.commands.crud import crud_app
from dcon.cli.commands.database import database_app
from dcon.cli.commands.interactive import interactive_command
from dcon.cli.commands.query import query_command
from dcon.cli.commands.table import table_app
from dcon.cli.output import OutputFormat  # noqa: TC001
from dcon.core.exceptions import DconError, UnknownError
from dcon.core.logging import setup_logging
from dcon.core.monitoring import setup_sentry

app = typer.Typer(
    help="dcon - PostgreSQL CLI tool for database operations",
    no_args_is_help=True,
)

app.command("connect")(connect_command)
app.add_typer(database_app, name="database")
app.add_typer(table_app, name="table")
app.add_typer(crud_app, name="crud")
app.command("query")(query_command)
app.command("interactive")(interactive_command)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dcon {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="PostgreSQL host"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-P", help="PostgreSQL port"),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-u", help="User name"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", help="Password"),
    ] = None,
    prompt_password: Annotated[
        bool,
        typer.Option("--prompt-password", help="Prompt for the password"),
    ] = False,
    database: Annotated[
        str | None,
        typer.Option("--database", "-d", help="Database name"),
    ] = None,
    url: Annotated[
        str | None,
        typer.Option("--url", help="Connection URL (postgresql://...)"),
    ] = None,
    profile: Annotated[
        str | None,
        typer.Option("--profile", help="Named connection profile"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json|csv"),
    ] = None,
    no_color: Annotated[
        bool,
        typer.Option("--no-color", help="Disable colored output"),
    ] = False,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Suppress header row in CSV output"),
    ] = False,
) -> None:
    """dcon - PostgreSQL CLI tool for database operations."""
    setup_logging(verbose, colors=False if no_color else None)
    setup_sentry()

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "dcon"
    )
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)

    if prompt_password and password is None:
        password = typer.prompt("Password", hide_input=True, default="", show_default=False)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["host"] = host
    ctx.obj["port"] = port
    ctx.obj["user"] = user
    ctx.obj["password"] = password or None
    ctx.obj["database"] = database
    ctx.obj["url"] = url
    ctx.obj["profile"] = profile
    ctx.obj["config_file"] = config_file
    ctx.obj["no_color"] = no_color

    ctx.obj["format"] = format.value if format else None
    ctx.obj["compact"] = compact
    ctx.obj["width"] = width
    ctx.obj["no_header"] = no_header


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except DconError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        error = UnknownError(str(e))
        typer.echo(f"Error: {error.message}", err=True)
        raise SystemExit(error.exit_code) from None
