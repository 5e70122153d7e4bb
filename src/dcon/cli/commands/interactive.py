"""Interactive REPL: psql-style meta-commands plus ad-hoc SQL."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

import typer

from dcon.cli.commands._shared import get_client, output_records, output_result
from dcon.core.exceptions import IoError, QueryFailedError, TimeoutError
from dcon.core.logging import get_logger
from dcon.core.models import DatabaseInfo, TableInfo

if TYPE_CHECKING:
    from collections.abc import Callable

    from dcon.core.client import PgClient

PROMPT = "dcon> "

HELP_TEXT = """\
Interactive commands:
  \\l                 List all databases
  \\d                 List all tables in the current database
  \\h or help         Show this help message
  \\q, quit, or exit  Exit interactive mode

Any other input is executed as SQL, e.g. SELECT * FROM users LIMIT 5;"""

_QUIT = {"\\q", "quit", "exit"}
_HELP = {"\\h", "help"}


def _read_line() -> str:
    return input(PROMPT)


class InteractiveSession:
    """One REPL bound to one client.

    Lines are processed strictly one at a time. Failed SQL is reported
    and the loop continues; meta-command failures propagate.
    """

    def __init__(
        self,
        ctx: typer.Context,
        client: PgClient,
        read_line: Callable[[], str] = _read_line,
    ) -> None:
        self.ctx = ctx
        self.client = client
        self.read_line = read_line
        self.no_color = bool(ctx.ensure_object(dict).get("no_color"))

    def _echo(self, message: str, color: str | None = None) -> None:
        if color is None or self.no_color:
            typer.echo(message)
        else:
            typer.secho(message, fg=color)

    def run(self) -> None:
        self._echo(
            "Interactive mode. Type 'help' for commands, 'exit' to quit.",
            typer.colors.BRIGHT_GREEN,
        )
        self._echo(HELP_TEXT)
        while True:
            try:
                line = self.read_line()
            except EOFError:
                typer.echo()
                break
            except OSError as e:
                raise IoError(f"Failed to read input: {e}") from e
            if not self.handle(line):
                break
        self._echo("Goodbye!", typer.colors.BRIGHT_GREEN)

    def handle(self, line: str) -> bool:
        """Process one input line. Returns False when the session should end."""
        text = line.strip()
        if not text:
            return True

        command = text.lower()
        if command in _QUIT:
            return False
        if command in _HELP:
            self._echo(HELP_TEXT)
        elif command == "\\l":
            output_records(self.ctx, DatabaseInfo, self.client.list_databases())
        elif command == "\\d":
            output_records(self.ctx, TableInfo, self.client.list_tables())
        else:
            self.run_sql(text)
        return True

    def run_sql(self, sql: str) -> None:
        log = get_logger("interactive")
        try:
            result = self.client.execute_query(sql)
        except (QueryFailedError, TimeoutError) as e:
            log.debug("statement failed", error=e.message)
            self._echo(f"Error: {e.message}", typer.colors.RED)
            return

        if not result.rows:
            self._echo("Query executed successfully.", typer.colors.GREEN)
        else:
            output_result(self.ctx, result)


def interactive_command(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option("--database", "-d", help="Target database (overrides global)"),
    ] = None,
) -> None:
    """Start an interactive SQL session."""
    with get_client(ctx, database=database) as client:
        client.connect()
        InteractiveSession(ctx, client).run()
