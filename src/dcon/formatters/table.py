"""Table formatter: rich boxes for catalog records, aligned text for rows."""

from __future__ import annotations

import shutil
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from dcon.core.coercion import coerce_row
from dcon.formatters.base import RenderMode, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from dcon.core.models import QueryResult

_NO_RESULTS = "No results"
_SEPARATOR = " | "


def _truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 1] + "…"


def aligned_lines(names: list[str], cells: list[list[str]]) -> Iterator[str]:
    """psql-style text: padded header, rule, padded rows, row count footer."""
    widths = [len(n) for n in names]
    for row in cells:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    yield _SEPARATOR.join(n.ljust(w) for n, w in zip(names, widths, strict=True)).rstrip()
    yield "-+-".join("-" * w for w in widths)
    for row in cells:
        yield _SEPARATOR.join(c.ljust(w) for c, w in zip(row, widths, strict=True)).rstrip()
    yield ""
    yield f"({len(cells)} rows)"


class TableFormatter:
    def __init__(
        self,
        mode: RenderMode = RenderMode.ROWS,
        width: int = 40,
        color: bool = True,
    ) -> None:
        self.mode = mode
        self.width = width
        self.color = color

    def format(self, result: QueryResult) -> Iterator[str]:
        if not result.columns:
            yield _NO_RESULTS
            return

        cells = [coerce_row(row) for row in result.records()]
        if self.mode is not RenderMode.RECORDS:
            yield from aligned_lines(result.column_names, cells)
            return

        if not cells:
            yield _NO_RESULTS
            return

        table = Table(show_edge=True, pad_edge=True)
        for name in result.column_names:
            table.add_column(name, no_wrap=True)
        for row in cells:
            table.add_row(*(_truncate(v, self.width) for v in row))

        buf = StringIO()
        term_width = shutil.get_terminal_size((120, 24)).columns
        console = Console(
            file=buf,
            force_terminal=self.color,
            no_color=not self.color,
            width=term_width,
        )
        console.print(table)
        yield buf.getvalue().rstrip("\n")


registry.register("table", TableFormatter)
