"""CSV formatter.

CRUD reads quote every value (embedded quotes doubled). Ad-hoc query
rows and catalog records are joined with bare commas and no escaping,
so a value containing a comma is ambiguous in those two modes.
"""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from dcon.core.coercion import coerce_row
from dcon.formatters.base import RenderMode, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from dcon.core.models import QueryResult


def _quoted_row(values: list[str]) -> str:
    buf = StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL)
    writer.writerow(values)
    return buf.getvalue().rstrip("\r\n")


def _bare_row(values: list[str]) -> str:
    return ",".join(values)


class CSVFormatter:
    def __init__(self, mode: RenderMode = RenderMode.ROWS, no_header: bool = False) -> None:
        self.mode = mode
        self.no_header = no_header

    def format(self, result: QueryResult) -> Iterator[str]:
        if not self.no_header:
            yield ",".join(result.column_names)

        write_row = _quoted_row if self.mode is RenderMode.CRUD else _bare_row
        for row in result.records():
            yield write_row(coerce_row(row))


registry.register("csv", CSVFormatter)
