"""JSON formatter: one object per row, typed by the column's declared type."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from dcon.core.coercion import row_to_json
from dcon.formatters.base import RenderMode, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from dcon.core.models import QueryResult


class JSONFormatter:
    def __init__(self, mode: RenderMode = RenderMode.ROWS, compact: bool = False) -> None:
        self.mode = mode
        self.compact = compact

    def format(self, result: QueryResult) -> Iterator[str]:
        rows_as_dicts = [row_to_json(row) for row in result.records()]

        if self.compact:
            yield json.dumps(rows_as_dicts, default=str)
        else:
            yield json.dumps(rows_as_dicts, indent=2, default=str)


registry.register("json", JSONFormatter)
