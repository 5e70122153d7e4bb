"""Formatter protocol, render modes and the formatter registry."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from dcon.core.models import QueryResult


class RenderMode(StrEnum):
    """What kind of result is being rendered.

    RECORDS: catalog snapshots (databases, tables, columns, session info).
    ROWS: rows returned by ad-hoc SQL.
    CRUD: rows returned by ``crud read``.

    Table output draws a box for RECORDS and psql-style aligned text for
    the other two. CSV output quotes every value only in CRUD mode.
    """

    RECORDS = "records"
    ROWS = "rows"
    CRUD = "crud"


@runtime_checkable
class Formatter(Protocol):
    """Protocol for output formatters.

    Each formatter transforms a QueryResult into lines of output text.
    """

    def format(self, result: QueryResult) -> Iterator[str]:
        """Transform a QueryResult into formatted output lines."""
        ...


class FormatterRegistry:
    """Look up formatter classes by output format name."""

    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str, formatter_class: type[Formatter]) -> None:
        self._formatters[name] = formatter_class

    def get(
        self, name: str, mode: RenderMode = RenderMode.ROWS, **kwargs: object
    ) -> Formatter:
        """Instantiate the formatter registered under ``name``.

        Raises KeyError if the format name is not registered.
        """
        if name not in self._formatters:
            available = ", ".join(sorted(self._formatters))
            msg = f"Unknown format {name!r}. Available: {available}"
            raise KeyError(msg)
        return self._formatters[name](mode=mode, **kwargs)  # type: ignore[call-arg]

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


registry = FormatterRegistry()
