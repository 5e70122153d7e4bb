"""Output format selection and writing."""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import TYPE_CHECKING

from dcon.core.exceptions import IoError
from dcon.formatters.base import RenderMode

if TYPE_CHECKING:
    from dcon.core.models import QueryResult
    from dcon.formatters.base import Formatter


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def resolve_format(format_flag: str | None, default: str = "table") -> str:
    """Determine the output format.

    Explicit --format overrides the configured default_format.
    """
    if format_flag is not None:
        return format_flag
    return default


def get_formatter(
    format_flag: str | None = None,
    mode: RenderMode = RenderMode.ROWS,
    *,
    default: str = "table",
    compact: bool = False,
    width: int = 40,
    no_header: bool = False,
    color: bool = True,
) -> Formatter:
    """Build and return the appropriate formatter instance."""
    # Import here to trigger registry population from formatter modules.
    import dcon.formatters.csv  # noqa: F401
    import dcon.formatters.json  # noqa: F401
    import dcon.formatters.table  # noqa: F401
    from dcon.formatters.base import registry

    fmt_name = resolve_format(format_flag, default)

    kwargs: dict[str, object] = {}
    if fmt_name == "table":
        kwargs["width"] = width
        kwargs["color"] = color
    elif fmt_name == "json":
        kwargs["compact"] = compact
    elif fmt_name == "csv":
        kwargs["no_header"] = no_header

    return registry.get(fmt_name, mode, **kwargs)


def write_output(formatter: Formatter, result: QueryResult) -> None:
    """Write formatted output to stdout."""
    try:
        for line in formatter.format(result):
            sys.stdout.write(line + "\n")
    except OSError as e:
        raise IoError(f"Failed to write output: {e}") from e
