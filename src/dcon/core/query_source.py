"""Query source resolution for the query command.

Resolves the SQL text from one of three sources:
1. Inline (--sql), highest priority
2. File path
3. stdin, lowest priority
"""

from __future__ import annotations

import sys
from pathlib import Path

from dcon.core.exceptions import InputError


def resolve_query_source(
    inline: str | None,
    file_path: str | None,
) -> str:
    """Resolve SQL query from inline, file, or stdin.

    Precedence: inline > file > stdin.
    Raises InputError when no source is available.
    """
    if inline is not None:
        return inline

    if file_path is not None:
        p = Path(file_path)
        if not p.exists():
            msg = (
                f"Query file not found: {file_path}\n"
                "Use --sql for inline queries or pipe query via stdin."
            )
            raise InputError(msg)
        return p.read_text()

    if not sys.stdin.isatty():
        text = sys.stdin.read()
        if text.strip():
            return text

    msg = "No query provided. Use --sql, a file path, or pipe to stdin."
    raise InputError(msg)
