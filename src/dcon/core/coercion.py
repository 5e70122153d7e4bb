"""Cell-to-text and row-to-JSON conversion for query results.

Two deliberately different conversions live here:

``coerce_value`` is used for table and CSV output. It walks a fixed,
ordered list of probes (string, int8, int4, float8, float4, bool,
timestamp, date) and renders the cell with the first probe whose
accepted column types include the column's declared type. It never
reinterprets text: a text column holding ``"42"`` stays the string
``"42"``. Columns no probe accepts (int2, numeric, timestamptz, uuid,
json, ...) render as ``"Unknown Type"``.

``row_to_json`` is used for JSON output. It dispatches on the declared
type name and keeps booleans and numbers as native JSON values. json
and jsonb cells become their JSON text; other types (arrays, bytea,
interval, numeric, ...) become their PostgreSQL text form.
"""

from __future__ import annotations

import json
import math
import struct
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Callable

    from dcon.core.models import Row

NULL_TEXT = "NULL"
UNKNOWN_TYPE_TEXT = "Unknown Type"


def _to_float4(v: float) -> float:
    return struct.unpack("f", struct.pack("f", v))[0]


def _shortest_float4(v: float) -> str:
    """Shortest decimal string that reads back as the same float4."""
    for digits in range(1, 10):
        candidate = f"{v:.{digits}g}"
        if _to_float4(float(candidate)) == v:
            return candidate
    return repr(v)


def _positional(v: float, digits: str) -> str:
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "inf" if v > 0 else "-inf"
    if v.is_integer():
        return str(int(v))
    return format(Decimal(digits), "f")


def _format_float8(v: float) -> str:
    return _positional(v, repr(v))


def _format_float4(v: float) -> str:
    if not math.isfinite(v):
        return _positional(v, repr(v))
    return _positional(v, _shortest_float4(v))


def _format_date(v: date) -> str:
    return f"{v.year:04d}-{v.month:02d}-{v.day:02d}"


def _format_timestamp(v: datetime) -> str:
    return f"{_format_date(v)} {v.hour:02d}:{v.minute:02d}:{v.second:02d}"


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


class Probe(NamedTuple):
    tag: str
    accepts: frozenset[str]
    matches: Callable[[Any], bool]
    render: Callable[[Any], str]


PROBES: tuple[Probe, ...] = (
    Probe(
        "string",
        frozenset({"text", "varchar", "bpchar", "name", "unknown", "citext"}),
        lambda v: isinstance(v, str),
        str,
    ),
    Probe("int8", frozenset({"int8"}), _is_int, str),
    Probe("int4", frozenset({"int4"}), _is_int, str),
    Probe("float8", frozenset({"float8"}), lambda v: isinstance(v, float), _format_float8),
    Probe("float4", frozenset({"float4"}), lambda v: isinstance(v, float), _format_float4),
    Probe(
        "bool",
        frozenset({"bool"}),
        lambda v: isinstance(v, bool),
        lambda v: "true" if v else "false",
    ),
    Probe(
        "timestamp",
        frozenset({"timestamp"}),
        lambda v: isinstance(v, datetime) and v.tzinfo is None,
        _format_timestamp,
    ),
    Probe(
        "date",
        frozenset({"date"}),
        lambda v: isinstance(v, date) and not isinstance(v, datetime),
        _format_date,
    ),
)


def coerce_value(row: Row, index: int) -> str:
    """Render one cell as display text using the ordered probe list."""
    type_name = row.column(index).type_name
    value = row[index]
    for probe in PROBES:
        if type_name not in probe.accepts:
            continue
        if value is None:
            return NULL_TEXT
        if probe.matches(value):
            return probe.render(value)
    return UNKNOWN_TYPE_TEXT


def coerce_row(row: Row) -> list[str]:
    return [coerce_value(row, i) for i in range(len(row))]


def _json_float4(v: Any) -> Any:
    if not isinstance(v, float) or not math.isfinite(v):
        return None
    return float(_shortest_float4(v))


def _json_float8(v: Any) -> Any:
    if not isinstance(v, float) or not math.isfinite(v):
        return None
    return v


def _json_int(v: Any) -> Any:
    return v if _is_int(v) else None


def _json_bool(v: Any) -> Any:
    return v if isinstance(v, bool) else None


def _json_date(v: Any) -> Any:
    return _format_date(v) if isinstance(v, date) else str(v)


def _json_text(v: Any) -> str:
    return json.dumps(v, ensure_ascii=False)


_ARRAY_SPECIAL = set('{}",\\')


def _array_element(v: Any) -> str:
    if v is None:
        return NULL_TEXT
    if isinstance(v, list):
        return _pg_text(v)
    text = _pg_text(v)
    if (
        not text
        or text.upper() == NULL_TEXT
        or any(c in _ARRAY_SPECIAL or c.isspace() for c in text)
    ):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _format_interval(v: timedelta) -> str:
    parts = []
    if v.days:
        parts.append(f"{v.days} day" if abs(v.days) == 1 else f"{v.days} days")
    if v.seconds or v.microseconds or not parts:
        hours, rest = divmod(v.seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        clock = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        if v.microseconds:
            clock += f".{v.microseconds:06d}".rstrip("0")
        if v.days < 0:
            clock = "+" + clock
        parts.append(clock)
    return " ".join(parts)


def _pg_text(v: Any) -> str:
    """PostgreSQL text output for values psycopg loaded as Python objects."""
    if isinstance(v, bool):
        return "t" if v else "f"
    if isinstance(v, bytes | bytearray | memoryview):
        return "\\x" + bytes(v).hex()
    if isinstance(v, timedelta):
        return _format_interval(v)
    if isinstance(v, list):
        return "{" + ",".join(_array_element(e) for e in v) + "}"
    if isinstance(v, dict):
        return _json_text(v)
    return str(v)


_JSON_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "bool": _json_bool,
    "int2": _json_int,
    "int4": _json_int,
    "int8": _json_int,
    "float4": _json_float4,
    "float8": _json_float8,
    "text": str,
    "varchar": str,
    "char": str,
    "name": str,
    "timestamp": str,
    "timestamptz": str,
    "date": _json_date,
    "uuid": str,
    "json": _json_text,
    "jsonb": _json_text,
}


def json_value(row: Row, index: int) -> Any:
    """Convert one cell to a JSON-native value based on its declared type."""
    value = row[index]
    if value is None:
        return None
    converter = _JSON_CONVERTERS.get(row.column(index).type_name, _pg_text)
    return converter(value)


def row_to_json(row: Row) -> dict[str, Any]:
    """Convert a row to a JSON object keyed by column name."""
    return {col.name: json_value(row, i) for i, col in enumerate(row.columns)}
