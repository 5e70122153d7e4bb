"""Builders shared by unit tests."""

from dcon.core.models import ColumnMeta, QueryResult

_OIDS = {
    "bool": 16,
    "int8": 20,
    "int2": 21,
    "int4": 23,
    "text": 25,
    "float4": 700,
    "float8": 701,
    "varchar": 1043,
    "date": 1082,
    "timestamp": 1114,
    "timestamptz": 1184,
    "numeric": 1700,
    "uuid": 2950,
}


def make_result(columns=None, rows=None, affected_rows=None):
    """Build a QueryResult from (name, type_name) pairs.

    Defaults to users(id int4, name text) holding alice and bob.
    """
    if columns is None:
        columns = [("id", "int4"), ("name", "text")]
    if rows is None:
        rows = [(1, "alice"), (2, "bob")]
    metas = [
        ColumnMeta(name=name, type_oid=_OIDS.get(type_name, 0), type_name=type_name)
        for name, type_name in columns
    ]
    return QueryResult(
        columns=metas,
        rows=rows,
        row_count=len(rows),
        status_message=f"SELECT {len(rows)}",
        affected_rows=affected_rows,
    )


def make_row(type_name, value, name="col"):
    """Single-cell Row for coercion tests."""
    return next(make_result(columns=[(name, type_name)], rows=[(value,)]).records())
