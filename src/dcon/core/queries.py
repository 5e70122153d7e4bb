"""SQL construction for catalog introspection, DDL and generic CRUD.

Pure string building, no I/O. Every builder returns a Statement holding
SQL text and its positional ``$n`` parameters, executed by PgClient.

Quoting rules:

- Identifiers (database, owner, table, column names) are wrapped in
  double quotes with embedded ``"`` doubled. They are never bound.
- The CREATE DATABASE encoding is wrapped in single quotes with
  embedded ``'`` doubled. Never bound.
- CRUD data values are always bound, as text.
- ``columns``, ``where`` and ``order_by`` fragments are caller-supplied
  SQL and are spliced in verbatim.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict

from dcon.core.exceptions import SerializationError

DEFAULT_SCHEMA = "public"
SYSTEM_SCHEMAS = ("information_schema", "pg_catalog", "pg_toast")

# Bound in place of a JSON null. This is the literal text "NULL", not
# an SQL NULL.
NULL_PARAM = "NULL"


class Statement(BaseModel):
    """SQL text plus positional parameters for $1..$n."""

    model_config = ConfigDict(frozen=True)

    sql: str
    params: tuple[Any, ...] = ()


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def param_text(value: Any) -> str:
    """Convert a decoded JSON value to the text bound for it."""
    if isinstance(value, str):
        return value
    if value is None:
        return NULL_PARAM
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value, separators=(",", ":"))


# ---------------------------------------------------------------------------
# Catalog introspection
# ---------------------------------------------------------------------------

_LIST_DATABASES_SQL = """
SELECT
    d.datname AS name,
    pg_catalog.pg_get_userbyid(d.datdba) AS owner,
    pg_catalog.pg_encoding_to_char(d.encoding) AS encoding,
    pg_catalog.pg_size_pretty(pg_catalog.pg_database_size(d.datname)) AS size,
    COALESCE(shobj.description, 'No description') AS description
FROM pg_catalog.pg_database d
LEFT JOIN pg_catalog.pg_shdescription shobj ON d.oid = shobj.objoid
WHERE d.datallowconn = true
ORDER BY d.datname
"""

_DESCRIBE_TABLE_SQL = """
SELECT
    c.column_name,
    c.data_type,
    c.is_nullable,
    COALESCE(c.column_default, 'NULL') AS default_value,
    CASE
        WHEN pk.column_name IS NOT NULL THEN 'YES'
        ELSE 'NO'
    END AS is_primary
FROM information_schema.columns c
LEFT JOIN (
    SELECT ku.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage ku
        ON tc.constraint_name = ku.constraint_name
        AND tc.table_schema = ku.table_schema
        AND tc.table_name = ku.table_name
    WHERE tc.constraint_type = 'PRIMARY KEY'
        AND tc.table_name = $1
        AND tc.table_schema = $2
) pk ON c.column_name = pk.column_name
WHERE c.table_name = $1
    AND c.table_schema = $2
ORDER BY c.ordinal_position
"""


def list_databases() -> Statement:
    return Statement(sql=_LIST_DATABASES_SQL)


def list_tables(include_system: bool = False) -> Statement:
    """Tables and views, optionally including the system schemas."""
    excluded = ", ".join(quote_literal(s) for s in SYSTEM_SCHEMAS)
    table_filter = "" if include_system else f"WHERE t.schemaname NOT IN ({excluded})"
    view_filter = "" if include_system else f"WHERE v.schemaname NOT IN ({excluded})"
    sql = f"""
SELECT
    t.schemaname AS schema,
    t.tablename AS table_name,
    'table' AS table_type
FROM pg_catalog.pg_tables t
{table_filter}
UNION ALL
SELECT
    v.schemaname AS schema,
    v.viewname AS table_name,
    'view' AS table_type
FROM pg_catalog.pg_views v
{view_filter}
ORDER BY schema, table_name
"""
    return Statement(sql=sql)


def count_rows(table_name: str, schema: str | None = None) -> Statement:
    schema = schema or DEFAULT_SCHEMA
    return Statement(
        sql=f"SELECT COUNT(*) FROM {quote_ident(schema)}.{quote_ident(table_name)}"
    )


def describe_table(table_name: str, schema: str | None = None) -> Statement:
    return Statement(
        sql=_DESCRIBE_TABLE_SQL, params=(table_name, schema or DEFAULT_SCHEMA)
    )


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------


def create_database(
    name: str, owner: str | None = None, encoding: str = "UTF8"
) -> Statement:
    sql = f"CREATE DATABASE {quote_ident(name)}"
    if owner is not None:
        sql += f" OWNER {quote_ident(owner)}"
    sql += f" ENCODING {quote_literal(encoding)}"
    return Statement(sql=sql)


def drop_database(name: str) -> Statement:
    return Statement(sql=f"DROP DATABASE {quote_ident(name)}")


def drop_table(name: str) -> Statement:
    return Statement(sql=f"DROP TABLE {quote_ident(name)}")


# ---------------------------------------------------------------------------
# Generic CRUD
# ---------------------------------------------------------------------------


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SerializationError(f"{what} must be a JSON object")
    if not data:
        raise SerializationError(f"No {what.lower()} provided")
    return data


def insert(table_name: str, data: Any) -> Statement:
    obj = _require_object(data, "Data")
    column_list = ", ".join(quote_ident(c) for c in obj)
    placeholders = ", ".join(f"${i}" for i in range(1, len(obj) + 1))
    sql = f"INSERT INTO {quote_ident(table_name)} ({column_list}) VALUES ({placeholders})"
    return Statement(sql=sql, params=tuple(param_text(v) for v in obj.values()))


def select(
    table_name: str,
    columns: str | None = None,
    where: str | None = None,
    order_by: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> Statement:
    sql = f"SELECT {columns or '*'} FROM {quote_ident(table_name)}"
    if where is not None:
        sql += f" WHERE {where}"
    if order_by is not None:
        sql += f" ORDER BY {order_by}"
    if limit is not None:
        sql += f" LIMIT {int(limit)}"
    if offset is not None:
        sql += f" OFFSET {int(offset)}"
    return Statement(sql=sql)


def update(table_name: str, data: Any, where: str) -> Statement:
    obj = _require_object(data, "Set data")
    set_clauses = ", ".join(
        f"{quote_ident(col)} = ${i}" for i, col in enumerate(obj, start=1)
    )
    sql = f"UPDATE {quote_ident(table_name)} SET {set_clauses} WHERE {where}"
    return Statement(sql=sql, params=tuple(param_text(v) for v in obj.values()))


def delete(table_name: str, where: str) -> Statement:
    return Statement(sql=f"DELETE FROM {quote_ident(table_name)} WHERE {where}")
