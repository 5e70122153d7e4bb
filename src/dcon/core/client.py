"""PostgreSQL client for dcon.

Wraps one psycopg v3 synchronous connection with the catalog, DDL and
CRUD operations, mapping driver exceptions to the DconError hierarchy.
"""

from __future__ import annotations

import time
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import psycopg
import psycopg.errors
import sentry_sdk

from dcon.core import queries
from dcon.core.coercion import row_to_json
from dcon.core.exceptions import (
    AuthenticationFailedError,
    ConnectionFailedError,
    DatabaseOperationError,
    DconError,
    DriverError,
    InvalidConfigurationError,
    NetworkError,
    QueryFailedError,
    TableOperationError,
    TimeoutError,
)
from dcon.core.logging import get_logger
from dcon.core.models import (
    ColumnInfo,
    ColumnMeta,
    ConnectionInfo,
    DatabaseInfo,
    QueryResult,
    TableInfo,
)

if TYPE_CHECKING:
    from dcon.core.config import ResolvedConfig
    from dcon.core.queries import Statement

# Mapping from PostgreSQL type OIDs to type names. OIDs missing here are
# looked up in the connection's type registry before falling back.
_TYPE_NAMES: dict[int, str] = {
    16: "bool",
    17: "bytea",
    18: "char",
    19: "name",
    20: "int8",
    21: "int2",
    23: "int4",
    25: "text",
    26: "oid",
    114: "json",
    142: "xml",
    700: "float4",
    701: "float8",
    705: "unknown",
    790: "money",
    1042: "bpchar",
    1043: "varchar",
    1082: "date",
    1083: "time",
    1114: "timestamp",
    1184: "timestamptz",
    1186: "interval",
    1266: "timetz",
    1700: "numeric",
    2950: "uuid",
    3802: "jsonb",
}

_AUTH_SQLSTATES = {"28000", "28P01"}

_CONNECTION_INFO_QUERIES: tuple[tuple[str, str], ...] = (
    ("Database", "SELECT current_database()"),
    ("User", "SELECT current_user"),
    ("Version", "SELECT version()"),
    ("Current Schema", "SELECT current_schema()"),
    ("Session User", "SELECT session_user"),
    ("Backend PID", "SELECT pg_backend_pid()::text"),
)


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def _connect_error(e: psycopg.OperationalError, target: str) -> DconError:
    text = str(e).strip()
    if e.sqlstate in _AUTH_SQLSTATES or "authentication failed" in text:
        return AuthenticationFailedError(f"Authentication failed for {target}: {text}")
    if "timeout expired" in text:
        return TimeoutError(f"Connection to {target} timed out: {text}")
    return ConnectionFailedError(f"Failed to connect to PostgreSQL at {target}: {text}")


def _connection_lost(conn: psycopg.Connection[Any], e: psycopg.OperationalError) -> bool:
    """True when the session is gone, not just the statement.

    OperationalError also covers per-statement server errors (lock not
    available, disk full, ...) that leave the connection usable.
    """
    if conn.closed or conn.broken:
        return True
    return e.sqlstate is None or e.sqlstate.startswith("08")


class PgClient:
    """One PostgreSQL session, used sequentially.

    The first operation connects lazily. After disconnect() the client
    refuses work until connect() is called again; nothing reconnects
    on its own.
    """

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config
        self.state = ConnectionState.DISCONNECTED
        self.last_error: str | None = None
        self._connection: psycopg.Connection[Any] | None = None
        self._disconnected = False

    def __enter__(self) -> PgClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def target(self) -> str:
        conn = self.config.connection
        return f"{conn.host}:{conn.port} database '{conn.database}'"

    # -- lifecycle --

    def connect(self) -> None:
        """Open the connection: DISCONNECTED -> CONNECTING -> CONNECTED."""
        log = get_logger("client")
        if self.state is ConnectionState.CONNECTED:
            return

        conn_config = self.config.connection
        conn_config.validate()

        self.state = ConnectionState.CONNECTING
        self.last_error = None
        log.debug("connecting", target=self.target)
        try:
            connection = psycopg.connect(
                conn_config.to_connection_string(),
                sslmode=self.config.sslmode,
                connect_timeout=self.config.connect_timeout,
                application_name=self.config.application_name,
                autocommit=True,
                cursor_factory=psycopg.RawCursor,
            )
        except psycopg.OperationalError as e:
            error = _connect_error(e, self.target)
            self.state = ConnectionState.DISCONNECTED
            self.last_error = error.message
            log.error("connection failed", target=self.target, error=error.message)
            raise error from e

        if self.config.statement_timeout is not None:
            timeout_ms = int(self.config.statement_timeout * 1000)
            try:
                connection.execute(f"SET statement_timeout = {timeout_ms}")
            except psycopg.Error as e:
                connection.close()
                self.state = ConnectionState.DISCONNECTED
                self.last_error = (
                    f"Invalid statement timeout {self.config.statement_timeout}s: {e}"
                )
                log.error("session setup failed", target=self.target, error=str(e))
                raise InvalidConfigurationError(self.last_error) from e

        self._connection = connection
        self._disconnected = False
        self.state = ConnectionState.CONNECTED
        log.debug("connected", target=self.target)

    def disconnect(self) -> None:
        """Close the connection: CONNECTED -> DISCONNECTED."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._disconnected = True
        self.state = ConnectionState.DISCONNECTED

    def close(self) -> None:
        """Close the database connection."""
        self.disconnect()

    def _require_connection(self) -> psycopg.Connection[Any]:
        if self._connection is None:
            if self._disconnected:
                raise ConnectionFailedError(
                    "Client is disconnected; call connect() to open a new session"
                )
            self.connect()
        assert self._connection is not None
        return self._connection

    def _type_name(self, conn: psycopg.Connection[Any], oid: int) -> str:
        name = _TYPE_NAMES.get(oid)
        if name is not None:
            return name
        info = conn.adapters.types.get(oid)
        if info is None:
            return "unknown"
        # the registry also answers for array OIDs; pg_type names those "_<elem>"
        if oid == info.array_oid and oid != info.oid:
            return f"_{info.name}"
        return info.name

    # -- execution --

    def execute(
        self,
        statement: Statement,
        *,
        action: str = "Query",
        error_class: type[DconError] = QueryFailedError,
    ) -> QueryResult:
        """Run a built statement and return a QueryResult.

        Server-side failures are raised as ``error_class`` with the
        message ``"<action> failed: <server message>"``.
        """
        log = get_logger("client")
        conn = self._require_connection()

        sql_normalized = " ".join(statement.sql.split())
        span_description = sql_normalized[:100]
        log.debug("executing query", sql=sql_normalized, params=len(statement.params))
        with sentry_sdk.start_span(op="db.query", description=span_description) as span:
            start_time = time.monotonic()
            try:
                with conn.cursor() as cur:
                    cur.execute(statement.sql, statement.params or None)

                    columns: list[ColumnMeta] = []
                    rows: list[tuple[Any, ...]] = []
                    affected_rows: int | None = None

                    if cur.description:
                        for desc in cur.description:
                            columns.append(
                                ColumnMeta(
                                    name=desc.name,
                                    type_oid=desc.type_code,
                                    type_name=self._type_name(conn, desc.type_code),
                                )
                            )
                        rows = cur.fetchall()
                    elif cur.rowcount >= 0:
                        affected_rows = cur.rowcount

                    duration_ms = (time.monotonic() - start_time) * 1000
                    span.set_data("row_count", len(rows))
                    span.set_data("duration_ms", duration_ms)
                    log.debug(
                        "query complete",
                        duration_ms=f"{duration_ms:.1f}",
                        row_count=len(rows),
                        affected_rows=affected_rows,
                    )

                    return QueryResult(
                        columns=columns,
                        rows=rows,
                        row_count=len(rows),
                        status_message=cur.statusmessage or "",
                        affected_rows=affected_rows,
                    )

            except psycopg.errors.QueryCanceled as e:
                duration_ms = (time.monotonic() - start_time) * 1000
                span.set_data("duration_ms", duration_ms)
                span.set_status("deadline_exceeded")
                log.error(
                    "query timeout",
                    sql=sql_normalized,
                    duration_ms=f"{duration_ms:.1f}",
                )
                msg = f"Query timed out after {self.config.statement_timeout}s: {e}"
                raise TimeoutError(msg) from e
            except psycopg.OperationalError as e:
                if not _connection_lost(conn, e):
                    span.set_status("invalid_argument")
                    log.error("query failed", sql=sql_normalized, error=str(e))
                    raise error_class(f"{action} failed: {e}") from e
                span.set_status("unavailable")
                log.error("connection lost", sql=sql_normalized, error=str(e))
                raise NetworkError(f"Database error: {e}") from e
            except psycopg.InterfaceError as e:
                span.set_status("internal_error")
                log.error("driver error", sql=sql_normalized, error=str(e))
                raise DriverError(f"PostgreSQL driver error: {e}") from e
            except psycopg.Error as e:
                span.set_status("invalid_argument")
                log.error("query failed", sql=sql_normalized, error=str(e))
                raise error_class(f"{action} failed: {e}") from e

    # -- session --

    def test_connection(self) -> None:
        """Round-trip a trivial query; raise ConnectionFailedError on failure."""
        self._require_connection()
        try:
            self.execute(queries.Statement(sql="SELECT 1"), action="Connection test")
        except (QueryFailedError, NetworkError, DriverError) as e:
            raise ConnectionFailedError(f"Connection test failed: {e.message}") from e

    def get_connection_info(self) -> list[ConnectionInfo]:
        """Facts about the live session; facts that cannot be read show N/A."""
        self._require_connection()
        info: list[ConnectionInfo] = []
        for prop, sql in _CONNECTION_INFO_QUERIES:
            try:
                result = self.execute(queries.Statement(sql=sql))
                value = str(result.rows[0][0]) if result.rows else "N/A"
            except (QueryFailedError, DriverError):
                value = "N/A"
            info.append(ConnectionInfo(property=prop, value=value))

        conn = self.config.connection
        info.append(ConnectionInfo(property="Connection Host", value=conn.host))
        info.append(ConnectionInfo(property="Connection Port", value=str(conn.port)))
        return info

    # -- databases --

    def list_databases(self) -> list[DatabaseInfo]:
        result = self.execute(queries.list_databases(), action="List databases")
        return [DatabaseInfo(**_as_dict(result, row)) for row in result.rows]

    def get_database_info(self, name: str | None = None) -> DatabaseInfo:
        """Look up one database by name, defaulting to the connected one."""
        db_name = name or self.config.connection.database
        for db in self.list_databases():
            if db.name == db_name:
                return db
        raise DatabaseOperationError(f"Database '{db_name}' not found")

    def create_database(
        self, name: str, owner: str | None = None, encoding: str = "UTF8"
    ) -> None:
        self.execute(
            queries.create_database(name, owner, encoding),
            action="Create database",
            error_class=DatabaseOperationError,
        )

    def drop_database(self, name: str) -> None:
        self.execute(
            queries.drop_database(name),
            action="Drop database",
            error_class=DatabaseOperationError,
        )

    # -- tables --

    def list_tables(self, include_system: bool = False) -> list[TableInfo]:
        """List tables and views; row counts cost one COUNT(*) per table."""
        result = self.execute(queries.list_tables(include_system), action="List tables")
        tables: list[TableInfo] = []
        for schema, table_name, table_type in result.rows:
            if table_type == "table":
                try:
                    row_count = str(self.get_table_row_count(table_name, schema))
                except (TableOperationError, DriverError):
                    row_count = "Error"
            else:
                row_count = "N/A"
            tables.append(
                TableInfo(
                    schema_name=schema,
                    table_name=table_name,
                    table_type=table_type,
                    row_count=row_count,
                )
            )
        return tables

    def get_table_row_count(self, table_name: str, schema: str | None = None) -> int:
        result = self.execute(
            queries.count_rows(table_name, schema),
            action="Get row count",
            error_class=TableOperationError,
        )
        return int(result.rows[0][0])

    def describe_table(
        self, table_name: str, schema: str | None = None
    ) -> list[ColumnInfo]:
        result = self.execute(
            queries.describe_table(table_name, schema),
            action="Describe table",
            error_class=TableOperationError,
        )
        return [ColumnInfo(**_as_dict(result, row)) for row in result.rows]

    def create_table(self, sql: str) -> QueryResult:
        return self.execute(
            queries.Statement(sql=sql),
            action="Create table",
            error_class=TableOperationError,
        )

    def drop_table(self, name: str) -> None:
        self.execute(
            queries.drop_table(name),
            action="Drop table",
            error_class=TableOperationError,
        )

    # -- ad-hoc SQL --

    def execute_query(self, sql: str) -> QueryResult:
        return self.execute(queries.Statement(sql=sql), action="Query execution")

    def execute_query_json(self, sql: str) -> list[dict[str, Any]]:
        return [row_to_json(row) for row in self.execute_query(sql).records()]

    # -- CRUD --

    def insert_data(self, table_name: str, data: Any) -> int:
        result = self.execute(queries.insert(table_name, data), action="Insert")
        return result.affected_rows or 0

    def select_data(
        self,
        table_name: str,
        columns: str | None = None,
        where: str | None = None,
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> QueryResult:
        return self.execute(
            queries.select(table_name, columns, where, order_by, limit, offset),
            action="Select",
        )

    def update_data(self, table_name: str, data: Any, where: str) -> int:
        result = self.execute(queries.update(table_name, data, where), action="Update")
        return result.affected_rows or 0

    def delete_data(self, table_name: str, where: str) -> int:
        result = self.execute(queries.delete(table_name, where), action="Delete")
        return result.affected_rows or 0


def _as_dict(result: QueryResult, row: tuple[Any, ...]) -> dict[str, Any]:
    return dict(zip(result.column_names, row, strict=True))
