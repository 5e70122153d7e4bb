"""Result and catalog models for dcon.

Pydantic models for query results, column metadata and the catalog
snapshots (databases, tables, columns, session facts) returned by
PgClient.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

TEXT_OID = 25


class ColumnMeta(BaseModel):
    """Metadata for a single result column."""

    name: str
    type_oid: int
    type_name: str


class Row(BaseModel):
    """One result row with its column metadata.

    Cells are addressable by position or by column name.
    """

    model_config = ConfigDict(frozen=True)

    columns: list[ColumnMeta]
    values: tuple[Any, ...]

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, str):
            return self.values[self.index_of(key)]
        return self.values[key]

    def index_of(self, name: str) -> int:
        for i, col in enumerate(self.columns):
            if col.name == name:
                return i
        raise KeyError(name)

    def column(self, index: int) -> ColumnMeta:
        return self.columns[index]

    @property
    def names(self) -> list[str]:
        return [col.name for col in self.columns]


class QueryResult(BaseModel):
    """Result of a SQL statement."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    columns: list[ColumnMeta]
    rows: list[tuple[Any, ...]]
    row_count: int
    status_message: str
    affected_rows: int | None = None

    def records(self) -> Iterator[Row]:
        for values in self.rows:
            yield Row(columns=self.columns, values=values)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]


class ConnectionInfo(BaseModel):
    property: str
    value: str


class DatabaseInfo(BaseModel):
    name: str
    owner: str
    encoding: str
    size: str
    description: str


class TableInfo(BaseModel):
    # "schema" would shadow a BaseModel attribute
    schema_name: str = Field(serialization_alias="schema")
    table_name: str
    table_type: str
    row_count: str


class ColumnInfo(BaseModel):
    column_name: str
    data_type: str
    is_nullable: str
    default_value: str
    is_primary: str


def records_to_result(
    model: type[BaseModel], records: Sequence[BaseModel]
) -> QueryResult:
    """Wrap catalog records in a text-typed QueryResult for the formatters."""
    names = [
        field.serialization_alias or name for name, field in model.model_fields.items()
    ]
    columns = [ColumnMeta(name=n, type_oid=TEXT_OID, type_name="text") for n in names]
    rows = [tuple(r.model_dump(by_alias=True).values()) for r in records]
    return QueryResult(
        columns=columns,
        rows=rows,
        row_count=len(rows),
        status_message=f"SELECT {len(rows)}",
    )
