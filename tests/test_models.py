"""Tests for result and catalog models."""

import pytest

from dcon.core.models import (
    ColumnMeta,
    DatabaseInfo,
    QueryResult,
    Row,
    TableInfo,
    records_to_result,
)
from tests.helpers import make_result


@pytest.mark.unit
def test_column_meta_serializes_to_dict():
    col = ColumnMeta(name="name", type_oid=25, type_name="text")
    assert col.model_dump() == {"name": "name", "type_oid": 25, "type_name": "text"}


@pytest.mark.unit
def test_query_result_no_columns():
    """DDL statements return no columns."""
    result = QueryResult(columns=[], rows=[], row_count=0, status_message="CREATE TABLE")
    assert result.columns == []
    assert result.affected_rows is None
    assert list(result.records()) == []


@pytest.mark.unit
def test_records_yield_rows_with_metadata():
    rows = list(make_result().records())
    assert len(rows) == 2
    assert isinstance(rows[0], Row)
    assert rows[0].names == ["id", "name"]
    assert rows[1].column(1).type_name == "text"


@pytest.mark.unit
def test_row_access_by_index_and_name():
    row = next(make_result().records())
    assert len(row) == 2
    assert row[0] == 1
    assert row["name"] == "alice"
    assert row.index_of("name") == 1


@pytest.mark.unit
def test_row_unknown_column_name():
    row = next(make_result().records())
    with pytest.raises(KeyError):
        row["missing"]


@pytest.mark.unit
def test_table_info_dumps_schema_key():
    info = TableInfo(schema_name="public", table_name="users", table_type="table", row_count="3")
    assert info.model_dump(by_alias=True) == {
        "schema": "public",
        "table_name": "users",
        "table_type": "table",
        "row_count": "3",
    }


@pytest.mark.unit
def test_records_to_result_uses_text_columns():
    dbs = [
        DatabaseInfo(name="app", owner="alice", encoding="UTF8", size="8 MB", description="x"),
    ]
    result = records_to_result(DatabaseInfo, dbs)
    assert result.column_names == ["name", "owner", "encoding", "size", "description"]
    assert {c.type_name for c in result.columns} == {"text"}
    assert result.rows == [("app", "alice", "UTF8", "8 MB", "x")]
    assert result.row_count == 1


@pytest.mark.unit
def test_records_to_result_uses_aliases():
    result = records_to_result(TableInfo, [])
    assert result.column_names == ["schema", "table_name", "table_type", "row_count"]
    assert result.rows == []
