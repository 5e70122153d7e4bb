"""Tests for JSONFormatter."""

import json

import pytest

from dcon.core.models import ConnectionInfo, records_to_result
from dcon.formatters.base import Formatter, RenderMode
from dcon.formatters.json import JSONFormatter
from tests.helpers import make_result


def _parse(formatter, result):
    return json.loads("\n".join(formatter.format(result)))


@pytest.mark.unit
def test_json_formatter_implements_protocol():
    assert isinstance(JSONFormatter(), Formatter)


@pytest.mark.unit
def test_rows_become_objects():
    assert _parse(JSONFormatter(), make_result()) == [
        {"id": 1, "name": "alice"},
        {"id": 2, "name": "bob"},
    ]


@pytest.mark.unit
def test_pretty_by_default():
    output = "\n".join(JSONFormatter().format(make_result()))
    assert '\n  {\n    "id": 1' in output


@pytest.mark.unit
def test_compact_is_single_line():
    lines = list(JSONFormatter(compact=True).format(make_result()))
    assert lines == ['[{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}]']


@pytest.mark.unit
def test_typed_values():
    result = make_result(
        columns=[("ok", "bool"), ("score", "float8"), ("note", "text")],
        rows=[(False, 2.5, None)],
    )
    assert _parse(JSONFormatter(mode=RenderMode.CRUD), result) == [
        {"ok": False, "score": 2.5, "note": None}
    ]


@pytest.mark.unit
def test_records_as_json():
    result = records_to_result(
        ConnectionInfo, [ConnectionInfo(property="Database", value="shop")]
    )
    assert _parse(JSONFormatter(mode=RenderMode.RECORDS), result) == [
        {"property": "Database", "value": "shop"}
    ]


@pytest.mark.unit
def test_empty_result_is_empty_list():
    assert _parse(JSONFormatter(), make_result(rows=[])) == []
