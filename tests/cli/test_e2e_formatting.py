"""E2E tests against a live server.

Full CLI pipeline: statement execution, formatter, stdout. Run with
``pytest -m integration`` and DCON_TEST_URL pointing at a scratch
database.
"""

import json
import uuid

import pytest

from dcon.cli.main import app
from tests.integration_config import URL_ARGS

# -- helpers --


def _invoke(runner, *extra_args, **kwargs):
    return runner.invoke(app, [*URL_ARGS, *extra_args], **kwargs)


def _query(runner, sql, fmt="json"):
    return _invoke(runner, "--format", fmt, "query", "--sql", sql)


@pytest.fixture
def scratch_table(runner):
    name = f"dcon_e2e_{uuid.uuid4().hex[:8]}"
    result = _invoke(
        runner,
        "table", "create", "--sql",
        f"CREATE TABLE {name} (id serial PRIMARY KEY, name text, score float8)",
    )
    assert result.exit_code == 0, result.output
    yield name
    _invoke(runner, "table", "drop", "--table", name, "--confirm")


# -- query output in each format --


@pytest.mark.integration
def test_e2e_json_output(runner):
    result = _query(runner, "SELECT 1 AS id, 'hello' AS msg")

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"id": 1, "msg": "hello"}]


@pytest.mark.integration
def test_e2e_csv_output(runner):
    result = _query(runner, "SELECT 1 AS id, 'hello' AS msg", fmt="csv")

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["id,msg", "1,hello"]


@pytest.mark.integration
def test_e2e_table_output(runner):
    result = _query(runner, "SELECT 1 AS id, 'hello' AS msg", fmt="table")

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "id | msg",
        "---+------",
        "1  | hello",
        "",
        "(1 rows)",
    ]


@pytest.mark.integration
def test_e2e_null_and_unknown_types(runner):
    result = _query(runner, "SELECT NULL::int4 AS n, 1.5::numeric AS d", fmt="csv")

    assert result.stdout.splitlines()[1] == "NULL,Unknown Type"


@pytest.mark.integration
def test_e2e_percent_in_literal(runner):
    result = _query(runner, "SELECT '100%' AS pct", fmt="csv")

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines()[1] == "100%"


@pytest.mark.integration
def test_e2e_empty_result(runner):
    result = _query(runner, "SELECT 1 AS id WHERE false")

    assert result.exit_code == 0, result.output
    assert "Query executed successfully. No rows returned." in result.stdout


@pytest.mark.integration
def test_e2e_syntax_error(runner):
    result = _query(runner, "SELEC 1")
    assert result.exit_code != 0


# -- catalog commands --


@pytest.mark.integration
def test_e2e_connect(runner):
    result = _invoke(runner, "-f", "json", "connect")

    assert result.exit_code == 0, result.output
    properties = {item["property"] for item in json.loads(result.stdout)}
    assert {"Database", "User", "Version"} <= properties


@pytest.mark.integration
def test_e2e_database_list(runner):
    result = _invoke(runner, "-f", "json", "database", "list")

    assert result.exit_code == 0, result.output
    names = [db["name"] for db in json.loads(result.stdout)]
    assert "postgres" in names


# -- crud lifecycle --


@pytest.mark.integration
def test_e2e_crud_lifecycle(runner, scratch_table):
    result = _invoke(
        runner, "crud", "create", "-t", scratch_table,
        "--data", '{"name": "Smith, John", "score": 2.5}',
    )
    assert "Inserted 1 row(s)" in result.stdout

    result = _invoke(
        runner, "-f", "csv", "crud", "read", "-t", scratch_table, "-c", "name,score"
    )
    assert result.stdout.splitlines() == ["name,score", '"Smith, John","2.5"']

    result = _invoke(
        runner, "crud", "update", "-t", scratch_table,
        "--data", '{"score": 3}', "-w", "name = 'Smith, John'", "--confirm",
    )
    assert "Updated 1 row(s)" in result.stdout

    result = _invoke(runner, "crud", "delete", "-t", scratch_table, "-w", "true", "--confirm")
    assert "Deleted 1 row(s)" in result.stdout

    result = _invoke(runner, "crud", "read", "-t", scratch_table)
    assert "No data found." in result.stdout


@pytest.mark.integration
def test_e2e_table_describe(runner, scratch_table):
    result = _invoke(runner, "-f", "json", "table", "describe", "-t", scratch_table)

    assert result.exit_code == 0, result.output
    columns = {c["column_name"]: c for c in json.loads(result.stdout)}
    assert columns["id"]["is_primary"] == "YES"
    assert columns["name"]["is_nullable"] == "YES"
