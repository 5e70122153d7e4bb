"""Tests for the crud command group."""

import pytest

from dcon.cli.commands.crud import parse_json_data
from dcon.core.exceptions import SerializationError
from tests.helpers import make_result


@pytest.mark.unit
class TestParseJsonData:
    def test_object(self):
        assert parse_json_data('{"name": "a", "age": 3}') == {"name": "a", "age": 3}

    def test_invalid(self):
        with pytest.raises(SerializationError, match="Invalid JSON data"):
            parse_json_data("{name: a}")


@pytest.mark.unit
class TestCrudCreate:
    def test_insert(self, cli_runner, fake_client):
        fake_client.insert_data.return_value = 1
        result = cli_runner("crud", "create", "-t", "users", "--data", '{"name": "carol"}')

        assert result.exit_code == 0, result.output
        fake_client.insert_data.assert_called_once_with("users", {"name": "carol"})
        assert "Inserted 1 row(s) into table 'users'" in result.stdout

    def test_invalid_json_never_connects(self, cli_runner, fake_client):
        result = cli_runner("crud", "create", "-t", "users", "--data", "not json")

        assert isinstance(result.exception, SerializationError)
        fake_client.factory.assert_not_called()


@pytest.mark.unit
class TestCrudRead:
    def test_read_defaults(self, cli_runner, fake_client):
        fake_client.select_data.return_value = make_result()
        result = cli_runner("crud", "read", "-t", "users")

        assert result.exit_code == 0, result.output
        fake_client.select_data.assert_called_once_with("users", None, None, None, None, None)
        assert "(2 rows)" in result.stdout

    def test_read_options(self, cli_runner, fake_client):
        fake_client.select_data.return_value = make_result()
        cli_runner(
            "crud", "read", "-t", "users",
            "-c", "id,name", "-w", "id > 1", "-o", "name DESC", "-l", "10", "--offset", "5",
        )
        fake_client.select_data.assert_called_once_with(
            "users", "id,name", "id > 1", "name DESC", 10, 5
        )

    def test_read_csv_quotes_every_value(self, cli_runner, fake_client):
        fake_client.select_data.return_value = make_result(rows=[(1, "Smith, John")])
        result = cli_runner("-f", "csv", "crud", "read", "-t", "users")

        assert result.stdout.splitlines() == ["id,name", '"1","Smith, John"']

    def test_read_empty(self, cli_runner, fake_client):
        fake_client.select_data.return_value = make_result(rows=[])
        result = cli_runner("crud", "read", "-t", "users")

        assert "No data found." in result.stdout
        assert "(0 rows)" not in result.stdout


@pytest.mark.unit
class TestCrudUpdate:
    def test_update_confirmed(self, cli_runner, fake_client):
        fake_client.update_data.return_value = 2
        result = cli_runner(
            "crud", "update", "-t", "users", "--data", '{"active": false}',
            "-w", "id < 3", "--confirm",
        )

        assert result.exit_code == 0, result.output
        fake_client.update_data.assert_called_once_with("users", {"active": False}, "id < 3")
        assert "Updated 2 row(s) in table 'users'" in result.stdout

    def test_update_declined(self, cli_runner, fake_client):
        result = cli_runner(
            "crud", "update", "-t", "users", "--data", '{"a": 1}', "-w", "id = 1",
            input="n\n",
        )

        assert "Update table 'users' WHERE id = 1?" in result.stdout
        assert "Operation cancelled." in result.stdout
        fake_client.update_data.assert_not_called()

    def test_update_invalid_json_fails_before_prompt(self, cli_runner, fake_client):
        result = cli_runner("crud", "update", "-t", "users", "--data", "{", "-w", "id = 1")

        assert isinstance(result.exception, SerializationError)
        assert "Update table" not in result.stdout

    def test_update_requires_filter(self, cli_runner, fake_client):
        result = cli_runner("crud", "update", "-t", "users", "--data", '{"a": 1}')
        assert result.exit_code == 2
        fake_client.update_data.assert_not_called()


@pytest.mark.unit
class TestCrudDelete:
    def test_delete_accepted(self, cli_runner, fake_client):
        fake_client.delete_data.return_value = 0
        result = cli_runner("crud", "delete", "-t", "users", "-w", "id = 9", input="y\n")

        assert result.exit_code == 0, result.output
        fake_client.delete_data.assert_called_once_with("users", "id = 9")
        assert "Deleted 0 row(s) from table 'users'" in result.stdout

    def test_delete_declined(self, cli_runner, fake_client):
        result = cli_runner("crud", "delete", "-t", "users", "-w", "true", input="n\n")

        assert "Delete from table 'users' WHERE true?" in result.stdout
        fake_client.delete_data.assert_not_called()
