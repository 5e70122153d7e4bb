"""Tests for query source resolution."""

import io
from unittest.mock import patch

import pytest

from dcon.core.exceptions import InputError
from dcon.core.query_source import resolve_query_source


@pytest.fixture
def sql_file(temp_dir):
    path = temp_dir / "select_42.sql"
    path.write_text("SELECT 42 AS answer\n")
    return str(path)


@pytest.mark.unit
def test_inline_query():
    assert resolve_query_source(inline="SELECT 1", file_path=None) == "SELECT 1"


@pytest.mark.unit
def test_inline_takes_precedence_over_file(sql_file):
    assert resolve_query_source(inline="SELECT 1", file_path=sql_file) == "SELECT 1"


@pytest.mark.unit
def test_file_query(sql_file):
    assert resolve_query_source(inline=None, file_path=sql_file) == "SELECT 42 AS answer\n"


@pytest.mark.unit
def test_file_not_found_raises_input_error():
    with pytest.raises(InputError, match="Query file not found"):
        resolve_query_source(inline=None, file_path="/nonexistent/file.sql")


@pytest.mark.unit
def test_stdin_query():
    with (
        patch("sys.stdin", new=io.StringIO("SELECT 99")),
        patch("sys.stdin.isatty", return_value=False),
    ):
        result = resolve_query_source(inline=None, file_path=None)
    assert result == "SELECT 99"


@pytest.mark.unit
def test_blank_stdin_is_no_query():
    with (
        patch("sys.stdin", new=io.StringIO("   \n")),
        patch("sys.stdin.isatty", return_value=False),
        pytest.raises(InputError, match="No query provided"),
    ):
        resolve_query_source(inline=None, file_path=None)


@pytest.mark.unit
def test_no_query_source_raises_input_error():
    with (
        patch("sys.stdin.isatty", return_value=True),
        pytest.raises(InputError, match="No query provided"),
    ):
        resolve_query_source(inline=None, file_path=None)


@pytest.mark.unit
def test_file_takes_precedence_over_stdin(sql_file):
    with patch("sys.stdin", new=io.StringIO("SELECT FROM STDIN")):
        assert resolve_query_source(inline=None, file_path=sql_file) == "SELECT 42 AS answer\n"
