"""Shared test fixtures for dcon."""

from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from dcon.cli.main import app

_ISOLATED_ENV = (
    "PGHOST",
    "PGPORT",
    "PGDATABASE",
    "PGUSER",
    "PGPASSWORD",
    "DCON_PROFILE",
    "DCON_SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep the developer's PG*/DCON_* environment out of tests."""
    for var in _ISOLATED_ENV:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_args(temp_dir):
    """Point --config at a file that does not exist, so defaults apply."""
    return ["--config", str(temp_dir / "config.toml")]


@pytest.fixture
def cli_runner(runner, config_args):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, [*config_args, *args], **kwargs)

    return invoke


@pytest.fixture
def fake_client():
    """Replace PgClient in the CLI with a MagicMock.

    The mock is its own context manager, so ``with get_client(ctx) as
    client`` hands it straight to the command. The patched class is
    available as ``fake_client.factory``.
    """
    client = MagicMock(name="PgClient()")
    client.__enter__.return_value = client
    with patch("dcon.cli.commands._shared.PgClient", return_value=client) as cls:
        client.factory = cls
        yield client
