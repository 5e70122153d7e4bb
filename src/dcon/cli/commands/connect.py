from __future__ import annotations

import typer

from dcon.cli.commands._shared import get_client, output_records
from dcon.core.models import ConnectionInfo


def connect_command(ctx: typer.Context) -> None:
    """Connect to PostgreSQL and show connection information."""
    with get_client(ctx) as client:
        client.test_connection()
        info = client.get_connection_info()

    output_records(ctx, ConnectionInfo, info)
