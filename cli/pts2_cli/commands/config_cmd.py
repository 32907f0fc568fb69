from __future__ import annotations

import typer
from rich.markup import escape
from rich.table import Table

from .. import console
from ..config import load_config
from ..http import client_errors, make_client

app = typer.Typer(help="Controller configuration.")


@app.command("load")
def load_configuration(
        json_out: bool = typer.Option(False, "--json", help="Print raw packets as JSON."),
):
    """Read the pumps/grades/nozzles/probes/users configuration in one request."""
    with client_errors():
        client = make_client(load_config())
        try:
            packets = client.load_configuration()
        finally:
            client.close()

    if json_out:
        console.print_json([p.as_dict() for p in packets])
        return

    table = Table(title="Configuration")
    table.add_column("Id", justify="right")
    table.add_column("Type")
    table.add_column("Data")
    for p in packets:
        table.add_row(str(p.id), escape(p.type or "-"), "-" if p.data is None else escape(str(p.data)))
    console.print(table)
