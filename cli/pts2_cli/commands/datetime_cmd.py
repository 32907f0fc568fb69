from __future__ import annotations

from datetime import datetime

import typer
from pts2_client import format_pts_datetime

from .. import console
from ..config import load_config
from ..formatting import parse_local_datetime
from ..http import client_errors, make_client

app = typer.Typer(help="Controller clock.", no_args_is_help=True)


@app.command("get")
def get_datetime(
        json_out: bool = typer.Option(False, "--json", help="Print JSON."),
):
    with client_errors():
        client = make_client(load_config())
        try:
            dt = client.get_date_time()
        finally:
            client.close()

    if json_out:
        console.print_json(
            {
                "dateTime": format_pts_datetime(dt.date_time),
                "iso": dt.date_time.isoformat(),
                "autoSynchronize": dt.auto_synchronize,
                "utcOffset": dt.utc_offset,
            }
        )
        return
    console.print(
        f"DateTime={format_pts_datetime(dt.date_time)} UTCOffset={dt.utc_offset} "
        f"AutoSynchronize={dt.auto_synchronize}"
    )


@app.command("set")
def set_datetime(
        value: str | None = typer.Argument(None, help="YYYY-MM-DDTHH:MM:SS (default: local now)."),
        utc_offset: int = typer.Option(0, "--utc-offset", help="UTC offset in minutes."),
        auto_sync: bool = typer.Option(False, "--auto-sync", help="Enable automatic synchronization."),
):
    dt = parse_local_datetime(value) if value else datetime.now().replace(microsecond=0)
    formatted = format_pts_datetime(dt)
    with client_errors():
        client = make_client(load_config())
        try:
            client.set_date_time(dt, utc_offset=utc_offset, auto_synchronize=auto_sync)
        finally:
            client.close()
    console.ok(f"SetDateTime -> {formatted}")
