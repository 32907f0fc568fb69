from __future__ import annotations

from datetime import datetime

import typer
from pts2_client import format_pts_datetime

from .. import console
from ..config import load_config
from ..formatting import day_bounds, parse_local_datetime
from ..http import client_errors, make_client

app = typer.Typer(help="Controller reports.", no_args_is_help=True)


@app.command("transactions")
def pump_transactions(
        pump: int = typer.Option(..., "--pump", min=0, help="Pump number."),
        date_from: str | None = typer.Option(None, "--from", help="Start, YYYY-MM-DDTHH:MM:SS (default: today 00:00:00)."),
        date_to: str | None = typer.Option(None, "--to", help="End, YYYY-MM-DDTHH:MM:SS (default: today 23:59:59)."),
        json_out: bool = typer.Option(False, "--json", help="Print rows as JSON."),
):
    today_start, today_end = day_bounds(datetime.now())
    start = parse_local_datetime(date_from) if date_from else today_start
    end = parse_local_datetime(date_to) if date_to else today_end

    with client_errors():
        client = make_client(load_config())
        try:
            rows = client.report_get_pump_transactions(pump, start, end)
        finally:
            client.close()

    if json_out:
        console.print_json(rows)
        return
    console.info(f"pump={pump} from={format_pts_datetime(start)} to={format_pts_datetime(end)} rows={len(rows)}")
    if rows:
        console.print_json(rows)
