from __future__ import annotations

from datetime import datetime

import typer
from pts2_client import format_pts_datetime

from .. import console
from ..config import load_config
from ..formatting import day_bounds
from ..http import client_errors, make_client

PREVIEW_ROWS = 5


def run_test(
        pump: int = typer.Option(0, "--pump", min=0, help="Pump number for the report."),
        report: bool = typer.Option(True, "--report/--no-report", help="Run ReportGetPumpTransactions for today."),
        set_datetime: bool = typer.Option(
            False, "--set-datetime", help="Set device datetime to local now (disabled by default)."
        ),
):
    """Run a safe test flow (load config, get datetime, sample report)."""
    with client_errors():
        client = make_client(load_config())
        try:
            console.info("Loading configuration...")
            client.load_configuration()
            console.ok("Configuration loaded")

            console.info("GetDateTime...")
            dt = client.get_date_time()
            console.ok(f"Device DateTime: {format_pts_datetime(dt.date_time)} (UTCOffset={dt.utc_offset})")

            if set_datetime:
                now = datetime.now().replace(microsecond=0)
                console.info(f"SetDateTime -> {format_pts_datetime(now)}")
                client.set_date_time(now, utc_offset=0, auto_synchronize=False)
                console.ok("Device clock updated")

            if report:
                start, end = day_bounds(datetime.now())
                console.info(
                    f"ReportGetPumpTransactions pump={pump} "
                    f"from={format_pts_datetime(start)} to={format_pts_datetime(end)}"
                )
                rows = client.report_get_pump_transactions(pump, start, end)
                console.ok(f"Rows: {len(rows)}")
                if rows:
                    console.print_json(rows[:PREVIEW_ROWS])
                    if len(rows) > PREVIEW_ROWS:
                        console.print("... (truncated)")
        finally:
            client.close()
