from __future__ import annotations

from datetime import datetime

import typer


def parse_local_datetime(value: str) -> datetime:
    """Parse user input into a naive local datetime (device clocks have no zone)."""
    text = (value or "").strip()
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DDTHH:MM:SS, got {value!r}")
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt.replace(microsecond=0)


def day_bounds(day: datetime) -> tuple[datetime, datetime]:
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    end = day.replace(hour=23, minute=59, second=59, microsecond=0)
    return start, end
