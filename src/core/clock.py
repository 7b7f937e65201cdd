"""Timestamp formatting used in reports and generated documents."""

from datetime import date, datetime, timezone
from typing import Optional


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def short_date(day: Optional[date] = None) -> str:
    """M/D/YYYY, as printed on title slides, reports and letters."""
    day = day or date.today()
    return f"{day.month}/{day.day}/{day.year}"
