"""Date parsing and report-kind helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from typing import Literal

ReportKind = Literal["current", "historical", "forecast"]

# Tried in order; the first format that parses wins.
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%d %b %Y",
    "%Y/%m/%d",
)


def parse_date(value: str) -> date:
    """Parse a calendar date written in any of the supported formats."""
    candidate = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    raise ValueError(
        f"Unrecognized date {value!r}; expected one of: "
        "YYYY-MM-DD, DD.MM.YYYY, MM/DD/YYYY, DD-MM-YYYY, DD Mon YYYY, YYYY/MM/DD."
    )


def today_utc() -> date:
    return datetime.now(UTC).date()


def report_kind(requested: date | None, today: date | None = None) -> ReportKind:
    """Classify a query: no date is current, past or today is historical, later is forecast."""
    if requested is None:
        return "current"
    if requested <= (today or today_utc()):
        return "historical"
    return "forecast"


def start_of_day_utc(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=UTC)
