"""
Calendar-aware lease duration.

Month and year steps clamp to the last valid day of the target month, so
Jan 31 + 1 month is Feb 28 (or 29) and Feb 29 + 1 year is Feb 28. Every
cursor is offset from its anchor date rather than stepped repeatedly, which
keeps a clamped month from dragging later months back (Jan 31 -> Feb 29 ->
Mar 31, never Mar 29).

Timestamps are normalized to UTC before anything else; values without an
offset are read as UTC. Ordering uses the full instant and the calendar walk
uses the UTC date.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from typing import Any, Optional

from agreements.models import DurationBreakdown


def parse_moment(value: Any) -> datetime:
    """Coerce a date, datetime or ISO-8601 string into an aware UTC ``datetime``.

    Raises ``ValueError`` when the value cannot be read as a date or timestamp.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date value")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value!r}") from exc
    else:
        raise ValueError(f"Invalid date: {value!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def try_parse_moment(value: Any) -> Optional[datetime]:
    try:
        return parse_moment(value)
    except ValueError:
        return None


def parse_date(value: Any) -> date:
    """The UTC calendar date of ``value``; see ``parse_moment``."""
    return parse_moment(value).date()


def add_months(anchor: date, months: int) -> date:
    """Offset ``anchor`` by whole calendar months, clamping the day."""
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(anchor.day, last_day))


def add_years(anchor: date, years: int) -> date:
    return add_months(anchor, years * 12)


def calculate_duration(start_date: Any, end_date: Any) -> DurationBreakdown:
    start_moment = parse_moment(start_date)
    end_moment = parse_moment(end_date)
    start, end = start_moment.date(), end_moment.date()
    total_days = (end - start).days
    if end_moment <= start_moment:
        return DurationBreakdown(years=0, months=0, days=total_days, total_days=total_days)

    years = 0
    while add_years(start, years + 1) <= end:
        years += 1
    year_cursor = add_years(start, years)

    months = 0
    while add_months(year_cursor, months + 1) <= end:
        months += 1
    cursor = add_months(year_cursor, months)

    return DurationBreakdown(years=years, months=months, days=(end - cursor).days, total_days=total_days)
