from __future__ import annotations

from datetime import date, datetime, time, timedelta


def date_range_filters(start_date, end_date, col):
    if start_date is None and end_date is None:
        return
    if start_date is not None:
        yield col >= start_date
    if end_date is not None:
        yield col <= end_date


def timestamp_range_filters(start_date, end_date, col):
    """Like ``date_range_filters`` for a DateTime column; ``end_date`` counts in full."""
    if start_date is not None:
        yield col >= datetime.combine(start_date, time.min)
    if end_date is not None:
        yield col < datetime.combine(end_date + timedelta(days=1), time.min)


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def display_date(d: date) -> str:
    # e.g. "Thu Jan 01 2026"
    return d.strftime("%a %b %d %Y")
