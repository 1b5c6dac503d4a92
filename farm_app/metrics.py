"""
farm_app/metrics.py
-------------------
Derived values that are computed on read and never stored: animal age,
transaction totals and Kenyan Shilling formatting.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .config import CURRENCY_SYMBOL

UNKNOWN_AGE = "Unknown"

_KES_STRIP = re.compile(r"[KSh,\s]")
_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit if count == 1 else unit + 's'}"


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return isoparse(value).date()
        except ValueError:
            return None
    return None


def calculate_age(
    date_of_birth: Any,
    fallback_date: Any = None,
    today: Optional[date] = None,
) -> str:
    """
    Human readable age such as "10 days", "3 months" or "2 years, 1 month".

    The primary date wins when present; the fallback (date of birth on farm)
    is only consulted when the primary is missing. A missing, unparsable or
    future date gives "Unknown".
    """
    raw = date_of_birth if date_of_birth not in (None, "") else fallback_date
    birth = _to_date(raw)
    if birth is None:
        return UNKNOWN_AGE

    today = today or date.today()
    if birth > today:
        return UNKNOWN_AGE

    delta = relativedelta(today, birth)
    years = delta.years
    months = delta.months
    days = (today - birth).days

    if days < 30:
        return _plural(days, "day")
    if years == 0:
        return _plural(months, "month")
    if months == 0:
        return _plural(years, "year")
    return f"{_plural(years, 'year')}, {_plural(months, 'month')}"


def livestock_age(animal: Any, today: Optional[date] = None) -> str:
    # Arrival date is the last resort for bought-in animals
    fallback = animal.date_of_birth_on_farm or animal.date_of_arrival_at_farm
    return calculate_age(animal.date_of_birth, fallback, today=today)


def format_kes(amount: Any) -> str:
    if amount is None:
        return f"{CURRENCY_SYMBOL} 0.00"
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return f"{CURRENCY_SYMBOL} 0.00"
    if math.isnan(value):
        return f"{CURRENCY_SYMBOL} 0.00"
    return f"{CURRENCY_SYMBOL} {value:,.2f}"


def parse_kes(value: str) -> float:
    clean = _KES_STRIP.sub("", value or "")
    m = _LEADING_NUMBER.match(clean)
    if not m:
        return 0.0
    return float(m.group(0))


def validate_kes(value: str) -> bool:
    parsed = parse_kes(value)
    return not math.isnan(parsed) and parsed >= 0


def line_total(quantity: Any, unit_price: Any) -> float:
    return float(quantity or 0) * float(unit_price or 0)


def coalesce_numbers(row: Any, *fields: str) -> dict[str, float]:
    """Read numeric attributes off a row, mapping NULL to 0."""
    out: dict[str, float] = {}
    for f in fields:
        v = getattr(row, f, None)
        out[f] = float(v) if v is not None else 0.0
    return out
