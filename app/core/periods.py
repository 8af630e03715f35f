"""
Period resolution for aggregate queries.

A period token names a window that ends "now": ``day``, ``week``, ``month``,
``year`` or ``all``. Month and year windows move by calendar units, clamping
the day when the target month is shorter (31 March - 1 month = 28/29 Feb).
"""
import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional

PERIODS = ("day", "week", "month", "year", "all")
DEFAULT_PERIOD = "month"


def utcnow() -> datetime:
    """Naive UTC timestamp, comparable with the values the database stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_period(token: Optional[str]) -> str:
    """Boundary helper: unknown or missing tokens fall back to ``month``."""
    if token in PERIODS:
        return token
    return DEFAULT_PERIOD


def shift_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_cutoff(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Return the earliest instant included in ``period``, or None for ``all``.
    Only the five canonical tokens are accepted.
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown period '{period}'. Expected one of {', '.join(PERIODS)}.")
    now = now or utcnow()
    if period == "day":
        return now - timedelta(hours=24)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return shift_months(now, -1)
    if period == "year":
        return shift_months(now, -12)
    return None


def months_between(start: datetime, end: datetime) -> int:
    """Whole calendar months elapsed from ``start`` to ``end`` (0 if end precedes start)."""
    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    # The last month only counts once its day/time has been reached
    if shift_months(start, months) > end:
        months -= 1
    return max(months, 0)
