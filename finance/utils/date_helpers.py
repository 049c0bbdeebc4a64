from calendar import monthrange
from datetime import date, timedelta
from dateutil.relativedelta import relativedelta


def month_bounds(year: int, month: int):
    """Return the first and last day of a calendar month."""
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def same_month(a: date | None, b: date | None) -> bool:
    if a is None or b is None:
        return False
    return (a.year, a.month) == (b.year, b.month)


def month_label(d: date) -> str:
    """Convert date to period string YYYY-MM"""
    return d.strftime("%Y-%m")


def iter_months(start: date, end: date):
    """Yield the first day of every month between ``start`` and ``end`` inclusive."""
    current = date(start.year, start.month, 1)
    last = date(end.year, end.month, 1)
    while current <= last:
        yield current
        current += relativedelta(months=1)


def add_months_clamped(d: date, months: int, day: int | None = None) -> date:
    """
    Shift ``d`` by ``months`` and pin it to ``day`` (or the current day).

    relativedelta clamps an absolute day to the last day of the target month,
    so Jan 31 + 1 month is Feb 28 (or 29), never Mar 3.
    """
    return d + relativedelta(months=months, day=day or d.day)


def js_weekday(d: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6."""
    return (d.weekday() + 1) % 7


def next_weekday(after: date, day_of_week: int) -> date:
    """First date strictly after ``after`` that falls on ``day_of_week`` (0 = Sunday)."""
    delta = (day_of_week - js_weekday(after)) % 7
    return after + timedelta(days=delta or 7)
