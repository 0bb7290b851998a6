"""US settlement business-day calendar.

``count_business_days`` is a pure function of its two dates and the fixed
calendar below, so callers are free to memoize it.
"""

from __future__ import annotations

from datetime import date, timedelta

_MONDAY, _THURSDAY = 0, 3


def _nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + (n - 1) * 7)


def _last_weekday(year: int, month: int, weekday: int) -> date:
    if month == 12:
        cursor = date(year + 1, 1, 1) - timedelta(days=1)
    else:
        cursor = date(year, month + 1, 1) - timedelta(days=1)
    return cursor - timedelta(days=(cursor.weekday() - weekday) % 7)


def _observed(d: date) -> date:
    # Saturday holidays move to Friday, Sunday holidays to Monday.
    if d.weekday() == 5:
        return d - timedelta(days=1)
    if d.weekday() == 6:
        return d + timedelta(days=1)
    return d


def us_settlement_holidays(year: int) -> frozenset[date]:
    """Observed US settlement holidays that fall inside ``year``."""

    days = {
        _observed(date(year, 1, 1)),
        _observed(_nth_weekday(year, 2, _MONDAY, 3)),
        _observed(_last_weekday(year, 5, _MONDAY)),
        _observed(date(year, 7, 4)),
        _observed(_nth_weekday(year, 9, _MONDAY, 1)),
        _observed(_nth_weekday(year, 10, _MONDAY, 2)),
        _observed(date(year, 11, 11)),
        _observed(_nth_weekday(year, 11, _THURSDAY, 4)),
        _observed(date(year, 12, 25)),
        # New Year's Day of the next year, observed on Friday Dec 31.
        _observed(date(year + 1, 1, 1)),
    }
    if year >= 1983:
        days.add(_observed(_nth_weekday(year, 1, _MONDAY, 3)))
    if year >= 2021:
        days.add(_observed(date(year, 6, 19)))
    return frozenset(d for d in days if d.year == year)


def is_business_day(d: date) -> bool:
    if d.weekday() >= 5:
        return False
    return d not in us_settlement_holidays(d.year)


def count_business_days(start: date, end: date) -> int:
    """Count business days in the half-open range ``[start, end)``."""

    if start >= end:
        return 0
    holidays: dict[int, frozenset[date]] = {}
    count = 0
    day = start
    one_day = timedelta(days=1)
    while day < end:
        if day.weekday() < 5:
            year_holidays = holidays.get(day.year)
            if year_holidays is None:
                year_holidays = holidays[day.year] = us_settlement_holidays(day.year)
            if day not in year_holidays:
                count += 1
        day += one_day
    return count


__all__ = ["count_business_days", "is_business_day", "us_settlement_holidays"]
