"""Retention-period arithmetic for active and inactive records."""

from __future__ import annotations

import datetime as dt

from .classification import PERIOD_SEPARATOR

DATE_FORMAT = "%d-%m-%Y"


def parse_date(value: str) -> dt.date:
    """Parse a ``dd-mm-yyyy`` date, raising :class:`ValueError` if malformed."""

    return dt.datetime.strptime(value.strip(), DATE_FORMAT).date()


def format_date(value: dt.date) -> str:
    return value.strftime(DATE_FORMAT)


def format_period(start: dt.date, end: dt.date | None = None) -> str:
    if end is None:
        return format_date(start)
    return f"{format_date(start)}{PERIOD_SEPARATOR}{format_date(end)}"


def active_period(start: dt.date, years: int | None) -> str:
    """Return the active retention period (jangka simpan) starting at ``start``.

    The period ends on 31 December of the last retention year, so a record
    kept two years from March 2020 stays active until the end of 2021.  No
    retention years keeps it active until the end of the starting year.
    """

    if years is not None and years < 0:
        raise ValueError("retention years must not be negative")
    end_year = start.year + years - 1 if years else start.year
    return format_period(start, dt.date(end_year, 12, 31))


def period_end(period: str | None) -> dt.date | None:
    """Return the last date of ``period`` or ``None`` when it is malformed."""

    if not period:
        return None
    parts = period.split(PERIOD_SEPARATOR)
    try:
        return parse_date(parts[-1])
    except ValueError:
        return None


def period_end_year(period: str | None) -> int | None:
    """Return the year the last date of ``period`` falls in."""

    end = period_end(period)
    return end.year if end else None


def days_remaining(period: str | None, today: dt.date) -> int | None:
    """Days from ``today`` until ``period`` ends; negative once it has passed."""

    end = period_end(period)
    if end is None:
        return None
    return (end - today).days


def inactive_period(active_end_year: int | None, inactive_years: int | None) -> str:
    """Return the inactive retention period following an active period.

    It starts on 1 January of the year after ``active_end_year`` and lasts
    ``inactive_years`` whole years.  ``"-"`` is returned when either input is
    unknown.
    """

    if active_end_year is None or inactive_years is None or inactive_years < 0:
        return "-"
    start_year = active_end_year + 1
    start = dt.date(start_year, 1, 1)
    if inactive_years == 0:
        return format_period(start)
    end = dt.date(start_year + inactive_years - 1, 12, 31)
    return format_period(start, end)
