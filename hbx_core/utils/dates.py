"""
Calendar Arithmetic Helpers.

Month-boundary and year arithmetic shared by the coverage period engine,
plus the age calculation used by Person and CensusMember.

Source: https://dateutil.readthedocs.io/en/stable/relativedelta.html
Verified: 2025-12-18
"""

from datetime import date, datetime
from typing import Union

from dateutil.relativedelta import relativedelta

DATE_FMT = "%Y-%m-%d"

DateLike = Union[str, date, datetime]


def to_date(date_like: DateLike) -> date:
    """
    Normalize a date-like value to a calendar date.

    Accepts `date`, `datetime` (time of day is dropped) and ISO
    'YYYY-MM-DD' strings.
    """
    if isinstance(date_like, datetime):
        return date_like.date()
    if isinstance(date_like, date):
        return date_like
    if isinstance(date_like, str):
        return datetime.strptime(date_like.strip(), DATE_FMT).date()
    raise TypeError(f"Unsupported type for date: {type(date_like)}")


def beginning_of_month(on: date) -> date:
    return on.replace(day=1)


def end_of_month(on: date) -> date:
    """Last calendar day of `on`'s month."""
    return on + relativedelta(day=31)


def next_month(on: date) -> date:
    """Same day next month, clamped to that month's last day (Jan 31 -> Feb 28)."""
    return on + relativedelta(months=1)


def first_of_next_month(on: date) -> date:
    return end_of_month(on) + relativedelta(days=1)


def add_years(on: date, years: int = 1) -> date:
    """
    Shift `on` by whole calendar years, preserving month and day.

    Feb 29 lands on Feb 28 when the target year is not a leap year.
    """
    return on + relativedelta(years=years)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _birthday_in(birth_date: date, year: int) -> tuple[int, int]:
    # Feb 29 birthdays fall on Mar 1 in common years
    if (birth_date.month, birth_date.day) == (2, 29) and not is_leap_year(year):
        return (3, 1)
    return (birth_date.month, birth_date.day)


def age_on(birth_date: date, as_of: date) -> int:
    """
    Age in whole years on `as_of` for someone born on `birth_date`.

    Args:
        birth_date: Date of birth
        as_of: Date on which the age is measured

    Returns:
        Completed years; one less than the year difference while the
        birthday has not yet been reached in `as_of`'s year.

    Example:
        >>> age_on(date(1990, 6, 15), date(2020, 6, 14))
        29
    """
    age = as_of.year - birth_date.year
    if (as_of.month, as_of.day) < _birthday_in(birth_date, as_of.year):
        age -= 1
    return age
