"""
Working days and working hours per calendar month.

Weekdays are Monday-Friday; public holidays falling on a weekday are removed
from the working days. One working day is HOURS_PER_WORKDAY hours.
"""
import calendar
from datetime import date, datetime
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Tuple

import holidays
from dateutil.relativedelta import relativedelta

from analytics.constants import HOLIDAY_COUNTRY, HOLIDAY_LANGUAGE, HOURS_PER_WORKDAY
from analytics.logger import get_logger
from analytics.models import Holiday, WorkingDaysResult

logger = get_logger(__name__)


def to_date(value) -> date:
    """Coerce a YYYY-MM-DD string, datetime or date to a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_months(date_from, date_to) -> Iterator[Tuple[int, int]]:
    """Yield (year, month) for every calendar month touched by [date_from, date_to]"""
    start = to_date(date_from).replace(day=1)
    end = to_date(date_to)

    current = start
    while current <= end:
        yield current.year, current.month
        current += relativedelta(months=1)


@lru_cache(maxsize=None)
def _country_holiday_map(year: int, country: str) -> MappingProxyType:
    calendar_for_year = holidays.country_holidays(country, years=year, language=HOLIDAY_LANGUAGE)
    logger.debug(f"Loaded {len(calendar_for_year)} public holidays for {country} {year}")
    return MappingProxyType({day.isoformat(): name for day, name in sorted(calendar_for_year.items())})


def get_public_holidays(year: int, country: str = HOLIDAY_COUNTRY) -> List[Dict]:
    """
    List the public holidays of a year.

    Returns:
        List of {'name', 'date'} dicts ordered by date
    """
    return [
        {'name': name, 'date': iso_date}
        for iso_date, name in _country_holiday_map(year, country).items()
    ]


def _holiday_name(holiday_calendar, day: date) -> Optional[str]:
    name = holiday_calendar.get(day)
    if name is None:
        name = holiday_calendar.get(day.isoformat())
    return name


def _count_working_days(year: int, month: int, holiday_calendar) -> WorkingDaysResult:
    total_days = calendar.monthrange(year, month)[1]

    weekdays = 0
    month_holidays = []

    for day in range(1, total_days + 1):
        current = date(year, month, day)
        # Monday=0 .. Friday=4
        if current.weekday() < 5:
            weekdays += 1
            holiday_name = _holiday_name(holiday_calendar, current)
            if holiday_name:
                month_holidays.append(Holiday(name=holiday_name, date=current.isoformat()))

    working_days = weekdays - len(month_holidays)

    return WorkingDaysResult(
        total_days=total_days,
        weekdays=weekdays,
        holidays=tuple(month_holidays),
        working_days=working_days,
        working_hours=working_days * HOURS_PER_WORKDAY,
    )


@lru_cache(maxsize=None)
def _cached_working_days(year: int, month: int, country: str) -> WorkingDaysResult:
    return _count_working_days(year, month, _country_holiday_map(year, country))


def calculate_working_days(
    year: int,
    month: int,
    holiday_calendar=None,
    country: str = HOLIDAY_COUNTRY
) -> WorkingDaysResult:
    """
    Calculate working days and hours for a given month.

    Args:
        year: Year (e.g. 2025)
        month: Month (1-12)
        holiday_calendar: Optional mapping of date (or ISO string) to holiday
                          name. When omitted the national calendar of
                          `country` is used and the result is memoized.
        country: ISO country code of the national holiday calendar

    Example:
        calculate_working_days(2025, 11).working_hours  # 152
    """
    if holiday_calendar is None:
        return _cached_working_days(year, month, country)
    return _count_working_days(year, month, holiday_calendar)


def get_working_hours_for_month(year: int, month: int, holiday_calendar=None,
                                country: str = HOLIDAY_COUNTRY) -> int:
    return calculate_working_days(year, month, holiday_calendar, country).working_hours


def get_working_hours_for_period(date_from, date_to, holiday_calendar=None,
                                 country: str = HOLIDAY_COUNTRY) -> int:
    """
    Total working hours of every calendar month touched by [date_from, date_to].

    Partially covered months count with their full working hours; edge months
    are not prorated.
    """
    total_working_hours = 0
    for year, month in iter_months(date_from, date_to):
        total_working_hours += get_working_hours_for_month(year, month, holiday_calendar, country)
    return total_working_hours
