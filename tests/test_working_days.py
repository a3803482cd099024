from datetime import date

from analytics.working_days import (
    calculate_working_days,
    get_public_holidays,
    get_working_hours_for_month,
    get_working_hours_for_period,
    iter_months,
    month_bounds,
)


def test_november_2025_has_one_weekday_holiday():
    result = calculate_working_days(2025, 11)
    assert result.total_days == 30
    assert result.weekdays == 20
    assert len(result.holidays) == 1
    assert result.holidays[0].date == "2025-11-17"
    assert result.working_days == 19
    assert result.working_hours == 152


def test_weekend_holidays_are_not_subtracted():
    # Jul 5 and 6 2025 fall on a weekend
    result = calculate_working_days(2025, 7)
    assert result.weekdays == 23
    assert result.holidays == ()
    assert result.working_hours == 184


def test_known_month_hours():
    assert get_working_hours_for_month(2025, 1) == 176
    assert get_working_hours_for_month(2025, 2) == 160
    assert get_working_hours_for_month(2025, 10) == 176
    # Dec 24, 25 and 26 are weekdays in 2025
    assert get_working_hours_for_month(2025, 12) == 160


def test_injected_holiday_calendar():
    custom = {date(2025, 11, 3): "Company day", "2025-11-04": "Another day"}
    result = calculate_working_days(2025, 11, holiday_calendar=custom)
    assert [h.name for h in result.holidays] == ["Company day", "Another day"]
    assert result.working_days == 18

    no_holidays = calculate_working_days(2025, 11, holiday_calendar={})
    assert no_holidays.working_hours == 160


def test_period_sums_whole_months_without_prorating():
    # Two touched months count in full
    assert get_working_hours_for_period("2025-11-15", "2025-12-05") == 152 + 160
    assert get_working_hours_for_period("2025-11-01", "2025-11-30") == 152
    assert get_working_hours_for_period(date(2025, 1, 31), date(2025, 2, 1)) == 176 + 160


def test_period_across_year_boundary():
    assert list(iter_months("2024-12-10", "2025-02-01")) == [(2024, 12), (2025, 1), (2025, 2)]


def test_month_bounds_leap_year():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


def test_public_holidays_are_ordered():
    holidays_2025 = get_public_holidays(2025)
    dates = [h["date"] for h in holidays_2025]
    assert dates == sorted(dates)
    assert "2025-11-17" in dates
    assert "2025-12-24" in dates
