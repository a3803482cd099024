"""
Multi-month aggregation of tracked hours into FTE metrics.

Period-level ratios are always computed as sum(hours) / sum(working hours)
with a single division at the end. Averaging per-month ratios would weight
short and long months equally and is never done here.

Planned FTE over a period is weighted by month: for every month present in
the data, each person who tracked time in that month contributes the planned
FTE record valid in that month, multiplied by the month's working hours.
Dividing the accumulated planned hours by the working hours of the whole
period gives the period planned FTE.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from analytics.constants import MONTH_ABBREVIATIONS
from analytics.fte import calculate_deviation, calculate_fte, calculate_team_monthly_fte
from analytics.logger import get_logger
from analytics.models import (
    MonthlyTrend,
    PeriodSummary,
    PersonMonthlyFTE,
    PersonPeriodFTE,
    PlannedFTERecord,
    TimesheetEntry,
)
from analytics.planned_fte import find_planned_fte_record
from analytics.project_helpers import round_half_up
from analytics.working_days import calculate_working_days, get_working_hours_for_period, month_bounds

logger = get_logger(__name__)


def _split_month_key(month_key: str) -> Tuple[int, int]:
    year, month = month_key.split('-')
    return int(year), int(month)


def month_label(month_key: str) -> str:
    """'2025-11' -> 'Nov 2025'"""
    year, month = _split_month_key(month_key)
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def group_entries_by_month(entries: Iterable[TimesheetEntry]) -> Dict[str, List[TimesheetEntry]]:
    """Partition entries by 'YYYY-MM', months in ascending order"""
    groups = {}
    for entry in entries:
        groups.setdefault(entry.month_key, []).append(entry)
    return dict(sorted(groups.items()))


def _team_size(entries: Iterable[TimesheetEntry]) -> int:
    return len({entry.person_email or entry.person_name for entry in entries})


def calculate_period_fte(entries: Iterable[TimesheetEntry], date_from, date_to) -> float:
    """Actual FTE of all entries over [date_from, date_to]"""
    total_hours = sum(entry.hours for entry in entries)
    return calculate_fte(total_hours, get_working_hours_for_period(date_from, date_to))


def _accumulate_planned_hours(
    entries: Iterable[TimesheetEntry],
    planned_records: List[PlannedFTERecord]
) -> Tuple[float, Dict[str, float]]:
    """
    Planned FTE x working hours, summed over the months present in the data.

    Returns:
        (total planned FTE-hours, planned FTE-hours per person); people with
        no applicable record in any month are absent from the dict
    """
    total_planned_hours = 0.0
    person_planned_hours = {}

    for month_key, month_entries in group_entries_by_month(entries).items():
        year, month = _split_month_key(month_key)
        month_start, month_end = month_bounds(year, month)
        month_working_hours = calculate_working_days(year, month).working_hours

        month_planned_fte = 0.0
        for person_name in sorted({entry.person_name for entry in month_entries}):
            record = find_planned_fte_record(planned_records, person_name, month_start, month_end)
            if record is None:
                continue
            month_planned_fte += record.fte_value
            person_planned_hours[person_name] = (
                person_planned_hours.get(person_name, 0.0) + record.fte_value * month_working_hours
            )

        total_planned_hours += month_planned_fte * month_working_hours

    return total_planned_hours, person_planned_hours


def calculate_period_planned_fte(
    entries: Iterable[TimesheetEntry],
    planned_records: Iterable[PlannedFTERecord],
    date_from,
    date_to
) -> float:
    """
    Month-weighted planned FTE of the people who tracked time in the period.

    A person contributes only in the months they tracked time, with the
    record valid in that month, weighted by that month's working hours.
    """
    period_working_hours = get_working_hours_for_period(date_from, date_to)
    if not period_working_hours:
        return 0.0

    total_planned_hours, _ = _accumulate_planned_hours(entries, list(planned_records))
    return round_half_up(total_planned_hours / period_working_hours, 2)


def calculate_person_period_planned_fte(
    entries: Iterable[TimesheetEntry],
    planned_records: Iterable[PlannedFTERecord],
    date_from,
    date_to
) -> Dict[str, float]:
    """
    Period-proportional planned FTE per person.

    Each person's planned FTE-hours are divided by the working hours of the
    entire period, not of the months they worked, so someone present for part
    of the period gets a proportionally diluted planned FTE.
    """
    period_working_hours = get_working_hours_for_period(date_from, date_to)
    _, person_planned_hours = _accumulate_planned_hours(entries, list(planned_records))

    if not period_working_hours:
        return {person: 0.0 for person in person_planned_hours}

    return {
        person: round_half_up(hours / period_working_hours, 2)
        for person, hours in person_planned_hours.items()
    }


def calculate_person_period_fte(
    entries: Iterable[TimesheetEntry],
    planned_records: Iterable[PlannedFTERecord],
    date_from,
    date_to
) -> List[PersonPeriodFTE]:
    """
    Actual vs period-proportional planned FTE per person.

    deviation_percent is None for people without any planned record.

    Returns:
        Rows sorted by actual FTE descending, then person name
    """
    entries = list(entries)
    period_working_hours = get_working_hours_for_period(date_from, date_to)
    planned = calculate_person_period_planned_fte(entries, planned_records, date_from, date_to)

    person_totals = {}
    for entry in entries:
        hours, count = person_totals.get(entry.person_name, (0.0, 0))
        person_totals[entry.person_name] = (hours + entry.hours, count + 1)

    rows = []
    for person_name, (hours, count) in person_totals.items():
        actual_fte = calculate_fte(hours, period_working_hours)
        planned_fte = planned.get(person_name)
        rows.append(PersonPeriodFTE(
            person_name=person_name,
            total_hours=round_half_up(hours, 2),
            entry_count=count,
            working_hours=period_working_hours,
            actual_fte=actual_fte,
            planned_fte=planned_fte,
            deviation_percent=calculate_deviation(actual_fte, planned_fte) if planned_fte is not None else None,
        ))

    return sorted(rows, key=lambda r: (-r.actual_fte, r.person_name))


def calculate_monthly_trends(
    entries: Iterable[TimesheetEntry],
    planned_records: Optional[Iterable[PlannedFTERecord]] = None
) -> List[MonthlyTrend]:
    """One row per month present in the data, in month order"""
    records = list(planned_records or [])
    trends = []

    for month_key, month_entries in group_entries_by_month(entries).items():
        year, month = _split_month_key(month_key)
        month_start, month_end = month_bounds(year, month)
        working_hours = calculate_working_days(year, month).working_hours

        month_hours = sum(entry.hours for entry in month_entries)
        team_size = _team_size(month_entries)
        total_fte = month_hours / working_hours if working_hours else 0.0

        planned_fte = 0.0
        for person_name in {entry.person_name for entry in month_entries}:
            record = find_planned_fte_record(records, person_name, month_start, month_end)
            if record is not None:
                planned_fte += record.fte_value

        trends.append(MonthlyTrend(
            month_key=month_key,
            label=month_label(month_key),
            tracked_hours=round_half_up(month_hours, 2),
            working_hours=working_hours,
            total_fte=round_half_up(total_fte, 2),
            average_fte=round_half_up(total_fte / team_size, 2) if team_size else 0.0,
            team_size=team_size,
            planned_fte=round_half_up(planned_fte, 2),
        ))

    return trends


def calculate_person_monthly_fte(
    entries: Iterable[TimesheetEntry],
    planned_records: Optional[Iterable[PlannedFTERecord]] = None
) -> List[PersonMonthlyFTE]:
    """
    PersonMonthlyFTE for every (person, month) in the data.

    The planned FTE of each month is the record valid in that month, so a
    mid-period change shows up from the month it takes effect.
    """
    records = list(planned_records or [])
    results = []

    for month_key, month_entries in group_entries_by_month(entries).items():
        year, month = _split_month_key(month_key)
        month_start, month_end = month_bounds(year, month)

        planned_map = {}
        for person_name in {entry.person_name for entry in month_entries}:
            record = find_planned_fte_record(records, person_name, month_start, month_end)
            if record is not None:
                planned_map[person_name] = record.fte_value

        results.extend(calculate_team_monthly_fte(month_entries, year, month, planned_map))

    return results


def calculate_period_summary(
    entries: Iterable[TimesheetEntry],
    planned_records: Iterable[PlannedFTERecord],
    date_from,
    date_to
) -> PeriodSummary:
    """Headline FTE figures of a period"""
    entries = list(entries)
    summary = PeriodSummary(date_from=str(date_from)[:10], date_to=str(date_to)[:10])
    summary.working_hours = get_working_hours_for_period(date_from, date_to)

    if not entries:
        return summary

    total_hours = sum(entry.hours for entry in entries)
    summary.total_hours = round_half_up(total_hours, 2)
    summary.team_size = _team_size(entries)
    summary.period_fte = calculate_fte(total_hours, summary.working_hours)
    summary.planned_fte = calculate_period_planned_fte(entries, planned_records, date_from, date_to)

    if summary.working_hours and summary.team_size:
        summary.average_fte = round_half_up(total_hours / summary.working_hours / summary.team_size, 2)

    if summary.planned_fte > 0:
        summary.deviation_percent = calculate_deviation(summary.period_fte, summary.planned_fte)

    logger.debug(
        f"Period {summary.date_from}..{summary.date_to}: {summary.total_hours} h, "
        f"FTE {summary.period_fte}, planned {summary.planned_fte}"
    )
    return summary
