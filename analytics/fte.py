"""
FTE (Full-Time Equivalent) calculations.

FTE is the ratio of tracked hours to the expected working hours of a period;
1.0 FTE means the person tracked exactly the full-time hours.
"""
from typing import Iterable, List, Mapping, Optional

from analytics.logger import get_logger
from analytics.models import FTEStats, PersonMonthlyFTE, TimesheetEntry
from analytics.project_helpers import round_half_up
from analytics.working_days import calculate_working_days

logger = get_logger(__name__)


def calculate_fte(tracked_hours: float, working_hours_in_period: float) -> float:
    """
    Calculate FTE from tracked hours, rounded to 2 decimal places.

    Example:
        calculate_fte(160, 160)  # 1.0
        calculate_fte(80, 160)   # 0.5
        calculate_fte(180, 160)  # 1.13
    """
    if not working_hours_in_period:
        return 0.0
    return round_half_up(tracked_hours / working_hours_in_period, 2)


def calculate_monthly_fte(tracked_hours: float, year: int, month: int) -> float:
    """FTE of hours tracked within one calendar month"""
    working_hours = calculate_working_days(year, month).working_hours
    return calculate_fte(tracked_hours, working_hours)


def calculate_deviation(fte: float, planned_fte: float) -> float:
    """Percentage deviation of actual from planned FTE; 0 when nothing is planned"""
    if planned_fte is None or planned_fte <= 0:
        return 0.0
    return round_half_up((fte - planned_fte) / planned_fte * 100, 1)


def calculate_team_monthly_fte(
    entries: Iterable[TimesheetEntry],
    year: int,
    month: int,
    planned_ftes: Optional[Mapping[str, float]] = None
) -> List[PersonMonthlyFTE]:
    """
    Calculate FTE for every person with entries in the given month.

    Args:
        entries: Timesheet entries (entries of other months are ignored)
        year: Year
        month: Month (1-12)
        planned_ftes: Optional map of person name to planned FTE

    Returns:
        PersonMonthlyFTE rows sorted by person name
    """
    working_hours = calculate_working_days(year, month).working_hours

    person_hours = {}
    for entry in entries:
        if entry.year == year and entry.month == month:
            person_hours[entry.person_name] = person_hours.get(entry.person_name, 0.0) + entry.hours

    results = []
    for person_name, hours in person_hours.items():
        fte = calculate_fte(hours, working_hours)
        row = PersonMonthlyFTE(
            person_name=person_name,
            year=year,
            month=month,
            tracked_hours=hours,
            working_hours=working_hours,
            fte=fte,
        )

        planned = planned_ftes.get(person_name) if planned_ftes else None
        if planned is not None:
            row.planned_fte = planned
            row.deviation_percent = calculate_deviation(fte, planned)

        results.append(row)

    logger.debug(f"Calculated monthly FTE for {len(results)} people in {year}-{month:02d}")
    return sorted(results, key=lambda r: r.person_name)


def calculate_total_team_fte(person_ftes: List[PersonMonthlyFTE]) -> float:
    return round_half_up(sum(p.fte for p in person_ftes), 2)


def calculate_fte_stats(person_ftes: List[PersonMonthlyFTE]) -> FTEStats:
    """
    Summary statistics over individual FTEs.

    total_fte is the plain sum of the individual FTEs (team capacity), not
    an hours-weighted ratio.
    """
    if not person_ftes:
        return FTEStats()

    fte_values = [p.fte for p in person_ftes]
    total_fte = sum(fte_values)

    return FTEStats(
        total_fte=round_half_up(total_fte, 2),
        average_fte=round_half_up(total_fte / len(fte_values), 2),
        highest_fte=max(fte_values),
        lowest_fte=min(fte_values),
        team_member_count=len(fte_values),
    )
