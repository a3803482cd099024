"""
Report metrics consumed by the dashboard pages.
"""
from typing import Dict, Iterable, List, Optional

import pandas as pd

from analytics.activity_pairing import categorize_timesheet, is_ops_time
from analytics.fte import calculate_fte, calculate_fte_stats
from analytics.logger import get_logger
from analytics.models import (
    ActivityCategory,
    ActivityKeyword,
    CategorizedEntry,
    PersonMonthlyFTE,
    PlannedFTERecord,
    TimesheetEntry,
)
from analytics.period_aggregator import calculate_person_period_fte
from analytics.project_helpers import map_project_category, round_half_up
from analytics.working_days import to_date

logger = get_logger(__name__)


def _person_key(entry: TimesheetEntry) -> str:
    return entry.person_email or entry.person_name


def _percentage(part: float, total: float) -> float:
    return round_half_up(part / total * 100, 1) if total > 0 else 0.0


def calculate_dashboard_metrics(person_ftes: List[PersonMonthlyFTE]) -> Dict:
    """Headline figures of the overview: highest/lowest FTE with names, average, total"""
    if not person_ftes:
        return {
            'highest_fte': 0.0,
            'highest_fte_person': 'N/A',
            'lowest_fte': 0.0,
            'lowest_fte_person': 'N/A',
            'average_fte': 0.0,
            'total_team_fte': 0.0,
            'team_member_count': 0,
        }

    stats = calculate_fte_stats(person_ftes)

    # First person wins ties, as in a left-to-right scan
    highest = person_ftes[0]
    lowest = person_ftes[0]
    for person in person_ftes[1:]:
        if person.fte > highest.fte:
            highest = person
        if person.fte < lowest.fte:
            lowest = person

    return {
        'highest_fte': stats.highest_fte,
        'highest_fte_person': highest.person_name,
        'lowest_fte': stats.lowest_fte,
        'lowest_fte_person': lowest.person_name,
        'average_fte': stats.average_fte,
        'total_team_fte': stats.total_fte,
        'team_member_count': stats.team_member_count,
    }


def _rollup(entries: Iterable[TimesheetEntry], key: str, key_of) -> pd.DataFrame:
    """Hours, entry count and distinct people per key, largest first"""
    df = pd.DataFrame(
        [{key: key_of(e), 'hours': e.hours, 'person': _person_key(e)} for e in entries],
        columns=[key, 'hours', 'person']
    )
    if df.empty:
        return df

    grouped = df.groupby(key, sort=False).agg(
        total_hours=('hours', 'sum'),
        entry_count=('hours', 'size'),
        person_count=('person', 'nunique'),
    ).reset_index()
    grouped['share'] = grouped['total_hours'] / df['hours'].sum() if df['hours'].sum() > 0 else 0.0
    return grouped.sort_values('total_hours', ascending=False, kind='stable')


def calculate_project_metrics(entries: Iterable[TimesheetEntry], working_hours: float) -> List[Dict]:
    """
    Hours, FTE, entry and person counts per project category.

    Returns:
        List of dicts sorted by total hours descending
    """
    grouped = _rollup(entries, 'project_category', lambda e: map_project_category(e.project_name))
    if grouped.empty:
        return []

    return [
        {
            'project_category': row.project_category,
            'total_hours': round_half_up(row.total_hours, 2),
            'fte': calculate_fte(row.total_hours, working_hours),
            'entry_count': int(row.entry_count),
            'person_count': int(row.person_count),
            'percentage': round_half_up(row.share * 100, 1),
        }
        for row in grouped.itertuples(index=False)
    ]


def calculate_activity_metrics(categorized_entries: Iterable[CategorizedEntry]) -> List[Dict]:
    """Hours, entry and person counts per activity category, largest first"""
    # Grouped by the plain label, turned back into the enum below
    grouped = _rollup(categorized_entries, 'category', lambda e: e.category.value)
    if grouped.empty:
        return []

    return [
        {
            'category': ActivityCategory(row.category),
            'total_hours': round_half_up(row.total_hours, 2),
            'entry_count': int(row.entry_count),
            'person_count': int(row.person_count),
            'percentage': round_half_up(row.share * 100, 1),
        }
        for row in grouped.itertuples(index=False)
    ]


def _project_breakdown(person_entries: List[TimesheetEntry], total_hours: float) -> List[Dict]:
    project_hours = {}
    for entry in person_entries:
        category = map_project_category(entry.project_name)
        project_hours[category] = project_hours.get(category, 0.0) + entry.hours

    breakdown = [
        {'project': project, 'hours': round_half_up(hours, 2), 'percentage': _percentage(hours, total_hours)}
        for project, hours in project_hours.items()
    ]
    return sorted(breakdown, key=lambda p: p['hours'], reverse=True)


def _ops_activity_breakdown(
    person_entries: List[TimesheetEntry],
    keywords: List[ActivityKeyword]
) -> Optional[List[Dict]]:
    ops_entries = [e for e in person_entries if is_ops_time(e.project_name)]
    if not ops_entries:
        return None

    activity_hours = {}
    for entry in categorize_timesheet(ops_entries, keywords, strict=False):
        if entry.category is ActivityCategory.OTHER:
            continue
        activity_hours[entry.category] = activity_hours.get(entry.category, 0.0) + entry.hours

    ops_total = sum(e.hours for e in ops_entries)
    activities = [
        {'activity': category, 'hours': round_half_up(hours, 2), 'percentage': _percentage(hours, ops_total)}
        for category, hours in activity_hours.items()
        if round_half_up(hours, 2) > 0
    ]
    if not activities:
        return None
    return sorted(activities, key=lambda a: a['hours'], reverse=True)


def calculate_team_member_breakdown(
    entries: Iterable[TimesheetEntry],
    keywords: Iterable[ActivityKeyword],
    planned_records: Iterable[PlannedFTERecord],
    date_from,
    date_to
) -> List[Dict]:
    """
    Per-person detail of a period: totals, actual vs planned FTE, hours by
    project category and, for people with OPS/Guiding time, hours by OPS
    activity (None when there is none).

    Returns:
        List of dicts sorted by person name
    """
    entries = list(entries)
    keywords = list(keywords)
    fte_rows = {
        row.person_name: row
        for row in calculate_person_period_fte(entries, planned_records, date_from, date_to)
    }

    by_person = {}
    for entry in entries:
        by_person.setdefault(entry.person_name, []).append(entry)

    members = []
    for person_name in sorted(by_person):
        person_entries = by_person[person_name]
        fte_row = fte_rows[person_name]
        total_hours = sum(e.hours for e in person_entries)

        members.append({
            'person': person_name,
            'total_hours': round_half_up(total_hours, 2),
            'actual_fte': fte_row.actual_fte,
            'planned_fte': fte_row.planned_fte,
            'deviation': fte_row.deviation_percent,
            'projects': _project_breakdown(person_entries, total_hours),
            'ops_activities': _ops_activity_breakdown(person_entries, keywords),
        })

    logger.debug(f"Built team breakdown for {len(members)} people")
    return members


def get_month_data(entries: Iterable[TimesheetEntry], year: int, month: int) -> List[TimesheetEntry]:
    return [e for e in entries if e.year == year and e.month == month]


def get_date_range_data(entries: Iterable[TimesheetEntry], date_from, date_to) -> List[TimesheetEntry]:
    """Entries dated within [date_from, date_to], both inclusive"""
    start, end = to_date(date_from).isoformat(), to_date(date_to).isoformat()
    return [e for e in entries if start <= e.date <= end]
