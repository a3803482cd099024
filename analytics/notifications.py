"""
Data-quality notifications shown above the dashboard.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from analytics.activity_pairing import (
    calculate_quality_score,
    categorize_timesheet,
    get_relevant_entries,
    get_unpaired_entries,
)
from analytics.constants import FTE_DEVIATION_THRESHOLD
from analytics.logger import get_logger
from analytics.models import ActivityKeyword, CategorizedEntry, PersonPeriodFTE, PlannedFTERecord, TimesheetEntry
from analytics.period_aggregator import calculate_person_period_fte

logger = get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    id: str
    type: str  # info | warning | error
    title: str
    message: str
    priority: int  # higher is shown first
    action_text: Optional[str] = None


def check_unpaired_items(categorized_entries: List[CategorizedEntry]) -> Optional[Notification]:
    """Warn when categorized entries contain Unpaired items"""
    relevant = get_relevant_entries(categorized_entries)
    unpaired_count = len(get_unpaired_entries(relevant))
    if not unpaired_count:
        return None

    unpaired_share = 100 - calculate_quality_score(relevant)
    return Notification(
        id='unpaired-items',
        type='warning',
        title='Unpaired Timesheet Items',
        message=(
            f"{unpaired_count} timesheet entries ({unpaired_share:.1f}%) are not categorized. "
            f"Review and add missing keywords."
        ),
        priority=2,
        action_text='Review in Review Buddy',
    )


def check_fte_deviations(
    person_rows: Iterable[PersonPeriodFTE],
    threshold: float = FTE_DEVIATION_THRESHOLD
) -> Optional[Notification]:
    """
    Warn about people whose actual FTE is more than `threshold` percent
    away from their planned FTE. People without a plan are ignored.
    """
    deviations = [
        row for row in person_rows
        if row.planned_fte and row.deviation_percent is not None
        and abs(row.deviation_percent) > threshold
    ]
    if not deviations:
        return None

    top = max(deviations, key=lambda row: abs(row.deviation_percent))
    return Notification(
        id='fte-deviations',
        type='warning',
        title='FTE Deviations Detected',
        message=(
            f"{len(deviations)} team member(s) have FTE deviations > {threshold:g}%. "
            f"Highest: {top.person_name} ({abs(top.deviation_percent):.1f}% off)."
        ),
        priority=3,
        action_text='View Team Dashboard',
    )


def get_notifications(
    entries: Iterable[TimesheetEntry],
    keywords: Iterable[ActivityKeyword],
    planned_records: Iterable[PlannedFTERecord],
    date_from,
    date_to,
    threshold: float = FTE_DEVIATION_THRESHOLD
) -> List[Notification]:
    """All active notifications of a period, highest priority first"""
    entries = list(entries)
    notifications = []

    unpaired = check_unpaired_items(categorize_timesheet(entries, keywords, strict=True))
    if unpaired:
        notifications.append(unpaired)

    person_rows = calculate_person_period_fte(entries, planned_records, date_from, date_to)
    deviations = check_fte_deviations(person_rows, threshold)
    if deviations:
        notifications.append(deviations)

    logger.debug(f"{len(notifications)} notification(s) for {date_from}..{date_to}")
    return sorted(notifications, key=lambda n: n.priority, reverse=True)
