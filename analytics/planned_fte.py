"""
Planned FTE records with temporal versioning.

A person has at most one open record (valid_to None). Recording a new value
closes the open record the day before the new one starts, so the validity
intervals of one person never overlap.
"""
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from analytics.constants import FTE_MAX, FTE_MIN, FTE_STEP
from analytics.logger import get_logger
from analytics.models import PlannedFTERecord
from analytics.working_days import to_date

logger = get_logger(__name__)


def validate_fte_value(value) -> float:
    """
    Validate an admin-entered planned FTE.

    Raises:
        ValueError: value is not a number, outside [0, 2] or not a multiple of 0.05
    """
    try:
        fte = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"FTE must be a number, got {value!r}")

    if fte != fte or fte < FTE_MIN or fte > FTE_MAX:
        raise ValueError(f"FTE must be between {FTE_MIN:g} and {FTE_MAX:g}")

    if Decimal(str(fte)) % Decimal(str(FTE_STEP)) != 0:
        raise ValueError(
            f"FTE must be in increments of {FTE_STEP:g} (e.g., 0.05, 0.10, 0.15, ...)"
        )

    return fte


def get_open_record(records: Iterable[PlannedFTERecord], person_name: str) -> Optional[PlannedFTERecord]:
    for record in records:
        if record.person_name == person_name and record.is_current:
            return record
    return None


def latest_version_boundary(records: Iterable[PlannedFTERecord], person_name: str) -> Optional[date]:
    """
    Latest date a new version of a person must start after: the valid_to of
    closed records and the valid_from of the open record. None without records.
    """
    boundaries = [
        record.valid_from if record.is_current else record.valid_to
        for record in records
        if record.person_name == person_name
    ]
    return max(boundaries) if boundaries else None


def add_planned_fte_version(
    records: Iterable[PlannedFTERecord],
    person_name: str,
    fte_value,
    valid_from
) -> List[PlannedFTERecord]:
    """
    Return a new record list with a new current planned FTE for a person.

    The person's open record, if any, gets valid_to = valid_from - 1 day.

    Raises:
        ValueError: invalid FTE value, or valid_from on or before the end of
                    a closed record or the start of the open record
    """
    if not person_name:
        raise ValueError("Person name is required")

    fte = validate_fte_value(fte_value)
    start = to_date(valid_from)
    records = list(records)

    latest = latest_version_boundary(records, person_name)
    if latest is not None and start <= latest:
        raise ValueError(
            f"Valid from {start.isoformat()} must be after {latest.isoformat()}, "
            f"the latest date already covered for {person_name}"
        )

    open_record = get_open_record(records, person_name)
    result = []
    for record in records:
        if record is open_record:
            closed_to = start - timedelta(days=1)
            result.append(PlannedFTERecord(
                person_name=record.person_name,
                fte_value=record.fte_value,
                valid_from=record.valid_from,
                valid_to=closed_to,
            ))
            logger.info(
                f"Closed FTE record for {person_name}: {record.fte_value} "
                f"(valid until {closed_to.isoformat()})"
            )
        else:
            result.append(record)

    result.append(PlannedFTERecord(person_name=person_name, fte_value=fte, valid_from=start))
    return result


def find_planned_fte_record(
    records: Iterable[PlannedFTERecord],
    person_name: str,
    period_start,
    period_end
) -> Optional[PlannedFTERecord]:
    """
    The record of a person whose validity overlaps [period_start, period_end].

    Should several overlap, the one with the latest valid_from wins.
    """
    start, end = to_date(period_start), to_date(period_end)
    best = None
    for record in records:
        if record.person_name != person_name or not record.overlaps(start, end):
            continue
        if best is None or record.valid_from > best.valid_from:
            best = record
    return best


def records_overlapping(records: Iterable[PlannedFTERecord], date_from, date_to) -> List[PlannedFTERecord]:
    """Records with valid_from <= date_to and (valid_to is None or valid_to >= date_from)"""
    start, end = to_date(date_from), to_date(date_to)
    return [r for r in records if r.overlaps(start, end)]


def get_current_planned_fte(records: Iterable[PlannedFTERecord]) -> List[Dict]:
    """
    Latest record per person with its status.

    Returns:
        List of dicts (person_name, fte_value, valid_from, valid_to, status)
        sorted by person name; status is 'active' for open records
        and 'historical' otherwise
    """
    latest = {}
    for record in records:
        current = latest.get(record.person_name)
        if current is None or record.valid_from > current.valid_from:
            latest[record.person_name] = record

    return [
        {
            'person_name': record.person_name,
            'fte_value': record.fte_value,
            'valid_from': record.valid_from,
            'valid_to': record.valid_to,
            'status': 'active' if record.is_current else 'historical',
        }
        for _, record in sorted(latest.items())
    ]


def find_overlapping_records(
    records: Iterable[PlannedFTERecord]
) -> List[Tuple[PlannedFTERecord, PlannedFTERecord]]:
    """Pairs of same-person records whose validity intervals overlap"""
    by_person = {}
    for record in records:
        by_person.setdefault(record.person_name, []).append(record)

    overlaps = []
    for person_records in by_person.values():
        ordered = sorted(person_records, key=lambda r: r.valid_from)
        for i, first in enumerate(ordered):
            for second in ordered[i + 1:]:
                if first.overlaps(second.valid_from, second.valid_to or date.max):
                    overlaps.append((first, second))
    return overlaps
