from datetime import date

import pytest

from analytics.models import PlannedFTERecord, TimesheetEntry
from analytics.period_aggregator import (
    calculate_monthly_trends,
    calculate_period_fte,
    calculate_period_planned_fte,
    calculate_period_summary,
    calculate_person_monthly_fte,
    calculate_person_period_fte,
    calculate_person_period_planned_fte,
    group_entries_by_month,
    month_label,
)

# Jan 2025: 176 working hours, Feb 2025: 160
PERIOD = ("2025-01-01", "2025-02-28")

RECORDS = [
    PlannedFTERecord("Alice", 1.0, date(2025, 1, 1)),
    PlannedFTERecord("Bob", 0.8, date(2024, 6, 1), date(2025, 1, 31)),
    PlannedFTERecord("Bob", 0.5, date(2025, 2, 1)),
]


def make_entry(person, day, hours, email=None):
    return TimesheetEntry(
        person_name=person,
        project_name="Design tým OPS_2025",
        activity_name="Work",
        date=day,
        hours=hours,
        person_email=email,
    )


def team_entries():
    return [
        make_entry("Alice", "2025-01-15", 176),
        make_entry("Alice", "2025-02-10", 100),
        make_entry("Alice", "2025-02-20", 60),
        # Bob only tracks in February
        make_entry("Bob", "2025-02-12", 80),
    ]


def test_group_entries_by_month_is_ordered():
    groups = group_entries_by_month(reversed(team_entries()))
    assert list(groups) == ["2025-01", "2025-02"]
    assert len(groups["2025-02"]) == 3


def test_month_label():
    assert month_label("2025-11") == "Nov 2025"


def test_period_fte_is_not_average_of_monthly_fte():
    # Half of January, all of February
    entries = [make_entry("Alice", "2025-01-20", 88), make_entry("Alice", "2025-02-20", 160)]

    period_fte = calculate_period_fte(entries, *PERIOD)
    assert period_fte == round(248 / 336, 2) == 0.74

    monthly = calculate_person_monthly_fte(entries)
    assert [m.fte for m in monthly] == [0.5, 1.0]
    average_of_months = sum(m.fte for m in monthly) / len(monthly)
    assert average_of_months == 0.75
    assert period_fte != average_of_months


def test_period_fte_without_entries():
    assert calculate_period_fte([], *PERIOD) == 0.0


def test_planned_fte_is_weighted_by_month_and_presence():
    # Jan: Alice 1.0 x 176; Feb: (Alice 1.0 + Bob 0.5) x 160 -> 416 / 336
    assert calculate_period_planned_fte(team_entries(), RECORDS, *PERIOD) == 1.24


def test_planned_fte_uses_record_valid_in_each_month():
    entries = [make_entry("Bob", "2025-01-10", 8), make_entry("Bob", "2025-02-10", 8)]
    # Jan 0.8 x 176 + Feb 0.5 x 160 = 220.8 / 336
    assert calculate_period_planned_fte(entries, RECORDS, *PERIOD) == 0.66


def test_person_planned_fte_is_diluted_over_whole_period():
    planned = calculate_person_period_planned_fte(team_entries(), RECORDS, *PERIOD)
    assert planned["Alice"] == 1.0
    # Bob: 0.5 x 160 / 336, not 0.5
    assert planned["Bob"] == 0.24


def test_person_planned_fte_sums_to_period_planned_fte():
    planned = calculate_person_period_planned_fte(team_entries(), RECORDS, *PERIOD)
    assert sum(planned.values()) == pytest.approx(
        calculate_period_planned_fte(team_entries(), RECORDS, *PERIOD), abs=0.01
    )


def test_person_period_fte_rows():
    entries = team_entries() + [make_entry("Carol", "2025-01-05", 40)]
    rows = calculate_person_period_fte(entries, RECORDS, *PERIOD)

    assert [r.person_name for r in rows] == ["Alice", "Bob", "Carol"]
    alice, bob, carol = rows
    assert alice.total_hours == 336
    assert alice.entry_count == 3
    assert alice.working_hours == 336
    assert alice.actual_fte == 1.0
    assert alice.deviation_percent == 0.0

    assert bob.actual_fte == 0.24
    assert bob.planned_fte == 0.24
    assert bob.deviation_percent == 0.0

    # No planned record at all
    assert carol.planned_fte is None
    assert carol.deviation_percent is None


def test_person_with_zero_plan_has_zero_deviation():
    records = [PlannedFTERecord("Alice", 0.0, date(2025, 1, 1))]
    rows = calculate_person_period_fte([make_entry("Alice", "2025-01-15", 10)], records, *PERIOD)
    assert rows[0].planned_fte == 0.0
    assert rows[0].deviation_percent == 0.0


def test_monthly_trends():
    entries = team_entries() + [make_entry("Alice2", "2025-02-11", 8, email="alice@example.com"),
                                make_entry("Alice", "2025-02-12", 8, email="alice@example.com")]
    trends = calculate_monthly_trends(entries, RECORDS)

    assert [t.label for t in trends] == ["Jan 2025", "Feb 2025"]
    january, february = trends
    assert january.tracked_hours == 176
    assert january.working_hours == 176
    assert january.total_fte == 1.0
    assert january.team_size == 1
    assert january.planned_fte == 1.0

    assert february.tracked_hours == 256
    assert february.total_fte == 1.6
    # Alice (no email), Bob, and one emailed person counted once
    assert february.team_size == 3
    assert february.average_fte == 0.53
    assert february.planned_fte == 1.5


def test_person_monthly_fte_follows_plan_changes():
    entries = [make_entry("Bob", "2025-01-10", 88), make_entry("Bob", "2025-02-10", 80)]
    rows = calculate_person_monthly_fte(entries, RECORDS)

    assert [(r.month, r.fte, r.planned_fte) for r in rows] == [(1, 0.5, 0.8), (2, 0.5, 0.5)]
    assert rows[0].deviation_percent == pytest.approx(-37.5)
    assert rows[1].deviation_percent == 0.0


def test_period_summary():
    summary = calculate_period_summary(team_entries(), RECORDS, *PERIOD)

    assert summary.date_from == "2025-01-01"
    assert summary.date_to == "2025-02-28"
    assert summary.total_hours == 416
    assert summary.working_hours == 336
    assert summary.period_fte == 1.24
    assert summary.planned_fte == 1.24
    assert summary.team_size == 2
    assert summary.average_fte == 0.62
    assert summary.deviation_percent == 0.0


def test_period_summary_empty():
    summary = calculate_period_summary([], RECORDS, *PERIOD)
    assert summary.total_hours == 0.0
    assert summary.working_hours == 336
    assert summary.period_fte == 0.0
    assert summary.deviation_percent is None
