import pytest

from analytics.fte import (
    calculate_deviation,
    calculate_fte,
    calculate_fte_stats,
    calculate_monthly_fte,
    calculate_team_monthly_fte,
    calculate_total_team_fte,
)
from analytics.models import FTEStats, TimesheetEntry


def make_entry(person, day, hours, project="Design tým OPS_2025"):
    return TimesheetEntry(
        person_name=person,
        project_name=project,
        activity_name="Work",
        date=day,
        hours=hours,
    )


def test_calculate_fte_rounding():
    assert calculate_fte(160, 160) == 1.0
    assert calculate_fte(80, 160) == 0.5
    assert calculate_fte(180, 160) == 1.13


def test_zero_working_hours_gives_zero():
    assert calculate_fte(10, 0) == 0.0


def test_monthly_fte_uses_calendar():
    assert calculate_monthly_fte(152, 2025, 11) == 1.0
    assert calculate_monthly_fte(76, 2025, 11) == 0.5


def test_deviation_guards():
    assert calculate_deviation(1.0, 0) == 0.0
    assert calculate_deviation(1.0, None) == 0.0
    assert calculate_deviation(1.2, 1.0) == 20.0


def test_team_monthly_fte():
    entries = [
        make_entry("Bob", "2025-11-03", 40),
        make_entry("Alice", "2025-11-03", 80),
        make_entry("Alice", "2025-11-20", 80),
        make_entry("Bob", "2025-11-28", 36),
        # other month, ignored
        make_entry("Alice", "2025-12-01", 8),
    ]
    rows = calculate_team_monthly_fte(entries, 2025, 11, {"Alice": 1.0, "Bob": 0.8})

    assert [r.person_name for r in rows] == ["Alice", "Bob"]
    alice, bob = rows
    assert alice.tracked_hours == 160
    assert alice.working_hours == 152
    assert alice.fte == 1.05
    assert alice.deviation_percent == pytest.approx(5.0)
    assert bob.fte == 0.5
    assert bob.planned_fte == 0.8
    assert bob.deviation_percent == pytest.approx(-37.5)


def test_team_monthly_fte_without_plan():
    rows = calculate_team_monthly_fte([make_entry("Alice", "2025-11-03", 8)], 2025, 11)
    assert rows[0].planned_fte is None
    assert rows[0].deviation_percent is None


def test_fte_stats_sum_individual_values():
    entries = [
        make_entry("Alice", "2025-11-03", 160),
        make_entry("Bob", "2025-11-03", 76),
    ]
    rows = calculate_team_monthly_fte(entries, 2025, 11)
    stats = calculate_fte_stats(rows)

    assert stats.total_fte == 1.55
    assert stats.average_fte == 0.78
    assert stats.highest_fte == 1.05
    assert stats.lowest_fte == 0.5
    assert stats.team_member_count == 2
    assert calculate_total_team_fte(rows) == 1.55


def test_fte_stats_empty():
    assert calculate_fte_stats([]) == FTEStats()
