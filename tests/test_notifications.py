from datetime import date

from analytics.activity_pairing import categorize_timesheet
from analytics.models import ActivityKeyword, PersonPeriodFTE, PlannedFTERecord, TimesheetEntry
from analytics.notifications import check_fte_deviations, check_unpaired_items, get_notifications

KEYWORDS = [ActivityKeyword("interview", "OPS_Hiring")]


def make_entry(person, activity, project, hours=8.0, day="2025-11-03"):
    return TimesheetEntry(
        person_name=person,
        project_name=project,
        activity_name=activity,
        date=day,
        hours=hours,
    )


def person_row(name, actual, planned, deviation):
    return PersonPeriodFTE(
        person_name=name,
        total_hours=actual * 152,
        entry_count=1,
        working_hours=152,
        actual_fte=actual,
        planned_fte=planned,
        deviation_percent=deviation,
    )


def test_unpaired_items_notification():
    categorized = categorize_timesheet(
        [
            make_entry("Alice", "Interview", "OPS_2025"),
            make_entry("Alice", "Sync", "OPS_2025"),
            # Other projects do not count towards the share
            make_entry("Alice", "UI", "Client Alpha"),
            make_entry("Alice", "UI", "Client Alpha"),
        ],
        KEYWORDS,
        strict=True,
    )
    notification = check_unpaired_items(categorized)

    assert notification.id == "unpaired-items"
    assert notification.type == "warning"
    assert "1 timesheet entries (50.0%)" in notification.message


def test_no_unpaired_notification_when_all_paired():
    categorized = categorize_timesheet([make_entry("Alice", "Interview", "OPS_2025")], KEYWORDS, strict=True)
    assert check_unpaired_items(categorized) is None


def test_fte_deviation_threshold():
    rows = [
        person_row("Alice", 1.0, 1.0, 0.0),
        person_row("Bob", 0.4, 0.8, -50.0),
        person_row("Carol", 1.3, 1.0, 30.0),
        person_row("Dan", 0.5, None, None),
    ]
    notification = check_fte_deviations(rows)

    assert notification.id == "fte-deviations"
    assert notification.message.startswith("1 team member(s)")
    assert "Bob (50.0% off)" in notification.message

    assert check_fte_deviations(rows, threshold=60) is None


def test_get_notifications_sorted_by_priority():
    entries = [
        make_entry("Alice", "Sync", "OPS_2025", hours=152, day="2025-11-10"),
        make_entry("Bob", "Interview", "OPS_2025", hours=40, day="2025-11-10"),
    ]
    records = [
        PlannedFTERecord("Alice", 1.0, date(2025, 1, 1)),
        PlannedFTERecord("Bob", 1.0, date(2025, 1, 1)),
    ]
    notifications = get_notifications(entries, KEYWORDS, records, "2025-11-01", "2025-11-30")

    assert [n.id for n in notifications] == ["fte-deviations", "unpaired-items"]
    assert "Bob" in notifications[0].message


def test_get_notifications_quiet_period():
    entries = [make_entry("Alice", "Interview", "OPS_2025", hours=152, day="2025-11-10")]
    records = [PlannedFTERecord("Alice", 1.0, date(2025, 1, 1))]
    assert get_notifications(entries, KEYWORDS, records, "2025-11-01", "2025-11-30") == []
