from datetime import date

from analytics.activity_pairing import categorize_timesheet
from analytics.fte import calculate_team_monthly_fte
from analytics.metrics import (
    calculate_activity_metrics,
    calculate_dashboard_metrics,
    calculate_project_metrics,
    calculate_team_member_breakdown,
    get_date_range_data,
    get_month_data,
)
from analytics.models import ActivityCategory, ActivityKeyword, PlannedFTERecord, TimesheetEntry

KEYWORDS = [
    ActivityKeyword("interview", "OPS_Hiring"),
    ActivityKeyword("review", "OPS_Reviews"),
]


def make_entry(person, project, hours, activity="Work", day="2025-11-03", email=None):
    return TimesheetEntry(
        person_name=person,
        project_name=project,
        activity_name=activity,
        date=day,
        hours=hours,
        person_email=email,
    )


def test_dashboard_metrics_empty():
    metrics = calculate_dashboard_metrics([])
    assert metrics["highest_fte_person"] == "N/A"
    assert metrics["lowest_fte_person"] == "N/A"
    assert metrics["team_member_count"] == 0


def test_dashboard_metrics():
    rows = calculate_team_monthly_fte(
        [make_entry("Alice", "OPS_2025", 160), make_entry("Bob", "OPS_2025", 76)], 2025, 11
    )
    metrics = calculate_dashboard_metrics(rows)
    assert metrics["highest_fte"] == 1.05
    assert metrics["highest_fte_person"] == "Alice"
    assert metrics["lowest_fte"] == 0.5
    assert metrics["lowest_fte_person"] == "Bob"
    assert metrics["total_team_fte"] == 1.55
    assert metrics["team_member_count"] == 2


def test_project_metrics_group_by_category():
    entries = [
        make_entry("Alice", "Design tým OPS_2025", 76),
        make_entry("Bob", "OPS_2024", 38),
        make_entry("Bob", "Design tým Interní_2025", 38),
    ]
    metrics = calculate_project_metrics(entries, 152)

    assert [m["project_category"] for m in metrics] == ["OPS", "Internal"]
    ops = metrics[0]
    assert ops["total_hours"] == 114
    assert ops["fte"] == 0.75
    assert ops["entry_count"] == 2
    assert ops["person_count"] == 2
    assert ops["percentage"] == 75.0

    assert calculate_project_metrics(entries, 0)[0]["fte"] == 0.0


def test_activity_metrics_count_people():
    categorized = categorize_timesheet(
        [
            make_entry("Alice", "OPS_2025", 2, "Interview"),
            make_entry("Bob", "OPS_2025", 1, "Interview", email="bob@example.com"),
            make_entry("Bob", "OPS_2025", 1, "Interview", email="bob@example.com"),
        ],
        KEYWORDS,
    )
    metrics = calculate_activity_metrics(categorized)
    assert len(metrics) == 1
    assert metrics[0]["category"] is ActivityCategory.OPS_HIRING
    assert metrics[0]["person_count"] == 2
    assert metrics[0]["percentage"] == 100.0


def test_team_member_breakdown():
    entries = [
        make_entry("Alice", "Design tým OPS_2025", 40, "Interview"),
        make_entry("Alice", "Design tým OPS_2025", 20, "Sync"),
        make_entry("Alice", "Client Alpha", 92, "UI design"),
        make_entry("Bob", "Client Alpha", 76, "UI design"),
    ]
    records = [PlannedFTERecord("Alice", 1.0, date(2025, 1, 1))]
    members = calculate_team_member_breakdown(entries, KEYWORDS, records, "2025-11-01", "2025-11-30")

    assert [m["person"] for m in members] == ["Alice", "Bob"]
    alice, bob = members

    assert alice["total_hours"] == 152
    assert alice["actual_fte"] == 1.0
    assert alice["planned_fte"] == 1.0
    assert alice["deviation"] == 0.0
    assert alice["projects"] == [
        {"project": "Other", "hours": 92, "percentage": 60.5},
        {"project": "OPS", "hours": 60, "percentage": 39.5},
    ]
    # Unlabelled OPS time counts as Guiding in reporting mode
    assert alice["ops_activities"] == [
        {"activity": ActivityCategory.OPS_HIRING, "hours": 40, "percentage": 66.7},
        {"activity": ActivityCategory.OPS_GUIDING, "hours": 20, "percentage": 33.3},
    ]

    assert bob["planned_fte"] is None
    assert bob["deviation"] is None
    assert bob["ops_activities"] is None


def test_month_and_range_filters():
    entries = [
        make_entry("Alice", "OPS_2025", 1, day="2025-10-31"),
        make_entry("Alice", "OPS_2025", 1, day="2025-11-01"),
        make_entry("Alice", "OPS_2025", 1, day="2025-11-30"),
        make_entry("Alice", "OPS_2025", 1, day="2025-12-01"),
    ]
    assert [e.date for e in get_month_data(entries, 2025, 11)] == ["2025-11-01", "2025-11-30"]
    assert [e.date for e in get_date_range_data(entries, "2025-10-31", date(2025, 11, 1))] == [
        "2025-10-31", "2025-11-01"
    ]


def test_ops_breakdown_follows_classifier_markers():
    entries = [make_entry("Alice", "Design tým OPS_2025 - extra", 4, "Interview")]
    members = calculate_team_member_breakdown(entries, KEYWORDS, [], "2025-11-01", "2025-11-30")

    assert members[0]["projects"] == [{"project": "Other", "hours": 4, "percentage": 100.0}]
    assert members[0]["ops_activities"] == [
        {"activity": ActivityCategory.OPS_HIRING, "hours": 4, "percentage": 100.0}
    ]


def test_project_metrics_empty():
    assert calculate_project_metrics([], 152) == []
    assert calculate_activity_metrics([]) == []
