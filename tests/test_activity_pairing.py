import pytest

from analytics.activity_pairing import (
    build_keyword_index,
    calculate_quality_score,
    categorize_activity,
    categorize_timesheet,
    get_activity_summary,
    get_relevant_entries,
    get_unpaired_entries,
)
from analytics.fte import calculate_fte
from analytics.models import ActivityCategory, ActivityKeyword, TimesheetEntry, normalize_category
from analytics.working_days import calculate_working_days

KEYWORDS = [
    ActivityKeyword("interview", "OPS_Hiring"),
    ActivityKeyword("job", "OPS Jobs"),
    ActivityKeyword("review", "OPS_Reviews"),
    ActivityKeyword("mentoring", "OPS_Guiding"),
    ActivityKeyword("legacy", "OPS_Hiring", active=False),
]

OPS = "Design tým OPS_2025"
GUIDING = "Design tým Guiding_2025"
INTERNAL = "Design tým Interní_2025"


def entry(activity, project, description=None, hours=1.0, person="Anna", day="2025-11-10"):
    return TimesheetEntry(
        person_name=person,
        project_name=project,
        activity_name=activity,
        date=day,
        hours=hours,
        description=description,
    )


def test_hiring_wins_over_jobs():
    assert categorize_activity("Interview for job posting", None, OPS, KEYWORDS) is ActivityCategory.OPS_HIRING


def test_keyword_found_in_description():
    assert categorize_activity("Call", "Quarterly REVIEW", OPS, KEYWORDS) is ActivityCategory.OPS_REVIEWS


@pytest.mark.parametrize("activity", ["Interview", "Job posting", "Performance review"])
def test_restricted_keyword_on_other_project_is_unpaired(activity):
    assert categorize_activity(activity, "anything", INTERNAL, KEYWORDS) is ActivityCategory.UNPAIRED


def test_restricted_keyword_match_stops_at_first_category():
    # Hiring matches on a non-OPS project; the Guiding project rule is never reached
    assert categorize_activity("Interview", None, GUIDING, KEYWORDS) is ActivityCategory.UNPAIRED


def test_guiding_project_fallback():
    assert categorize_activity("Team sync", None, GUIDING, KEYWORDS) is ActivityCategory.OPS_GUIDING


def test_ops_fallback_depends_on_strict_mode():
    assert categorize_activity("Team sync", None, OPS, KEYWORDS, strict=True) is ActivityCategory.UNPAIRED
    assert categorize_activity("Team sync", None, OPS, KEYWORDS, strict=False) is ActivityCategory.OPS_GUIDING


def test_guiding_keyword_rules():
    assert categorize_activity("Mentoring", None, GUIDING, KEYWORDS) is ActivityCategory.OPS_GUIDING
    assert categorize_activity("Mentoring", None, OPS, KEYWORDS) is ActivityCategory.UNPAIRED
    # Allowed on other projects, falls through to the project rule
    assert categorize_activity("Mentoring", None, INTERNAL, KEYWORDS) is ActivityCategory.OTHER


def test_substring_matching_is_not_tokenized():
    assert categorize_activity("Jobless stats", None, OPS, KEYWORDS) is ActivityCategory.OPS_JOBS


def test_inactive_and_blank_keywords_are_ignored():
    keywords = KEYWORDS + [ActivityKeyword("   ", "OPS_Reviews")]
    assert categorize_activity("Legacy cleanup", None, OPS, keywords, strict=True) is ActivityCategory.UNPAIRED
    index = build_keyword_index(keywords)
    assert index[ActivityCategory.OPS_HIRING] == ("interview",)
    assert index[ActivityCategory.OPS_REVIEWS] == ("review",)


def test_keyword_index_accepts_storage_rows():
    index = build_keyword_index([
        {"keyword": "Pohovor", "category": "OPS Hiring", "is_active": 1},
        {"keyword": "old", "category": "OPS_Jobs", "is_active": 0},
    ])
    assert index == {ActivityCategory.OPS_HIRING: ("pohovor",)}


def test_non_ops_project_is_other():
    assert categorize_activity("UI design", None, "Client Alpha", KEYWORDS) is ActivityCategory.OTHER


def test_quality_score_boundaries():
    assert calculate_quality_score([]) == 100.0

    unpaired = categorize_timesheet([entry("Sync", OPS), entry("Call", OPS)], [], strict=True)
    assert calculate_quality_score(unpaired) == 0.0

    paired = categorize_timesheet([entry("Interview", OPS), entry("Sync", GUIDING)], KEYWORDS)
    assert calculate_quality_score(paired) == 100.0


def test_quality_score_rounding():
    entries = [entry("Interview", OPS), entry("Sync", OPS), entry("Review", OPS)]
    categorized = categorize_timesheet(entries, KEYWORDS, strict=True)
    assert calculate_quality_score(categorized) == 66.7


def test_categorize_timesheet_is_repeatable():
    entries = [
        entry("Interview", OPS, "Candidate"),
        entry("Sync", OPS),
        entry("Mentoring", GUIDING),
        entry("UI design", "Client Alpha"),
    ]
    first = categorize_timesheet(entries, KEYWORDS, strict=True)
    second = categorize_timesheet(entries, KEYWORDS, strict=True)
    assert first == second
    assert [e.category for e in first] == [
        ActivityCategory.OPS_HIRING,
        ActivityCategory.UNPAIRED,
        ActivityCategory.OPS_GUIDING,
        ActivityCategory.OTHER,
    ]


def test_full_month_on_ops_without_keywords():
    categorized = categorize_timesheet([entry("Weekly sync", "OPS_2025", hours=152)], [], strict=False)
    assert categorized[0].category is ActivityCategory.OPS_GUIDING
    working_hours = calculate_working_days(2025, 11).working_hours
    assert calculate_fte(152, working_hours) == 1.0


def test_activity_summary_sorted_by_hours():
    entries = [
        entry("Interview", OPS, hours=3),
        entry("Interview", OPS, hours=1),
        entry("Sync", GUIDING, hours=2),
        entry("UI design", "Client Alpha", hours=2),
    ]
    summary = get_activity_summary(categorize_timesheet(entries, KEYWORDS))
    assert summary[0].category is ActivityCategory.OPS_HIRING
    assert summary[0].total_hours == 4.0
    assert summary[0].entry_count == 2
    assert summary[0].percentage == 50.0
    assert sum(s.entry_count for s in summary) == 4


def test_unpaired_and_relevant_filters():
    categorized = categorize_timesheet(
        [entry("Sync", OPS), entry("UI design", "Client Alpha"), entry("Interview", OPS)],
        KEYWORDS,
        strict=True,
    )
    assert len(get_unpaired_entries(categorized)) == 1
    assert len(get_relevant_entries(categorized)) == 2


@pytest.mark.parametrize("label", ["OPS_Hiring", "OPS Hiring", "ops-hiring", "Hiring"])
def test_category_spellings_normalize(label):
    assert normalize_category(label) is ActivityCategory.OPS_HIRING


def test_unknown_category_label_raises():
    with pytest.raises(ValueError):
        normalize_category("Marketing")
