import pandas as pd

from analytics.data_processor import TOTAL_LABEL, DataProcessor
from analytics.models import ActivityCategory, CategorizedEntry, PersonPeriodFTE, TimesheetEntry
from analytics.period_aggregator import calculate_monthly_trends


def test_deviation_status():
    status = DataProcessor.deviation_status(pd.Series([50.0, -50.0, 10.0, None]))
    assert list(status) == ["Over", "Under", "On plan", "-"]


def test_monthly_trend_total_uses_summed_hours():
    entries = [
        TimesheetEntry("Alice", "Client Alpha", "UI", "2025-01-15", 88.0),
        TimesheetEntry("Alice", "Client Alpha", "UI", "2025-02-14", 160.0),
    ]
    df = DataProcessor.monthly_trend_frame(calculate_monthly_trends(entries))

    assert list(df["Month"]) == ["Jan 2025", "Feb 2025", TOTAL_LABEL]
    assert list(df["Total FTE"]) == [0.5, 1.0, 0.74]
    assert df.iloc[-1]["Working Hours"] == 336


def test_person_period_frame_total_row():
    rows = [
        PersonPeriodFTE("Alice", 152.0, 10, 152, 1.0, 1.0, 0.0),
        PersonPeriodFTE("Bob", 76.0, 5, 152, 0.5, 1.0, -50.0),
        PersonPeriodFTE("Carol", 38.0, 2, 152, 0.25),
    ]
    df = DataProcessor.person_period_fte_frame(rows, 152, period_planned_fte=2.0)

    assert list(df["Person"]) == ["Alice", "Bob", "Carol", TOTAL_LABEL]
    assert list(df["Status"]) == ["On plan", "Under", "-", ""]

    total = df.iloc[-1]
    assert total["Hours"] == 266.0
    assert total["Entries"] == 17
    assert total["Actual FTE"] == 1.75
    assert total["Planned FTE"] == 2.0
    assert total["Deviation %"] == -12.5


def test_empty_frames_keep_columns():
    assert list(DataProcessor.person_period_fte_frame([], 152).columns)[0] == "Person"
    assert DataProcessor.monthly_trend_frame([]).empty
    assert DataProcessor.person_month_matrix([]).empty


def test_categorized_entries_newest_first():
    entries = [
        CategorizedEntry("Bob", "OPS_2025", "Interview", "2025-11-03", 1.0, category=ActivityCategory.OPS_HIRING),
        CategorizedEntry("Alice", "OPS_2025", "Sync", "2025-11-10", 2.0, category=ActivityCategory.UNPAIRED),
    ]
    df = DataProcessor.categorized_entries_frame(entries)
    assert list(df["Date"]) == ["2025-11-10", "2025-11-03"]
    assert list(df["Category"]) == ["Unpaired", "OPS_Hiring"]


def test_working_days_frame():
    df = DataProcessor.working_days_frame(2025)
    november = df[df["Month"] == "November"].iloc[0]

    assert len(df) == 12
    assert november["Working Hours"] == 152
    assert november["Holidays"] == 1
    assert november["Quarter"] == "Q4"


def test_holidays_frame():
    df = DataProcessor.holidays_frame(2025, 12)
    assert list(df["Day"]) == ["Wednesday", "Thursday", "Friday"]
