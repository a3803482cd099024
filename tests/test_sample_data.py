from datetime import date

from analytics.database import DatabaseManager
from analytics.sample_data import SAMPLE_KEYWORDS, SAMPLE_PEOPLE, build_sample_entries, generate_sample_data


def test_entries_stay_inside_range():
    entries = build_sample_entries(date(2025, 11, 5), "2025-11-12")

    dates = {e.date for e in entries}
    assert dates
    assert dates <= {"2025-11-05", "2025-11-06", "2025-11-07", "2025-11-10", "2025-11-11", "2025-11-12"}


def test_entries_skip_weekends_and_holidays():
    dates = {e.date for e in build_sample_entries("2025-11-14", "2025-11-18")}
    # 15-16 Nov is a weekend, 17 Nov a public holiday
    assert dates <= {"2025-11-14", "2025-11-18"}


def test_same_seed_same_entries():
    assert build_sample_entries("2025-11-03", "2025-11-07") == build_sample_entries("2025-11-03", "2025-11-07")


def test_generate_sample_data(tmp_path):
    db = DatabaseManager(tmp_path / "sample.db")
    try:
        result = generate_sample_data(db, date(2025, 11, 5), date(2025, 11, 12))

        assert result["total_rows"] > 0
        assert result["data_date_from"] >= "2025-11-05"
        assert result["data_date_to"] <= "2025-11-12"
        assert len(db.get_keywords()) == len(SAMPLE_KEYWORDS)
        assert len(db.get_planned_fte_records()) == len(SAMPLE_PEOPLE)

        # A second run keeps keywords and plans and replaces the entries
        generate_sample_data(db, date(2025, 11, 5), date(2025, 11, 12))
        assert len(db.get_keywords()) == len(SAMPLE_KEYWORDS)
        assert len(db.get_planned_fte_records()) == len(SAMPLE_PEOPLE)
        assert len(db.get_entries()) == result["total_rows"]
    finally:
        db.close()
