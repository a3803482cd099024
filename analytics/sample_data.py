import random
from datetime import date

from analytics.logger import get_logger
from analytics.models import ActivityCategory, TimesheetEntry
from analytics.working_days import calculate_working_days, iter_months, month_bounds, to_date

logger = get_logger(__name__)

SAMPLE_PEOPLE = [
    ('Anna Nováková', 'anna.novakova@example.com', 1.0),
    ('Petr Svoboda', 'petr.svoboda@example.com', 0.8),
    ('Jana Dvořáková', 'jana.dvorakova@example.com', 1.0),
    ('Tomáš Černý', 'tomas.cerny@example.com', 0.5),
]

SAMPLE_KEYWORDS = [
    ('interview', ActivityCategory.OPS_HIRING),
    ('pohovor', ActivityCategory.OPS_HIRING),
    ('job posting', ActivityCategory.OPS_JOBS),
    ('inzerát', ActivityCategory.OPS_JOBS),
    ('review', ActivityCategory.OPS_REVIEWS),
    ('hodnocení', ActivityCategory.OPS_REVIEWS),
    ('mentoring', ActivityCategory.OPS_GUIDING),
    ('guiding', ActivityCategory.OPS_GUIDING),
]

# (project name, activity, description, weight)
SAMPLE_ACTIVITIES = [
    ('Design tým OPS_{year}', 'Interview', 'Candidate interview', 2),
    ('Design tým OPS_{year}', 'Job posting', 'Senior designer ad', 1),
    ('Design tým OPS_{year}', 'Performance review', 'Quarterly review', 1),
    ('Design tým OPS_{year}', 'Team sync', None, 2),
    ('Guiding_{year}', 'Mentoring', 'Junior onboarding', 2),
    ('Design tým Interní_{year}', 'Design system', 'Component library', 4),
    ('Design tým R&D_{year}', 'Prototype', 'AI assistant research', 2),
    ('Design tým PR_{year}', 'Conference talk', None, 1),
    ('UX Maturity_{year} 🙌', 'Workshop', 'UX maturity assessment', 1),
    ('Client Alpha', 'UI design', 'Checkout redesign', 6),
]


def build_sample_entries(date_from, date_to, seed=42):
    """
    Deterministic random timesheet covering every working day of [date_from, date_to].

    Each person tracks roughly their planned FTE share of an 8 hour day.
    """
    start, end = to_date(date_from), to_date(date_to)
    rng = random.Random(seed)
    weights = [a[3] for a in SAMPLE_ACTIVITIES]
    entries = []

    for year, month in iter_months(start, end):
        first, last = month_bounds(year, month)
        first, last = max(first, start), min(last, end)
        holidays = {h.date for h in calculate_working_days(year, month).holidays}

        for day in range(first.day, last.day + 1):
            current = date(year, month, day)
            if current.weekday() >= 5 or current.isoformat() in holidays:
                continue

            for person_name, email, fte in SAMPLE_PEOPLE:
                # Occasional days off
                if rng.random() < 0.05:
                    continue
                remaining = round(8 * fte * rng.uniform(0.85, 1.15) * 2) / 2
                while remaining > 0:
                    project, activity, description, _ = rng.choices(SAMPLE_ACTIVITIES, weights)[0]
                    hours = min(remaining, rng.choice([0.5, 1.0, 1.5, 2.0, 3.0, 4.0]))
                    entries.append(TimesheetEntry(
                        person_name=person_name,
                        person_email=email,
                        project_name=project.format(year=year),
                        activity_name=activity,
                        description=description,
                        date=current.isoformat(),
                        hours=hours,
                    ))
                    remaining -= hours

    return entries


def generate_sample_data(db_manager, date_from=None, date_to=None):
    """Generate sample keywords, planned FTE and timesheet entries for the dashboard"""
    today = date.today()
    date_from = date_from or date(today.year, 1, 1)
    date_to = date_to or today

    existing = {(row['keyword'], row['category']) for row in db_manager.get_keywords().to_dict('records')}
    for keyword, category in SAMPLE_KEYWORDS:
        if (keyword, category.value) not in existing:
            db_manager.add_keyword(keyword, category)

    planned = db_manager.get_planned_fte_history()
    people_with_plan = set(planned['person_name']) if not planned.empty else set()
    for person_name, _, fte in SAMPLE_PEOPLE:
        if person_name not in people_with_plan:
            db_manager.set_planned_fte(person_name, fte, date_from)

    entries = build_sample_entries(date_from, date_to)
    result = db_manager.import_entries(entries, filename='sample-data')

    logger.info(f"Sample data generation completed: {len(entries)} entries")
    return result
