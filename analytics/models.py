"""Data models for the timesheet analytics engine."""
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class ActivityCategory(str, Enum):
    """Business activity category assigned to every timesheet row"""
    OPS_HIRING = 'OPS_Hiring'
    OPS_JOBS = 'OPS_Jobs'
    OPS_REVIEWS = 'OPS_Reviews'
    OPS_GUIDING = 'OPS_Guiding'
    UNPAIRED = 'Unpaired'
    OTHER = 'Other'

    def __str__(self):
        return self.value


# Categories an admin can attach keywords to
KEYWORD_CATEGORIES = (
    ActivityCategory.OPS_HIRING,
    ActivityCategory.OPS_JOBS,
    ActivityCategory.OPS_REVIEWS,
    ActivityCategory.OPS_GUIDING,
)

_CATEGORY_ALIASES = {
    'opshiring': ActivityCategory.OPS_HIRING,
    'hiring': ActivityCategory.OPS_HIRING,
    'opsjobs': ActivityCategory.OPS_JOBS,
    'jobs': ActivityCategory.OPS_JOBS,
    'opsreviews': ActivityCategory.OPS_REVIEWS,
    'reviews': ActivityCategory.OPS_REVIEWS,
    'opsguiding': ActivityCategory.OPS_GUIDING,
    'guiding': ActivityCategory.OPS_GUIDING,
    'unpaired': ActivityCategory.UNPAIRED,
    'other': ActivityCategory.OTHER,
}


def normalize_category(value) -> ActivityCategory:
    """
    Map any recognised spelling of a category label to its canonical member.

    "OPS_Hiring", "OPS Hiring", "ops-hiring" and "Hiring" all resolve to
    ActivityCategory.OPS_HIRING. Unknown labels raise ValueError.
    """
    if isinstance(value, ActivityCategory):
        return value
    if value is None:
        raise ValueError("Category is required")

    key = re.sub(r'[\s_\-]+', '', str(value)).lower()
    category = _CATEGORY_ALIASES.get(key)
    if category is None:
        raise ValueError(f"Unknown activity category: {value!r}")
    return category


@dataclass(frozen=True)
class TimesheetEntry:
    """One imported timesheet row. Dates are ISO strings (YYYY-MM-DD)."""
    person_name: str
    project_name: str
    activity_name: str
    date: str
    hours: float
    description: Optional[str] = None
    person_email: Optional[str] = None

    @property
    def month_key(self) -> str:
        return self.date[:7]

    @property
    def year(self) -> int:
        return int(self.date[0:4])

    @property
    def month(self) -> int:
        return int(self.date[5:7])

    @classmethod
    def from_row(cls, row) -> 'TimesheetEntry':
        """Build an entry from a dict-like storage row"""
        description = row.get('description')
        email = row.get('person_email')
        return cls(
            person_name=str(row['person_name']),
            project_name=str(row['project_name']),
            activity_name=str(row['activity_name']),
            date=str(row['date'])[:10],
            hours=float(row['hours']),
            description=description if isinstance(description, str) else None,
            person_email=email if isinstance(email, str) and email else None,
        )


@dataclass(frozen=True)
class CategorizedEntry(TimesheetEntry):
    """A timesheet entry with its assigned activity category"""
    category: ActivityCategory = field(kw_only=True)


@dataclass(frozen=True)
class ActivityKeyword:
    keyword: str
    category: ActivityCategory
    active: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'category', normalize_category(self.category))


@dataclass(frozen=True)
class Holiday:
    name: str
    date: str


@dataclass(frozen=True)
class WorkingDaysResult:
    """Working-time breakdown of one calendar month"""
    total_days: int
    weekdays: int
    holidays: tuple
    working_days: int
    working_hours: int


@dataclass(frozen=True)
class PlannedFTERecord:
    """
    Planned FTE for a person, valid from valid_from to valid_to inclusive.
    valid_to None marks the current, open-ended record.
    """
    person_name: str
    fte_value: float
    valid_from: date
    valid_to: Optional[date] = None

    @property
    def is_current(self) -> bool:
        return self.valid_to is None

    def overlaps(self, period_start: date, period_end: date) -> bool:
        if self.valid_from > period_end:
            return False
        return self.valid_to is None or self.valid_to >= period_start


@dataclass
class PersonMonthlyFTE:
    person_name: str
    year: int
    month: int
    tracked_hours: float
    working_hours: int
    fte: float
    planned_fte: Optional[float] = None
    deviation_percent: Optional[float] = None


@dataclass
class FTEStats:
    total_fte: float = 0.0
    average_fte: float = 0.0
    highest_fte: float = 0.0
    lowest_fte: float = 0.0
    team_member_count: int = 0


@dataclass
class ActivitySummary:
    category: ActivityCategory
    total_hours: float
    entry_count: int
    percentage: float


@dataclass
class PersonPeriodFTE:
    """Actual vs planned FTE of one person over a multi-month period"""
    person_name: str
    total_hours: float
    entry_count: int
    working_hours: int
    actual_fte: float
    planned_fte: Optional[float] = None
    deviation_percent: Optional[float] = None


@dataclass
class MonthlyTrend:
    month_key: str
    label: str
    tracked_hours: float
    working_hours: int
    total_fte: float
    average_fte: float
    team_size: int
    planned_fte: float = 0.0


@dataclass
class PeriodSummary:
    date_from: str
    date_to: str
    total_hours: float = 0.0
    working_hours: int = 0
    period_fte: float = 0.0
    planned_fte: float = 0.0
    team_size: int = 0
    average_fte: float = 0.0
    deviation_percent: Optional[float] = None
