"""
Activity categorization ("pairing") of timesheet entries.

Every entry gets exactly one ActivityCategory by priority-ordered,
case-insensitive substring matching of the active keywords against
"activity name + description", combined with project-type rules:

- Hiring, Jobs and Reviews keywords are only valid on OPS projects; the
  first of them that matches decides the entry (category on OPS,
  Unpaired anywhere else).
- Guiding keywords pair on Guiding projects, flag general OPS time as
  Unpaired and are ignored on other projects.
- Without a deciding keyword the project name is the fallback: Guiding
  projects are Guiding, OPS projects are Guiding (lenient) or Unpaired
  (strict), everything else is Other.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from analytics.constants import GUIDING_MARKER, OPS_MARKER
from analytics.logger import get_logger
from analytics.models import (
    ActivityCategory,
    ActivityKeyword,
    ActivitySummary,
    CategorizedEntry,
    TimesheetEntry,
    normalize_category,
)
from analytics.project_helpers import round_half_up

logger = get_logger(__name__)

# Keyword categories that are only valid on OPS projects, in priority order
RESTRICTED_CATEGORIES = (
    ActivityCategory.OPS_HIRING,
    ActivityCategory.OPS_JOBS,
    ActivityCategory.OPS_REVIEWS,
)

KeywordIndex = Dict[ActivityCategory, Tuple[str, ...]]


def build_keyword_index(keywords: Iterable[ActivityKeyword]) -> KeywordIndex:
    """
    Group the active keywords by category, lowercased.

    Blank keywords are skipped, they would match every entry.
    """
    grouped = defaultdict(list)
    for keyword in keywords:
        if isinstance(keyword, dict):
            keyword = ActivityKeyword(
                keyword=keyword['keyword'],
                category=keyword['category'],
                active=bool(keyword.get('active', keyword.get('is_active', True))),
            )
        if not keyword.active:
            continue
        text = keyword.keyword.strip().lower() if keyword.keyword else ''
        if not text:
            continue
        grouped[normalize_category(keyword.category)].append(text)
    return {category: tuple(words) for category, words in grouped.items()}


def is_ops_time(project_name: str) -> bool:
    """True for projects the OPS activity rules apply to (OPS or Guiding)"""
    project_lower = (project_name or '').lower()
    return OPS_MARKER in project_lower or GUIDING_MARKER in project_lower


def _matches(search_text: str, words: Tuple[str, ...]) -> bool:
    return any(word in search_text for word in words)


def _categorize(
    activity_name: str,
    description: Optional[str],
    project_name: str,
    index: KeywordIndex,
    strict: bool
) -> ActivityCategory:
    search_text = f"{activity_name or ''} {description or ''}".lower()
    project_lower = (project_name or '').lower()
    is_ops = OPS_MARKER in project_lower
    is_guiding = GUIDING_MARKER in project_lower

    for category in RESTRICTED_CATEGORIES:
        if _matches(search_text, index.get(category, ())):
            return category if is_ops else ActivityCategory.UNPAIRED

    if _matches(search_text, index.get(ActivityCategory.OPS_GUIDING, ())):
        if is_guiding:
            return ActivityCategory.OPS_GUIDING
        if is_ops:
            return ActivityCategory.UNPAIRED
        # Allowed incidentally on other projects, fall through

    if is_guiding:
        return ActivityCategory.OPS_GUIDING
    if is_ops:
        return ActivityCategory.UNPAIRED if strict else ActivityCategory.OPS_GUIDING
    return ActivityCategory.OTHER


def categorize_activity(
    activity_name: str,
    description: Optional[str],
    project_name: str,
    keywords: Iterable[ActivityKeyword],
    strict: bool = False
) -> ActivityCategory:
    """
    Categorize a single activity.

    Args:
        activity_name: Activity/task name
        description: Free-text description (may be None)
        project_name: Project the time was tracked on
        keywords: Active keyword snapshot
        strict: Pre-import validation mode; OPS time without a keyword
                is Unpaired instead of Guiding

    Example:
        categorize_activity('Interview', 'Candidate call', 'Design tým OPS_2025', keywords)
        # ActivityCategory.OPS_HIRING
    """
    return _categorize(activity_name, description, project_name,
                       build_keyword_index(keywords), strict)


def categorize_timesheet(
    entries: Iterable[TimesheetEntry],
    keywords: Iterable[ActivityKeyword],
    strict: bool = False
) -> List[CategorizedEntry]:
    """Categorize every entry independently against one keyword snapshot"""
    index = build_keyword_index(keywords)

    categorized = [
        CategorizedEntry(
            person_name=entry.person_name,
            project_name=entry.project_name,
            activity_name=entry.activity_name,
            date=entry.date,
            hours=entry.hours,
            description=entry.description,
            person_email=entry.person_email,
            category=_categorize(entry.activity_name, entry.description,
                                 entry.project_name, index, strict),
        )
        for entry in entries
    ]

    logger.debug(
        f"Categorized {len(categorized)} entries with "
        f"{sum(len(words) for words in index.values())} keywords (strict={strict})"
    )
    return categorized


def get_activity_summary(categorized_entries: List[CategorizedEntry]) -> List[ActivitySummary]:
    """Hours, entry count and share of total hours per category, largest first"""
    total_hours = sum(entry.hours for entry in categorized_entries)

    category_hours = {}
    for entry in categorized_entries:
        hours, count = category_hours.get(entry.category, (0.0, 0))
        category_hours[entry.category] = (hours + entry.hours, count + 1)

    summaries = [
        ActivitySummary(
            category=category,
            total_hours=round_half_up(hours, 2),
            entry_count=count,
            percentage=round_half_up(hours / total_hours * 100, 1) if total_hours > 0 else 0.0,
        )
        for category, (hours, count) in category_hours.items()
    ]

    return sorted(summaries, key=lambda s: s.total_hours, reverse=True)


def get_unpaired_entries(categorized_entries: List[CategorizedEntry]) -> List[CategorizedEntry]:
    return [e for e in categorized_entries if e.category is ActivityCategory.UNPAIRED]


def get_relevant_entries(categorized_entries: List[CategorizedEntry]) -> List[CategorizedEntry]:
    """Entries that need validation, i.e. everything except Other"""
    return [e for e in categorized_entries if e.category is not ActivityCategory.OTHER]


def calculate_quality_score(categorized_entries: List[CategorizedEntry]) -> float:
    """
    Share of paired entries in percent (0-100), one decimal.
    An empty input scores 100.
    """
    if not categorized_entries:
        return 100.0

    unpaired_count = len(get_unpaired_entries(categorized_entries))
    paired_count = len(categorized_entries) - unpaired_count

    return round_half_up(paired_count / len(categorized_entries) * 100, 1)
