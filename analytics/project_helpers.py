"""
Helper functions for project-name mapping, rounding and display formatting.
"""
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import pandas as pd


PROJECT_CATEGORIES = ['OPS', 'Internal', 'R&D', 'Guiding', 'PR', 'UX Maturity', 'Other']

# Costlocker project names carry a "_YYYY" suffix and optionally the
# "Design tým " team prefix
PROJECT_PATTERNS = [
    (re.compile(r'^(?:Design tým )?OPS(?:_\d{4})?$', re.IGNORECASE), 'OPS'),
    (re.compile(r'^(?:Design tým )?Interní(?:_\d{4})?$', re.IGNORECASE), 'Internal'),
    (re.compile(r'^(?:Design tým )?R&D(?:_\d{4})?$', re.IGNORECASE), 'R&D'),
    (re.compile(r'^(?:Design tým )?Guiding(?:_\d{4})?$', re.IGNORECASE), 'Guiding'),
    (re.compile(r'^(?:Design tým )?PR(?:_\d{4})?$', re.IGNORECASE), 'PR'),
    (re.compile(r'^(?:Design tým )?UX Maturity(?:_\d{4})?(?:\s*🙌)?$', re.IGNORECASE), 'UX Maturity'),
]

PROJECT_MAPPING = {
    'Design tým OPS': 'OPS',
    'Design tým Interní': 'Internal',
    'Design tým R&D': 'R&D',
    'Design tým Guiding': 'Guiding',
    'Guiding': 'Guiding',
    'Design tým PR': 'PR',
    'Design tým UX Maturity': 'UX Maturity',
    'UX Maturity': 'UX Maturity',
    'UX Maturity 🙌': 'UX Maturity',
}

_YEAR_SUFFIX = re.compile(r'_(\d{4})(?:\s*🙌)?$')


def map_project_category(project_name: str) -> str:
    """
    Map a Costlocker project name to an internal project category.

    Exact names are looked up first, then the year-variant patterns.
    Anything unrecognised is 'Other'.
    """
    if not project_name:
        return 'Other'

    name = str(project_name).strip()
    direct_match = PROJECT_MAPPING.get(name)
    if direct_match:
        return direct_match

    for pattern, category in PROJECT_PATTERNS:
        if pattern.match(name):
            return category

    return 'Other'


def extract_year_from_project_name(project_name: str) -> Optional[int]:
    """Return the year from a "_YYYY" suffix, or None"""
    if not project_name:
        return None
    match = _YEAR_SUFFIX.search(str(project_name).strip())
    return int(match.group(1)) if match else None


def round_half_up(value, digits: int = 2) -> float:
    """
    Round like the dashboard displays numbers.

    Ties go away from zero and are decided on the exact binary value of the
    float, so 1.125 -> 1.13 while 1.005 (stored as 1.00499...) -> 1.0.
    """
    if value is None:
        return 0.0
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def safe_fte_display(fte):
    """Safely display an FTE value with NULL handling."""
    if fte is None or pd.isna(fte):
        return '-'
    return f"{fte:.2f}"


def safe_percentage_display(value, signed=False):
    """
    Safely display a percentage with NULL/NaN handling.
    Returns '-' when the value is missing.
    """
    if value is None or pd.isna(value):
        return '-'
    if signed:
        return f"{value:+.1f}%"
    return f"{value:.1f}%"


def safe_hours_display(hours):
    """Safely display hours with NULL handling."""
    if hours is None or pd.isna(hours):
        return '-'
    return f"{hours:,.2f} h"
