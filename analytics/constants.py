"""
Named constants for the timesheet analytics dashboard.

Keeps the magic numbers of the FTE engine in one place so the calculator,
the storage layer and the pages agree on them.
"""

# Standard workday used for working-hours calculation
HOURS_PER_WORKDAY = 8

# ISO 3166 country code for the public holiday calendar
HOLIDAY_COUNTRY = "CZ"
HOLIDAY_LANGUAGE = "en_US"

# Storage
DEFAULT_DB_PATH = "data/timesheet_dashboard.db"
PAGE_SIZE = 1000

# Planned FTE bounds (admin input validation)
FTE_MIN = 0.0
FTE_MAX = 2.0
FTE_STEP = 0.05

# Notifications
FTE_DEVIATION_THRESHOLD = 30.0

# Project-name markers used by the activity classifier
OPS_MARKER = "ops"
GUIDING_MARKER = "guiding"

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
