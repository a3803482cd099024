"""
CSV and Excel Timesheet Importer
Parses Costlocker timesheet exports (English or Czech headers) into TimesheetEntry rows
"""

import math
import re
import unicodedata
from datetime import datetime, timedelta
from pathlib import Path

import pandas as pd

from analytics.logger import get_logger
from analytics.models import TimesheetEntry

logger = get_logger(__name__)

# Normalized header aliases per field; Czech headers are listed without diacritics
COLUMN_ALIASES = {
    'person_name': ['person_name', 'personname', 'person', 'name', 'user', 'username', 'osoba'],
    'person_email': ['person_email', 'personemail', 'email', 'user_email'],
    'project_name': ['project_name', 'projectname', 'project', 'projekt'],
    'activity_name': ['activity_name', 'activityname', 'activity', 'cinnost'],
    'task_name': ['task', 'task_name', 'taskname', 'ukol'],
    'date': ['date', 'day', 'start_at', 'startat', 'datum'],
    'hours': ['hours', 'duration', 'time', 'hours_tracked', 'natrackovano'],
    'description': ['description', 'note', 'notes', 'comment', 'comments', 'popis'],
}

REQUIRED_FIELDS = ['person_name', 'project_name', 'date', 'hours']

_ISO_DATE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
_CZECH_DATE = re.compile(r'^(\d{1,2})\.\s*(\d{1,2})\.\s*(\d{4})$')
_US_DATE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')
_TIME_SUFFIX = re.compile(r'^(.+?)\s*[ T]\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?$')
_EXCEL_SERIAL = re.compile(r'^(\d{5})(?:\.\d+)?$')

# Day zero of Excel serial dates (1900 date system)
EXCEL_EPOCH = datetime(1899, 12, 30)

EXCEL_EXTENSIONS = ('.xlsx', '.xls')
UPLOAD_TYPES = ['csv', 'xlsx', 'xls']


def normalize_column_name(name):
    """'Natrackováno ' -> 'natrackovano', 'Person Name' -> 'person_name'"""
    text = unicodedata.normalize('NFKD', str(name))
    text = ''.join(ch for ch in text if not unicodedata.combining(ch)).lower()
    text = re.sub(r'[^a-z0-9]', '_', text)
    text = re.sub(r'_+', '_', text)
    return text.strip('_')


def parse_date(date_str):
    """
    Convert a date to 'YYYY-MM-DD'.
    Handles:
    - 'YYYY-MM-DD' (e.g., "2025-11-29")
    - 'D. M. YYYY' and 'D.M.YYYY' (e.g., "29. 11. 2025")
    - 'M/D/YYYY' (e.g., "11/29/2025")
    - any of the above with a time suffix (e.g., "2025-11-29 08:00:00")
    - Excel serial day numbers (e.g., "45990")
    Returns None for anything else or an impossible calendar date.
    """
    if date_str is None or pd.isna(date_str):
        return None
    text = str(date_str).strip()
    if not text:
        return None

    match = _TIME_SUFFIX.match(text)
    if match:
        text = match.group(1).strip()

    try:
        match = _ISO_DATE.match(text)
        if match:
            year, month, day = match.groups()
            parsed = datetime(int(year), int(month), int(day))
        elif _CZECH_DATE.match(text):
            day, month, year = _CZECH_DATE.match(text).groups()
            parsed = datetime(int(year), int(month), int(day))
        elif _US_DATE.match(text):
            month, day, year = _US_DATE.match(text).groups()
            parsed = datetime(int(year), int(month), int(day))
        elif _EXCEL_SERIAL.match(text):
            parsed = EXCEL_EPOCH + timedelta(days=int(_EXCEL_SERIAL.match(text).group(1)))
        else:
            return None
    except ValueError:
        return None
    if not 1900 <= parsed.year <= 2100:
        return None
    return parsed.strftime('%Y-%m-%d')


def parse_hours(value):
    """Hours with '.' or ',' as decimal separator; None when not a finite non-negative number"""
    if value is None or pd.isna(value):
        return None
    text = str(value).strip().replace(',', '.')
    if not text:
        return None
    try:
        hours = float(text)
    except ValueError:
        return None
    if not math.isfinite(hours) or hours < 0:
        return None
    return hours


class TimesheetCSVImporter:
    """
    Imports timesheet data from Costlocker CSV or Excel exports with columns such as:
    Osoba, Projekt, Činnost, Úkol, Datum, Natrackováno, Popis
    (or their English equivalents).
    """

    def __init__(self, csv_path):
        """Initialize importer with CSV file path or file-like object"""
        self.csv_path = csv_path
        self.df = None
        self.column_map = {}
        self.entries = []
        self.validation_errors = []

    def _is_excel(self):
        name = getattr(self.csv_path, 'name', None) or str(self.csv_path)
        return Path(name).suffix.lower() in EXCEL_EXTENSIONS

    def parse_csv(self):
        """
        Parse the CSV (or Excel) file and resolve its columns.

        Raises:
            ValueError: a required column is missing
        """
        if self._is_excel():
            # Date cells come back as 'YYYY-MM-DD HH:MM:SS' strings
            self.df = pd.read_excel(self.csv_path, dtype=str, keep_default_na=False)
        else:
            # sep=None sniffs ',' vs ';' exports
            self.df = pd.read_csv(
                self.csv_path,
                sep=None,
                engine='python',
                dtype=str,
                keep_default_na=False,
                encoding='utf-8-sig'
            )

        normalized = {}
        for column in self.df.columns:
            normalized.setdefault(normalize_column_name(column), column)

        self.column_map = {}
        for field, aliases in COLUMN_ALIASES.items():
            for alias in aliases:
                if alias in normalized:
                    self.column_map[field] = normalized[alias]
                    break

        missing = [f for f in REQUIRED_FIELDS if f not in self.column_map]
        if 'activity_name' not in self.column_map and 'task_name' not in self.column_map:
            missing.append('activity_name')
        if missing:
            raise ValueError(
                f"Missing required column(s): {', '.join(missing)}. "
                f"Found columns: {', '.join(map(str, self.df.columns))}"
            )

        logger.info(f"Parsed CSV with {len(self.df)} rows, columns mapped: {self.column_map}")
        return self

    def _value(self, row, field):
        column = self.column_map.get(field)
        if column is None:
            return None
        value = row[column]
        if value is None or pd.isna(value):
            return None
        value = str(value).strip()
        return value or None

    def _error(self, row_number, field, message, value=None):
        self.validation_errors.append({
            'row': row_number,
            'field': field,
            'message': message,
            'value': value,
        })

    def extract_entries(self):
        """Validate every row; good rows become entries, bad rows become validation errors"""
        self.entries = []
        self.validation_errors = []

        # Row numbers are 1-based for display
        for row_number, (_, row) in enumerate(self.df.iterrows(), start=1):
            person_name = self._value(row, 'person_name')
            project_name = self._value(row, 'project_name')
            activity_name = self._value(row, 'activity_name') or self._value(row, 'task_name')
            raw_date = self._value(row, 'date')
            raw_hours = self._value(row, 'hours')

            errors_before = len(self.validation_errors)
            if not person_name:
                self._error(row_number, 'person_name', 'Person name is required')
            if not project_name:
                self._error(row_number, 'project_name', 'Project name is required')
            if not activity_name:
                self._error(row_number, 'activity_name', 'Activity or Task name is required')
            if not raw_date:
                self._error(row_number, 'date', 'Date is required')
            if raw_hours is None:
                self._error(row_number, 'hours', 'Hours is required')
            if len(self.validation_errors) > errors_before:
                continue

            date = parse_date(raw_date)
            if date is None:
                self._error(row_number, 'date',
                            'Date must be in valid format (YYYY-MM-DD or DD. MM. YYYY)', raw_date)
            hours = parse_hours(raw_hours)
            if hours is None:
                self._error(row_number, 'hours', 'Hours must be a positive number', raw_hours)
            if len(self.validation_errors) > errors_before:
                continue

            self.entries.append(TimesheetEntry(
                person_name=person_name,
                project_name=project_name,
                activity_name=activity_name,
                date=date,
                hours=hours,
                description=self._value(row, 'description'),
                person_email=self._value(row, 'person_email'),
            ))

        if self.validation_errors:
            logger.warning(f"{len(self.validation_errors)} validation error(s) while parsing timesheet rows")
        return self

    def get_summary(self):
        """Get summary statistics of the import"""
        if self.df is None:
            return {}

        dates = sorted(e.date for e in self.entries)
        failed_rows = len({error['row'] for error in self.validation_errors})

        return {
            'total_rows': len(self.df),
            'valid_rows': len(self.entries),
            'failed_rows': failed_rows,
            'unique_people': len({e.person_name for e in self.entries}),
            'unique_projects': len({e.project_name for e in self.entries}),
            'date_range': (dates[0], dates[-1]) if dates else None,
            'total_hours': sum(e.hours for e in self.entries),
        }

    def import_all(self):
        """
        Parse CSV and extract all rows
        Returns: (entries, validation_errors, summary)
        """
        self.parse_csv()
        self.extract_entries()

        return self.entries, self.validation_errors, self.get_summary()
