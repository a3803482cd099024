import json
import sqlite3
from datetime import datetime
from pathlib import Path

import pandas as pd

from analytics.constants import DEFAULT_DB_PATH, PAGE_SIZE
from analytics.logger import get_logger
from analytics.models import ActivityKeyword, PlannedFTERecord, TimesheetEntry, normalize_category
from analytics.planned_fte import add_planned_fte_version
from analytics.project_helpers import map_project_category
from analytics.working_days import to_date

logger = get_logger(__name__)

ENTRY_COLUMNS = [
    'person_name', 'person_email', 'project_name', 'project_category',
    'activity_name', 'date', 'hours', 'description', 'upload_id',
]


class DatabaseManager:
    def __init__(self, db_path=DEFAULT_DB_PATH):
        """Initialize database connection and create tables if they don't exist"""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False, isolation_level=None)
        self.create_tables()

    def create_tables(self):
        """Create all necessary tables"""
        cursor = self.conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS timesheet_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                person_name TEXT NOT NULL,
                person_email TEXT,
                project_name TEXT NOT NULL,
                project_category TEXT,
                activity_name TEXT NOT NULL,
                date TEXT NOT NULL,
                hours REAL NOT NULL,
                description TEXT,
                upload_id INTEGER,
                created_at TEXT,
                FOREIGN KEY (upload_id) REFERENCES upload_history (id)
            )
        ''')
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_entries_date ON timesheet_entries (date)")

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS activity_keywords (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                keyword TEXT NOT NULL,
                category TEXT NOT NULL,
                is_active INTEGER DEFAULT 1,
                created_at TEXT,
                updated_at TEXT,
                UNIQUE(keyword, category)
            )
        ''')

        # valid_to NULL marks the current record of a person
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS planned_fte (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                person_name TEXT NOT NULL,
                fte_value REAL NOT NULL,
                valid_from TEXT NOT NULL,
                valid_to TEXT,
                created_at TEXT
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TEXT
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS upload_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT,
                file_size INTEGER,
                total_rows INTEGER DEFAULT 0,
                successful_rows INTEGER DEFAULT 0,
                failed_rows INTEGER DEFAULT 0,
                data_date_from TEXT,
                data_date_to TEXT,
                status TEXT,
                validation_errors TEXT,
                created_at TEXT,
                completed_at TEXT
            )
        ''')

    def is_empty(self):
        """Check if database has no timesheet entries"""
        cursor = self.conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM timesheet_entries")
        return cursor.fetchone()[0] == 0

    # Timesheet entry methods
    def get_timesheet_entries(self, date_from=None, date_to=None, person_name=None):
        """
        Timesheet entries as a DataFrame, ordered by date.

        Rows are read in PAGE_SIZE pages and concatenated so large ranges
        never come back truncated.
        """
        query = "SELECT * FROM timesheet_entries"
        params = []
        conditions = []

        if date_from:
            conditions.append("date >= ?")
            params.append(to_date(date_from).isoformat())
        if date_to:
            conditions.append("date <= ?")
            params.append(to_date(date_to).isoformat())
        if person_name:
            conditions.append("person_name = ?")
            params.append(person_name)

        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY date ASC, id ASC LIMIT ? OFFSET ?"

        pages = []
        offset = 0
        while True:
            page = pd.read_sql_query(query, self.conn, params=params + [PAGE_SIZE, offset])
            if page.empty:
                break
            pages.append(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        if not pages:
            return pd.read_sql_query("SELECT * FROM timesheet_entries WHERE 0", self.conn)

        df = pd.concat(pages, ignore_index=True)
        logger.debug(f"Fetched {len(df)} timesheet entries in {len(pages)} page(s)")
        return df

    def get_entries(self, date_from=None, date_to=None, person_name=None):
        """Timesheet entries of a date range as TimesheetEntry objects"""
        df = self.get_timesheet_entries(date_from, date_to, person_name)
        df = df.astype(object).where(df.notna(), None)
        return [TimesheetEntry.from_row(row) for row in df.to_dict('records')]

    def get_existing_entries_date_range(self):
        """
        Get the current date range of timesheet entries in the database.

        Returns:
            Tuple (min_date, max_date) in 'YYYY-MM-DD' format, or None if no entries exist
        """
        cursor = self.conn.cursor()
        cursor.execute("SELECT MIN(date), MAX(date) FROM timesheet_entries")
        result = cursor.fetchone()

        if result and result[0] and result[1]:
            return (result[0], result[1])
        return None

    def delete_entries_by_date_range(self, start_date: str, end_date: str):
        """
        Delete timesheet entries within a specific date range (inclusive).

        Returns:
            Number of rows deleted
        """
        cursor = self.conn.cursor()
        cursor.execute(
            "DELETE FROM timesheet_entries WHERE date >= ? AND date <= ?",
            (start_date, end_date)
        )
        return cursor.rowcount

    def import_entries(self, entries, filename=None, file_size=None, validation_errors=None):
        """
        Incremental import of timesheet entries.

        Existing entries inside the imported date range are replaced; data
        outside the range is kept. The whole import runs in one transaction
        and is recorded in upload_history.

        Returns:
            dict with upload_id, total_rows, deleted_rows, data_date_from, data_date_to
        """
        entries = list(entries)
        dates = sorted(e.date for e in entries)
        date_from = dates[0] if dates else None
        date_to = dates[-1] if dates else None
        now = datetime.now().isoformat()

        cursor = self.conn.cursor()
        cursor.execute("BEGIN")
        try:
            cursor.execute('''
                INSERT INTO upload_history
                    (filename, file_size, total_rows, successful_rows, failed_rows,
                     data_date_from, data_date_to, status, validation_errors, created_at)
                VALUES (?, ?, ?, 0, 0, ?, ?, 'processing', ?, ?)
            ''', (
                filename, file_size, len(entries), date_from, date_to,
                json.dumps(validation_errors) if validation_errors else None, now,
            ))
            upload_id = cursor.lastrowid

            deleted = 0
            if date_from and date_to:
                deleted = self.delete_entries_by_date_range(date_from, date_to)

            placeholders = ','.join('?' * (len(ENTRY_COLUMNS) + 1))
            query = f"INSERT INTO timesheet_entries ({','.join(ENTRY_COLUMNS)}, created_at) VALUES ({placeholders})"
            values = [
                (
                    e.person_name, e.person_email, e.project_name,
                    map_project_category(e.project_name), e.activity_name,
                    e.date, float(e.hours), e.description, upload_id, now,
                )
                for e in entries
            ]
            cursor.executemany(query, values)

            cursor.execute('''
                UPDATE upload_history
                SET successful_rows = ?, failed_rows = ?, status = 'completed', completed_at = ?
                WHERE id = ?
            ''', (len(entries), len(validation_errors or []), datetime.now().isoformat(), upload_id))
            cursor.execute("COMMIT")
        except Exception:
            cursor.execute("ROLLBACK")
            logger.exception(f"Import of {len(entries)} entries failed, rolled back")
            raise

        logger.info(
            f"Imported {len(entries)} entries ({date_from}..{date_to}), "
            f"replaced {deleted} existing"
        )
        return {
            'upload_id': upload_id,
            'total_rows': len(entries),
            'deleted_rows': deleted,
            'data_date_from': date_from,
            'data_date_to': date_to,
        }

    def get_people(self):
        cursor = self.conn.cursor()
        cursor.execute("SELECT DISTINCT person_name FROM timesheet_entries ORDER BY person_name")
        return [row[0] for row in cursor.fetchall()]

    # Activity keyword methods
    def get_keywords(self, active_only=False):
        """Get keywords as a DataFrame"""
        query = "SELECT * FROM activity_keywords"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY category, keyword"
        return pd.read_sql_query(query, self.conn)

    def get_active_keywords(self):
        """Snapshot of the active keywords for one categorization pass"""
        df = self.get_keywords(active_only=True)
        return [
            ActivityKeyword(keyword=row['keyword'], category=row['category'], active=True)
            for row in df.to_dict('records')
        ]

    def add_keyword(self, keyword, category, is_active=True):
        """
        Add a keyword. The category label is normalized.

        Raises:
            ValueError: blank keyword, unknown category or duplicate
        """
        keyword = (keyword or '').strip()
        if not keyword:
            raise ValueError("Keyword must not be empty")
        category = normalize_category(category)

        now = datetime.now().isoformat()
        cursor = self.conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO activity_keywords (keyword, category, is_active, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (keyword, category.value, int(bool(is_active)), now, now)
            )
        except sqlite3.IntegrityError:
            raise ValueError(f"Keyword '{keyword}' already exists for {category.value}")

        logger.info(f"Added keyword '{keyword}' -> {category.value}")
        return cursor.lastrowid

    def _apply_keyword_update(self, cursor, keyword_id, updates):
        updates = dict(updates)
        if 'keyword' in updates:
            updates['keyword'] = (updates['keyword'] or '').strip()
            if not updates['keyword']:
                raise ValueError("Keyword must not be empty")
        if 'category' in updates:
            updates['category'] = normalize_category(updates['category']).value
        if 'is_active' in updates:
            updates['is_active'] = int(bool(updates['is_active']))
        updates['updated_at'] = datetime.now().isoformat()

        set_clause = ','.join([f"{k}=?" for k in updates.keys()])
        query = f"UPDATE activity_keywords SET {set_clause} WHERE id=?"
        try:
            cursor.execute(query, list(updates.values()) + [keyword_id])
        except sqlite3.IntegrityError:
            raise ValueError(f"Keyword '{updates.get('keyword', keyword_id)}' already exists in that category")
        return cursor.rowcount

    def update_keyword(self, keyword_id, updates):
        """
        Update keyword, category and/or is_active of a keyword.

        Raises:
            ValueError: blank keyword, unknown category or duplicate
        """
        return self._apply_keyword_update(self.conn.cursor(), keyword_id, updates)

    def update_keywords(self, changes):
        """
        Apply several keyword updates in one transaction.

        Args:
            changes: iterable of (keyword_id, updates) pairs

        Returns:
            Number of updated keywords; nothing is saved when one update fails
        """
        changes = list(changes)
        cursor = self.conn.cursor()
        cursor.execute("BEGIN")
        try:
            updated = sum(self._apply_keyword_update(cursor, keyword_id, updates) for keyword_id, updates in changes)
            cursor.execute("COMMIT")
        except Exception:
            cursor.execute("ROLLBACK")
            raise

        logger.info(f"Updated {updated} keyword(s)")
        return updated

    def set_keyword_active(self, keyword_id, is_active):
        return self.update_keyword(keyword_id, {'is_active': is_active})

    def delete_keyword(self, keyword_id):
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM activity_keywords WHERE id = ?", (keyword_id,))
        return cursor.rowcount

    # Planned FTE methods
    def get_planned_fte_history(self, person_name=None):
        """All planned FTE records, newest first"""
        query = "SELECT * FROM planned_fte"
        params = []
        if person_name:
            query += " WHERE person_name = ?"
            params.append(person_name)
        query += " ORDER BY person_name ASC, valid_from DESC"
        return pd.read_sql_query(query, self.conn, params=params)

    def get_planned_fte_records(self, date_from=None, date_to=None):
        """
        Planned FTE records as PlannedFTERecord objects, optionally limited
        to records overlapping [date_from, date_to]
        """
        query = "SELECT person_name, fte_value, valid_from, valid_to FROM planned_fte"
        params = []
        conditions = []
        if date_to:
            conditions.append("valid_from <= ?")
            params.append(to_date(date_to).isoformat())
        if date_from:
            conditions.append("(valid_to IS NULL OR valid_to >= ?)")
            params.append(to_date(date_from).isoformat())
        if conditions:
            query += " WHERE " + " AND ".join(conditions)

        cursor = self.conn.cursor()
        cursor.execute(query, params)
        return [
            PlannedFTERecord(
                person_name=person_name,
                fte_value=float(fte_value),
                valid_from=to_date(valid_from),
                valid_to=to_date(valid_to) if valid_to else None,
            )
            for person_name, fte_value, valid_from, valid_to in cursor.fetchall()
        ]

    def set_planned_fte(self, person_name, fte_value, valid_from):
        """
        Record a new planned FTE for a person.

        Versioning follows add_planned_fte_version: the open record is closed
        the day before valid_from and the new record inserted, both in one
        transaction.

        Raises:
            ValueError: invalid FTE value or valid_from inside an already
                        covered interval of the person
        """
        cursor = self.conn.cursor()
        cursor.execute("BEGIN")
        try:
            cursor.execute(
                "SELECT id, person_name, fte_value, valid_from, valid_to FROM planned_fte "
                "WHERE person_name = ? ORDER BY valid_from",
                (person_name,)
            )
            rows = cursor.fetchall()
            records = [
                PlannedFTERecord(
                    person_name=name,
                    fte_value=float(value),
                    valid_from=to_date(start),
                    valid_to=to_date(end) if end else None,
                )
                for _, name, value, start, end in rows
            ]
            versioned = add_planned_fte_version(records, person_name, fte_value, valid_from)

            # Existing records keep their order, the new one is appended
            for (record_id, *_), before, after in zip(rows, records, versioned):
                if before.valid_to != after.valid_to:
                    cursor.execute(
                        "UPDATE planned_fte SET valid_to = ? WHERE id = ?",
                        (after.valid_to.isoformat(), record_id)
                    )

            new_record = versioned[-1]
            cursor.execute(
                "INSERT INTO planned_fte (person_name, fte_value, valid_from, valid_to, created_at) "
                "VALUES (?, ?, ?, NULL, ?)",
                (person_name, new_record.fte_value, new_record.valid_from.isoformat(), datetime.now().isoformat())
            )
            record_id = cursor.lastrowid
            cursor.execute("COMMIT")
        except Exception:
            cursor.execute("ROLLBACK")
            raise

        logger.info(
            f"Set planned FTE for {person_name}: {new_record.fte_value} "
            f"from {new_record.valid_from.isoformat()}"
        )
        return record_id

    def delete_planned_fte(self, record_id):
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM planned_fte WHERE id = ?", (record_id,))
        return cursor.rowcount

    # Settings methods
    def get_setting(self, key, default=None):
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row and row[0] is not None else default

    def set_setting(self, key, value):
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, datetime.now().isoformat())
        )

    def get_data_range(self):
        """
        Configured data availability range.

        Returns:
            Tuple (start_date, end_date); either may be None
        """
        return self.get_setting('data_range_start'), self.get_setting('data_range_end')

    def set_data_range(self, start_date, end_date):
        start = to_date(start_date)
        end = to_date(end_date)
        if start > end:
            raise ValueError("Data range start must not be after its end")
        self.set_setting('data_range_start', start.isoformat())
        self.set_setting('data_range_end', end.isoformat())
        logger.info(f"Data range set to {start.isoformat()}..{end.isoformat()}")

    # Upload history methods
    def get_upload_history(self, limit=10):
        return pd.read_sql_query(
            "SELECT * FROM upload_history ORDER BY id DESC LIMIT ?",
            self.conn, params=[limit]
        )

    def clear_all_data(self):
        """Delete timesheet entries and upload history; keywords, FTE and settings stay"""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM timesheet_entries")
        cursor.execute("DELETE FROM upload_history")
        logger.info("Cleared timesheet entries and upload history")

    def close(self):
        """Close database connection"""
        self.conn.close()
