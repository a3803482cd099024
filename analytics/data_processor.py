import calendar
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
import streamlit as st

from analytics.constants import FTE_DEVIATION_THRESHOLD, MONTH_NAMES
from analytics.logger import get_logger
from analytics.models import ActivitySummary, CategorizedEntry, MonthlyTrend, PersonMonthlyFTE, PersonPeriodFTE
from analytics.project_helpers import round_half_up
from analytics.working_days import calculate_working_days

logger = get_logger(__name__)

TOTAL_LABEL = 'Total'


class DataProcessor:
    """Turn engine results into DataFrames for the dashboard pages"""

    @staticmethod
    @st.cache_data(ttl=60, show_spinner=False)
    def load_period_data(date_from: str, date_to: str) -> Dict:
        """
        Entries, active keywords and overlapping planned FTE records of a period.

        Cached for 60 seconds per (date_from, date_to); pages call
        st.cache_data.clear() after writing to the database.
        """
        # Access database manager from session state
        db = st.session_state.db_manager

        logger.info(f"Loading period data from {date_from} to {date_to}")
        return {
            'entries': db.get_entries(date_from, date_to),
            'keywords': db.get_active_keywords(),
            'planned_records': db.get_planned_fte_records(date_from, date_to),
        }

    @staticmethod
    def deviation_status(deviations: pd.Series, threshold: float = FTE_DEVIATION_THRESHOLD) -> np.ndarray:
        """'Over' / 'Under' / 'On plan' / '-' for a series of deviation percentages"""
        values = pd.to_numeric(deviations, errors='coerce')
        return np.where(
            values.isna(),
            '-',
            np.where(values > threshold, 'Over', np.where(values < -threshold, 'Under', 'On plan'))
        )

    @staticmethod
    def person_period_fte_frame(
        rows: List[PersonPeriodFTE],
        working_hours: int,
        period_planned_fte: Optional[float] = None
    ) -> pd.DataFrame:
        """
        One row per person plus a Total row.

        The Total FTE is recomputed from the summed hours and the period
        working hours rather than summing the rounded per-person values.
        """
        columns = ['Person', 'Hours', 'Entries', 'Actual FTE', 'Planned FTE', 'Deviation %', 'Status']
        if not rows:
            return pd.DataFrame(columns=columns)

        df = pd.DataFrame([
            {
                'Person': r.person_name,
                'Hours': r.total_hours,
                'Entries': r.entry_count,
                'Actual FTE': r.actual_fte,
                'Planned FTE': r.planned_fte,
                'Deviation %': r.deviation_percent,
            }
            for r in rows
        ])
        df['Status'] = DataProcessor.deviation_status(df['Deviation %'])

        total_hours = df['Hours'].sum()
        total_fte = round_half_up(total_hours / working_hours, 2) if working_hours else 0.0
        total_row = {
            'Person': TOTAL_LABEL,
            'Hours': round_half_up(total_hours, 2),
            'Entries': int(df['Entries'].sum()),
            'Actual FTE': total_fte,
            'Planned FTE': period_planned_fte,
            'Deviation %': None,
            'Status': '',
        }
        if period_planned_fte:
            total_row['Deviation %'] = round_half_up((total_fte - period_planned_fte) / period_planned_fte * 100, 1)

        return pd.concat([df, pd.DataFrame([total_row])], ignore_index=True)[columns]

    @staticmethod
    def monthly_trend_frame(trends: List[MonthlyTrend]) -> pd.DataFrame:
        """
        One row per month plus a Total row computed as
        sum(tracked hours) / sum(working hours).
        """
        columns = ['Month', 'Tracked Hours', 'Working Hours', 'Team Size', 'Total FTE', 'Average FTE', 'Planned FTE']
        if not trends:
            return pd.DataFrame(columns=columns)

        df = pd.DataFrame([
            {
                'Month': t.label,
                'Tracked Hours': t.tracked_hours,
                'Working Hours': t.working_hours,
                'Team Size': t.team_size,
                'Total FTE': t.total_fte,
                'Average FTE': t.average_fte,
                'Planned FTE': t.planned_fte,
            }
            for t in trends
        ])

        total_hours = df['Tracked Hours'].sum()
        total_working_hours = int(df['Working Hours'].sum())
        total_row = {
            'Month': TOTAL_LABEL,
            'Tracked Hours': round_half_up(total_hours, 2),
            'Working Hours': total_working_hours,
            'Team Size': None,
            'Total FTE': round_half_up(total_hours / total_working_hours, 2) if total_working_hours else 0.0,
            'Average FTE': None,
            'Planned FTE': None,
        }

        return pd.concat([df, pd.DataFrame([total_row])], ignore_index=True)[columns]

    @staticmethod
    def person_month_matrix(rows: List[PersonMonthlyFTE]) -> pd.DataFrame:
        """Person x month FTE matrix, months as 'YYYY-MM' columns in order"""
        if not rows:
            return pd.DataFrame()

        df = pd.DataFrame([
            {'Person': r.person_name, 'Month': f"{r.year}-{r.month:02d}", 'FTE': r.fte}
            for r in rows
        ])
        matrix = df.pivot_table(index='Person', columns='Month', values='FTE', aggfunc='sum')
        return matrix.reindex(sorted(matrix.columns), axis=1)

    @staticmethod
    def activity_summary_frame(summaries: List[ActivitySummary]) -> pd.DataFrame:
        columns = ['Category', 'Hours', 'Entries', 'Share %']
        if not summaries:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([
            {'Category': str(s.category), 'Hours': s.total_hours, 'Entries': s.entry_count, 'Share %': s.percentage}
            for s in summaries
        ], columns=columns)

    @staticmethod
    def project_metrics_frame(metrics: List[Dict]) -> pd.DataFrame:
        columns = ['Project', 'Hours', 'FTE', 'Entries', 'People', 'Share %']
        if not metrics:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([
            {
                'Project': m['project_category'],
                'Hours': m['total_hours'],
                'FTE': m['fte'],
                'Entries': m['entry_count'],
                'People': m['person_count'],
                'Share %': m['percentage'],
            }
            for m in metrics
        ], columns=columns)

    @staticmethod
    def categorized_entries_frame(entries: List[CategorizedEntry]) -> pd.DataFrame:
        """Review table of categorized entries, newest first"""
        columns = ['Date', 'Person', 'Project', 'Activity', 'Description', 'Hours', 'Category']
        if not entries:
            return pd.DataFrame(columns=columns)

        df = pd.DataFrame([
            {
                'Date': e.date,
                'Person': e.person_name,
                'Project': e.project_name,
                'Activity': e.activity_name,
                'Description': e.description or '',
                'Hours': e.hours,
                'Category': str(e.category),
            }
            for e in entries
        ], columns=columns)
        return df.sort_values(['Date', 'Person'], ascending=[False, True], kind='stable').reset_index(drop=True)

    @staticmethod
    def working_days_frame(year: int) -> pd.DataFrame:
        """Working days, holidays and hours of every month of a year"""
        records = []
        for month in range(1, 13):
            result = calculate_working_days(year, month)
            records.append({
                'Month': MONTH_NAMES[month - 1],
                'Days': result.total_days,
                'Weekdays': result.weekdays,
                'Holidays': len(result.holidays),
                'Working Days': result.working_days,
                'Working Hours': result.working_hours,
                'Holiday Names': ', '.join(h.name for h in result.holidays),
            })

        df = pd.DataFrame(records)
        df['Quarter'] = [f"Q{(m - 1) // 3 + 1}" for m in range(1, 13)]
        return df

    @staticmethod
    def holidays_frame(year: int, month: int) -> pd.DataFrame:
        """Weekday holidays of a month"""
        result = calculate_working_days(year, month)
        return pd.DataFrame(
            [
                {'Date': h.date, 'Day': calendar.day_name[pd.Timestamp(h.date).weekday()], 'Holiday': h.name}
                for h in result.holidays
            ],
            columns=['Date', 'Day', 'Holiday']
        )
