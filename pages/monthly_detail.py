from datetime import date

import streamlit as st

from analytics.activity_pairing import categorize_timesheet, get_activity_summary
from analytics.constants import MONTH_NAMES
from analytics.data_processor import DataProcessor
from analytics.fte import calculate_fte_stats, calculate_team_monthly_fte
from analytics.logger import get_logger
from analytics.metrics import calculate_dashboard_metrics, calculate_project_metrics
from analytics.planned_fte import find_planned_fte_record
from analytics.working_days import calculate_working_days, month_bounds

logger = get_logger(__name__)

st.markdown("### 📅 Monthly Detail")

today = date.today()
col1, col2 = st.columns(2)
with col1:
    year = st.selectbox("Year", list(range(today.year - 3, today.year + 2)), index=3, key="detail_year")
with col2:
    month = st.selectbox(
        "Month",
        list(range(1, 13)),
        index=today.month - 1,
        format_func=lambda m: MONTH_NAMES[m - 1],
        key="detail_month"
    )

working = calculate_working_days(year, month)

col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Calendar Days", working.total_days)
with col2:
    st.metric("Weekdays", working.weekdays)
with col3:
    st.metric("Working Days", working.working_days)
with col4:
    st.metric("Working Hours", f"{working.working_hours} h")

if working.holidays:
    st.markdown("#### Public Holidays")
    st.dataframe(DataProcessor.holidays_frame(year, month), use_container_width=True, hide_index=True)

st.divider()

month_start, month_end = month_bounds(year, month)
try:
    data = DataProcessor.load_period_data(month_start.isoformat(), month_end.isoformat())
except Exception as e:
    logger.error(f"Failed to load monthly data: {e}", exc_info=True)
    st.error(f"Failed to load data: {e}")
    st.stop()

entries = data['entries']
if not entries:
    st.info(f"No timesheet entries for {MONTH_NAMES[month - 1]} {year}.")
else:
    planned_map = {}
    for person_name in {e.person_name for e in entries}:
        record = find_planned_fte_record(data['planned_records'], person_name, month_start, month_end)
        if record is not None:
            planned_map[person_name] = record.fte_value

    person_ftes = calculate_team_monthly_fte(entries, year, month, planned_map)
    dashboard = calculate_dashboard_metrics(person_ftes)
    stats = calculate_fte_stats(person_ftes)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Team FTE", f"{stats.total_fte:.2f}")
    with col2:
        st.metric("Average FTE", f"{stats.average_fte:.2f}")
    with col3:
        st.metric("Highest", f"{dashboard['highest_fte']:.2f}", help=dashboard['highest_fte_person'])
    with col4:
        st.metric("Lowest", f"{dashboard['lowest_fte']:.2f}", help=dashboard['lowest_fte_person'])

    st.markdown("#### Personnel")
    st.dataframe(
        [
            {
                'Person': p.person_name,
                'Hours': p.tracked_hours,
                'FTE': p.fte,
                'Planned FTE': p.planned_fte,
                'Deviation %': p.deviation_percent,
            }
            for p in person_ftes
        ],
        use_container_width=True,
        hide_index=True
    )

    st.markdown("#### Projects")
    st.dataframe(
        DataProcessor.project_metrics_frame(calculate_project_metrics(entries, working.working_hours)),
        use_container_width=True,
        hide_index=True
    )

    st.markdown("#### Activities")
    st.dataframe(
        DataProcessor.activity_summary_frame(get_activity_summary(categorize_timesheet(entries, data['keywords']))),
        use_container_width=True,
        hide_index=True
    )

with st.expander(f"Working days in {year}"):
    st.dataframe(DataProcessor.working_days_frame(year), use_container_width=True, hide_index=True)
