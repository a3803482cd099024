import streamlit as st

from analytics.activity_pairing import calculate_quality_score, categorize_timesheet, get_relevant_entries
from analytics.data_processor import DataProcessor
from analytics.logger import get_logger
from analytics.metrics import calculate_project_metrics
from analytics.notifications import get_notifications
from analytics.period_aggregator import (
    calculate_monthly_trends,
    calculate_period_planned_fte,
    calculate_period_summary,
    calculate_person_period_fte,
)
from analytics.project_helpers import safe_fte_display, safe_hours_display, safe_percentage_display

logger = get_logger(__name__)

filters = st.session_state.filters
date_from = filters['date_from'].isoformat()
date_to = filters['date_to'].isoformat()

st.markdown("### 📊 Overview")
st.caption(f"{date_from} to {date_to}")

try:
    data = DataProcessor.load_period_data(date_from, date_to)
except Exception as e:
    logger.error(f"Failed to load overview data: {e}", exc_info=True)
    st.error(f"Failed to load data: {e}")
    st.stop()

entries = data['entries']
planned_records = data['planned_records']

if not entries:
    st.info("No timesheet entries in the selected period. Import data in Data Management.")
    st.stop()

# Notifications
for notification in get_notifications(entries, data['keywords'], planned_records, date_from, date_to):
    message = f"**{notification.title}** – {notification.message}"
    if notification.type == 'error':
        st.error(message)
    elif notification.type == 'warning':
        st.warning(message)
    else:
        st.info(message)

summary = calculate_period_summary(entries, planned_records, date_from, date_to)
categorized = categorize_timesheet(entries, data['keywords'])

col1, col2, col3, col4, col5 = st.columns(5)
with col1:
    st.metric("Tracked Hours", safe_hours_display(summary.total_hours))
with col2:
    st.metric("Team FTE", safe_fte_display(summary.period_fte))
with col3:
    st.metric(
        "Planned FTE",
        safe_fte_display(summary.planned_fte),
        delta=safe_percentage_display(summary.deviation_percent, signed=True)
        if summary.deviation_percent is not None else None
    )
with col4:
    st.metric("Average FTE", safe_fte_display(summary.average_fte), help=f"Team size: {summary.team_size}")
with col5:
    st.metric("Pairing Quality", safe_percentage_display(calculate_quality_score(get_relevant_entries(categorized))))

st.divider()

st.markdown("#### Monthly Trend")
trends = calculate_monthly_trends(entries, planned_records)
st.dataframe(DataProcessor.monthly_trend_frame(trends), use_container_width=True, hide_index=True)

st.markdown("#### FTE by Person")
person_rows = calculate_person_period_fte(entries, planned_records, date_from, date_to)
person_df = DataProcessor.person_period_fte_frame(
    person_rows,
    summary.working_hours,
    calculate_period_planned_fte(entries, planned_records, date_from, date_to)
)
st.dataframe(person_df, use_container_width=True, hide_index=True)

st.markdown("#### Projects")
project_metrics = calculate_project_metrics(entries, summary.working_hours)
st.dataframe(DataProcessor.project_metrics_frame(project_metrics), use_container_width=True, hide_index=True)
