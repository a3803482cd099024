import pandas as pd
import streamlit as st

from analytics.data_processor import DataProcessor
from analytics.logger import get_logger
from analytics.metrics import calculate_team_member_breakdown
from analytics.period_aggregator import calculate_person_monthly_fte
from analytics.project_helpers import safe_fte_display, safe_hours_display, safe_percentage_display

logger = get_logger(__name__)

filters = st.session_state.filters
date_from = filters['date_from'].isoformat()
date_to = filters['date_to'].isoformat()

st.markdown("### 👥 Team")

try:
    data = DataProcessor.load_period_data(date_from, date_to)
except Exception as e:
    logger.error(f"Failed to load team data: {e}", exc_info=True)
    st.error(f"Failed to load data: {e}")
    st.stop()

entries = data['entries']
if not entries:
    st.info("No timesheet entries in the selected period.")
    st.stop()

st.markdown("#### Monthly FTE per Person")
matrix = DataProcessor.person_month_matrix(calculate_person_monthly_fte(entries, data['planned_records']))
st.dataframe(matrix, use_container_width=True)

st.markdown("#### Team Members")
members = calculate_team_member_breakdown(
    entries, data['keywords'], data['planned_records'], date_from, date_to
)

for member in members:
    label = (
        f"{member['person']} · {safe_hours_display(member['total_hours'])} · "
        f"FTE {safe_fte_display(member['actual_fte'])} / planned {safe_fte_display(member['planned_fte'])}"
    )
    with st.expander(label):
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Actual FTE", safe_fte_display(member['actual_fte']))
        with col2:
            st.metric("Planned FTE", safe_fte_display(member['planned_fte']))
        with col3:
            st.metric("Deviation", safe_percentage_display(member['deviation'], signed=True))

        st.markdown("**Projects**")
        st.dataframe(pd.DataFrame(member['projects']), use_container_width=True, hide_index=True)

        if member['ops_activities']:
            st.markdown("**OPS Activities**")
            ops_df = pd.DataFrame(member['ops_activities'])
            ops_df['activity'] = ops_df['activity'].astype(str)
            st.dataframe(ops_df, use_container_width=True, hide_index=True)
