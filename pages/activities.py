import streamlit as st

from analytics.activity_pairing import categorize_timesheet, get_activity_summary, get_unpaired_entries
from analytics.data_processor import DataProcessor
from analytics.logger import get_logger
from analytics.metrics import calculate_activity_metrics
from analytics.models import ActivityCategory

logger = get_logger(__name__)

filters = st.session_state.filters
date_from = filters['date_from'].isoformat()
date_to = filters['date_to'].isoformat()

st.markdown("### 🏷️ Activities")

try:
    data = DataProcessor.load_period_data(date_from, date_to)
except Exception as e:
    logger.error(f"Failed to load activity data: {e}", exc_info=True)
    st.error(f"Failed to load data: {e}")
    st.stop()

if not data['entries']:
    st.info("No timesheet entries in the selected period.")
    st.stop()

categorized = categorize_timesheet(data['entries'], data['keywords'])

# Only OPS activities are interesting here
ops_entries = [e for e in categorized if e.category is not ActivityCategory.OTHER]

col1, col2, col3 = st.columns(3)
with col1:
    st.metric("OPS Hours", f"{sum(e.hours for e in ops_entries):,.2f} h")
with col2:
    st.metric("OPS Entries", len(ops_entries))
with col3:
    st.metric("Unpaired Entries", len(get_unpaired_entries(ops_entries)))

st.markdown("#### Hours by Activity")
st.dataframe(
    DataProcessor.activity_summary_frame(get_activity_summary(ops_entries)),
    use_container_width=True,
    hide_index=True
)

st.markdown("#### People per Activity")
metrics = calculate_activity_metrics(ops_entries)
st.dataframe(
    [
        {'Category': str(m['category']), 'Hours': m['total_hours'], 'People': m['person_count'], 'Share %': m['percentage']}
        for m in metrics
    ],
    use_container_width=True,
    hide_index=True
)

with st.expander("All categorized entries"):
    st.dataframe(DataProcessor.categorized_entries_frame(ops_entries), use_container_width=True, hide_index=True)
