import streamlit as st

from analytics.activity_pairing import (
    calculate_quality_score,
    categorize_timesheet,
    get_relevant_entries,
    get_unpaired_entries,
)
from analytics.csv_importer import UPLOAD_TYPES, TimesheetCSVImporter
from analytics.data_processor import DataProcessor
from analytics.logger import get_logger

logger = get_logger(__name__)

db = st.session_state.db_manager

st.markdown("### 🔍 Review Buddy")
st.info(
    "Check a timesheet export before importing it. OPS time without a matching "
    "keyword is reported as Unpaired so it can be fixed in Costlocker first."
)

uploaded = st.file_uploader("Choose timesheet file (CSV or Excel)", type=UPLOAD_TYPES, key="review_upload")

if uploaded is not None:
    try:
        importer = TimesheetCSVImporter(uploaded)
        entries, validation_errors, summary = importer.import_all()
    except ValueError as e:
        logger.warning(f"Review Buddy rejected file {uploaded.name}: {e}")
        st.error(str(e))
        st.stop()
    except Exception as e:
        logger.error(f"Review Buddy failed to parse {uploaded.name}: {e}", exc_info=True)
        st.error(f"Failed to read file: {e}")
        st.stop()

    categorized = categorize_timesheet(entries, db.get_active_keywords(), strict=True)
    relevant = get_relevant_entries(categorized)
    unpaired = get_unpaired_entries(relevant)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Rows", summary['total_rows'])
    with col2:
        st.metric("OPS Entries", len(relevant))
    with col3:
        st.metric("Unpaired", len(unpaired))
    with col4:
        st.metric("Quality Score", f"{calculate_quality_score(relevant):.1f}%")

    if validation_errors:
        with st.expander(f"⚠️ {len(validation_errors)} row(s) could not be read"):
            st.dataframe(validation_errors, use_container_width=True, hide_index=True)

    if unpaired:
        st.markdown("#### Unpaired Entries")
        st.dataframe(DataProcessor.categorized_entries_frame(unpaired), use_container_width=True, hide_index=True)
    elif relevant:
        st.success("All OPS entries are paired with an activity. Ready to import.")

    with st.expander("All OPS entries"):
        st.dataframe(DataProcessor.categorized_entries_frame(relevant), use_container_width=True, hide_index=True)
