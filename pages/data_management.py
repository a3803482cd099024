from datetime import date

import streamlit as st

from analytics.csv_importer import UPLOAD_TYPES, TimesheetCSVImporter
from analytics.logger import get_logger
from analytics.sample_data import generate_sample_data

logger = get_logger(__name__)

db = st.session_state.db_manager

st.markdown("### 💾 Data Management")

tab1, tab2, tab3 = st.tabs(["Import Timesheet", "Data Range", "Database Management"])

with tab1:
    st.markdown("#### Import Timesheet")
    st.info(
        "Import a Costlocker timesheet export. Existing entries inside the file's date range "
        "are replaced; data outside the range is kept."
    )

    timesheet_file = st.file_uploader(
        "Choose timesheet file (CSV or Excel)",
        type=UPLOAD_TYPES,
        key="timesheet_upload",
        help="Columns: Osoba, Projekt, Činnost/Úkol, Datum, Natrackováno, Popis (or English equivalents)"
    )

    summary = None
    if timesheet_file is not None:
        try:
            importer = TimesheetCSVImporter(timesheet_file)
            entries, validation_errors, summary = importer.import_all()
        except ValueError as e:
            st.error(str(e))
        except Exception as e:
            logger.error(f"Error parsing timesheet CSV: {e}", exc_info=True)
            st.error(f"Error parsing file: {e}")

    if summary is not None:
        # Show summary
        st.markdown("##### Import Preview")
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Total Rows", summary['total_rows'])
        with col2:
            st.metric("Valid Rows", summary['valid_rows'])
        with col3:
            st.metric("People", summary['unique_people'])
        with col4:
            st.metric("Projects", summary['unique_projects'])

        st.write(f"**Total Hours:** {summary['total_hours']:,.1f}")

        if validation_errors:
            with st.expander(f"⚠️ {len(validation_errors)} validation error(s), these rows will be skipped"):
                st.dataframe(validation_errors, use_container_width=True, hide_index=True)

        if summary['date_range']:
            csv_start, csv_end = summary['date_range']
            existing_range = db.get_existing_entries_date_range()

            st.markdown("##### 📅 Date Range Impact")
            col1, col2, col3 = st.columns(3)
            with col1:
                st.markdown("**Incoming CSV:**")
                st.info(f"{csv_start}\nto\n{csv_end}")
            with col2:
                st.markdown("**Current Database:**")
                st.info(f"{existing_range[0]}\nto\n{existing_range[1]}" if existing_range else "No existing\nentries")
            with col3:
                st.markdown("**Will Be Replaced:**")
                if existing_range and max(csv_start, existing_range[0]) <= min(csv_end, existing_range[1]):
                    st.warning(f"{max(csv_start, existing_range[0])}\nto\n{min(csv_end, existing_range[1])}")
                else:
                    st.success("No overlap")

            if st.button("📥 Import", type="primary", key="do_import"):
                try:
                    result = db.import_entries(
                        entries,
                        filename=timesheet_file.name,
                        file_size=timesheet_file.size,
                        validation_errors=validation_errors
                    )
                    st.cache_data.clear()
                    st.success(
                        f"Imported {result['total_rows']} entries, replaced {result['deleted_rows']} existing."
                    )
                except Exception as e:
                    logger.error(f"Error importing timesheet: {e}", exc_info=True)
                    st.error(f"Error importing timesheet: {e}")

    st.markdown("#### Upload History")
    history = db.get_upload_history()
    if history.empty:
        st.caption("No uploads yet.")
    else:
        st.dataframe(history.drop(columns=['validation_errors']), use_container_width=True, hide_index=True)

with tab2:
    st.markdown("#### Data Availability Range")
    st.caption("Dashboard periods are clamped to this range.")

    range_start, range_end = db.get_data_range()
    today = date.today()
    with st.form("data_range_form"):
        col1, col2 = st.columns(2)
        with col1:
            start = st.date_input("Start", value=date.fromisoformat(range_start) if range_start else date(today.year, 1, 1))
        with col2:
            end = st.date_input("End", value=date.fromisoformat(range_end) if range_end else today)
        if st.form_submit_button("Save", type="primary"):
            try:
                db.set_data_range(start, end)
                st.success(f"Data range set to {start} – {end}")
            except ValueError as e:
                st.error(str(e))

with tab3:
    st.markdown("#### Sample Data")
    st.caption("Fill the database with generated entries, keywords and planned FTE for the current year.")
    if st.button("🎲 Generate Sample Data"):
        try:
            with st.spinner("Generating sample data..."):
                result = generate_sample_data(db)
            st.cache_data.clear()
            st.success(f"Generated {result['total_rows']} sample entries")
        except Exception as e:
            logger.error(f"Error generating sample data: {e}", exc_info=True)
            st.error(f"Error generating sample data: {e}")

    st.markdown("#### Clear Data")
    st.warning("Deletes all timesheet entries and upload history. Keywords, planned FTE and settings are kept.")
    confirm = st.checkbox("I understand this cannot be undone")
    if st.button("🗑️ Clear Timesheet Data", disabled=not confirm):
        db.clear_all_data()
        st.cache_data.clear()
        st.success("Timesheet data cleared")
