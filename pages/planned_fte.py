from datetime import date

import streamlit as st

from analytics.constants import FTE_MAX, FTE_MIN, FTE_STEP
from analytics.logger import get_logger
from analytics.planned_fte import find_overlapping_records, get_current_planned_fte

logger = get_logger(__name__)

db = st.session_state.db_manager

st.markdown("### 🎯 Planned FTE")

records = db.get_planned_fte_records()
current = get_current_planned_fte(records)

col1, col2 = st.columns(2)
with col1:
    st.metric("People with Plan", len(current))
with col2:
    st.metric("Planned Team FTE", f"{sum(r['fte_value'] for r in current if r['status'] == 'active'):.2f}")

overlaps = find_overlapping_records(records)
if overlaps:
    st.warning(f"{len(overlaps)} overlapping planned FTE record pair(s) found: "
               + ", ".join(sorted({first.person_name for first, _ in overlaps})))

tab1, tab2 = st.tabs(["Current Values", "History"])

with tab1:
    st.dataframe(current, use_container_width=True, hide_index=True)

    st.markdown("#### Set Planned FTE")
    known_people = sorted(set(db.get_people()) | {r['person_name'] for r in current})

    with st.form("planned_fte_form"):
        selected_person = st.selectbox("Person", known_people, index=None)
        new_person = st.text_input("Or new person")
        fte_value = st.number_input("FTE", min_value=FTE_MIN, max_value=FTE_MAX, value=1.0, step=FTE_STEP)
        valid_from = st.date_input("Valid from", value=date.today().replace(day=1))
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        person_name = new_person.strip() or selected_person
        try:
            db.set_planned_fte(person_name, round(fte_value, 2), valid_from)
            st.cache_data.clear()
            st.success(f"Planned FTE for {person_name} set to {fte_value:.2f} from {valid_from}")
            st.rerun()
        except ValueError as e:
            st.error(str(e))
        except Exception as e:
            logger.error(f"Failed to save planned FTE: {e}", exc_info=True)
            st.error(f"Failed to save planned FTE: {e}")

with tab2:
    history = db.get_planned_fte_history()
    if history.empty:
        st.info("No planned FTE records yet.")
    else:
        st.dataframe(history.drop(columns=['id']), use_container_width=True, hide_index=True)

        with st.expander("Delete a record"):
            record_id = st.selectbox(
                "Record",
                history['id'].tolist(),
                format_func=lambda i: " · ".join(
                    str(v) for v in history.loc[history['id'] == i, ['person_name', 'fte_value', 'valid_from']].iloc[0]
                )
            )
            if st.button("Delete", key="delete_fte"):
                db.delete_planned_fte(int(record_id))
                st.cache_data.clear()
                st.rerun()
