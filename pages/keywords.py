import streamlit as st

from analytics.logger import get_logger
from analytics.models import KEYWORD_CATEGORIES

logger = get_logger(__name__)

db = st.session_state.db_manager

st.markdown("### 🔑 Activity Keywords")
st.caption(
    "Keywords are matched case-insensitively inside activity name and description. "
    "Hiring, Jobs and Reviews keywords only apply on OPS projects."
)

keywords_df = db.get_keywords()

col1, col2 = st.columns(2)
with col1:
    st.metric("Keywords", len(keywords_df))
with col2:
    st.metric("Active", int(keywords_df['is_active'].sum()) if not keywords_df.empty else 0)

with st.form("add_keyword_form", clear_on_submit=True):
    col1, col2 = st.columns(2)
    with col1:
        keyword = st.text_input("Keyword")
    with col2:
        category = st.selectbox("Category", [c.value for c in KEYWORD_CATEGORIES])
    submitted = st.form_submit_button("➕ Add Keyword", type="primary")

if submitted:
    try:
        db.add_keyword(keyword, category)
        st.cache_data.clear()
        st.success(f"Added '{keyword.strip()}' to {category}")
        st.rerun()
    except ValueError as e:
        st.error(str(e))

st.divider()

if keywords_df.empty:
    st.info("No keywords defined yet.")
else:
    display_df = keywords_df[['id', 'keyword', 'category', 'is_active']].copy()
    display_df['is_active'] = display_df['is_active'].astype(bool)

    edited_df = st.data_editor(
        display_df,
        column_config={
            'id': st.column_config.NumberColumn('ID', disabled=True, width='small'),
            'keyword': st.column_config.TextColumn('Keyword', required=True),
            'category': st.column_config.SelectboxColumn(
                'Category', options=[c.value for c in KEYWORD_CATEGORIES], required=True
            ),
            'is_active': st.column_config.CheckboxColumn('Active'),
        },
        use_container_width=True,
        hide_index=True,
        num_rows="fixed",
        key='keywords_editor'
    )

    col1, col2 = st.columns([1, 3])
    with col1:
        if st.button("💾 Save Changes", type="primary"):
            changes = []
            for idx in range(len(display_df)):
                original = display_df.iloc[idx]
                edited = edited_df.iloc[idx]
                updates = {
                    column: edited[column]
                    for column in ('keyword', 'category', 'is_active')
                    if edited[column] != original[column]
                }
                if updates:
                    changes.append((int(original['id']), updates))

            try:
                changes_made = db.update_keywords(changes)
                st.cache_data.clear()
                st.success(f"Saved {changes_made} keyword change(s)")
                st.rerun()
            except ValueError as e:
                st.error(f"Nothing was saved: {e}")
            except Exception as e:
                logger.error(f"Failed to save keyword changes: {e}", exc_info=True)
                st.error(f"Failed to save changes: {e}")

    with st.expander("Delete a keyword"):
        keyword_id = st.selectbox(
            "Keyword",
            display_df['id'].tolist(),
            format_func=lambda i: f"{display_df.loc[display_df['id'] == i, 'keyword'].iloc[0]} "
                                  f"({display_df.loc[display_df['id'] == i, 'category'].iloc[0]})"
        )
        if st.button("🗑️ Delete", key="delete_keyword"):
            db.delete_keyword(int(keyword_id))
            st.cache_data.clear()
            st.rerun()
