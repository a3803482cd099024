import logging
from datetime import date, datetime

# Setup logging FIRST, before any Streamlit imports
from analytics.logger import setup_logging, get_logger
setup_logging(log_level=logging.INFO)
logger = get_logger(__name__)

# Now import Streamlit and other dependencies
import streamlit as st
from dateutil.relativedelta import relativedelta

# Page configuration - must be first Streamlit command
st.set_page_config(
    page_title="Timesheet Analytics Dashboard",
    page_icon="⏱️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Import database utilities
from analytics.database import DatabaseManager
from analytics.data_processor import DataProcessor
from analytics.working_days import get_working_hours_for_period, to_date

# Initialize session state BEFORE defining pages
# This ensures session state exists when page modules are imported
if 'db_manager' not in st.session_state:
    logger.info("Initializing database manager and data processor")
    st.session_state.db_manager = DatabaseManager()
    st.session_state.data_processor = DataProcessor()

db = st.session_state.db_manager
today = date.today()

PERIOD_OPTIONS = ["This Month", "Last Month", "Last 3 Months", "Year to Date", "Custom"]


def resolve_period(option, custom_range=None):
    """(date_from, date_to) of a period preset"""
    month_start = today.replace(day=1)
    if option == "This Month":
        return month_start, month_start + relativedelta(months=1, days=-1)
    if option == "Last Month":
        start = month_start - relativedelta(months=1)
        return start, month_start - relativedelta(days=1)
    if option == "Last 3 Months":
        return month_start - relativedelta(months=2), month_start + relativedelta(months=1, days=-1)
    if option == "Year to Date":
        return date(today.year, 1, 1), today
    return custom_range


# Initialize filters in session state if not present
if 'filters' not in st.session_state:
    date_from, date_to = resolve_period("Last Month")
    st.session_state.filters = {
        'period': "Last Month",
        'date_from': date_from,
        'date_to': date_to,
    }

# Define pages using st.Page
overview_page = st.Page(
    "pages/overview.py",
    title="Overview",
    icon="📊",
    default=True
)
activities_page = st.Page(
    "pages/activities.py",
    title="Activities",
    icon="🏷️"
)
team_page = st.Page(
    "pages/team.py",
    title="Team",
    icon="👥"
)
monthly_detail_page = st.Page(
    "pages/monthly_detail.py",
    title="Monthly Detail",
    icon="📅"
)
review_buddy_page = st.Page(
    "pages/review_buddy.py",
    title="Review Buddy",
    icon="🔍"
)
planned_fte_page = st.Page(
    "pages/planned_fte.py",
    title="Planned FTE",
    icon="🎯"
)
keywords_page = st.Page(
    "pages/keywords.py",
    title="Keywords",
    icon="🔑"
)
data_page = st.Page(
    "pages/data_management.py",
    title="Data Management",
    icon="💾"
)

# Create navigation
pg = st.navigation({
    "Dashboard": [overview_page, activities_page, team_page, monthly_detail_page],
    "Tools": [review_buddy_page],
    "Admin": [planned_fte_page, keywords_page, data_page],
})

# Period filter in sidebar
with st.sidebar:
    st.markdown("### 🗓️ Period")

    filters = st.session_state.filters
    period = st.selectbox(
        "Period",
        PERIOD_OPTIONS,
        index=PERIOD_OPTIONS.index(filters['period']),
        key="period_option"
    )

    if period == "Custom":
        custom = st.date_input(
            "Date range",
            value=(filters['date_from'], filters['date_to']),
            key="custom_period"
        )
        if isinstance(custom, (tuple, list)) and len(custom) == 2:
            date_from, date_to = custom
        else:
            date_from, date_to = filters['date_from'], filters['date_to']
    else:
        date_from, date_to = resolve_period(period)

    # Clamp to the configured data range
    range_start, range_end = db.get_data_range()
    if range_start and date_from < to_date(range_start):
        date_from = to_date(range_start)
    if range_end and date_to > to_date(range_end):
        date_to = to_date(range_end)

    filters.update({'period': period, 'date_from': date_from, 'date_to': date_to})

    st.caption(f"{date_from:%d.%m.%Y} – {date_to:%d.%m.%Y}")
    if date_from <= date_to:
        st.metric("Working Hours", f"{get_working_hours_for_period(date_from, date_to)} h")

    existing_range = db.get_existing_entries_date_range()
    if existing_range:
        st.caption(f"Data available: {existing_range[0]} to {existing_range[1]}")
    else:
        st.caption("No timesheet data imported yet")

# Run the selected page
pg.run()

# Footer
st.markdown("---")
st.markdown(
    """
    <div style='text-align: center; color: #666;'>
        Timesheet Analytics Dashboard v1.0 | Last updated: {0}
    </div>
    """.format(datetime.now().strftime("%Y-%m-%d %H:%M")),
    unsafe_allow_html=True
)
