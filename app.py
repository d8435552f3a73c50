import pandas as pd
import streamlit as st

from rollsearch.config import SEARCH_FIELDS, get_config
from rollsearch.exceptions import StoreUnavailable
from rollsearch.logger import get_logger
from rollsearch.models import SearchMode
from rollsearch.persistence import SQLiteRecordStore
from rollsearch.session import RollSession, open_store

st.set_page_config(page_title="Electoral Roll - Voter List", layout="wide")

logger = get_logger("rollsearch")

FIELD_LABELS = {
    "name": "Name",
    "epic_no": "EPIC",
    "fh_name": "Guardian",
    "house_name": "House Name",
    "house_no": "House No",
    "sex_age": "Sex/Age",
}

DISPLAY_COLUMNS = ["sl_no", "name", "sex_age", "fh_name", "house_no", "house_name", "epic_no"]


@st.cache_resource
def get_store() -> SQLiteRecordStore:
    # One database handle for the whole process, shared by every browser session
    return open_store(get_config())


def get_session() -> RollSession:
    # Filters, query and results are kept per browser session
    if "roll_session" not in st.session_state:
        st.session_state.roll_session = RollSession.start(get_config(), store=get_store())
    return st.session_state.roll_session


st.title("Electoral Roll - Voter List")
st.caption("Complete voter database with detailed information")

try:
    with st.spinner("Loading voter database..."):
        session = get_session()
except StoreUnavailable as e:
    logger.error(f"Roll database unavailable: {e}")
    st.error(f"Could not load the voter database: {e.message}")
    st.markdown("\n".join(f"- {step}" for step in e.remediation))
    st.stop()

# ------------------------------------------------------------------
# FILTERS
# ------------------------------------------------------------------

options = session.filter_options()
selection = session.state.selection

col_lb, col_ward, col_ps = st.columns(3)

local_body = col_lb.selectbox(
    "Local Body",
    options.local_bodies,
    index=options.local_bodies.index(selection.local_body),
)
if local_body != selection.local_body:
    session.select_local_body(local_body).result()
    st.rerun()

ward = col_ward.selectbox(
    "Ward",
    options.wards,
    index=options.wards.index(selection.ward),
)
if ward != selection.ward:
    session.select_ward(ward).result()
    st.rerun()

polling_station = col_ps.selectbox(
    "Polling Station",
    options.polling_stations,
    index=options.polling_stations.index(selection.polling_station),
)
if polling_station != selection.polling_station:
    session.select_polling_station(polling_station).result()
    st.rerun()

# ------------------------------------------------------------------
# SEARCH BAR
# ------------------------------------------------------------------

state = session.state

fuzzy = st.checkbox(
    "Enable Fuzzy Search (typo-friendly)",
    value=state.mode is SearchMode.FUZZY,
)
session.set_mode(SearchMode.FUZZY if fuzzy else SearchMode.EXACT)

with st.form("search", border=False):
    col_field, col_query, col_button = st.columns([1, 4, 1])
    field = col_field.selectbox(
        "Field",
        SEARCH_FIELDS,
        index=SEARCH_FIELDS.index(state.field),
        format_func=FIELD_LABELS.get,
        disabled=fuzzy,
        label_visibility="collapsed",
    )
    query = col_query.text_input(
        "Search",
        value=state.query_text,
        placeholder="Search...",
        label_visibility="collapsed",
    )
    submitted = col_button.form_submit_button("Search", use_container_width=True)

if submitted:
    session.set_field(field)
    session.set_query(query)
    session.search()

# ------------------------------------------------------------------
# RESULTS
# ------------------------------------------------------------------

state = session.state

if state.error:
    st.warning(state.error)

st.write(f"Showing **{state.result_count}** results")

if state.results:
    df = pd.DataFrame([voter.to_dict() for voter in state.results])
    columns = [c for c in DISPLAY_COLUMNS if c in df.columns]
    st.dataframe(
        df[columns],
        use_container_width=True,
        hide_index=True,
        column_config={
            "sl_no": st.column_config.TextColumn("SL #"),
            "name": st.column_config.TextColumn("Name"),
            "sex_age": st.column_config.TextColumn("Sex/Age"),
            "fh_name": st.column_config.TextColumn("Guardian"),
            "house_no": st.column_config.TextColumn("House No"),
            "house_name": st.column_config.TextColumn("House Name"),
            "epic_no": st.column_config.TextColumn("EPIC"),
        },
    )
