import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging

import streamlit as st

from ledger.ai_summary import LOADING_MESSAGE, AISummaryClient
from ledger.auth import sign_in_anonymously
from ledger.config import get_settings
from ledger.dashboard import DEFAULT_PERIOD, PERIODS, Dashboard, DashboardState
from ledger.dates import days_ago_str, parse_date, today, today_str
from ledger.db import init_db, make_engine, make_session_factory
from ledger.domain import ALL, EXPENSE, EXPENSE_CATEGORIES, FILTER_TYPES, INCOME, TRANSACTION_TYPES
from ledger.presentation import (
    NO_TRANSACTIONS,
    breakdown_frame,
    build_chart,
    margin_bar,
    summary_cards,
    transactions_frame,
)
from ledger.store import TransactionStore

settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Freelance Finance", layout="wide")


def run(coro):
    return asyncio.run(coro)


@st.cache_resource
def get_store(db_url: str) -> TransactionStore:
    engine = make_engine(db_url)
    run(init_db(engine))
    return TransactionStore(make_session_factory(engine))


store = get_store(settings.db_url)
user_id = sign_in_anonymously(st.session_state, settings.user_id)

ai_client = AISummaryClient(
    api_key=settings.gemini_api_key,
    model=settings.gemini_model,
    api_base=settings.gemini_api_base,
    timeout=settings.ai_timeout,
)

first_visit = "dashboard_state" not in st.session_state
if first_visit:
    st.session_state.dashboard_state = DashboardState()

dashboard = Dashboard(
    store,
    user_id,
    ai_client,
    state=st.session_state.dashboard_state,
    page_size=settings.page_size,
    tax_rate=settings.tax_rate,
    savings_rate=settings.savings_rate,
)
if first_visit:
    run(dashboard.start())

state = dashboard.state


def show_errors(result) -> bool:
    if result.is_left():
        st.error(result.get_error()["message"])
        return True
    return False


# ── Sidebar: new transaction ────────────────────────────────────────────────
st.sidebar.markdown("### ➕ Add Transaction")
new_type = st.sidebar.radio("Type", TRANSACTION_TYPES, format_func=str.capitalize, key="new_type", horizontal=True)
with st.sidebar.form("transaction_form", clear_on_submit=True):
    description = st.text_input("Description")
    amount = st.number_input("Amount ($)", min_value=0.0, step=10.0, format="%.2f")
    tx_date = st.date_input("Date", value=today())
    category = None
    if new_type == EXPENSE:
        category = st.selectbox("Category", EXPENSE_CATEGORIES, format_func=str.capitalize,
                                index=EXPENSE_CATEGORIES.index("other"))
    submitted = st.form_submit_button("Add Transaction")

    if submitted:
        result = run(dashboard.add_transaction(description, amount, tx_date, new_type, category))
        if not show_errors(result):
            st.rerun()

st.sidebar.caption(f"Signed in anonymously · `{user_id[:8]}`")


# ── Summary ──────────────────────────────────────────────────────────────────
st.title("💼 Freelance Finance")

cards = summary_cards(state.summary)
cols = st.columns(len(cards))
for col, card in zip(cols, cards):
    with col:
        st.metric(card.label, card.value)

bar = margin_bar(state.summary)
st.markdown(
    f"**Profit margin:** <span style='color:{bar['color']}'>{bar['text']}</span>",
    unsafe_allow_html=True,
)
st.progress(bar["fraction"])

st.divider()


# ── Filters ─────────────────────────────────────────────────────────────────
f_col1, f_col2 = st.columns([2, 2])
with f_col1:
    selected_type = st.radio(
        "Show",
        FILTER_TYPES,
        index=FILTER_TYPES.index(state.filter.type),
        format_func=str.capitalize,
        horizontal=True,
        key="filter_type",
    )
selected_category = None
if selected_type == EXPENSE:
    with f_col2:
        options = (ALL,) + EXPENSE_CATEGORIES
        current = state.filter.category or ALL
        selected_category = st.selectbox(
            "Category",
            options,
            index=options.index(current) if current in options else 0,
            format_func=str.capitalize,
            key="filter_category",
        )

if selected_type != state.filter.type or (
    selected_type == EXPENSE and selected_category != (state.filter.category or ALL)
):
    run(dashboard.set_filter(selected_type, selected_category))
    st.rerun()


# ── Transaction list ────────────────────────────────────────────────────────
st.subheader("🧾 Transactions")

frame = transactions_frame(state.page.items)
if frame.empty:
    st.info(NO_TRANSACTIONS)
else:
    for _, row in frame.iterrows():
        c_main, c_amount, c_edit, c_delete = st.columns([6, 2, 1, 1])
        with c_main:
            meta = row["Date"] + (f" • {row['Category']}" if row["Category"] else "")
            st.markdown(f"**{row['Description']}**  \n{meta}")
        with c_amount:
            color = "#20c997" if row["type"] == INCOME else "#fa5252"
            st.markdown(f"<span style='color:{color}'>{row['Amount']}</span>", unsafe_allow_html=True)
        with c_edit:
            if st.button("✎", key=f"edit_{row['id']}", help="Edit"):
                st.session_state.editing_id = int(row["id"])
                st.rerun()
        with c_delete:
            if st.button("✕", key=f"delete_{row['id']}", help="Delete"):
                st.session_state.pending_delete = int(row["id"])
                st.rerun()

pending = st.session_state.get("pending_delete")
if pending is not None:
    st.warning("Are you sure?")
    yes, no = st.columns(2)
    if yes.button("Delete", key="confirm_delete"):
        run(dashboard.delete_transaction(pending))
        st.session_state.pending_delete = None
        st.rerun()
    if no.button("Cancel", key="cancel_delete"):
        st.session_state.pending_delete = None
        st.rerun()

p_prev, p_info, p_next = st.columns([1, 2, 1])
with p_prev:
    if st.button("◀ Previous", disabled=not state.page.has_prev):
        run(dashboard.prev_page())
        st.rerun()
with p_info:
    st.caption(state.page.page_info)
with p_next:
    if st.button("Next ▶", disabled=not state.page.has_next):
        run(dashboard.next_page())
        st.rerun()


# ── Edit form ────────────────────────────────────────────────────────────────
editing_id = st.session_state.get("editing_id")
editing = dashboard.find_on_page(editing_id) if editing_id is not None else None
if editing is not None:
    st.subheader("✎ Edit Transaction")
    edit_type = st.radio("Type", TRANSACTION_TYPES, index=TRANSACTION_TYPES.index(editing.type),
                         format_func=str.capitalize, horizontal=True, key=f"edit_type_{editing.id}")
    with st.form("edit_form"):
        e_description = st.text_input("Description", value=editing.description)
        e_amount = st.number_input("Amount ($)", min_value=0.0, step=10.0, format="%.2f",
                                   value=float(editing.amount))
        e_date = st.date_input("Date", value=editing.date)
        e_category = None
        if edit_type == EXPENSE:
            current = editing.category or "other"
            e_category = st.selectbox("Category", EXPENSE_CATEGORIES, format_func=str.capitalize,
                                      index=EXPENSE_CATEGORIES.index(current) if current in EXPENSE_CATEGORIES else 0)
        save, cancel = st.columns(2)
        saved = save.form_submit_button("Save")
        cancelled = cancel.form_submit_button("Cancel")

    if saved:
        result = run(dashboard.update_transaction(editing.id, e_description, e_amount, e_date, edit_type, e_category))
        if not show_errors(result):
            st.session_state.editing_id = None
            st.rerun()
    if cancelled:
        st.session_state.editing_id = None
        st.rerun()

st.divider()


# ── Reports ──────────────────────────────────────────────────────────────────
if not st.toggle("📊 Reports", key="show_reports"):
    dashboard.close_report()
else:
    period_names = list(PERIODS)
    period = st.selectbox("Time period", period_names, index=period_names.index(DEFAULT_PERIOD), key="report_period")
    custom_start = custom_end = None
    if PERIODS[period] is None:
        d1, d2 = st.columns(2)
        custom_start = d1.date_input("Start date", value=parse_date(days_ago_str(29)), key="report_start")
        custom_end = d2.date_input("End date", value=parse_date(today_str()), key="report_end")

    with st.spinner(LOADING_MESSAGE):
        report = run(dashboard.open_report(period, custom_start, custom_end))

    if report.alert:
        st.error(report.alert)
    if report.chart is not None:
        st.plotly_chart(build_chart(report.chart), use_container_width=True)
        if report.breakdown:
            st.markdown("**Expenses by category**")
            st.table(breakdown_frame(report.breakdown))

    st.markdown("**🤖 AI Summary**")
    st.write(report.ai_summary)
