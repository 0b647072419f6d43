import asyncio
from contextlib import contextmanager
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from workforce_core.dates import to_readable
from workforce_core.export import PRODUCTIVITY_FILENAME, SCHEDULE_FILENAME, productivity_csv, schedule_csv
from workforce_core.filters import ALL, normalize_productivity_filters, normalize_schedule_filters
from workforce_core.metrics_productivity import compute_productivity
from workforce_core.metrics_schedule import compute_schedule
from workforce_core.productivity import filter_by_shift
from workforce_core.session import DashboardSession

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str, csv_text: Optional[str] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if csv_text:
            st.download_button("Export CSV", data=csv_text.encode("utf-8"), file_name=export_name, mime="text/csv")


def get_session() -> DashboardSession:
    if "dashboard_session" not in st.session_state:
        st.session_state["dashboard_session"] = DashboardSession()
    return st.session_state["dashboard_session"]


def report(result) -> None:
    if result.status == "loaded":
        st.success(result.message)
    elif result.status in ("empty", "failed"):
        st.error(result.message)
    for w in result.warnings[:5]:
        st.caption(w)


def _upload_key(upload) -> Optional[str]:
    if upload is None:
        return None
    return f"{upload.name}:{upload.size}"


# ---------- Pages ----------
def render_schedule(session: DashboardSession):
    store = session.store
    upload = st.sidebar.file_uploader("Schedule file", type=["xlsx", "xls", "csv"], key="schedule_file")
    key = _upload_key(upload)
    if upload is not None and st.session_state.get("_schedule_upload") != key:
        with st.spinner("Processing schedule file..."):
            result = asyncio.run(session.ingest_schedule(upload.getvalue(), upload.name))
        st.session_state["_schedule_upload"] = key
        report(result)

    if not len(store):
        render_page_header("Work Schedule", "Dashboard / Schedule")
        st.info("Upload a schedule workbook (.xlsx, .xls or .csv) to get started.")
        return

    with st.sidebar:
        st.markdown("### Filters")
        query = st.text_input("Search name, shift, position...", "")
        shift = st.selectbox("Shift", [ALL] + store.distinct_values("shift"))
        position = st.selectbox("Position", [ALL] + store.distinct_values("position"))
        name = st.selectbox("Name", [ALL] + store.distinct_values("name"))
        pick_day = st.checkbox("Filter by day", value=False)
        day = st.date_input("Day") if pick_day else None
        sort_field = st.selectbox("Sort by", ["date", "name", "shift", "position"])
        ascending = st.radio("Direction", ["asc", "desc"], horizontal=True) == "asc"

    filters = normalize_schedule_filters(
        {
            "query": query,
            "shift": shift,
            "position": position,
            "name": name,
            "date": day.strftime("%m-%d-%Y") if day else None,
            "sort_field": sort_field,
            "ascending": ascending,
        }
    )
    rows = store.apply_filters(filters)
    payload = compute_schedule(filters, store, rows=rows)
    render_page_header("Work Schedule", "Dashboard / Schedule", schedule_csv(rows), SCHEDULE_FILENAME)
    st.caption(f"{payload['counts']['filtered']} of {payload['counts']['total']} records")

    list_tab, calendar_tab = st.tabs(["List", "Calendar"])
    with list_tab:
        table = pd.DataFrame(payload["rows"], columns=["name", "display_date", "shift", "position"])
        table.columns = ["Name", "Date", "Shift", "Position"]
        st.dataframe(table, hide_index=True, use_container_width=True)
    with calendar_tab:
        cal = payload.get("calendar")
        if not cal:
            st.info("No dated records to show.")
        else:
            st.markdown(f"**{cal['month']:02d}/{cal['year']}**")
            chart = payload["charts"].get("daily_headcount")
            if chart:
                st.vega_lite_chart(chart, use_container_width=True)
            for d, recs in cal["days"].items():
                label = to_readable("%02d-%02d-%d" % (cal["month"], d, cal["year"]))
                with st.expander(f"{label} ({len(recs)})"):
                    st.dataframe(pd.DataFrame(recs)[["name", "shift", "position"]], hide_index=True, use_container_width=True)


def render_productivity(session: DashboardSession):
    call_upload = st.sidebar.file_uploader("Call logs", type=["xlsx", "xls", "csv"], key="call_file")
    care_upload = st.sidebar.file_uploader("Care logs", type=["xlsx", "xls", "csv"], key="care_file")
    key = f"{_upload_key(call_upload)}|{_upload_key(care_upload)}"
    if call_upload is not None and care_upload is not None and st.session_state.get("_log_upload") != key:
        with st.spinner("Processing log files..."):
            result = asyncio.run(
                session.ingest_productivity(call_upload.getvalue(), call_upload.name, care_upload.getvalue(), care_upload.name)
            )
        st.session_state["_log_upload"] = key
        report(result)

    with st.sidebar.expander("Excluded solutions", expanded=False):
        labels = st.text_area("One label per line", "\n".join(session.excluded_solutions.as_list()))
        c1, c2 = st.columns(2)
        if c1.button("Apply"):
            session.excluded_solutions.replace([s for s in labels.splitlines() if s.strip()])
            session.reaggregate()
        if c2.button("Reset"):
            session.excluded_solutions.reset()
            session.reaggregate()

    records = session.productivity
    if not records:
        render_page_header("Staff Productivity", "Dashboard / Productivity")
        st.info("Upload both call logs and care logs to see productivity.")
        return

    with st.sidebar:
        st.markdown("### Filters")
        shift = st.selectbox("Work shift", [ALL] + list(dict.fromkeys(r.shift for r in records)))
        sort_field = st.selectbox("Sort by", ["shift", "name", "callRecords", "careRecords", "records", "contribution"])
        ascending = st.radio("Direction", ["asc", "desc"], horizontal=True, key="prod_dir") == "asc"

    filters = normalize_productivity_filters({"shift": shift, "sort_field": sort_field, "ascending": ascending})
    payload = compute_productivity(filters, records)
    render_page_header(
        "Staff Productivity", "Dashboard / Productivity", productivity_csv(filter_by_shift(records, shift)), PRODUCTIVITY_FILENAME
    )

    kpis = payload["kpis"]
    cols = st.columns(3)
    cols[0].metric("Total Records", f"{kpis['total_records']:,}")
    cols[1].metric("Staff", f"{kpis['staff_count']:,}")
    top = kpis["top_contributor"]
    cols[2].metric("Top Contributor", top["name"], delta=f"{top['contribution']:.1f}%")

    with card("Staff"):
        st.dataframe(pd.DataFrame(payload["rows"]), hide_index=True, use_container_width=True)
    c1, c2 = st.columns(2)
    with c1:
        with card("Records by shift"):
            st.vega_lite_chart(payload["charts"]["shift_distribution"], use_container_width=True)
    with c2:
        with card("Contribution"):
            st.vega_lite_chart(payload["charts"]["staff_contribution"], use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Workforce Dashboard", layout="wide")
inject_base_styles()
st.title("Workforce Dashboard")
st.caption("Work schedules and staff productivity from uploaded spreadsheets.")

session = get_session()
with st.sidebar:
    st.markdown("### Navigate")
    page = st.radio("Navigate", ["Work Schedule", "Productivity"], index=0)
    if st.button("Reset session"):
        session.reset()
        st.session_state.pop("_schedule_upload", None)
        st.session_state.pop("_log_upload", None)
    st.markdown("---")

if page == "Work Schedule":
    render_schedule(session)
else:
    render_productivity(session)
