import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Optional

from schoolstats.data import year_label
from schoolstats.metrics_table import DISPLAY_COLUMNS
from schoolstats.session import DashboardSession

alt.data_transformers.disable_max_rows()
# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
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


def format_filter_summary(year: Optional[int], school_type: Optional[str], category: Optional[str], search: str) -> str:
    chips = [
        f"年度: {year_label(year)}" if year is not None else "年度: すべて",
        f"設置種別: {school_type}" if school_type else "設置種別: すべて",
        f"学校種別: {category}" if category else "学校種別: すべて",
    ]
    if search:
        chips.append(f"検索: {search}")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def get_session() -> DashboardSession:
    if "dashboard" not in st.session_state:
        st.session_state["dashboard"] = DashboardSession.from_data_dir()
    return st.session_state["dashboard"]


def show_chart(charts: dict, key: str, empty_message: str = "データがありません"):
    spec = charts.get(key)
    if spec is None:
        st.info(empty_message)
        return
    st.vega_lite_chart(spec, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="学校統計ダッシュボード", layout="wide")
inject_base_styles()
st.title("学校統計ダッシュボード")
st.caption("JSONファイルを読み込み、年度・設置種別・学校種別で絞り込みます。")

session = get_session()

uploaded = st.file_uploader("JSONファイル", type=["json"])
if uploaded is not None and st.session_state.get("_loaded_file_id") != uploaded.file_id:
    st.session_state["_loaded_file_id"] = uploaded.file_id
    session.load(uploaded.getvalue())

if session.status.kind == "loaded":
    st.success(session.status.message)
elif session.status.kind in {"error", "empty"}:
    st.error(session.status.message)

if not session.has_data:
    st.stop()

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### フィルター")
    years = session.year_options()
    # Keyed on the loaded file so a new load starts with cleared widgets.
    wkey = st.session_state.get("_loaded_file_id", "")
    year_choice = st.selectbox("年度", options=[None] + years, format_func=lambda y: "すべて" if y is None else year_label(y), key=f"year-{wkey}")
    type_choice = st.selectbox("設置種別", options=[None] + session.type_options(), format_func=lambda t: "すべて" if t is None else t, key=f"type-{wkey}")
    category_choice = st.selectbox("学校種別", options=[None] + session.category_options(), format_func=lambda c: "すべて" if c is None else c, key=f"category-{wkey}")
    search_term = st.text_input("検索", "", key=f"search-{wkey}")

    st.markdown("---")
    page_size_choice = st.selectbox(
        "表示件数",
        options=list(session.settings.page_size_choices),
        index=list(session.settings.page_size_choices).index(session.pager.page_size),
    )

# Streamlit reruns the script on every widget change; only changed values reset the page.
if year_choice != session.filters.year:
    session.set_filter("year", year_choice)
if type_choice != session.filters.school_type:
    session.set_filter("school_type", type_choice)
if category_choice != session.filters.category:
    session.set_filter("category", category_choice)
if search_term != session.filters.search:
    session.set_search(search_term)
if page_size_choice != session.pager.page_size:
    session.set_page_size(page_size_choice)

st.markdown(
    f"<div class='chip-row'>{format_filter_summary(session.filters.year, session.filters.school_type, session.filters.category, session.filters.search)}</div>",
    unsafe_allow_html=True,
)

views = session.render()
overview = views["overview"]
charts = views["charts"]

with card("サマリー"):
    display = overview["display"]
    cols = st.columns(4)
    cols[0].metric("学校数", display.get("schools", "0"))
    cols[1].metric("教員数", display.get("teachers", "0"))
    cols[2].metric("生徒数（計）", display.get("total_students", "0"))
    cols[3].metric("男女比", display.get("gender_ratio", "N/A"))

chart_cols = st.columns(3)
with chart_cols[0]:
    with card("性別生徒数"):
        show_chart(charts, "gender")
with chart_cols[1]:
    with card("学校種別別生徒数"):
        show_chart(charts, "category")
with chart_cols[2]:
    with card("設置種別別生徒数"):
        show_chart(charts, "type")

with card("年度別推移"):
    show_chart(charts, "year_trend")

with card("年次間の生徒数変化率"):
    show_chart(charts, "change_rate", empty_message="変化率の計算には2年度以上のデータが必要です")

with card("教員数（設置種別 - 学校種別）"):
    show_chart(charts, "teacher")

with card("データ一覧"):
    table = views["table"]
    st.dataframe(pd.DataFrame(table["display_rows"], columns=list(DISPLAY_COLUMNS.values())), hide_index=True, use_container_width=True)
    nav = st.columns([1, 2, 1, 2])
    if nav[0].button("前へ", disabled=not table["page"]["has_prev"]):
        session.prev_page()
        st.rerun()
    nav[1].markdown(f"**{table['page']['label']}**")
    if nav[2].button("次へ", disabled=not table["page"]["has_next"]):
        session.next_page()
        st.rerun()
    nav[3].download_button(
        "CSVエクスポート",
        data=session.filtered.to_csv(index=False).encode("utf-8"),
        file_name="table.csv",
        mime="text/csv",
    )
