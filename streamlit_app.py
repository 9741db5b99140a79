import logging
from datetime import date

import plotly.graph_objects as go
import streamlit as st

from dashboard_state import DashboardState, SELECT_DAY, SELECT_WEEK
from formatting import (
    LOAD_ERROR, PLACEHOLDER,
    pct, roi_percent, yearly_meta_text, range_text, count_text,
    bucket_summary_text, monthly_frame, detail_frame,
)
from roi_aggregator import week_key
from settings import CSV_URL, LOG_LEVEL

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Configure page
st.set_page_config(
    page_title="本命馬 回収率ダッシュボード",
    page_icon="🐎",
    layout="wide",
)

CHART_DAILY = "日別"
CHART_WEEKLY = "週別"
CHART_KEYS = [f"roi_chart_{mode}" for mode in (CHART_DAILY, CHART_WEEKLY)]


def get_state() -> DashboardState:
    """Per-session dashboard state (created and loaded on first run)."""
    if "dashboard" not in st.session_state:
        st.session_state.dashboard = DashboardState()
    state = st.session_state.dashboard
    if not state.loaded:
        with st.spinner("CSVを読み込んでいます..."):
            state.reload(url=CSV_URL)
    return state


def main():
    st.title("🐎 本命馬 回収率ダッシュボード")

    state = get_state()

    if st.sidebar.button("🔄 再読込", type="primary"):
        with st.spinner("CSVを読み込んでいます..."):
            state.reload(url=CSV_URL)
        # drop the previous data's point selections
        for key in CHART_KEYS:
            st.session_state.pop(key, None)

    yearly_section(state)
    if state.error:
        return

    monthly_section(state)
    chart_section(state)
    detail_section(state)


def yearly_section(state: DashboardState):
    st.header("📅 年間回収率")

    if state.error:
        st.metric("回収率", LOAD_ERROR)
        st.error(f"❌ {state.error}")
        return

    summary = state.summary
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("回収率", pct(summary.roi_ratio))
    with col2:
        st.metric("期間", range_text(summary))
    with col3:
        st.metric("件数", count_text(summary))
    st.caption(yearly_meta_text(summary))


def monthly_section(state: DashboardState):
    st.header("📊 月別")
    if not state.monthly:
        st.info("データがありません。")
        return
    st.dataframe(monthly_frame(state.monthly), use_container_width=True, hide_index=True)


def _roi_figure(buckets, title: str) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=[b.key for b in buckets],
        y=[roi_percent(b.roi_ratio) for b in buckets],
        mode="lines+markers",
        name=title,
        connectgaps=True,
        line_shape="spline",
        customdata=[[pct(b.roi_ratio), b.race_count] for b in buckets],
        hovertemplate="%{x}<br>回収率 %{customdata[0]}<br>%{customdata[1]}レース<extra></extra>",
    ))
    fig.update_layout(
        title=title,
        yaxis=dict(ticksuffix="%"),
        xaxis=dict(type="category"),
        hovermode="closest",
        margin=dict(l=10, r=10, t=40, b=10),
    )
    return fig


def chart_section(state: DashboardState):
    st.header("📈 回収率の推移")

    mode = st.radio("表示単位", [CHART_DAILY, CHART_WEEKLY], horizontal=True)

    if mode == CHART_DAILY:
        col_prev, col_info, col_next = st.columns([1, 4, 1])
        with col_prev:
            st.button("◀ 前へ", disabled=not state.can_retreat, on_click=state.retreat_window)
        with col_next:
            st.button("次へ ▶", disabled=not state.can_advance, on_click=state.advance_window)
        buckets = state.day_window()
        with col_info:
            if buckets:
                st.caption(f"{buckets[0].key} 〜 {buckets[-1].key}（{len(buckets)}日 / 全{len(state.daily)}日）")
            else:
                st.caption(PLACEHOLDER)
        fig = _roi_figure(buckets, "日別回収率")
    else:
        fig = _roi_figure(state.weekly, "週別回収率")

    event = st.plotly_chart(fig, use_container_width=True, on_select="rerun",
                            selection_mode="points", key=f"roi_chart_{mode}")

    points = (event or {}).get("selection", {}).get("points", [])
    if points:
        kind = SELECT_DAY if mode == CHART_DAILY else SELECT_WEEK
        key = str(points[0].get("x"))
        if state.pick_from_chart(kind, key):
            logger.debug("Chart selection: %s %s", kind, key)


def _selected_week(state: DashboardState) -> str:
    kind, key = state.selection
    if kind == SELECT_DAY:
        return week_key(date.fromisoformat(key))
    return key


def detail_section(state: DashboardState):
    st.header("🔍 レース詳細")

    if not state.weekly:
        st.write(PLACEHOLDER)
        return

    labels = {w.key: w.label for w in state.weekly}
    keys = list(labels)
    current = _selected_week(state) if state.selection else keys[-1]
    index = keys.index(current) if current in keys else len(keys) - 1

    col1, col2 = st.columns([4, 1])
    with col1:
        choice = st.selectbox(
            "週を選択",
            options=keys,
            index=index,
            format_func=lambda k: f"{k}（{labels[k]}）",
        )
    with col2:
        open_week = st.button("この週を表示")
    if open_week or choice != current:
        state.select_week(choice)

    st.info(bucket_summary_text(state.selected_bucket()))

    records = state.selected_records()
    if records:
        st.dataframe(detail_frame(records), use_container_width=True, hide_index=True)
    elif state.selection and state.selection[0] == SELECT_WEEK:
        logger.debug("No records for week %s", state.selection[1])


if __name__ == "__main__":
    main()
