"""SolarDay — Streamlit app for sunrise, sunset and twilight of a place and date."""

import datetime
import html

import streamlit as st
from dotenv import load_dotenv

load_dotenv()

from solarday.compute import (  # noqa: E402
    CHART_KINDS,
    GeocodingError,
    compute_year_chart,
    event_rows,
    format_duration,
    run,
)
from solarday.errors import SolarDayError  # noqa: E402
from solarday.models import QueryInput  # noqa: E402
from solarday.position import refract  # noqa: E402
from solarday.renderers.plotly_2d import render_plotly_chart  # noqa: E402
from solarday.timeutil import direction  # noqa: E402

st.set_page_config(
    page_title="SolarDay",
    page_icon="☀",
    layout="wide",
)

# --- Session state initialization ---

if "report" not in st.session_state:
    st.session_state.report = None
if "chart" not in st.session_state:
    st.session_state.chart = None
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None

st.markdown(
    """
    <style>
    /* Error box */
    .error-box {
        border: 1px solid #ff6b6b;
        color: #ff9999;
        border-radius: 6px;
        padding: 0.8rem 1.2rem;
        margin-bottom: 1rem;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

# --- Input panel ---
col1, col2, col3, col4 = st.columns([3, 2, 2, 1.5])
with col1:
    address = st.text_input("Place", value="Santa Barbara, CA")
with col2:
    date_val = st.date_input(
        "Date",
        value=datetime.date.today(),
        min_value=datetime.date(1800, 1, 1),
        max_value=datetime.date(2200, 12, 31),
    )
with col3:
    kind = st.selectbox("Chart", CHART_KINDS, format_func=lambda k: k.replace("-", "/"))
with col4:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    submitted = st.button("Show", key="submit_btn")

# --- Form submission handler ---
if submitted and address:
    st.session_state.error_msg = None
    with st.spinner("Computing..."):
        try:
            report = run(QueryInput(address=address, when=date_val.strftime("%Y-%m-%d")))
            st.session_state.report = report
            st.session_state.chart = compute_year_chart(report.context, date_val.year, kind)
        except (GeocodingError, SolarDayError) as e:
            st.session_state.report = None
            st.session_state.chart = None
            st.session_state.error_msg = html.escape(str(e))

# --- Error message ---
if st.session_state.error_msg:
    st.markdown(
        f"<div class='error-box'>{st.session_state.error_msg}</div>",
        unsafe_allow_html=True,
    )

# --- Results ---
report = st.session_state.report
if report is not None:
    ctx = report.context
    st.subheader(ctx.address_display)
    st.caption(f"{ctx.lat:.4f}, {ctx.lng:.4f} · {ctx.zone} · {ctx.day.isoformat()}")

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Day length", format_duration(report.day_length_ms))
    m2.metric("Sun elevation", f"{refract(report.position.elevation):.2f}°")
    m3.metric(
        "Sun azimuth",
        f"{report.position.azimuth:.1f}° {direction(report.position.azimuth)}",
    )
    m4.metric("Subsolar point", "{:.2f}, {:.2f}".format(*report.subsolar_point))
    st.caption(f"Position at {report.now.strftime('%H:%M %Z')}, refraction applied.")

    rows = event_rows(report)
    if rows:
        st.dataframe(rows, use_container_width=True, hide_index=True)
    else:
        st.info("The sun crosses none of the twilight thresholds on this date.")

if st.session_state.chart is not None:
    fig = render_plotly_chart(st.session_state.chart)
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})
