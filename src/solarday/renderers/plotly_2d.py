"""Plotly interactive year chart renderer.

Same layout as the static renderer: day of year on x, hours on y. Each band
ring becomes a filled scatter trace; hovering a noon or midnight trace shows
its local clock time.
"""

import calendar

import numpy as np
import plotly.graph_objects as go

from solarday.models import YearChart
from solarday.renderers.static import (
    MIDNIGHT_COLOR,
    NOON_COLOR,
    SEASON_COLOR,
    SUN_COLORS,
    band_colors,
    month_edges,
)

_HOUR_MS = 3_600_000
_BAND_NAMES = ("astronomical twilight", "nautical twilight", "civil twilight", "day")


def _hhmm(hours: np.ndarray) -> list[str]:
    minutes = np.round(hours * 60).astype(int)
    return [f"{m // 60:02d}:{m % 60:02d}" for m in minutes]


def render_plotly_chart(chart: YearChart) -> go.Figure:
    """Render a YearChart as a Plotly interactive figure.

    Args:
        chart: Fully computed year chart.

    Returns:
        Plotly Figure object.
    """
    traces: list[go.Scatter] = []
    for name, color, rings in zip(_BAND_NAMES, band_colors(), chart.bands):
        for ring in rings:
            pts = np.array(ring, dtype=float)
            traces.append(
                go.Scatter(
                    x=pts[:, 0],
                    y=pts[:, 1] / _HOUR_MS,
                    mode="lines",
                    fill="toself",
                    fillcolor=color,
                    line=dict(width=0, color=color),
                    hoverinfo="skip",
                    name=name,
                    showlegend=False,
                )
            )

    for lines, color, name in (
        (chart.midnight_lines, MIDNIGHT_COLOR, "solar midnight"),
        (chart.noon_lines, NOON_COLOR, "solar noon"),
    ):
        for line in lines:
            pts = np.array(line, dtype=float)
            hours = pts[:, 1] / _HOUR_MS
            traces.append(
                go.Scatter(
                    x=pts[:, 0] + 0.5,
                    y=hours,
                    mode="lines",
                    line=dict(color=color, width=1),
                    text=_hhmm(hours),
                    hovertemplate=f"{name} %{{text}}<extra></extra>",
                    showlegend=False,
                )
            )

    edges = month_edges(chart.year)
    fig = go.Figure(data=traces)
    fig.update_layout(
        paper_bgcolor="#ffffff",
        plot_bgcolor=SUN_COLORS[4],
        showlegend=False,
        margin=dict(l=40, r=10, t=30, b=30),
        width=1000,
        height=500,
        title=f"{chart.context.address_display} ({chart.year})",
        xaxis=dict(
            range=[0, chart.days],
            tickmode="array",
            tickvals=[(a + b) / 2 for a, b in zip(edges, edges[1:])],
            ticktext=list(calendar.month_abbr)[1:],
            showgrid=False,
        ),
        yaxis=dict(
            range=[0, 24],
            tickmode="array",
            tickvals=list(range(0, 25, 2)),
            gridcolor="#808080",
            title="Hours" if chart.kind == "length" else "Local time (h)",
        ),
        shapes=[
            dict(type="line", x0=x, x1=x, y0=0, y1=24, line=dict(color=SEASON_COLOR, width=1))
            for x in chart.season_days
        ],
    )
    fig._config = {"displayModeBar": False}  # type: ignore[attr-defined]

    return fig
