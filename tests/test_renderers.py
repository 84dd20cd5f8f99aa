from datetime import date

import matplotlib

matplotlib.use("Agg")

import plotly.graph_objects as go  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from solarday.models import ObserverContext, YearChart  # noqa: E402
from solarday.renderers.plotly_2d import render_plotly_chart  # noqa: E402
from solarday.renderers.static import (  # noqa: E402
    band_colors,
    month_edges,
    render_static_chart,
    save_static_chart,
)

HOUR_MS = 3_600_000


def _box(x0, x1, lo, hi):
    return [(x0, lo * HOUR_MS), (x0, hi * HOUR_MS), (x1, hi * HOUR_MS), (x1, lo * HOUR_MS)]


def _chart(kind="rise-set"):
    context = ObserverContext(
        lat=34.42, lng=-119.85, zone="America/Los_Angeles", day=date(2025, 1, 1),
        address_display="Santa Barbara, CA",
    )
    return YearChart(
        context=context,
        year=2025,
        kind=kind,
        days=365,
        bands=(
            (_box(0, 365, 4, 20),),
            (_box(0, 365, 5, 19),),
            (_box(0, 365, 6, 18),),
            (_box(0, 180, 7, 17), _box(200, 365, 7, 17)),
        ),
        noon_lines=(((0, 12 * HOUR_MS), (1, 12.1 * HOUR_MS)),),
        midnight_lines=(((0, 0.5 * HOUR_MS), (1, 0.6 * HOUR_MS)),),
        season_days=(78.5, 171.5, 264.5, 354.5),
    )


def test_month_edges():
    edges = month_edges(2024)
    assert len(edges) == 13
    assert edges[:3] == [0, 31, 60]
    assert edges[-1] == 366
    assert month_edges(2025)[-1] == 365


def test_band_colors_go_from_dark_to_light():
    colors = band_colors()
    assert len(colors) == 4
    assert colors[-1] == "#80c0ff"


def test_render_static_chart():
    fig = render_static_chart(_chart())
    assert isinstance(fig, Figure)
    ax = fig.axes[0]
    assert len(ax.patches) == 5
    assert len(ax.lines) == 2 + 4
    assert ax.get_title() == "Santa Barbara, CA (2025)"


def test_save_static_chart_to_results_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("SOLARDAY_RESULTS_DIR", str(tmp_path / "results"))
    path = save_static_chart(_chart("length"))
    assert path == tmp_path / "results" / "Santa_Barbara_CA__2025_length.png"
    assert path.exists()


def test_save_static_chart_explicit_path(tmp_path):
    path = save_static_chart(_chart(), tmp_path / "out" / "chart.png")
    assert path.exists()


def test_render_plotly_chart():
    fig = render_plotly_chart(_chart())
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 5 + 2
    assert all(trace.fill == "toself" for trace in fig.data[:5])
    assert fig.data[-1].text == ("12:00", "12:06")
    assert len(fig.layout.shapes) == 4
    assert fig.layout.yaxis.range == (0, 24)
