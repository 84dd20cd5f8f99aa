"""Matplotlib static PNG renderer."""

import calendar
import os
from datetime import date
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure
from matplotlib.patches import Polygon

from solarday.constants import MS_PER_DAY
from solarday.models import YearChart

_ROOT = Path(__file__).parent.parent.parent.parent

# Day, civil, nautical, astronomical, night
SUN_COLORS = ("#80c0ff", "#0060c0", "#004080", "#002040", "#000000")
NOON_COLOR = "#ff0000"
MIDNIGHT_COLOR = "#0000ff"
SEASON_COLOR = "#00c000"
GRID_COLOR = "#808080"

_HOUR_MS = MS_PER_DAY / 24


def month_edges(year: int) -> list[int]:
    """Day-of-year index of the first day of each month, plus the year length."""
    first = date(year, 1, 1)
    return [(date(year, m, 1) - first).days for m in range(1, 13)] + [
        (date(year + 1, 1, 1) - first).days
    ]


def band_colors() -> tuple[str, ...]:
    """Fill colours in YearChart.bands order (astronomical first)."""
    return tuple(reversed(SUN_COLORS[:4]))


def render_static_chart(chart: YearChart, width: float = 10, height: float = 5) -> Figure:
    """Render a YearChart as a static matplotlib image.

    Args:
        chart: Fully computed year chart.
        width: Figure width in inches.
        height: Figure height in inches.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(width, height))
    fig.patch.set_facecolor("white")
    ax.set_facecolor(SUN_COLORS[4])

    for color, rings in zip(band_colors(), chart.bands):
        for ring in rings:
            pts = np.array(ring, dtype=float)
            pts[:, 1] /= _HOUR_MS
            ax.add_patch(Polygon(pts, closed=True, facecolor=color, edgecolor="none", zorder=1))

    for lines, color in ((chart.midnight_lines, MIDNIGHT_COLOR), (chart.noon_lines, NOON_COLOR)):
        for line in lines:
            pts = np.array(line, dtype=float)
            # Points sit at the middle of their day column
            ax.plot(pts[:, 0] + 0.5, pts[:, 1] / _HOUR_MS, color=color, linewidth=1, zorder=2)

    for x in chart.season_days:
        ax.axvline(x, color=SEASON_COLOR, linewidth=1, zorder=3)

    edges = month_edges(chart.year)
    ax.set_xticks(edges, labels=[""] * len(edges))
    ax.set_xticks(
        [(a + b) / 2 for a, b in zip(edges, edges[1:])],
        labels=list(calendar.month_abbr)[1:],
        minor=True,
    )
    ax.tick_params(axis="x", which="minor", length=0)
    ax.set_yticks(range(0, 25, 2))
    ax.grid(True, color=GRID_COLOR, linewidth=0.5, zorder=4)
    ax.set_xlim(0, chart.days)
    ax.set_ylim(0, 24)
    ax.set_ylabel("Hours" if chart.kind == "length" else "Local time (h)")
    ax.set_title(f"{chart.context.address_display} ({chart.year})")

    return fig


def save_static_chart(chart: YearChart, output_path: Path | None = None) -> Path:
    """Save a YearChart as a PNG file.

    Args:
        chart: Fully computed year chart.
        output_path: Destination path. Auto-generated under SOLARDAY_RESULTS_DIR
            (default results/) if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        results_dir = Path(os.environ.get("SOLARDAY_RESULTS_DIR", _ROOT / "results"))
        place = chart.context.address_display.replace(",", "")
        filename = f"{place}__{chart.year}_{chart.kind}.png".replace(" ", "_")
        output_path = results_dir / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(chart)
    fig.savefig(output_path)
    plt.close(fig)
    return output_path
