"""Interval and polygon engine — light-regime spans of a day and their outlines over a year."""

import logging
from collections import defaultdict
from collections.abc import Sequence

from solarday.constants import (
    ASTRONOMICAL_ANGLE,
    CIVIL_ANGLE,
    MS_PER_DAY,
    NAUTICAL_ANGLE,
    SUNRISE_ANGLE,
)
from solarday.models import (
    BoundaryPolygon,
    EventSeries,
    EventType,
    Interval,
    LightRegime,
    OffsetChange,
    Point,
    RegimeIntervals,
)
from solarday.position import sun_position
from solarday.zones import day_offset_table, ms_since_local_midnight

log = logging.getLogger(__name__)

Span = tuple[float, float]

SNAP_DIGITS = 6
LINE_GAP_MS = MS_PER_DAY / 48

# Regime before and after each threshold crossing
BOUNDING_REGIMES: dict[EventType, tuple[LightRegime, LightRegime]] = {
    EventType.ASTRO_DAWN: (LightRegime.NIGHT, LightRegime.ASTRO_TWILIGHT),
    EventType.NAUTICAL_DAWN: (LightRegime.ASTRO_TWILIGHT, LightRegime.NAUTICAL_TWILIGHT),
    EventType.CIVIL_DAWN: (LightRegime.NAUTICAL_TWILIGHT, LightRegime.CIVIL_TWILIGHT),
    EventType.SUNRISE: (LightRegime.CIVIL_TWILIGHT, LightRegime.DAY),
    EventType.SUNSET: (LightRegime.DAY, LightRegime.CIVIL_TWILIGHT),
    EventType.CIVIL_DUSK: (LightRegime.CIVIL_TWILIGHT, LightRegime.NAUTICAL_TWILIGHT),
    EventType.NAUTICAL_DUSK: (LightRegime.NAUTICAL_TWILIGHT, LightRegime.ASTRO_TWILIGHT),
    EventType.ASTRO_DUSK: (LightRegime.ASTRO_TWILIGHT, LightRegime.NIGHT),
}

_REGIME_FLOORS = (
    (SUNRISE_ANGLE, LightRegime.DAY),
    (CIVIL_ANGLE, LightRegime.CIVIL_TWILIGHT),
    (NAUTICAL_ANGLE, LightRegime.NAUTICAL_TWILIGHT),
    (ASTRONOMICAL_ANGLE, LightRegime.ASTRO_TWILIGHT),
)


def regime_at(elevation: float) -> LightRegime:
    """Light regime for an unrefracted solar elevation."""
    for floor, regime in _REGIME_FLOORS:
        if elevation >= floor:
            return regime
    return LightRegime.NIGHT


def intervals(series: EventSeries, offsets: list[OffsetChange] | None = None) -> RegimeIntervals:
    """Split one local day into the five disjoint light-regime interval lists.

    Noon and midnight events are ignored. Every other event bounds two gaps and
    fixes the regime on either side of it. Boundaries are local clock readings,
    held monotone so the lists always cover [0, 86 400 000) exactly once.

    Args:
        series: Events of one calendar day.
        offsets: Offset table covering the day. Built from the series' zone if None.

    Returns:
        RegimeIntervals with integer millisecond bounds.
    """
    crossings = [e for e in series if e.event_type in BOUNDING_REGIMES]
    buckets: list[list[Interval]] = [[] for _ in LightRegime]

    if not crossings:
        elevation = sun_position(series.lat, series.lng, series.start).elevation
        regime = regime_at(elevation)
        log.debug("No crossings on %s, whole day is %s", series.day, regime.name)
        buckets[regime].append(Interval(0, MS_PER_DAY))
        return RegimeIntervals(*(tuple(b) for b in buckets))

    if offsets is None:
        offsets = day_offset_table(series.day, series.zone)

    bounds = [0]
    for event in crossings:
        clock = round(ms_since_local_midnight(event.time, series.day, offsets))
        bounds.append(min(max(clock, bounds[-1]), MS_PER_DAY))
    bounds.append(MS_PER_DAY)

    regimes = [BOUNDING_REGIMES[crossings[0].event_type][0]]
    regimes.extend(BOUNDING_REGIMES[e.event_type][1] for e in crossings)

    for regime, lo, hi in zip(regimes, bounds, bounds[1:]):
        if hi <= lo:
            continue
        bucket = buckets[regime]
        if bucket and bucket[-1].end == lo:
            bucket[-1] = Interval(bucket[-1].start, hi)
        else:
            bucket.append(Interval(lo, hi))
    return RegimeIntervals(*(tuple(b) for b in buckets))


def cumulative_bands(regimes: RegimeIntervals) -> tuple[list[Span], ...]:
    """Spans of Day, Day+Civil, Day+Civil+Nautical and Day+Civil+Nautical+Astro."""
    bands = []
    spans: list[Span] = []
    for regime in list(LightRegime)[:-1]:
        spans.extend((i.start, i.end) for i in regimes.by_regime(regime))
        bands.append(normalize_spans(spans))
    return tuple(bands)


def lengths(regimes: RegimeIntervals) -> tuple[float, float, float, float]:
    """Cumulative band lengths in ms, brightest band first."""
    totals = []
    running = 0.0
    for regime in list(LightRegime)[:-1]:
        running += sum(i.length for i in regimes.by_regime(regime))
        totals.append(running)
    return tuple(totals)


def day_length(series: EventSeries, offsets: list[OffsetChange] | None = None) -> float:
    """Total daylight of a day in ms."""
    return sum(i.length for i in intervals(series, offsets).day)


def normalize_spans(spans: Sequence[Span]) -> list[Span]:
    """Sort spans and merge the ones that overlap or touch."""
    out: list[list[float]] = []
    for a, b in sorted((min(a, b), max(a, b)) for a, b in spans):
        if out and a <= out[-1][1]:
            out[-1][1] = max(out[-1][1], b)
        else:
            out.append([a, b])
    return [(a, b) for a, b in out]


def xor_spans(a: Sequence[Span], b: Sequence[Span]) -> list[Span]:
    """Symmetric difference of two normalized span lists. Empty pieces are dropped."""
    sweep = []
    for lo, hi in [*a, *b]:
        sweep.append((lo, 1))
        sweep.append((hi, -1))
    sweep.sort(key=lambda e: (e[0], -e[1]))  # starts before ends at the same y

    out = []
    inside = 0
    y0 = 0.0
    for y, d in sweep:
        if inside == 1 and y > y0:
            out.append((y0, y))
        inside = (inside + d) & 1
        y0 = y
    return out


def _snap(p: Point) -> Point:
    return round(p[0], SNAP_DIGITS), round(p[1], SNAP_DIGITS)


def _edge(u: Point, v: Point) -> tuple[Point, Point]:
    return (u, v) if u <= v else (v, u)


def intervals_to_polygon(columns: Sequence[Sequence[Span]]) -> list[BoundaryPolygon]:
    """Trace the outline of per-column spans as closed rings.

    Column x covers [x, x + 1] horizontally. Each span contributes its bottom and
    top edge; vertical edges at x come from the symmetric difference of columns
    x - 1 and x. The edges are snapped to 1e-6 and walked into rings.

    Args:
        columns: One list of (lo, hi) spans per column, e.g. one per day of a year.

    Returns:
        Rings as point lists, closed implicitly (the first point is not repeated).
    """
    width = len(columns)
    cols = [normalize_spans(c) for c in columns]

    segments: list[tuple[Point, Point]] = []
    for x in range(width + 1):
        left = cols[x - 1] if x > 0 else []
        right = cols[x] if x < width else []
        for lo, hi in xor_spans(left, right):
            segments.append(((x, lo), (x, hi)))
    for x, spans in enumerate(cols):
        for lo, hi in spans:
            segments.append(((x, lo), (x + 1, lo)))
            segments.append(((x, hi), (x + 1, hi)))
    segments = [(_snap(a), _snap(b)) for a, b in segments]

    adjacency: dict[Point, list[Point]] = defaultdict(list)
    for a, b in segments:
        adjacency[a].append(b)
        adjacency[b].append(a)

    used: set[tuple[Point, Point]] = set()
    polygons: list[BoundaryPolygon] = []
    for a, b in segments:
        if _edge(a, b) in used:
            continue
        used.add(_edge(a, b))
        ring = [a]
        prev, curr = a, b
        while True:
            ring.append(curr)
            nxt = None
            for cand in adjacency[curr]:
                if cand != prev and _edge(curr, cand) not in used:
                    nxt = cand
                    break
            if nxt is None:
                log.debug("Open boundary walk ended at %s", curr)
                break
            used.add(_edge(curr, nxt))
            prev, curr = curr, nxt
            if curr == ring[0]:
                break
        if len(ring) >= 4:
            polygons.append(ring)
    return polygons


def trace_lines(points_per_day: Sequence[Sequence[float]], gap: float = LINE_GAP_MS) -> list[list[Point]]:
    """Join per-day values (solar noon or midnight clock times) into polylines.

    A value continues a line when the line's last point is on the previous day
    and less than `gap` away; otherwise it starts a new line.
    """
    lines: list[list[Point]] = []
    for day, values in enumerate(points_per_day):
        for value in values:
            for line in lines:
                last_day, last_value = line[-1]
                if last_day == day - 1 and abs(value - last_value) < gap:
                    line.append((day, value))
                    break
            else:
                lines.append([(day, value)])
    return lines
