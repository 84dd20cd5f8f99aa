"""Compute layer — geocoding, per-day reports and year charts built on the event engine."""

import logging
import os
from datetime import date, datetime, time, timedelta

import httpx
from pytz import timezone, utc

from solarday.errors import LookupTableError
from solarday.events import all_sun_events
from solarday.intervals import (
    cumulative_bands,
    intervals,
    intervals_to_polygon,
    lengths,
    trace_lines,
)
from solarday.models import (
    DayReport,
    EventType,
    ObserverContext,
    QueryInput,
    SeasonInstants,
    YearChart,
)
from solarday.position import refract, subsolar_point, sun_distance_at, sun_position
from solarday.seasons import load_table, lookup, season_instants
from solarday.timeutil import check_position, direction, from_ms, observer_frame, to_ms
from solarday.zones import ms_since_local_midnight, offset_table, timezone_at

log = logging.getLogger(__name__)

CHART_KINDS = ("rise-set", "length")

_NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
_DEFAULT_USER_AGENT = "SolarDay/1.0 (solar event calculator)"


class GeocodingError(Exception):
    """Geocoder call failure."""


def _geocode_nominatim(address: str) -> tuple[float, float, str] | None:
    """Nominatim (OpenStreetMap) geocoder. Returns (lat, lng, display_name) or None."""
    params = {"q": address, "format": "json", "limit": 1}
    headers = {"User-Agent": os.environ.get("SOLARDAY_USER_AGENT", _DEFAULT_USER_AGENT)}
    resp = httpx.get(_NOMINATIM_URL, params=params, headers=headers, timeout=10)
    resp.raise_for_status()
    results = resp.json()
    if not results:
        return None
    r = results[0]
    return float(r["lat"]), float(r["lon"]), r["display_name"]


def geocode_address(address: str) -> tuple[float, float, str]:
    """Resolve an address string to coordinates.

    Args:
        address: Place name or address in any language.

    Returns:
        (lat, lng, display_name).

    Raises:
        GeocodingError: On HTTP failure or when the address cannot be found.
    """
    try:
        result = _geocode_nominatim(address)
    except httpx.HTTPError as e:
        raise GeocodingError(f"Geocoder request failed: {e}") from e
    if result is None:
        raise GeocodingError(f"Address not found: {address}")
    log.info("Geocoded %r to (%.4f, %.4f)", address, result[0], result[1])
    return result


def context_at(
    lat: float,
    lng: float,
    day: date,
    zone: str | None = None,
    address_display: str | None = None,
) -> ObserverContext:
    """Build an ObserverContext for known coordinates. The zone is looked up if None."""
    pos = check_position(lat, lng)
    if zone is None:
        zone = timezone_at(pos.lat, pos.lng)
    if address_display is None:
        address_display = f"{pos.lat:.4f}, {pos.lng:.4f}"
    return ObserverContext(lat=pos.lat, lng=pos.lng, zone=zone, day=day, address_display=address_display)


def resolve_context(address: str, when: str) -> ObserverContext:
    """Resolve an address and a "YYYY-MM-DD" date string to an ObserverContext.

    Raises:
        GeocodingError: When the address cannot be found or the date cannot be parsed.
    """
    try:
        day = datetime.strptime(when, "%Y-%m-%d").date()
    except ValueError as e:
        raise GeocodingError(f"Invalid date {when!r}, expected YYYY-MM-DD") from e
    lat, lng, address_display = geocode_address(address)
    return context_at(lat, lng, day, address_display=address_display)


def _report_instant(context: ObserverContext) -> datetime:
    """Now, if the context's date is today in its zone, else local noon of that date."""
    tz = timezone(context.zone)
    now = datetime.now(utc).astimezone(tz)
    if now.date() == context.day:
        return now
    return tz.localize(datetime.combine(context.day, time(12)))


def build_report(context: ObserverContext, when: datetime | None = None) -> DayReport:
    """Compute events, light-regime intervals and the sun's position for one day.

    Args:
        context: Observer position, zone and date.
        when: Aware datetime for the position fields. Defaults to now (or local noon
            when the date is not today).

    Returns:
        Fully computed DayReport.
    """
    frame = observer_frame(context.lat, context.lng)
    series = all_sun_events(context.lat, context.lng, context.day, context.zone, frame)
    regimes = intervals(series)
    if when is None:
        when = _report_instant(context)
    ms = to_ms(when)
    return DayReport(
        context=context,
        events=series,
        intervals=regimes,
        day_length_ms=sum(i.length for i in regimes.day),
        now=when,
        position=sun_position(context.lat, context.lng, ms, frame),
        subsolar_point=subsolar_point(ms),
        distance_km=sun_distance_at(ms),
    )


def run(query: QueryInput) -> DayReport:
    """Top-level entry point: takes a QueryInput and returns a DayReport.

    Args:
        query: User input (address, date string).

    Returns:
        Fully computed DayReport.
    """
    context = resolve_context(query.address, query.when)
    return build_report(context)


def format_duration(ms: float) -> str:
    """"H:MM:SS" for a duration in milliseconds."""
    seconds = int(ms // 1000)
    return f"{seconds // 3600}:{seconds % 3600 // 60:02d}:{seconds % 60:02d}"


def event_rows(report: DayReport) -> list[dict[str, str]]:
    """Display rows for the events of a report, in local time, refraction applied."""
    tz = timezone(report.context.zone)
    rows = []
    for event in report.events:
        rows.append(
            {
                "event": event.event_type.value,
                "time": from_ms(event.time, tz).strftime("%H:%M:%S"),
                "elevation": f"{refract(event.elevation):.2f}°",
                "azimuth": f"{event.azimuth:.1f}° ({direction(event.azimuth)})",
            }
        )
    return rows


def seasons_for(year: int) -> SeasonInstants:
    """Seasons of a year, from SOLARDAY_SEASONS_TABLE when it covers the year.

    An unreadable table is logged and ignored; the seasons are then computed.
    """
    path = os.environ.get("SOLARDAY_SEASONS_TABLE")
    if path:
        try:
            table = load_table(path)
        except LookupTableError as e:
            log.warning("%s, computing seasons", e)
            return season_instants(year)
        try:
            return lookup(year, table)
        except LookupTableError:
            log.info("Year %d not in %s, computing seasons", year, path)
    return season_instants(year)


def compute_year_chart(context: ObserverContext, year: int, kind: str = "rise-set") -> YearChart:
    """Compute band outlines, noon/midnight traces and season markers for a year.

    For "rise-set" the y axis is the local time of day in ms; for "length" each
    band is a bar from 0 to the band's total length that day.

    Args:
        context: Observer position and zone. Its date is ignored.
        year: Calendar year.
        kind: "rise-set" or "length".

    Returns:
        YearChart with bands ordered astronomical, nautical, civil, day.

    Raises:
        ValueError: Unknown chart kind.
    """
    if kind not in CHART_KINDS:
        raise ValueError(f"Unknown chart kind {kind!r}, expected one of {CHART_KINDS}")

    first = date(year, 1, 1)
    days = (date(year + 1, 1, 1) - first).days
    offsets = offset_table(year, context.zone)
    frame = observer_frame(context.lat, context.lng)

    columns: list[list[list[tuple[float, float]]]] = [[] for _ in range(4)]
    noons: list[list[float]] = []
    midnights: list[list[float]] = []
    for i in range(days):
        day = first + timedelta(days=i)
        series = all_sun_events(context.lat, context.lng, day, context.zone, frame)
        regimes = intervals(series, offsets)
        if kind == "rise-set":
            for k, spans in enumerate(cumulative_bands(regimes)):
                columns[k].append(spans)
            noons.append(
                [ms_since_local_midnight(e.time, day, offsets) for e in series.of_type(EventType.SOLAR_NOON)]
            )
            midnights.append(
                [ms_since_local_midnight(e.time, day, offsets) for e in series.of_type(EventType.SOLAR_MIDNIGHT)]
            )
        else:
            for k, total in enumerate(lengths(regimes)):
                columns[k].append([(0.0, total)] if total > 0 else [])

    bands = tuple(tuple(intervals_to_polygon(cols)) for cols in reversed(columns))
    tz = timezone(context.zone)
    season_days = []
    for instant in seasons_for(year).as_tuple():
        local = from_ms(instant, tz)
        if local.year == year:
            season_days.append((local.date() - first).days + 0.5)
    log.info(
        "Year chart %s %d at (%.4f, %.4f): %d polygon(s)",
        kind, year, context.lat, context.lng, sum(len(b) for b in bands),
    )
    return YearChart(
        context=context,
        year=year,
        kind=kind,
        days=days,
        bands=bands,
        noon_lines=tuple(tuple(line) for line in trace_lines(noons)),
        midnight_lines=tuple(tuple(line) for line in trace_lines(midnights)),
        season_days=tuple(season_days),
    )
