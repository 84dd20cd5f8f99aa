"""Command-line entry point.

    solarday rise-set 38.9 -77.02 2024-06-20
    solarday rise-set --place "Santa Barbara, CA" js
    solarday seasons 2024 America/Los_Angeles
    solarday chart 34.42 -119.85 2025 --kind length
    solarday seasons-table 2000 2100 seasons.json
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from dotenv import load_dotenv
from pytz import UnknownTimeZoneError, timezone, utc

from solarday.compute import (
    CHART_KINDS,
    GeocodingError,
    build_report,
    compute_year_chart,
    context_at,
    event_rows,
    format_duration,
    geocode_address,
    seasons_for,
)
from solarday.errors import SolarDayError
from solarday.position import refract
from solarday.seasons import build_table, write_table
from solarday.timeutil import direction, from_ms
from solarday.zones import timezone_at

log = logging.getLogger(__name__)

_SEASON_TOKENS = {"me": 0, "js": 1, "se": 2, "ds": 3}
_SEASON_NAMES = ("March equinox", "June solstice", "September equinox", "December solstice")


def _zone(name: str) -> str:
    """argparse type for an IANA zone name."""
    try:
        timezone(name)
    except UnknownTimeZoneError:
        raise argparse.ArgumentTypeError(f"unknown time zone: {name}")
    return name


def _locate(args: argparse.Namespace, parser: argparse.ArgumentParser) -> tuple[float, float, str, list[str]]:
    """Coordinates, display name and leftover positionals from either --place or LAT LNG."""
    rest = list(args.args)
    if args.place:
        lat, lng, display = geocode_address(args.place)
        return lat, lng, display, rest
    if len(rest) < 2:
        parser.error("give LAT LNG or --place ADDRESS")
    try:
        lat, lng = float(rest[0]), float(rest[1])
    except ValueError:
        parser.error(f"invalid coordinates: {rest[0]} {rest[1]}")
    return lat, lng, f"{lat:.4f}, {lng:.4f}", rest[2:]


def _resolve_day(token: str | None, zone: str) -> tuple[date, datetime | None]:
    """Local date and optional instant for a DATE token. No instant means "now or local noon"."""
    tz = timezone(zone)
    if token is None:
        return datetime.now(utc).astimezone(tz).date(), None
    if token in _SEASON_TOKENS:
        year = datetime.now(utc).astimezone(tz).year
        when = from_ms(seasons_for(year).as_tuple()[_SEASON_TOKENS[token]], tz)
        return when.date(), when
    if len(token) == 10:
        return date.fromisoformat(token), None
    parsed = datetime.fromisoformat(token)
    parsed = tz.localize(parsed) if parsed.tzinfo is None else parsed.astimezone(tz)
    return parsed.date(), parsed


def _cmd_rise_set(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    lat, lng, display, rest = _locate(args, parser)
    zone = args.zone or timezone_at(lat, lng)
    try:
        day, when = _resolve_day(rest[0] if rest else None, zone)
    except ValueError:
        parser.error(f"invalid date: {rest[0]}")
    context = context_at(lat, lng, day, zone, display)
    report = build_report(context, when)

    pos = report.position
    sub_lat, sub_lng = report.subsolar_point
    print(context.address_display)
    print(zone)
    print(report.now.strftime("%Y-%m-%d %H:%M:%S %Z"))
    print(f"Sun elevation: {pos.elevation:.4f}° (after refraction: {refract(pos.elevation):.4f}°)")
    print(f"Sun azimuth: {pos.azimuth:.4f}° ({direction(pos.azimuth)})")
    print(f"Subsolar point: {sub_lat:.4f}, {sub_lng:.4f}")
    print(f"Distance: {report.distance_km:,.0f} km")
    print()
    for row in event_rows(report):
        print(f"{row['event']:<15} {row['time']}  {row['elevation']:>8}  {row['azimuth']}")
    print()
    print(f"Day length: {format_duration(report.day_length_ms)}")
    return 0


def _cmd_seasons(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    tz = timezone(args.zone)
    year = args.year or datetime.now(utc).astimezone(tz).year
    seasons = seasons_for(year)
    for name, instant in zip(_SEASON_NAMES, seasons.as_tuple()):
        print(f"{name:<18} {from_ms(instant, tz).strftime('%Y-%m-%d %H:%M:%S %Z')}")
    return 0


def _cmd_chart(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    # Imported here so the other commands do not pay for matplotlib/plotly
    from solarday.renderers.plotly_2d import render_plotly_chart
    from solarday.renderers.static import save_static_chart

    lat, lng, display, rest = _locate(args, parser)
    if not rest:
        parser.error("give the chart YEAR")
    try:
        year = int(rest[0])
    except ValueError:
        parser.error(f"invalid year: {rest[0]}")
    context = context_at(lat, lng, date(year, 1, 1), args.zone, display)
    chart = compute_year_chart(context, year, args.kind)
    if args.html:
        fig = render_plotly_chart(chart)
        fig.write_html(args.html)
        print(args.html)
    path = save_static_chart(chart, Path(args.out) if args.out else None)
    print(path)
    return 0


def _cmd_seasons_table(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.last < args.first:
        parser.error("LAST must not precede FIRST")
    write_table(args.out, build_table(args.first, args.last), iso=not args.epoch_ms)
    print(args.out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="solarday", description="Solar event calculator.")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("rise-set", help="events of one day")
    p.add_argument("args", nargs="*", metavar="LAT LNG [DATE]",
                   help="DATE is YYYY-MM-DD, an ISO local datetime, or me/js/se/ds")
    p.add_argument("--place", help="geocode an address instead of LAT LNG")
    p.add_argument("--zone", type=_zone, help="IANA zone (looked up from the position by default)")
    p.set_defaults(func=_cmd_rise_set)

    p = sub.add_parser("seasons", help="equinoxes and solstices of a year")
    p.add_argument("year", nargs="?", type=int)
    p.add_argument("zone", nargs="?", type=_zone, default="UTC")
    p.set_defaults(func=_cmd_seasons)

    p = sub.add_parser("chart", help="year chart of light regimes")
    p.add_argument("args", nargs="*", metavar="LAT LNG YEAR")
    p.add_argument("--place", help="geocode an address instead of LAT LNG")
    p.add_argument("--zone", type=_zone, help="IANA zone (looked up from the position by default)")
    p.add_argument("--kind", choices=CHART_KINDS, default="rise-set")
    p.add_argument("--out", help="PNG path (default: under SOLARDAY_RESULTS_DIR)")
    p.add_argument("--html", help="also write an interactive plotly HTML file")
    p.set_defaults(func=_cmd_chart)

    p = sub.add_parser("seasons-table", help="write the JSON seasons table")
    p.add_argument("first", type=int)
    p.add_argument("last", type=int)
    p.add_argument("out")
    p.add_argument("--epoch-ms", action="store_true", help="numbers instead of ISO strings")
    p.set_defaults(func=_cmd_seasons_table)
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args, parser)
    except (SolarDayError, GeocodingError) as e:
        log.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
