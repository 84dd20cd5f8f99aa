"""Equinoxes and solstices — bisection on the apparent solar longitude, plus the JSON table fast path."""

import json
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pytz import utc

from solarday.constants import MS_PER_DAY
from solarday.errors import LookupTableError
from solarday.models import SeasonInstants
from solarday.position import sun_longitude_at
from solarday.timeutil import from_ms, to_ms

log = logging.getLogger(__name__)

SEARCH_WINDOW_MS = 8 * MS_PER_DAY

_FIELDS = ("marEquinox", "junSolstice", "sepEquinox", "decSolstice")


def _search(year: int, month: int, day: int, before: Callable[[float], bool]) -> float:
    """Bisect an 8-day window from 00:00 UTC of the given date to 1 ms.

    `before` tells from the apparent longitude whether the event is still ahead.
    """
    t0 = to_ms(datetime(year, month, day, tzinfo=utc))
    t1 = t0 + SEARCH_WINDOW_MS
    while t1 - t0 > 1:
        mid = (t0 + t1) / 2
        if before(sun_longitude_at(mid)):
            t0 = mid
        else:
            t1 = mid
    return t0


def mar_equinox(year: int) -> float:
    """Instant (epoch ms) the apparent longitude passes 0°."""
    return _search(year, 3, 16, lambda long: long >= 180)


def jun_solstice(year: int) -> float:
    """Instant (epoch ms) the apparent longitude passes 90°."""
    return _search(year, 6, 16, lambda long: long <= 90)


def sep_equinox(year: int) -> float:
    """Instant (epoch ms) the apparent longitude passes 180°."""
    return _search(year, 9, 18, lambda long: long <= 180)


def dec_solstice(year: int) -> float:
    """Instant (epoch ms) the apparent longitude passes 270°."""
    return _search(year, 12, 18, lambda long: long <= 270)


def season_instants(year: int, table: list[SeasonInstants] | None = None) -> SeasonInstants:
    """Equinoxes and solstices of a year, from `table` when given, else computed."""
    if table is not None:
        return lookup(year, table)
    return SeasonInstants(
        year=year,
        mar_equinox=mar_equinox(year),
        jun_solstice=jun_solstice(year),
        sep_equinox=sep_equinox(year),
        dec_solstice=dec_solstice(year),
    )


def build_table(first: int, last: int) -> list[SeasonInstants]:
    """Compute the seasons of every year from `first` to `last` inclusive."""
    return [season_instants(year) for year in range(first, last + 1)]


def _iso(ms: float) -> str:
    return from_ms(ms, utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse(value: str | float) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    return to_ms(datetime.fromisoformat(value.replace("Z", "+00:00")))


def write_table(path: str | Path, table: list[SeasonInstants], iso: bool = True) -> None:
    """Write a seasons table as JSON, with ISO-8601 UTC strings or epoch-ms numbers."""
    rows = []
    for row in table:
        values = row.as_tuple()
        rows.append(
            {"year": row.year, **{k: _iso(v) if iso else v for k, v in zip(_FIELDS, values)}}
        )
    Path(path).write_text(json.dumps(rows, indent=1), encoding="utf-8")
    log.info("Wrote %d season rows to %s", len(rows), path)


def load_table(path: str | Path) -> list[SeasonInstants]:
    """Read a seasons table written by write_table (or any table of the same shape).

    Raises:
        LookupTableError: If the file cannot be read, is not valid JSON, or a row
            is missing a field or holds an unparseable instant.
    """
    try:
        rows = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise LookupTableError(f"Cannot read seasons table {path}: {e}") from e
    try:
        table = [
            SeasonInstants(int(r["year"]), *(_parse(r[k]) for k in _FIELDS)) for r in rows
        ]
    except KeyError as e:
        raise LookupTableError(f"Seasons table {path} is missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise LookupTableError(f"Seasons table {path} has a malformed row: {e}") from e
    table.sort(key=lambda r: r.year)
    log.info("Loaded %d season rows from %s", len(table), path)
    return table


def lookup(year: int, table: list[SeasonInstants]) -> SeasonInstants:
    """Row of a loaded seasons table.

    Raises:
        LookupTableError: If the table has no row for `year`.
    """
    if table:
        i = year - table[0].year
        if 0 <= i < len(table) and table[i].year == year:
            return table[i]
        for row in table:
            if row.year == year:
                return row
    raise LookupTableError(f"Year {year} is not in the seasons table")
