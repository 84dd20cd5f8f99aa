"""Time-zone layer — zone lookup, calendar-day windows and UTC-offset tables."""

import bisect
import logging
from datetime import date, datetime, time, timedelta

import pytz
from timezonefinder import TimezoneFinder

from solarday.constants import MS_PER_DAY, MS_PER_MINUTE
from solarday.errors import LookupTableError
from solarday.models import OffsetChange
from solarday.timeutil import check_position, to_ms

log = logging.getLogger(__name__)

_tf = TimezoneFinder()
_EPOCH_DATE = date(1970, 1, 1)


def timezone_at(lat: float, lng: float) -> str:
    """IANA zone name for a position.

    Falls back to the nautical zone ("Etc/GMT+8" for 120°W) where timezonefinder
    has no answer, e.g. far out at sea.
    """
    check_position(lat, lng)
    zone = _tf.timezone_at(lat=lat, lng=lng)
    if zone is None:
        hours = round(lng / 15)
        zone = "Etc/GMT" if hours == 0 else f"Etc/GMT{-hours:+d}"
        log.debug("No zone polygon at (%s, %s), using %s", lat, lng, zone)
    return zone


def local_start(day: date, zone: str) -> datetime:
    """First existing local instant of a calendar date.

    Where a DST jump skips midnight the day starts at the end of the gap; where
    midnight repeats, the earlier occurrence is used.
    """
    tz = pytz.timezone(zone)
    naive = datetime.combine(day, time())
    try:
        return tz.localize(naive, is_dst=None)
    except pytz.NonExistentTimeError:
        return tz.normalize(tz.localize(naive, is_dst=False))
    except pytz.AmbiguousTimeError:
        return tz.localize(naive, is_dst=True)


def day_window(day: date, zone: str) -> tuple[float, float]:
    """Half-open [start, end) in epoch ms covering one local calendar date."""
    start = to_ms(local_start(day, zone))
    end = to_ms(local_start(day + timedelta(days=1), zone))
    return start, end


def day_starts(year: int, zone: str) -> list[datetime]:
    """Local start of every day of a year, plus the start of the next year."""
    first = date(year, 1, 1)
    days = (date(year + 1, 1, 1) - first).days
    return [local_start(first + timedelta(days=i), zone) for i in range(days + 1)]


def _offset_minutes(tz: pytz.BaseTzInfo, ms: float) -> float:
    return datetime.fromtimestamp(ms / 1000, tz=tz).utcoffset().total_seconds() / 60


def _table_from_starts(starts: list[datetime]) -> list[OffsetChange]:
    tz = pytz.timezone(starts[0].tzinfo.zone)
    first = to_ms(starts[0])
    first_offset = _offset_minutes(tz, first)
    table = [OffsetChange(first, first_offset, first_offset != _offset_minutes(tz, first - 1))]
    for prev, cur in zip(starts, starts[1:]):
        prev_ms, cur_ms = to_ms(prev), to_ms(cur)
        prev_offset = _offset_minutes(tz, prev_ms)
        cur_offset = _offset_minutes(tz, cur_ms)
        if prev_offset == cur_offset:
            continue
        # Binary search for the first millisecond with the new offset
        t0, t1 = prev_ms, cur_ms
        while t1 - t0 > 1:
            mid = (t0 + t1) // 2
            if _offset_minutes(tz, mid) == prev_offset:
                t0 = mid
            else:
                t1 = mid
        table.append(OffsetChange(t1, cur_offset, True))
    return table


def offset_table(year: int, zone: str) -> list[OffsetChange]:
    """UTC-offset lookup table for one year.

    The first row holds the offset at the start of the year; each further row
    is an offset change located to the millisecond.

    Args:
        year: Calendar year.
        zone: IANA zone name.

    Returns:
        Rows ascending by instant.
    """
    table = _table_from_starts(day_starts(year, zone))
    log.debug("Offset table for %s %d: %d change(s)", zone, year, len(table) - 1)
    return table


def day_offset_table(day: date, zone: str) -> list[OffsetChange]:
    """Offset lookup table covering a single calendar date."""
    return _table_from_starts([local_start(day, zone), local_start(day + timedelta(days=1), zone)])


def offset_at(ms: float, table: list[OffsetChange]) -> float:
    """UTC offset in minutes at an instant.

    Raises:
        LookupTableError: If the instant precedes the first row of the table.
    """
    if not table or ms < table[0].instant:
        raise LookupTableError(f"Instant {ms} is not covered by the offset table")
    i = bisect.bisect_right([row.instant for row in table], ms) - 1
    return table[i].offset_minutes


def ms_since_local_midnight(ms: float, day: date, table: list[OffsetChange]) -> float:
    """Local clock reading of an instant in milliseconds after 00:00 of `day`.

    Not clamped; on DST days the result may be negative or exceed one day.
    """
    local_ms = ms + offset_at(ms, table) * MS_PER_MINUTE
    return local_ms - (day - _EPOCH_DATE).days * MS_PER_DAY
