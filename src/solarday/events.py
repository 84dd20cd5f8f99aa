"""Event root-finding engine — extrema bracketing, threshold crossings, solar noon and midnight.

Every search works on unrefracted elevation. A day is handled in two phases:
`max_and_min` brackets the local extrema of elevation, then `dawn`/`dusk`
bisect each rising or falling stretch between consecutive extrema for the
requested angle. Solar noon and midnight come from apparent solar time instead.
"""

import logging
from datetime import date

from solarday.constants import (
    ASTRONOMICAL_ANGLE,
    CIVIL_ANGLE,
    MINUTES_PER_DAY,
    MS_PER_MINUTE,
    NAUTICAL_ANGLE,
    SUNRISE_ANGLE,
)
from solarday.models import (
    EventSeries,
    EventType,
    NoCrossing,
    ObserverFrame,
    SolarEvent,
    Threshold,
)
from solarday.position import solar_time, sun_position
from solarday.timeutil import check_position, check_window, mod, observer_frame
from solarday.zones import day_window

log = logging.getLogger(__name__)

DERIVATIVE_STEP_MS = 500
CHECKPOINTS = 9
NOON_REFINE_STEPS = 3

# (event type, elevation threshold, rising)
CROSSINGS: tuple[tuple[EventType, float, bool], ...] = (
    (EventType.ASTRO_DAWN, ASTRONOMICAL_ANGLE, True),
    (EventType.NAUTICAL_DAWN, NAUTICAL_ANGLE, True),
    (EventType.CIVIL_DAWN, CIVIL_ANGLE, True),
    (EventType.SUNRISE, SUNRISE_ANGLE, True),
    (EventType.SUNSET, SUNRISE_ANGLE, False),
    (EventType.CIVIL_DUSK, CIVIL_ANGLE, False),
    (EventType.NAUTICAL_DUSK, NAUTICAL_ANGLE, False),
    (EventType.ASTRO_DUSK, ASTRONOMICAL_ANGLE, False),
)

THRESHOLDS: dict[EventType, float] = {kind: angle for kind, angle, _ in CROSSINGS}


def _frame(lat: float, lng: float, frame: ObserverFrame | None) -> ObserverFrame:
    return frame if frame is not None else observer_frame(lat, lng)


def _elevation(frame: ObserverFrame, ms: float) -> float:
    return sun_position(frame.lat, frame.lng, ms, frame).elevation


def _slope(frame: ObserverFrame, ms: float) -> float:
    return _elevation(frame, ms + DERIVATIVE_STEP_MS) - _elevation(frame, ms - DERIVATIVE_STEP_MS)


def max_and_min(
    lat: float,
    lng: float,
    start: float,
    end: float,
    frame: ObserverFrame | None = None,
) -> list[float]:
    """Bracket and refine the local extrema of solar elevation in a window.

    The slope is sampled at 9 points splitting the window into 8 equal parts.
    A change from non-negative to negative brackets a maximum, negative to
    non-negative a minimum; each bracket is bisected on the slope sign to 1 ms.

    Args:
        lat: Observer latitude (degrees).
        lng: Observer longitude (degrees).
        start: Window start, epoch ms.
        end: Window end, epoch ms.
        frame: Precomputed observer frame.

    Returns:
        [start, extrema..., end], ascending.

    Raises:
        CoordinateError: Latitude or longitude out of range.
        WindowError: end <= start.
    """
    check_position(lat, lng)
    check_window(start, end)
    frame = _frame(lat, lng, frame)

    step = (end - start) / (CHECKPOINTS - 1)
    points = [start + i * step for i in range(CHECKPOINTS - 1)] + [end]
    slopes = [_slope(frame, t) for t in points]

    extrema = []
    for j in range(CHECKPOINTS - 1):
        rising = slopes[j] >= 0
        if rising == (slopes[j + 1] >= 0):
            continue
        t0, t1 = points[j], points[j + 1]
        while t1 - t0 > 1:
            mid = (t0 + t1) / 2
            if (_slope(frame, mid) >= 0) == rising:
                t0 = mid
            else:
                t1 = mid
        extrema.append(t0)

    if not extrema:
        log.debug("No elevation extremum at (%s, %s) in [%s, %s)", lat, lng, start, end)
    return [start, *extrema, end]


def _crossings(
    frame: ObserverFrame,
    start: float,
    end: float,
    angle: float,
    rising: bool,
    extrema: list[float] | None,
) -> list[float]:
    check_position(frame.lat, frame.lng)
    check_window(start, end)
    if extrema is None:
        extrema = max_and_min(frame.lat, frame.lng, start, end, frame)
    elevations = [_elevation(frame, t) for t in extrema]

    times = []
    for j in range(len(extrema) - 1):
        s0, s1 = elevations[j], elevations[j + 1]
        if rising and not s0 <= angle <= s1:
            continue
        if not rising and not s0 >= angle >= s1:
            continue
        t0, t1 = extrema[j], extrema[j + 1]
        while t1 - t0 > 1:
            mid = (t0 + t1) / 2
            if (_elevation(frame, mid) < angle) == rising:
                t0 = mid
            else:
                t1 = mid
        times.append(t0)
    return times


def dawn(
    lat: float,
    lng: float,
    start: float,
    end: float,
    angle: float,
    frame: ObserverFrame | None = None,
    extrema: list[float] | None = None,
) -> list[float]:
    """Instants in [start, end) at which the rising sun reaches `angle`.

    Args:
        lat: Observer latitude (degrees).
        lng: Observer longitude (degrees).
        start: Window start, epoch ms.
        end: Window end, epoch ms.
        angle: Unrefracted elevation threshold (degrees).
        frame: Precomputed observer frame.
        extrema: Output of max_and_min for the same window, to share between calls.

    Returns:
        Crossing instants to 1 ms, ascending. Empty if the sun never rises through `angle`.
    """
    return _crossings(_frame(lat, lng, frame), start, end, angle, True, extrema)


def dusk(
    lat: float,
    lng: float,
    start: float,
    end: float,
    angle: float,
    frame: ObserverFrame | None = None,
    extrema: list[float] | None = None,
) -> list[float]:
    """Instants in [start, end) at which the setting sun reaches `angle`. See dawn()."""
    return _crossings(_frame(lat, lng, frame), start, end, angle, False, extrema)


def first_crossing(
    lat: float,
    lng: float,
    start: float,
    end: float,
    angle: float,
    rising: bool = True,
    frame: ObserverFrame | None = None,
) -> float | NoCrossing:
    """First rising (or falling) crossing of `angle`, or which side the sun stays on.

    When there is no crossing in the requested direction the NoCrossing regime
    is the side of the threshold the sun is on at the window start.
    """
    frame = _frame(lat, lng, frame)
    times = _crossings(frame, start, end, angle, rising, None)
    if times:
        return times[0]
    above = _elevation(frame, start) >= angle
    return NoCrossing(Threshold.ABOVE if above else Threshold.BELOW)


def _rate(lng: float, start: float, end: float) -> tuple[float, float, float]:
    """Apparent solar time at both window edges and its rate per clock minute."""
    st00 = solar_time(lng, start)
    st24 = solar_time(lng, end)
    minutes = (end - start) / MS_PER_MINUTE
    rate = (mod(st24 - st00 - 720, MINUTES_PER_DAY) + 720) / minutes
    return st00, st24, rate


def _refine(lng: float, t: float, target: float, rate: float, start: float, end: float) -> float:
    for _ in range(NOON_REFINE_STEPS):
        error = mod(target - solar_time(lng, t) + 720, MINUTES_PER_DAY) - 720
        t += error / rate * MS_PER_MINUTE
    return min(max(t, start), end - 1)


def solar_noon(lng: float, start: float, end: float) -> list[float]:
    """Instants in [start, end) at which apparent solar time is 720 minutes.

    A calendar day is not a solar day, so it can hold zero, one or two noons.

    Args:
        lng: Observer longitude (degrees).
        start: Window start, epoch ms.
        end: Window end, epoch ms.

    Returns:
        Noon instants, ascending.
    """
    check_window(start, end)
    st00, st24, rate = _rate(lng, start, end)
    if 600 < st00 <= 720 and 720 < st24 < 840:
        estimates = [
            start + mod(720 - st00, MINUTES_PER_DAY) / rate * MS_PER_MINUTE,
            end - (st24 - 720) / rate * MS_PER_MINUTE,
        ]
    elif 720 < st00 < 840 and 600 < st24 <= 720:
        log.debug("No solar noon at lng %s in [%s, %s)", lng, start, end)
        return []
    else:
        estimates = [start + mod(720 - st00, MINUTES_PER_DAY) / rate * MS_PER_MINUTE]
    return [_refine(lng, t, 720, rate, start, end) for t in estimates]


def solar_midnight(lng: float, start: float, end: float) -> list[float]:
    """Instants in [start, end) at which apparent solar time wraps to 0. See solar_noon()."""
    check_window(start, end)
    st00, st24, rate = _rate(lng, start, end)
    if st00 > 1320 and st24 < 120:
        estimates = [
            start + (MINUTES_PER_DAY - st00) / rate * MS_PER_MINUTE,
            end - st24 / rate * MS_PER_MINUTE,
        ]
    elif st00 < 120 and st24 > 1320:
        log.debug("No solar midnight at lng %s in [%s, %s)", lng, start, end)
        return []
    else:
        estimates = [end - st24 / rate * MS_PER_MINUTE]
    return [_refine(lng, t, 0, rate, start, end) for t in estimates]


def sun_events_between(
    lat: float,
    lng: float,
    start: float,
    end: float,
    frame: ObserverFrame | None = None,
) -> list[SolarEvent]:
    """Every solar event in [start, end), sorted by time.

    Extrema are bracketed once and shared by the eight threshold searches.
    """
    check_position(lat, lng)
    check_window(start, end)
    frame = _frame(lat, lng, frame)
    extrema = max_and_min(lat, lng, start, end, frame)

    found: list[tuple[float, EventType]] = []
    found.extend((t, EventType.SOLAR_MIDNIGHT) for t in solar_midnight(lng, start, end))
    found.extend((t, EventType.SOLAR_NOON) for t in solar_noon(lng, start, end))
    for kind, angle, rising in CROSSINGS:
        found.extend((t, kind) for t in _crossings(frame, start, end, angle, rising, extrema))

    events = []
    for t, kind in found:
        position = sun_position(lat, lng, t, frame)
        events.append(SolarEvent(t, position.elevation, position.azimuth, kind))
    events.sort(key=lambda e: e.time)
    return events


def all_sun_events(
    lat: float,
    lng: float,
    day: date,
    zone: str,
    frame: ObserverFrame | None = None,
) -> EventSeries:
    """Solar events of one local calendar date.

    Args:
        lat: Observer latitude (degrees). Use ±89.9999 for the poles.
        lng: Observer longitude (degrees).
        day: Local calendar date.
        zone: IANA zone name that defines the date's boundaries.
        frame: Precomputed observer frame.

    Returns:
        EventSeries for the date. Thresholds the sun never crosses produce no event.
    """
    start, end = day_window(day, zone)
    events = sun_events_between(lat, lng, start, end, frame)
    log.debug("%d event(s) at (%s, %s) on %s", len(events), lat, lng, day)
    return EventSeries(
        lat=lat, lng=lng, zone=zone, day=day, start=start, end=end, events=tuple(events)
    )


def sunrise(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dawn(lat, lng, start, end, SUNRISE_ANGLE, frame)


def sunset(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dusk(lat, lng, start, end, SUNRISE_ANGLE, frame)


def civil_dawn(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dawn(lat, lng, start, end, CIVIL_ANGLE, frame)


def civil_dusk(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dusk(lat, lng, start, end, CIVIL_ANGLE, frame)


def nautical_dawn(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dawn(lat, lng, start, end, NAUTICAL_ANGLE, frame)


def nautical_dusk(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dusk(lat, lng, start, end, NAUTICAL_ANGLE, frame)


def astro_dawn(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dawn(lat, lng, start, end, ASTRONOMICAL_ANGLE, frame)


def astro_dusk(lat: float, lng: float, start: float, end: float, frame: ObserverFrame | None = None) -> list[float]:
    return dusk(lat, lng, start, end, ASTRONOMICAL_ANGLE, frame)
