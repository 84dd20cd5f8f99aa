import math
from datetime import date, datetime

import pytest
from pytz import timezone, utc

from solarday import events
from solarday.constants import SUNRISE_ANGLE
from solarday.errors import CoordinateError, WindowError
from solarday.events import (
    all_sun_events,
    first_crossing,
    max_and_min,
    solar_midnight,
    solar_noon,
    sunrise,
)
from solarday.models import EventType, NoCrossing, Threshold
from solarday.position import refract, solar_time
from solarday.timeutil import from_ms, to_ms
from solarday.zones import day_window

SANTA_BARBARA = (34.42, -119.85)
LA = "America/Los_Angeles"
HOUR_MS = 3_600_000


def _ms(*args) -> float:
    return to_ms(datetime(*args, tzinfo=utc))


@pytest.fixture(scope="module")
def solstice_series():
    return all_sun_events(*SANTA_BARBARA, date(2025, 6, 21), LA)


def test_summer_day_has_every_event_in_order(solstice_series):
    kinds = [e.event_type for e in solstice_series]
    assert kinds == [
        EventType.SOLAR_MIDNIGHT,
        EventType.ASTRO_DAWN,
        EventType.NAUTICAL_DAWN,
        EventType.CIVIL_DAWN,
        EventType.SUNRISE,
        EventType.SOLAR_NOON,
        EventType.SUNSET,
        EventType.CIVIL_DUSK,
        EventType.NAUTICAL_DUSK,
        EventType.ASTRO_DUSK,
    ]
    times = [e.time for e in solstice_series]
    assert times == sorted(times)
    assert all(solstice_series.start <= t < solstice_series.end for t in times)


def test_summer_noon_is_just_after_one_pm(solstice_series):
    (noon,) = solstice_series.of_type(EventType.SOLAR_NOON)
    (rise,) = solstice_series.of_type(EventType.SUNRISE)
    (set_,) = solstice_series.of_type(EventType.SUNSET)
    assert from_ms(noon.time, timezone(LA)).hour == 13
    assert rise.time < noon.time < set_.time
    assert refract(noon.elevation) > 70
    assert math.isclose(solar_time(SANTA_BARBARA[1], noon.time), 720, abs_tol=0.01)


def test_crossings_sit_on_their_threshold(solstice_series):
    (rise,) = solstice_series.of_type(EventType.SUNRISE)
    (dusk,) = solstice_series.of_type(EventType.CIVIL_DUSK)
    assert math.isclose(rise.elevation, SUNRISE_ANGLE, abs_tol=1e-3)
    assert math.isclose(dusk.elevation, -6.0, abs_tol=1e-3)
    assert 50 < rise.azimuth < 70
    assert 290 < dusk.azimuth < 310


def test_events_are_idempotent(solstice_series):
    assert all_sun_events(*SANTA_BARBARA, date(2025, 6, 21), LA) == solstice_series


def test_max_and_min_brackets_noon_and_midnight():
    start, end = day_window(date(2025, 6, 21), LA)
    extrema = max_and_min(*SANTA_BARBARA, start, end)
    assert len(extrema) == 4
    assert extrema[0] == start and extrema[-1] == end
    # minimum first (about 01:01 PDT), then maximum (about 13:01 PDT)
    assert 0.5 * HOUR_MS < extrema[1] - start < 1.5 * HOUR_MS
    assert 12.5 * HOUR_MS < extrema[2] - start < 13.5 * HOUR_MS


def test_first_crossing_matches_sunrise(solstice_series):
    start, end = solstice_series.start, solstice_series.end
    (rise,) = solstice_series.of_type(EventType.SUNRISE)
    assert first_crossing(*SANTA_BARBARA, start, end, SUNRISE_ANGLE) == rise.time
    assert sunrise(*SANTA_BARBARA, start, end) == [rise.time]


def test_polar_day_and_night():
    june = all_sun_events(89.9999, 0, date(2025, 6, 21), "UTC")
    assert june.of_type(EventType.SUNRISE) == ()
    assert june.of_type(EventType.SUNSET) == ()
    december = all_sun_events(89.9999, 0, date(2025, 12, 21), "UTC")
    assert december.of_type(EventType.ASTRO_DAWN) == ()

    start, end = june.start, june.end
    assert first_crossing(89.9999, 0, start, end, SUNRISE_ANGLE) == NoCrossing(Threshold.ABOVE)
    start, end = december.start, december.end
    assert first_crossing(89.9999, 0, start, end, SUNRISE_ANGLE) == NoCrossing(Threshold.BELOW)


def test_midnight_sun_keeps_noon_and_midnight():
    series = all_sun_events(69.65, 18.96, date(2025, 6, 21), "Europe/Oslo")
    kinds = {e.event_type for e in series}
    assert kinds == {EventType.SOLAR_NOON, EventType.SOLAR_MIDNIGHT}


def test_polar_night_still_has_civil_twilight():
    series = all_sun_events(69.65, 18.96, date(2025, 12, 21), "Europe/Oslo")
    assert series.of_type(EventType.SUNRISE) == ()
    assert len(series.of_type(EventType.CIVIL_DAWN)) == 1
    assert len(series.of_type(EventType.CIVIL_DUSK)) == 1


def test_solar_noon_once_per_day():
    noons = solar_noon(0.0, _ms(2024, 3, 20), _ms(2024, 3, 21))
    assert len(noons) == 1
    # Equation of time is about -7.5 min on the March equinox
    assert math.isclose(noons[0] - _ms(2024, 3, 20, 12), 7.5 * 60_000, abs_tol=30_000)


def test_solar_noon_twice_in_a_long_window():
    start = _ms(2024, 11, 3, 11)
    noons = solar_noon(0.0, start, start + 25 * HOUR_MS)
    assert len(noons) == 2
    for t in noons:
        assert math.isclose(solar_time(0.0, t), 720, abs_tol=0.01)
    assert math.isclose(noons[1] - noons[0], 24 * HOUR_MS, abs_tol=60_000)


def test_solar_noon_absent_in_a_short_window():
    start = _ms(2024, 11, 3, 12, 30)
    assert solar_noon(0.0, start, start + 23 * HOUR_MS) == []


def test_solar_midnight_twice_and_never():
    start = _ms(2024, 11, 3, 23)
    assert len(solar_midnight(0.0, start, start + 25 * HOUR_MS)) == 2
    start = _ms(2024, 11, 4, 0, 30)
    assert solar_midnight(0.0, start, start + 23 * HOUR_MS) == []


def test_contract_violations_raise():
    with pytest.raises(WindowError):
        solar_noon(0.0, 10.0, 10.0)
    with pytest.raises(WindowError):
        max_and_min(0.0, 0.0, 10.0, 5.0)
    with pytest.raises(CoordinateError):
        all_sun_events(90, 0, date(2025, 6, 21), "UTC")
    with pytest.raises(CoordinateError):
        all_sun_events(0, 200, date(2025, 6, 21), "UTC")


@pytest.mark.parametrize(
    "wrapper, kind",
    [
        ("sunrise", EventType.SUNRISE),
        ("sunset", EventType.SUNSET),
        ("civil_dawn", EventType.CIVIL_DAWN),
        ("civil_dusk", EventType.CIVIL_DUSK),
        ("nautical_dawn", EventType.NAUTICAL_DAWN),
        ("nautical_dusk", EventType.NAUTICAL_DUSK),
        ("astro_dawn", EventType.ASTRO_DAWN),
        ("astro_dusk", EventType.ASTRO_DUSK),
    ],
)
def test_threshold_wrappers_match_the_series(solstice_series, wrapper, kind):
    find = getattr(events, wrapper)
    times = find(*SANTA_BARBARA, solstice_series.start, solstice_series.end)
    assert times == [e.time for e in solstice_series.of_type(kind)]
    assert len(times) == 1
