"""Solar position model — subsolar point, declination, equation of time, refraction, elevation/azimuth.

Formulas for eccentricity, distance, axial tilt, declination and the equation of
time follow NOAA's solar calculator and Meeus, "Astronomical Algorithms". The
apparent longitude uses the periodic series of Bretagnon & Simon. UTC is treated
as UT1; the two never differ by more than 0.9 s.

Every quantity that depends on time comes as a pair: ``name(jc)`` takes a Julian
century since J2000.0 and ``name_at(ms)`` takes an epoch-millisecond instant.
"""

import math

from solarday.constants import (
    AU_KM,
    MINUTES_PER_DAY,
    MS_PER_MINUTE,
    SUN_PERIODIC_TERMS,
    SUN_RADIUS_KM,
)
from solarday.models import ObserverFrame, SolarPosition
from solarday.timeutil import (
    century_at,
    clamp,
    enu,
    geocentric_to_geodetic,
    mod,
    observer_frame,
    terrestrial_century,
)


def mean_anomaly(jc: float) -> float:
    return 357.52911 + 35999.05029 * jc - 0.0001537 * jc**2


def eccentricity(jc: float) -> float:
    return 0.016708634 - 0.000042037 * jc + 0.0000001267 * jc**2


def equation_of_center(jc: float) -> float:
    anom = math.radians(mean_anomaly(jc))
    return (
        (1.914602 - 0.004817 * jc - 0.000014 * jc**2) * math.sin(anom)
        + (0.019993 - 0.000101 * jc) * math.sin(2 * anom)
        + 0.000289 * math.sin(3 * anom)
    )


def sun_distance(jc: float) -> float:
    """Earth-sun distance in km from the two-body orbit."""
    ecc = eccentricity(jc)
    true_anomaly = math.radians(mean_anomaly(jc) + equation_of_center(jc))
    return AU_KM * (1 - ecc**2) / (1 + ecc * math.cos(true_anomaly))


def sun_distance_at(ms: float) -> float:
    return sun_distance(century_at(ms))


def _mean_longitude_rad(u: float) -> float:
    """Mean longitude in radians, u in units of 10^4 Julian years of TT."""
    long = 4.9353929 + 62833.196168 * u
    for l, alpha, nu in SUN_PERIODIC_TERMS:
        long += 1e-7 * l * math.sin(alpha + nu * u)
    return long


def sun_longitude(jc: float) -> float:
    """Apparent ecliptic longitude of the sun in degrees.

    0 at the March equinox, 90 at the June solstice, 180 at the September
    equinox and 270 at the December solstice. Good to about 0.0009° for years
    0-3000; far from the present the error is dominated by delta T.
    """
    u = terrestrial_century(jc) / 100
    aberration = 1e-7 * (17 * math.cos(3.1 + 62830.14 * u) - 993)
    nutation = 1e-7 * (
        -834 * math.sin(2.18 - 3375.7 * u + 0.36 * u**2)
        - 64 * math.sin(3.51 + 125666.39 * u + 0.1 * u**2)
    )
    return mod(math.degrees(_mean_longitude_rad(u) + aberration + nutation), 360)


def sun_longitude_at(ms: float) -> float:
    return sun_longitude(century_at(ms))


def axial_tilt(jc: float) -> float:
    """Obliquity of the ecliptic in degrees, i.e. the latitude of the tropics."""
    return (
        23.4392911
        - (46.815 * jc - 0.00059 * jc**2 + 0.001813 * jc**3) / 3600
        + 0.00256 * math.cos(math.radians(125.04 - 1934.136 * jc))
    )


def axial_tilt_at(ms: float) -> float:
    return axial_tilt(century_at(ms))


def declination(jc: float) -> float:
    """Geocentric declination of the sun in degrees."""
    return math.degrees(
        math.asin(
            clamp(
                math.sin(math.radians(axial_tilt(jc)))
                * math.sin(math.radians(sun_longitude(jc)))
            )
        )
    )


def declination_at(ms: float) -> float:
    return declination(century_at(ms))


def equation_of_time(jc: float) -> float:
    """Apparent minus mean solar time, in minutes."""
    vary = math.tan(math.radians(axial_tilt(jc)) / 2) ** 2
    long = math.radians(mod(280.46646 + 36000.76983 * jc + 0.0003032 * jc**2, 360))
    anom = math.radians(mean_anomaly(jc))
    ecc = eccentricity(jc)
    return 4 * math.degrees(
        vary * math.sin(2 * long)
        - 2 * ecc * math.sin(anom)
        + 4 * ecc * vary * math.sin(anom) * math.cos(2 * long)
        - 0.5 * vary**2 * math.sin(4 * long)
        - 1.25 * ecc**2 * math.sin(2 * anom)
    )


def equation_of_time_at(ms: float) -> float:
    return equation_of_time(century_at(ms))


def angular_radius(jc: float) -> float:
    """Apparent angular radius of the sun in degrees."""
    return math.degrees(SUN_RADIUS_KM / sun_distance(jc))


def angular_radius_at(ms: float) -> float:
    return angular_radius(century_at(ms))


def solar_time(lng: float, ms: float) -> float:
    """Apparent solar time in minutes after solar midnight. 720 is solar noon."""
    return mod(ms / MS_PER_MINUTE + equation_of_time_at(ms) + 4 * lng, MINUTES_PER_DAY)


def mean_solar_offset(lng: float) -> int:
    """Whole minutes between local mean solar time and UTC."""
    return math.floor(4 * lng + 0.5)


def _subsolar_longitude(jc: float, ms: float) -> float:
    solar_time_greenwich = mod(ms / MS_PER_MINUTE, MINUTES_PER_DAY) + equation_of_time(jc)
    return mod(-solar_time_greenwich / 4, 360) - 180


def subsolar_point(ms: float, geodetic: bool = False) -> tuple[float, float]:
    """Point on Earth with the sun at the zenith, as (lat, lng) in degrees.

    The latitude is the declination, i.e. geocentric, unless ``geodetic`` is set;
    the two differ by up to ~0.2°.
    """
    jc = century_at(ms)
    lat = declination(jc)
    if geodetic:
        lat = geocentric_to_geodetic(lat)
    return lat, _subsolar_longitude(jc, ms)


def sun_position(
    lat: float, lng: float, ms: float, frame: ObserverFrame | None = None
) -> SolarPosition:
    """Solar elevation and azimuth seen by an observer.

    The sun is placed in ECEF from the geocentric subsolar point and the orbital
    distance, then rotated into the observer's East-North-Up frame.

    Args:
        lat: Observer latitude (degrees, geodetic).
        lng: Observer longitude (degrees).
        ms: Instant, epoch milliseconds.
        frame: Precomputed observer frame for (lat, lng). Built on the fly if None.

    Returns:
        SolarPosition with unrefracted elevation. Use refract() for apparent elevation.
    """
    if frame is None:
        frame = observer_frame(lat, lng)
    jc = century_at(ms)
    dec = math.radians(declination(jc))
    sub_lng = math.radians(_subsolar_longitude(jc, ms))
    dist = sun_distance(jc)
    sun = (
        dist * math.cos(dec) * math.cos(sub_lng),
        dist * math.cos(dec) * math.sin(sub_lng),
        dist * math.sin(dec),
    )
    east, north, up = enu(frame, sun)
    r = math.sqrt(east**2 + north**2 + up**2)
    elevation = math.degrees(math.asin(clamp(up / r)))
    azimuth = mod(math.degrees(math.atan2(east, north)), 360)
    return SolarPosition(elevation=elevation, azimuth=azimuth)


def refraction(elev: float) -> float:
    """Degrees by which refraction raises the apparent elevation.

    NOAA's piecewise formula with constants adjusted so the pieces meet to six
    decimal places. Below -0.575° the correction follows -k·cot(elev), which
    tends to 0 as the elevation approaches -90°.
    """
    if abs(elev) >= 89.999:
        return 0.0
    tan_elev = math.tan(math.radians(elev))
    if elev >= 5:
        ref = 58.1 / tan_elev - 0.07 / tan_elev**3 + 0.000086 / tan_elev**5
    elif elev >= -0.575:
        ref = 1.0029734 * (
            1735 - 518.2 * elev + 103.4 * elev**2 - 12.79 * elev**3 + 0.711 * elev**4
        )
    else:
        ref = -20.83284 / tan_elev
    return ref / 3600  # arcseconds -> degrees


def refract(elev: float) -> float:
    """Apparent elevation for an unrefracted elevation."""
    return elev + refraction(elev)
