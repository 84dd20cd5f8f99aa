"""Time and frame utilities — Julian dates, delta T, modular arithmetic, ECEF/ENU transforms."""

import math
from datetime import datetime, tzinfo

from solarday.constants import (
    DAYS_PER_CENTURY,
    EARTH_ECCENTRICITY_SQ,
    EARTH_EQUATORIAL_RADIUS_KM,
    JD_J2000,
    JD_UNIX_EPOCH,
    MS_PER_DAY,
    SECONDS_PER_CENTURY,
)
from solarday.errors import CoordinateError, WindowError
from solarday.models import GeoPosition, ObserverFrame

_COMPASS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def clamp(x: float) -> float:
    """Clamp to [-1, 1] so asin/acos never see rounding overshoot."""
    if x <= -1:
        return -1.0
    if x >= 1:
        return 1.0
    return x


def mod(x: float, y: float) -> float:
    """Modulo with the result always in [0, y)."""
    r = math.fmod(x, y)
    if r < 0:
        r += y
    return 0.0 if r == y else r


def julian_day(ms: float) -> float:
    """Julian day (with fraction) of an epoch-millisecond instant."""
    return ms / MS_PER_DAY + JD_UNIX_EPOCH


def julian_century(jd: float) -> float:
    """Julian centuries since J2000.0."""
    return (jd - JD_J2000) / DAYS_PER_CENTURY


def century_at(ms: float) -> float:
    return julian_century(julian_day(ms))


def delta_t(jc: float) -> float:
    """Approximate TT - UT in seconds for a Julian century.

    Piecewise polynomials of Espenak & Meeus. The error is a few seconds around
    the present and grows before 1800 and after 2100 since Earth's rotation is
    not predictable.
    """
    y = 100 * jc + 2000
    if y < 500:
        u = y / 100
        return (10583.6 - 1014.41 * u + 33.78311 * u**2 - 5.952053 * u**3
                - 0.1798452 * u**4 + 0.022174192 * u**5 + 0.0090316521 * u**6)
    if y < 1600:
        u = (y - 1000) / 100
        return (1574.2 - 556.01 * u + 71.23472 * u**2 + 0.319781 * u**3
                - 0.853463 * u**4 - 0.005050998 * u**5 + 0.0083572073 * u**6)
    if y < 1700:
        t = y - 1600
        return 120 - 0.9808 * t - 0.01532 * t**2 + t**3 / 7129
    if y < 1800:
        t = y - 1700
        return 8.83 + 0.1603 * t - 0.0059285 * t**2 + 0.00013336 * t**3 - t**4 / 1174000
    if y < 1860:
        t = y - 1800
        return (13.72 - 0.332447 * t + 0.0068612 * t**2 + 0.0041116 * t**3
                - 0.00037436 * t**4 + 0.0000121272 * t**5 - 0.0000001699 * t**6
                + 0.000000000875 * t**7)
    if y < 1900:
        t = y - 1860
        return (7.62 + 0.5737 * t - 0.251754 * t**2 + 0.01680668 * t**3
                - 0.0004473624 * t**4 + t**5 / 233174)
    if y < 1920:
        t = y - 1900
        return -2.79 + 1.494119 * t - 0.0598939 * t**2 + 0.0061966 * t**3 - 0.000197 * t**4
    if y < 1941:
        t = y - 1920
        return 21.20 + 0.84493 * t - 0.076100 * t**2 + 0.0020936 * t**3
    if y < 1961:
        t = y - 1950
        return 29.07 + 0.407 * t - t**2 / 233 + t**3 / 2547
    if y < 1986:
        t = y - 1975
        return 45.45 + 1.067 * t - t**2 / 260 - t**3 / 718
    if y < 2005:
        t = y - 2000
        return (63.86 + 0.3345 * t - 0.060374 * t**2 + 0.0017275 * t**3
                + 0.000651814 * t**4 + 0.00002373599 * t**5)
    if y < 2050:
        t = y - 2000
        return 62.92 + 0.32217 * t + 0.005589 * t**2
    if y < 2150:
        return 32 * ((y - 1820) / 100) ** 2 - 0.5628 * (2150 - y) - 20
    u = (y - 1820) / 100
    return 32 * u**2 - 20


def terrestrial_century(jc: float) -> float:
    """Shift a UT-based Julian century to terrestrial time."""
    return jc + delta_t(jc) / SECONDS_PER_CENTURY


def to_ms(dt: datetime) -> float:
    """Epoch milliseconds of an aware datetime."""
    return dt.timestamp() * 1000


def from_ms(ms: float, tz: tzinfo) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=tz)


def direction(bearing: float) -> str:
    """16-point compass label for a bearing in degrees (225 -> "SW")."""
    return _COMPASS[int(mod(bearing + 11.25, 360) // 22.5) % 16]


def check_position(lat: float, lng: float) -> GeoPosition:
    """Validate an observer position.

    Longitudes live in (-180, 180]; -180 names the same meridian and is returned as 180.

    Raises:
        CoordinateError: Unless -90 < lat < 90 and -180 <= lng <= 180.
    """
    if not -90 < lat < 90:
        raise CoordinateError(
            f"Latitude must be between -90 and 90 exclusive (use ±89.9999 for poles): {lat}"
        )
    if not -180 <= lng <= 180:
        raise CoordinateError(f"Longitude must be between -180 and 180: {lng}")
    return GeoPosition(lat=lat, lng=180.0 if lng == -180 else lng)


def check_window(start: float, end: float) -> None:
    if end <= start:
        raise WindowError(f"Window end {end} is not after start {start}")


def geocentric_to_geodetic(lat: float) -> float:
    """Convert a geocentric latitude (degrees) to geodetic on the WGS84 ellipsoid."""
    if abs(lat) >= 90:
        return lat
    return math.degrees(math.atan(math.tan(math.radians(lat)) / (1 - EARTH_ECCENTRICITY_SQ)))


def geodetic_to_geocentric(lat: float) -> float:
    if abs(lat) >= 90:
        return lat
    return math.degrees(math.atan(math.tan(math.radians(lat)) * (1 - EARTH_ECCENTRICITY_SQ)))


def geodetic_to_ecef(lat: float, lng: float, height_km: float = 0.0) -> tuple[float, float, float]:
    """WGS84 geodetic coordinates to an Earth-centred, Earth-fixed vector in km."""
    phi = math.radians(lat)
    lam = math.radians(lng)
    sin_phi = math.sin(phi)
    n = EARTH_EQUATORIAL_RADIUS_KM / math.sqrt(1 - EARTH_ECCENTRICITY_SQ * sin_phi**2)
    x = (n + height_km) * math.cos(phi) * math.cos(lam)
    y = (n + height_km) * math.cos(phi) * math.sin(lam)
    z = (n * (1 - EARTH_ECCENTRICITY_SQ) + height_km) * sin_phi
    return x, y, z


def ecef_to_geodetic(x: float, y: float, z: float) -> tuple[float, float, float]:
    """Inverse of geodetic_to_ecef: (lat, lng, height_km).

    Fixed-point iteration on latitude; the height form used stays stable near
    the poles where p / cos(lat) would blow up.
    """
    lam = math.atan2(y, x)
    p = math.hypot(x, y)
    phi = math.atan2(z, p * (1 - EARTH_ECCENTRICITY_SQ))
    h = 0.0
    for _ in range(6):
        sin_phi = math.sin(phi)
        n = EARTH_EQUATORIAL_RADIUS_KM / math.sqrt(1 - EARTH_ECCENTRICITY_SQ * sin_phi**2)
        h = p * math.cos(phi) + (z + EARTH_ECCENTRICITY_SQ * n * sin_phi) * sin_phi - n
        phi = math.atan2(z, p * (1 - EARTH_ECCENTRICITY_SQ * n / (n + h)))
    return math.degrees(phi), math.degrees(lam), h


def observer_frame(lat: float, lng: float) -> ObserverFrame:
    """Precompute the ECEF position and ENU rotation terms of an observer."""
    phi = math.radians(lat)
    lam = math.radians(lng)
    return ObserverFrame(
        lat=lat,
        lng=lng,
        ecef=geodetic_to_ecef(lat, lng),
        sin_lat=math.sin(phi),
        cos_lat=math.cos(phi),
        sin_lng=math.sin(lam),
        cos_lng=math.cos(lam),
    )


def enu(frame: ObserverFrame, target: tuple[float, float, float]) -> tuple[float, float, float]:
    """East, north, up components of the vector from the observer to an ECEF target."""
    ox, oy, oz = frame.ecef
    dx, dy, dz = target[0] - ox, target[1] - oy, target[2] - oz
    east = -frame.sin_lng * dx + frame.cos_lng * dy
    north = (
        -frame.sin_lat * frame.cos_lng * dx
        - frame.sin_lat * frame.sin_lng * dy
        + frame.cos_lat * dz
    )
    up = frame.cos_lat * frame.cos_lng * dx + frame.cos_lat * frame.sin_lng * dy + frame.sin_lat * dz
    return east, north, up
