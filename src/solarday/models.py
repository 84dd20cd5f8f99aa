"""Data model definitions — explicit boundaries between input, engine, interval, and render layers."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum, IntEnum


@dataclass(frozen=True)
class GeoPosition:
    """Geodetic observer position. Poles must be given as ±89.9999."""

    lat: float  # Latitude (decimal degrees, -90 < lat < 90)
    lng: float  # Longitude (decimal degrees, -180 < lng <= 180)


@dataclass(frozen=True)
class ObserverFrame:
    """ECEF position of an observer plus the trig terms of its ENU rotation.

    Derived once per GeoPosition and passed back into the position model so
    bisection loops do not rebuild it on every sample.
    """

    lat: float
    lng: float
    ecef: tuple[float, float, float]  # km
    sin_lat: float
    cos_lat: float
    sin_lng: float
    cos_lng: float


@dataclass(frozen=True)
class SolarPosition:
    """Sun position for one instant and observer. Elevation is NOT refracted."""

    elevation: float  # Degrees above the horizon
    azimuth: float  # Degrees clockwise from north


class EventType(Enum):
    """Kinds of solar events, in their usual order through a day."""

    SOLAR_MIDNIGHT = "Solar Midnight"
    ASTRO_DAWN = "Astro Dawn"
    NAUTICAL_DAWN = "Nautical Dawn"
    CIVIL_DAWN = "Civil Dawn"
    SUNRISE = "Sunrise"
    SOLAR_NOON = "Solar Noon"
    SUNSET = "Sunset"
    CIVIL_DUSK = "Civil Dusk"
    NAUTICAL_DUSK = "Nautical Dusk"
    ASTRO_DUSK = "Astro Dusk"


class LightRegime(IntEnum):
    """Disjoint light regimes, brightest first. Index k of a cumulative band = regimes 0..k."""

    DAY = 0
    CIVIL_TWILIGHT = 1
    NAUTICAL_TWILIGHT = 2
    ASTRO_TWILIGHT = 3
    NIGHT = 4


class Threshold(Enum):
    """Side of an elevation threshold the sun stays on when it never crosses it."""

    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class NoCrossing:
    """Result of a crossing query when the sun never reaches the angle in the window."""

    regime: Threshold


@dataclass(frozen=True)
class SolarEvent:
    """A single solar event. Series keep these sorted by time."""

    time: float  # Epoch milliseconds (UTC)
    elevation: float  # Unrefracted elevation (degrees)
    azimuth: float  # Degrees clockwise from north
    event_type: EventType


@dataclass(frozen=True)
class EventSeries:
    """All solar events of one calendar day at one position, ascending by time."""

    lat: float
    lng: float
    zone: str  # IANA zone name ("America/Los_Angeles")
    day: date  # Local calendar date
    start: float  # Epoch ms of the first local instant of the day
    end: float  # Epoch ms of the first local instant of the next day
    events: tuple[SolarEvent, ...]

    def __iter__(self):
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def of_type(self, event_type: EventType) -> tuple[SolarEvent, ...]:
        return tuple(e for e in self.events if e.event_type == event_type)


@dataclass(frozen=True)
class Interval:
    """Half-open span of milliseconds since local midnight."""

    start: float
    end: float

    @property
    def length(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class RegimeIntervals:
    """The five disjoint light-regime interval lists of one day."""

    day: tuple[Interval, ...]
    civil: tuple[Interval, ...]
    nautical: tuple[Interval, ...]
    astronomical: tuple[Interval, ...]
    night: tuple[Interval, ...]

    def by_regime(self, regime: LightRegime) -> tuple[Interval, ...]:
        return (self.day, self.civil, self.nautical, self.astronomical, self.night)[regime]

    def __iter__(self):
        return iter((self.day, self.civil, self.nautical, self.astronomical, self.night))


@dataclass(frozen=True)
class OffsetChange:
    """One row of a time-zone offset lookup table."""

    instant: float  # Epoch ms from which the offset applies
    offset_minutes: float  # UTC offset in minutes (-420 for PDT)
    is_change: bool  # True if the offset changes exactly at this instant


@dataclass(frozen=True)
class SeasonInstants:
    """Equinoxes and solstices of one year, epoch milliseconds (UTC)."""

    year: int
    mar_equinox: float
    jun_solstice: float
    sep_equinox: float
    dec_solstice: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.mar_equinox, self.jun_solstice, self.sep_equinox, self.dec_solstice)


Point = tuple[float, float]
BoundaryPolygon = list[Point]


@dataclass(frozen=True)
class QueryInput:
    """Raw user input. Not yet validated."""

    address: str  # Place name or address ("Santa Barbara, CA")
    when: str  # "YYYY-MM-DD" local calendar date


@dataclass(frozen=True)
class ObserverContext:
    """Result of geocoding + time zone lookup. Input to the engine."""

    lat: float  # Latitude (decimal degrees)
    lng: float  # Longitude (decimal degrees)
    zone: str  # IANA time zone name
    day: date  # Local calendar date
    address_display: str  # Normalized address returned by geocoder (for display)


@dataclass(frozen=True)
class DayReport:
    """Everything computed for one observer and one day."""

    context: ObserverContext
    events: EventSeries
    intervals: RegimeIntervals
    day_length_ms: float
    now: datetime  # Instant the position below refers to
    position: SolarPosition  # Unrefracted position at `now`
    subsolar_point: tuple[float, float]  # (lat, lng) at `now`
    distance_km: float


@dataclass(frozen=True)
class YearChart:
    """The sole input to renderers. Fully computed state for one year."""

    context: ObserverContext
    year: int
    kind: str  # "rise-set" (time of day) or "length" (cumulative lengths)
    days: int  # 365 or 366
    bands: tuple[tuple[BoundaryPolygon, ...], ...]  # Astro, nautical, civil, day (drawn in order)
    noon_lines: tuple[tuple[Point, ...], ...]  # Solar noon traces (empty for "length")
    midnight_lines: tuple[tuple[Point, ...], ...]
    season_days: tuple[float, ...]  # Fractional day-of-year of equinoxes/solstices
