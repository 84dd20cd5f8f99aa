"""Exception types raised on contract violations. Degenerate days are never errors."""


class SolarDayError(Exception):
    """Base class for all solarday errors."""


class CoordinateError(SolarDayError, ValueError):
    """Latitude outside (-90, 90) or longitude outside [-180, 180]."""


class WindowError(SolarDayError, ValueError):
    """Time window whose end is not after its start."""


class LookupTableError(SolarDayError, LookupError):
    """An offset or seasons table does not cover the requested instant or year."""
