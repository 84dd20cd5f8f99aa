"""Constant data of the position model. Never mutated after import."""

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60_000
MS_PER_DAY = 86_400_000
MINUTES_PER_DAY = 1440

# Julian day of the Unix epoch and of J2000.0
JD_UNIX_EPOCH = 2440587.5
JD_J2000 = 2451545.0
DAYS_PER_CENTURY = 36525.0
SECONDS_PER_CENTURY = 3155760000.0

# WGS84 ellipsoid, kilometres
EARTH_EQUATORIAL_RADIUS_KM = 6378.137
EARTH_FLATTENING = 1 / 298.257223563
EARTH_ECCENTRICITY_SQ = EARTH_FLATTENING * (2 - EARTH_FLATTENING)

SUN_RADIUS_KM = 695700.0
AU_KM = 149598023.0

# Elevation thresholds (degrees, unrefracted)
SUNRISE_ANGLE = -5 / 6
CIVIL_ANGLE = -6.0
NAUTICAL_ANGLE = -12.0
ASTRONOMICAL_ANGLE = -18.0

# Periodic terms of the solar longitude, Bretagnon & Simon,
# "Planetary Programs and Tables from -4000 to +2800".
# Rows are (l, alpha, nu): l in 1e-7 rad, alpha in rad, nu in rad per 10^4 Julian years.
SUN_PERIODIC_TERMS: tuple[tuple[float, float, float], ...] = (
    (403406.0, 4.721964, 1.621043),
    (195207.0, 5.937458, 62830.348067),
    (119433.0, 1.115589, 62830.821524),
    (112392.0, 5.781616, 62829.634302),
    (3891.0, 5.5474, 125660.5691),
    (2819.0, 1.5120, 125660.9845),
    (1721.0, 4.1897, 62832.4766),
    (0.0, 1.163, 0.813),
    (660.0, 5.415, 125659.310),
    (350.0, 4.315, 57533.850),
    (334.0, 4.553, -33.931),
    (314.0, 5.198, 777137.715),
    (268.0, 5.989, 78604.191),
    (242.0, 2.911, 5.412),
    (234.0, 1.423, 39302.098),
    (158.0, 0.061, -34.861),
    (132.0, 2.317, 115067.698),
    (129.0, 3.193, 15774.337),
    (114.0, 2.828, 5296.670),
    (99.0, 0.52, 58849.27),
    (93.0, 4.65, 5296.11),
    (86.0, 4.35, -3980.70),
    (78.0, 2.75, 52237.69),
    (72.0, 4.50, 55076.47),
    (68.0, 3.23, 261.08),
    (64.0, 1.22, 15773.85),
    (46.0, 0.14, 188491.03),
    (38.0, 3.44, -7756.55),
    (37.0, 4.37, 264.89),
    (32.0, 1.14, 117906.27),
    (29.0, 2.84, 55075.75),
    (28.0, 5.96, -7961.39),
    (27.0, 5.09, 188489.81),
    (27.0, 1.72, 2132.19),
    (25.0, 2.56, 109771.03),
    (24.0, 1.92, 54868.56),
    (21.0, 0.09, 25443.93),
    (21.0, 5.98, -55731.43),
    (20.0, 4.03, 60697.74),
    (18.0, 4.47, 2132.79),
    (17.0, 0.79, 109771.63),
    (14.0, 4.24, -7752.82),
    (13.0, 2.01, 188491.91),
    (13.0, 2.65, 207.81),
    (13.0, 4.98, 29424.63),
    (12.0, 0.93, -7.99),
    (10.0, 2.21, 46941.14),
    (10.0, 3.59, -68.29),
    (10.0, 1.50, 21463.25),
    (10.0, 2.55, 157208.40),
)
