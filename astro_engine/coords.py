"""Julian Day, sidereal time and horizontal -> equatorial conversion."""

from __future__ import annotations

import math
from datetime import datetime, timezone

J2000 = 2451545.0
HOURS_PER_DAY = 24.0


def julian_day(instant: datetime) -> float:
    """Julian Day of a UTC instant (naive values are taken as UTC)."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    y, m, d = instant.year, instant.month, instant.day
    jd = (
        367 * y
        - math.floor(7 * (y + math.floor((m + 9) / 12)) / 4)
        - math.floor(3 * (math.floor((y + (m - 9) / 7) / 100) + 1) / 4)
        + math.floor(275 * m / 9)
        + d
        + 1721028.5
    )
    hours = (
        instant.hour
        + instant.minute / 60
        + instant.second / 3600
        + (instant.microsecond // 1000) / 3_600_000
    )
    return jd + hours / HOURS_PER_DAY


def greenwich_sidereal_hours(instant: datetime) -> float:
    return (18.697374558 + 24.06570982441908 * (julian_day(instant) - J2000)) % HOURS_PER_DAY


def local_sidereal_time(instant: datetime, longitude: float) -> float:
    """Local sidereal time in radians."""
    lst = (greenwich_sidereal_hours(instant) + longitude / 15) % HOURS_PER_DAY
    if lst < 0:
        lst += HOURS_PER_DAY
    return lst * math.pi / 12


def horizontal_to_equatorial(
    instant: datetime,
    azimuth: float,
    altitude: float,
    latitude: float,
    longitude: float,
) -> tuple[float, float]:
    """Convert azimuth/altitude (radians, azimuth from north through east).

    Returns ``(right_ascension_hours, declination_degrees)`` with right
    ascension normalised to [0, 24).
    """
    lat = math.radians(latitude)
    sin_dec = math.sin(altitude) * math.sin(lat) + math.cos(altitude) * math.cos(lat) * math.cos(azimuth)
    dec = math.asin(max(-1.0, min(1.0, sin_dec)))

    denominator = math.cos(lat) * math.cos(dec)
    if denominator == 0.0:
        # pole or body at the celestial pole: hour angle is undefined
        cos_h = 1.0
    else:
        cos_h = (math.sin(altitude) - math.sin(lat) * sin_dec) / denominator
    hour_angle = math.acos(max(-1.0, min(1.0, cos_h)))
    # east of the meridian the body has not culminated yet
    if 0 < azimuth < math.pi:
        hour_angle = 2 * math.pi - hour_angle

    lst = local_sidereal_time(instant, longitude)
    ra = ((lst - hour_angle) * 12 / math.pi) % HOURS_PER_DAY
    if ra < 0:
        ra += HOURS_PER_DAY
    if ra >= HOURS_PER_DAY:
        ra = 0.0
    return ra, math.degrees(dec)
