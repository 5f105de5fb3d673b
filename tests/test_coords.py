import math
from datetime import datetime, timedelta, timezone

import pytest

from astro_engine.coords import (
    greenwich_sidereal_hours,
    horizontal_to_equatorial,
    julian_day,
    local_sidereal_time,
)


@pytest.mark.parametrize(
    "when, expected",
    [
        (datetime(2000, 1, 1, 12, tzinfo=timezone.utc), 2451545.0),
        (datetime(2024, 1, 1, tzinfo=timezone.utc), 2460310.5),
        (datetime(2024, 1, 1, 18, tzinfo=timezone.utc), 2460311.25),
        (datetime(1999, 12, 31, 0, 0, 0, 500_000, tzinfo=timezone.utc), 2451543.5 + 0.5 / 86400),
    ],
)
def test_julian_day(when, expected):
    assert julian_day(when) == pytest.approx(expected, abs=1e-8)


def test_julian_day_converts_to_utc():
    plus_two = timezone(timedelta(hours=2))
    local = datetime(2000, 1, 1, 14, tzinfo=plus_two)
    assert julian_day(local) == pytest.approx(2451545.0)


def test_sidereal_time_at_j2000():
    j2000 = datetime(2000, 1, 1, 12, tzinfo=timezone.utc)
    assert greenwich_sidereal_hours(j2000) == pytest.approx(18.697374558)
    assert local_sidereal_time(j2000, 0.0) == pytest.approx(18.697374558 * math.pi / 12)
    assert local_sidereal_time(j2000, 15.0) == pytest.approx(19.697374558 * math.pi / 12)
    # wraps into [0, 24) hours
    assert local_sidereal_time(j2000, 90.0) == pytest.approx((24.697374558 - 24) * math.pi / 12)
    assert local_sidereal_time(j2000, -180.0) == pytest.approx(6.697374558 * math.pi / 12)


def _to_horizontal(ra_h, dec_deg, lst_rad, lat_deg):
    """Textbook equatorial -> horizontal, azimuth from north through east."""
    ha = lst_rad - ra_h * math.pi / 12
    dec = math.radians(dec_deg)
    lat = math.radians(lat_deg)
    alt = math.asin(math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec) * math.cos(ha))
    az = math.atan2(
        -math.cos(dec) * math.sin(ha),
        math.sin(dec) * math.cos(lat) - math.cos(dec) * math.sin(lat) * math.cos(ha),
    )
    return az % (2 * math.pi), alt


@pytest.mark.parametrize(
    "ra_h, dec_deg, lat, lon",
    [
        (5.0, 20.0, 40.0, -74.0),
        (18.5, -30.0, -33.9, 151.2),
        (12.25, 60.0, 52.0, 13.4),
        (0.5, -5.0, 0.0, 0.0),
        (23.9, 10.0, 64.1, -21.9),
    ],
)
def test_horizontal_to_equatorial_inverts_textbook_transform(ra_h, dec_deg, lat, lon):
    when = datetime(2024, 5, 17, 21, 30, tzinfo=timezone.utc)
    az, alt = _to_horizontal(ra_h, dec_deg, local_sidereal_time(when, lon), lat)

    ra, dec = horizontal_to_equatorial(when, az, alt, lat, lon)

    assert dec == pytest.approx(dec_deg, abs=1e-6)
    diff = abs(ra - ra_h) % 24
    assert min(diff, 24 - diff) < 1e-6
    assert 0.0 <= ra < 24.0
