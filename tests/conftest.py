import math
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from astro_engine import ephemeris  # noqa: E402
from astro_engine.ephemeris import MoonIllumination, MoonPosition, SunPosition  # noqa: E402
from astro_engine.models import SunEvent  # noqa: E402

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class LinearMoonProvider:
    """Phase grows linearly from EPOCH: one cycle every ``period`` days."""

    def __init__(self, period=28.0, offset=0.0, distance_km=384400.0):
        self.period = period
        self.offset = offset
        self.distance_km = distance_km
        self.calls = 0

    def moon_illumination(self, instant):
        self.calls += 1
        days = (instant - EPOCH).total_seconds() / 86400
        phase = ((days - self.offset) / self.period) % 1.0
        return MoonIllumination(fraction=(1 - math.cos(2 * math.pi * phase)) / 2, phase=phase)

    def moon_position(self, instant, latitude, longitude):
        return MoonPosition(azimuth=0.0, altitude=0.0, distance_km=self.distance_km)

    def sun_position(self, instant, latitude, longitude):
        return SunPosition(azimuth=math.pi, altitude=math.radians(30))

    def sun_events(self, instant, latitude, longitude):
        return {event: None for event in SunEvent}


class ConstantMoonProvider(LinearMoonProvider):
    def __init__(self, phase):
        super().__init__()
        self.phase = phase

    def moon_illumination(self, instant):
        self.calls += 1
        return MoonIllumination(fraction=0.5, phase=self.phase)


class FixedSunProvider:
    """Sunrise 06:00Z, solar noon 12:00Z and sunset 18:00Z every day.

    ``missing`` events are always None; ``only_on`` limits every event to
    the given dates; ``shift`` moves every event by that many hours, so a
    day's sunset can land after the next UTC midnight as it does west of
    Greenwich.
    """

    def __init__(self, missing=(), only_on=None, shift=0.0):
        self.shift = shift
        self.missing = set(missing)
        self.only_on = set(only_on) if only_on is not None else None
        self.days = []

    def sun_events(self, instant, latitude, longitude):
        day = instant.date()
        self.days.append(day)
        midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
        hours = {
            SunEvent.SUNRISE: 6,
            SunEvent.SOLAR_NOON: 12,
            SunEvent.SUNSET: 18,
            SunEvent.DAWN: 5.5,
            SunEvent.DUSK: 18.5,
        }
        events = {}
        for event in SunEvent:
            hour = hours.get(event)
            if (
                hour is None
                or event in self.missing
                or (self.only_on is not None and day not in self.only_on)
            ):
                events[event] = None
            else:
                events[event] = midnight + timedelta(hours=hour + self.shift)
        return events

    def moon_illumination(self, instant):
        return MoonIllumination(fraction=0.0, phase=0.0)

    def moon_position(self, instant, latitude, longitude):
        return MoonPosition(azimuth=0.0, altitude=0.0, distance_km=384400.0)

    def sun_position(self, instant, latitude, longitude):
        return SunPosition(azimuth=math.pi, altitude=math.radians(30))


@pytest.fixture
def linear_moon():
    return LinearMoonProvider


@pytest.fixture
def constant_moon():
    return ConstantMoonProvider


@pytest.fixture
def fixed_sun():
    return FixedSunProvider


@pytest.fixture
def real_provider():
    return ephemeris.PyEphemProvider()


@pytest.fixture
def use_default_provider(monkeypatch):
    """Swap the process-wide default provider for the duration of a test."""

    def install(provider):
        monkeypatch.setattr(ephemeris, "_default_provider", provider)
        return provider

    return install
