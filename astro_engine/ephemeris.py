"""Ephemeris provider interface and its PyEphem-backed implementation.

The engine only needs four low-precision quantities: moon illumination,
moon and sun horizontal positions, and the day's sun events. Anything that
implements :class:`EphemerisProvider` can be passed to the samplers and
searches in place of the default provider.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date as date_cls, datetime, timedelta, timezone
from typing import Mapping, Optional, Protocol

import ephem

from astro_engine.models import SunEvent

KM_PER_AU = 149_597_870.7
TWO_PI = 2 * math.pi


@dataclass(frozen=True)
class MoonIllumination:
    fraction: float  # illuminated fraction, [0, 1]
    phase: float  # synodic position, [0, 1)


@dataclass(frozen=True)
class MoonPosition:
    azimuth: float  # radians from north through east
    altitude: float  # radians
    distance_km: float


@dataclass(frozen=True)
class SunPosition:
    azimuth: float
    altitude: float


SunEventMap = Mapping[SunEvent, Optional[datetime]]


class EphemerisProvider(Protocol):
    def moon_illumination(self, instant: datetime) -> MoonIllumination: ...

    def moon_position(self, instant: datetime, latitude: float, longitude: float) -> MoonPosition: ...

    def sun_position(self, instant: datetime, latitude: float, longitude: float) -> SunPosition: ...

    def sun_events(self, instant: datetime, latitude: float, longitude: float) -> SunEventMap: ...


# (horizon, use_center, rising event, setting event)
_HORIZONS = (
    ("-0:34", False, SunEvent.SUNRISE, SunEvent.SUNSET),
    ("-6", True, SunEvent.DAWN, SunEvent.DUSK),
    ("-12", True, SunEvent.NAUTICAL_DAWN, SunEvent.NAUTICAL_DUSK),
    ("-18", True, SunEvent.NIGHT_END, SunEvent.NIGHT_START),
    ("6", True, SunEvent.GOLDEN_HOUR_END, SunEvent.GOLDEN_HOUR_START),
)


def _to_ephem(instant: datetime) -> ephem.Date:
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return ephem.Date(instant)


def _from_ephem(value: float) -> datetime:
    return ephem.Date(value).datetime().replace(tzinfo=timezone.utc)


def _observer(instant: datetime, latitude: float, longitude: float) -> ephem.Observer:
    obs = ephem.Observer()
    # floats are radians for ephem angles
    obs.lat = math.radians(latitude)
    obs.lon = math.radians(longitude)
    obs.elevation = 0
    obs.pressure = 0  # no refraction
    obs.date = _to_ephem(instant)
    return obs


def solar_day_start(day: date_cls, longitude: float) -> datetime:
    """Local mean solar midnight that opens ``day`` at ``longitude``."""
    midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return midnight - timedelta(hours=longitude / 15)


class PyEphemProvider:
    """Geocentric moon phase and topocentric sun/moon positions from PyEphem."""

    def moon_illumination(self, instant: datetime) -> MoonIllumination:
        when = _to_ephem(instant)
        moon = ephem.Moon(when)
        sun = ephem.Sun(when)
        elongation = float(ephem.Ecliptic(moon).lon) - float(ephem.Ecliptic(sun).lon)
        phase = (elongation / TWO_PI) % 1.0
        if phase >= 1.0:
            phase = 0.0
        fraction = min(1.0, max(0.0, float(moon.moon_phase)))
        return MoonIllumination(fraction=fraction, phase=phase)

    def moon_position(self, instant: datetime, latitude: float, longitude: float) -> MoonPosition:
        obs = _observer(instant, latitude, longitude)
        moon = ephem.Moon(obs)
        return MoonPosition(
            azimuth=float(moon.az),
            altitude=float(moon.alt),
            distance_km=float(moon.earth_distance) * KM_PER_AU,
        )

    def sun_position(self, instant: datetime, latitude: float, longitude: float) -> SunPosition:
        obs = _observer(instant, latitude, longitude)
        sun = ephem.Sun(obs)
        return SunPosition(azimuth=float(sun.az), altitude=float(sun.alt))

    def sun_events(self, instant: datetime, latitude: float, longitude: float) -> dict[SunEvent, datetime | None]:
        """Sun events of the UTC calendar day of ``instant``.

        Events are searched from local mean solar midnight and must fall in
        the following 24 hours; anything else (including circumpolar
        conditions) is reported as None.
        """
        start = solar_day_start(instant.astimezone(timezone.utc).date(), longitude)
        end = start + timedelta(days=1)
        obs = _observer(start, latitude, longitude)
        begin = _to_ephem(start)

        def within(found: float | None) -> datetime | None:
            if found is None:
                return None
            moment = _from_ephem(found)
            return moment if start <= moment < end else None

        events: dict[SunEvent, datetime | None] = {}
        for horizon, use_center, rising_event, setting_event in _HORIZONS:
            obs.horizon = horizon
            events[rising_event] = within(self._crossing(obs.next_rising, begin, use_center))
            events[setting_event] = within(self._crossing(obs.next_setting, begin, use_center))
        obs.horizon = "0"
        events[SunEvent.SOLAR_NOON] = within(obs.next_transit(ephem.Sun(), start=begin))
        events[SunEvent.ASTRONOMICAL_DAWN] = events[SunEvent.NIGHT_END]
        events[SunEvent.ASTRONOMICAL_DUSK] = events[SunEvent.NIGHT_START]
        return events

    @staticmethod
    def _crossing(search, begin: ephem.Date, use_center: bool) -> float | None:
        try:
            return search(ephem.Sun(), start=begin, use_center=use_center)
        except ephem.CircumpolarError:
            return None


_default_provider: EphemerisProvider | None = None


def default_provider() -> EphemerisProvider:
    global _default_provider
    if _default_provider is None:
        _default_provider = PyEphemProvider()
    return _default_provider
