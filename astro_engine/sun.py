"""Sun event times, sun position and next-event search."""

from __future__ import annotations

import logging
import math
from datetime import date as date_cls, datetime, timedelta, tzinfo

from astro_engine.config import cfg
from astro_engine.coords import horizontal_to_equatorial
from astro_engine.ephemeris import EphemerisProvider, SunEventMap, default_provider
from astro_engine.errors import EventNotFound, InvalidParameter
from astro_engine.models import (
    Location,
    SunEvent,
    SunEventOccurrence,
    SunPositionSample,
    SunTimesSample,
)
from astro_engine.timeutil import (
    at_clock,
    date_span,
    day_start,
    format_instant,
    iter_days,
    local_date,
    parse_clock,
    parse_instant,
    resolve_timezone,
    timezone_label,
)

logger = logging.getLogger(__name__)


def day_length_minutes(events: SunEventMap) -> float:
    sunrise = events.get(SunEvent.SUNRISE)
    sunset = events.get(SunEvent.SUNSET)
    if sunrise is None or sunset is None:
        return 0.0
    return max(0.0, (sunset - sunrise).total_seconds() / 60)


def _times_sample(day: date_cls, events: SunEventMap, tz: tzinfo | None) -> SunTimesSample:
    formatted = {event.value: format_instant(events.get(event), tz) for event in SunEvent}
    return SunTimesSample(
        date=day.isoformat(),
        day_length_minutes=day_length_minutes(events),
        timezone=timezone_label(tz),
        **formatted,
    )


def sun_times(
    location: Location,
    date: str | datetime | date_cls | None = None,
    timezone: str | None = None,
    *,
    provider: EphemerisProvider | None = None,
) -> SunTimesSample:
    """Sun events for one day; events that do not happen are None."""
    provider = provider or default_provider()
    day = parse_instant(date).date()
    tz = resolve_timezone(timezone)
    events = provider.sun_events(day_start(day), location.latitude, location.longitude)
    return _times_sample(day, events, tz)


def sun_times_range(
    start_date: str | date_cls,
    end_date: str | date_cls,
    location: Location,
    timezone: str | None = None,
    *,
    provider: EphemerisProvider | None = None,
) -> list[SunTimesSample]:
    start_day, end_day = date_span(start_date, end_date)
    provider = provider or default_provider()
    # resolve once so an invalid timezone warns once per range
    tz = resolve_timezone(timezone)
    samples = []
    for day in iter_days(start_day, end_day):
        events = provider.sun_events(day_start(day), location.latitude, location.longitude)
        samples.append(_times_sample(day, events, tz))
    return samples


def position(
    location: Location,
    date: str | datetime | date_cls | None = None,
    time: str | None = None,
    *,
    provider: EphemerisProvider | None = None,
) -> SunPositionSample:
    """Sun azimuth/altitude plus right ascension and declination.

    ``time`` (UTC, HH:MM:SS) replaces the time-of-day of ``date``.
    """
    provider = provider or default_provider()
    instant = parse_instant(date)
    if time is not None:
        instant = at_clock(instant, parse_clock(time))

    horizontal = provider.sun_position(instant, location.latitude, location.longitude)
    ra_hours, dec_deg = horizontal_to_equatorial(
        instant,
        horizontal.azimuth,
        horizontal.altitude,
        location.latitude,
        location.longitude,
    )
    return SunPositionSample(
        date=instant.date().isoformat(),
        time=instant.strftime("%H:%M:%S"),
        azimuth_deg=math.degrees(horizontal.azimuth),
        altitude_deg=math.degrees(horizontal.altitude),
        declination_deg=dec_deg,
        right_ascension_h=ra_hours,
    )


def next_occurrences(
    event: str | SunEvent,
    location: Location,
    start_date: str | datetime | date_cls | None = None,
    count: int = 1,
    timezone: str | None = None,
    *,
    provider: EphemerisProvider | None = None,
) -> list[SunEventOccurrence]:
    """The next ``count`` instants of ``event`` strictly after ``start_date``.

    Same scan bounds as the moon-phase search: :class:`EventNotFound` when
    the first horizon passes without a hit, partial results once
    ``horizon * count`` days have been scanned.

    The scan opens one day before the start date: west of Greenwich that
    day's solar window runs past midnight UTC and may hold the next event.
    """
    sun_event = SunEvent.parse(event)
    if count < 1:
        raise InvalidParameter(f"count must be >= 1, got {count}.")
    provider = provider or default_provider()
    start = parse_instant(start_date)
    tz = resolve_timezone(timezone)
    horizon = cfg.SEARCH_HORIZON_DAYS
    first_day = start.date() - timedelta(days=1)

    results: list[SunEventOccurrence] = []
    for step in range(horizon * count):
        day = first_day + timedelta(days=step)
        events = provider.sun_events(day_start(day), location.latitude, location.longitude)
        instant = events.get(sun_event)
        if instant is not None and instant > start:
            results.append(
                SunEventOccurrence(
                    date=local_date(instant, tz),
                    time=format_instant(instant, tz),
                    event=sun_event,
                    instant=instant,
                )
            )
            if len(results) == count:
                return results
        if not results and step + 1 >= horizon:
            raise EventNotFound(
                f"Could not find {sun_event.value} within {horizon} days of {start.date().isoformat()}."
            )

    logger.warning(
        "Search for %s stopped after %d days with %d of %d occurrences.",
        sun_event.value,
        horizon * count,
        len(results),
        count,
    )
    return results
