"""Moon phase classification, daily sampling and next-phase search."""

from __future__ import annotations

import logging
from datetime import date as date_cls, datetime, timedelta

from astro_engine.config import cfg
from astro_engine.ephemeris import EphemerisProvider, default_provider
from astro_engine.errors import InvalidParameter, PhaseNotFound
from astro_engine.models import Location, MoonPhase, MoonPhaseSample, PhaseOccurrence
from astro_engine.timeutil import date_span, day_start, iter_days, parse_instant

logger = logging.getLogger(__name__)

SYNODIC_MONTH_DAYS = 29.53
MEAN_DISTANCE_KM = 384400.0
MEAN_DIAMETER_DEG = 0.5181

# upper bounds of the phase bands; the last band wraps back to New
_PHASE_BANDS = (
    (0.0625, MoonPhase.NEW),
    (0.1875, MoonPhase.WAXING_CRESCENT),
    (0.3125, MoonPhase.FIRST_QUARTER),
    (0.4375, MoonPhase.WAXING_GIBBOUS),
    (0.5625, MoonPhase.FULL),
    (0.6875, MoonPhase.WANING_GIBBOUS),
    (0.8125, MoonPhase.LAST_QUARTER),
    (0.9375, MoonPhase.WANING_CRESCENT),
)

# a day counts as the phase day when the distance shrank below NEAR_DIFF,
# or is below CLOSE_DIFF whatever the trend
NEAR_DIFF = 0.01
CLOSE_DIFF = 0.005


def normalize_phase(phase: float) -> float:
    phase = phase % 1.0
    return 0.0 if phase >= 1.0 else phase


def phase_name(phase: float) -> MoonPhase:
    """Band lookup; a value on a band edge belongs to the upper band."""
    value = normalize_phase(phase)
    for upper, name in _PHASE_BANDS:
        if value < upper:
            return name
    return MoonPhase.NEW


def phase_distance(phase: float, target: float) -> float:
    """Distance on the synodic circle, so 0.99 is close to New (0.0)."""
    d = abs(normalize_phase(phase) - target) % 1.0
    return min(d, 1.0 - d)


def classify(
    date: str | datetime | date_cls | None = None,
    location: Location | None = None,
    *,
    provider: EphemerisProvider | None = None,
) -> MoonPhaseSample:
    """Label the moon at ``date`` (default: now).

    The location only feeds the distance, and hence the apparent diameter;
    phase and illumination are geocentric.
    """
    provider = provider or default_provider()
    location = location or Location()
    instant = parse_instant(date)

    illumination = provider.moon_illumination(instant)
    position = provider.moon_position(instant, location.latitude, location.longitude)

    phase = normalize_phase(illumination.phase)
    return MoonPhaseSample(
        date=instant.date().isoformat(),
        phase=phase,
        phase_name=phase_name(phase),
        illumination=illumination.fraction,
        age=phase * SYNODIC_MONTH_DAYS,
        distance_km=position.distance_km,
        apparent_diameter_deg=MEAN_DIAMETER_DEG * (MEAN_DISTANCE_KM / position.distance_km),
        is_waxing=phase < 0.5,
    )


def sample_range(
    start_date: str | date_cls,
    end_date: str | date_cls,
    location: Location | None = None,
    *,
    provider: EphemerisProvider | None = None,
) -> list[MoonPhaseSample]:
    """One sample per day at 00:00 UTC, both ends inclusive."""
    start_day, end_day = date_span(start_date, end_date)
    provider = provider or default_provider()
    return [
        classify(day_start(day), location, provider=provider)
        for day in iter_days(start_day, end_day)
    ]


def _search_target(target: str | MoonPhase) -> tuple[MoonPhase, float]:
    phase = MoonPhase.parse(target)
    value = phase.target
    if value is None:
        raise InvalidParameter(
            f"'{phase.value}' cannot be searched. Allowed: New, First Quarter, Full, Last Quarter."
        )
    return phase, value


def next_occurrences(
    target: str | MoonPhase,
    start_date: str | datetime | date_cls | None = None,
    count: int = 1,
    *,
    provider: EphemerisProvider | None = None,
) -> list[PhaseOccurrence]:
    """Dates of the next ``count`` occurrences of a principal phase.

    Candidates start the day after ``start_date``. The scan gives up with
    :class:`PhaseNotFound` when the first horizon passes without a hit, and
    returns what it has once ``horizon * count`` days have been scanned.

    Sampling is one day apart while the phase moves about 0.034 per day, so
    a lunation whose phase day falls between two samples misses the
    NEAR_DIFF/CLOSE_DIFF window and is skipped (roughly four in ten). Gaps
    of two cycles between consecutive results are expected.
    """
    phase, value = _search_target(target)
    if count < 1:
        raise InvalidParameter(f"count must be >= 1, got {count}.")
    provider = provider or default_provider()
    start = parse_instant(start_date)
    horizon = cfg.SEARCH_HORIZON_DAYS

    results: list[PhaseOccurrence] = []
    prev_diff = phase_distance(provider.moon_illumination(start).phase, value)
    for step in range(1, horizon * count + 1):
        candidate = start + timedelta(days=step)
        current_diff = phase_distance(provider.moon_illumination(candidate).phase, value)
        if (prev_diff > current_diff and current_diff < NEAR_DIFF) or current_diff < CLOSE_DIFF:
            logger.debug("%s hit on %s (diff=%.5f)", phase.value, candidate.date(), current_diff)
            results.append(PhaseOccurrence(date=candidate.date().isoformat(), phase=phase))
            if len(results) == count:
                return results
        if not results and step >= horizon:
            raise PhaseNotFound(
                f"Could not find {phase.value} within {horizon} days of {start.date().isoformat()}."
            )
        prev_diff = current_diff

    logger.warning(
        "Search for %s stopped after %d days with %d of %d occurrences.",
        phase.value,
        horizon * count,
        len(results),
        count,
    )
    return results
