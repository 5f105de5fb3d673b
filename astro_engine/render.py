"""Plain-text projections used when a caller asks for ``format=text``."""

from __future__ import annotations

from typing import Iterable

from astro_engine.models import (
    Location,
    MoonPhaseSample,
    PhaseOccurrence,
    SunEventOccurrence,
    SunPositionSample,
    SunTimesSample,
)


def _na(value: str | None) -> str:
    return value if value else "N/A"


def _day_length(minutes: float) -> str:
    total = int(round(minutes))
    return f"{total // 60}h {total % 60}m"


def moon_phase(sample: MoonPhaseSample) -> str:
    return (
        f"Moon phase for {sample.date}: {sample.phase_name.value} "
        f"({sample.illumination * 100:.1f}% illuminated)"
    )


def moon_phases(samples: Iterable[MoonPhaseSample]) -> str:
    return "\n".join(
        f"{s.date}: {s.phase_name.value} ({s.illumination * 100:.1f}% illuminated)" for s in samples
    )


def next_phases(occurrences: Iterable[PhaseOccurrence]) -> str:
    return "\n".join(f"Next {o.phase.value}: {o.date}" for o in occurrences)


def sun_times(sample: SunTimesSample, location: Location) -> str:
    lines = [
        f"Sun times for {sample.date} at latitude {location.latitude}, longitude {location.longitude}:",
        f"Sunrise: {_na(sample.sunrise)}",
        f"Sunset: {_na(sample.sunset)}",
        f"Day length: {_day_length(sample.day_length_minutes)}",
        f"Solar noon: {_na(sample.solar_noon)}",
        f"Dawn: {_na(sample.dawn)}",
        f"Dusk: {_na(sample.dusk)}",
    ]
    return "\n".join(lines) + "\n"


def sun_times_range(samples: list[SunTimesSample], location: Location) -> str:
    if not samples:
        return ""
    text = (
        f"Sun times from {samples[0].date} to {samples[-1].date} at latitude "
        f"{location.latitude}, longitude {location.longitude}:\n\n"
    )
    for s in samples:
        text += f"Date: {s.date}\n"
        text += f"Sunrise: {_na(s.sunrise)}\n"
        text += f"Sunset: {_na(s.sunset)}\n"
        text += f"Day length: {_day_length(s.day_length_minutes)}\n\n"
    return text


def sun_position(sample: SunPositionSample, location: Location) -> str:
    return (
        f"Sun position for {sample.date} {sample.time} at latitude {location.latitude}, "
        f"longitude {location.longitude}:\n"
        f"Azimuth: {sample.azimuth_deg:.2f}°\n"
        f"Altitude: {sample.altitude_deg:.2f}°\n"
        f"Declination: {sample.declination_deg:.2f}°\n"
        f"Right Ascension: {sample.right_ascension_h:.2f}h\n"
    )


def next_events(occurrences: Iterable[SunEventOccurrence]) -> str:
    return "\n".join(f"Next {o.event.value}: {o.date} at {o.time}" for o in occurrences)
