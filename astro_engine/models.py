"""Value types shared by the samplers, the searches and the two surfaces."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from astro_engine.errors import InvalidLocation, InvalidParameter


class MoonPhase(str, Enum):
    NEW = "New"
    WAXING_CRESCENT = "Waxing Crescent"
    FIRST_QUARTER = "First Quarter"
    WAXING_GIBBOUS = "Waxing Gibbous"
    FULL = "Full"
    WANING_GIBBOUS = "Waning Gibbous"
    LAST_QUARTER = "Last Quarter"
    WANING_CRESCENT = "Waning Crescent"

    @classmethod
    def parse(cls, label: str | MoonPhase) -> MoonPhase:
        """Case-insensitive lookup; "New Moon" and "Full Moon" are accepted too."""
        if isinstance(label, cls):
            return label
        key = " ".join(str(label).replace("_", " ").split()).lower()
        if key.endswith(" moon"):
            key = key[: -len(" moon")]
        for member in cls:
            if member.value.lower() == key:
                return member
        raise InvalidParameter(
            f"Unknown moon phase '{label}'. Allowed: {[m.value for m in cls]}"
        )

    @property
    def target(self) -> float | None:
        """Canonical phase value for the four searchable phases, else None."""
        return SEARCH_TARGETS.get(self)


SEARCH_TARGETS: dict[MoonPhase, float] = {
    MoonPhase.NEW: 0.0,
    MoonPhase.FIRST_QUARTER: 0.25,
    MoonPhase.FULL: 0.5,
    MoonPhase.LAST_QUARTER: 0.75,
}


class SunEvent(str, Enum):
    SUNRISE = "sunrise"
    SUNSET = "sunset"
    SOLAR_NOON = "solar_noon"
    DAWN = "dawn"
    DUSK = "dusk"
    NIGHT_START = "night_start"
    NIGHT_END = "night_end"
    GOLDEN_HOUR_START = "golden_hour_start"
    GOLDEN_HOUR_END = "golden_hour_end"
    NAUTICAL_DAWN = "nautical_dawn"
    NAUTICAL_DUSK = "nautical_dusk"
    ASTRONOMICAL_DAWN = "astronomical_dawn"
    ASTRONOMICAL_DUSK = "astronomical_dusk"

    @classmethod
    def parse(cls, label: str | SunEvent) -> SunEvent:
        """Accepts snake_case, camelCase and the ``night``/``goldenHour`` aliases."""
        if isinstance(label, cls):
            return label
        key = str(label).replace("_", "").replace(" ", "").lower()
        key = _SUN_EVENT_ALIASES.get(key, key)
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        raise InvalidParameter(
            f"Unknown sun event '{label}'. Allowed: {[e.value for e in cls]}"
        )


_SUN_EVENT_ALIASES = {
    "night": "nightstart",
    "goldenhour": "goldenhourstart",
}


@dataclass(frozen=True)
class Location:
    latitude: float = 0.0
    longitude: float = 0.0

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise InvalidLocation(f"Latitude {self.latitude} out of bounds [-90, 90].")
        if not -180 <= self.longitude <= 180:
            raise InvalidLocation(f"Longitude {self.longitude} out of bounds [-180, 180].")


@dataclass(frozen=True)
class MoonPhaseSample:
    date: str  # ISO calendar date (UTC)
    phase: float  # position in the synodic cycle, [0, 1)
    phase_name: MoonPhase
    illumination: float  # illuminated fraction, [0, 1]
    age: float  # days since new moon
    distance_km: float
    apparent_diameter_deg: float
    is_waxing: bool

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["phase_name"] = self.phase_name.value
        return data


@dataclass(frozen=True)
class SunTimesSample:
    """One day of sun events; an event is None when it does not occur."""

    date: str
    sunrise: str | None
    sunset: str | None
    solar_noon: str | None
    dawn: str | None
    dusk: str | None
    night_start: str | None
    night_end: str | None
    golden_hour_start: str | None
    golden_hour_end: str | None
    nautical_dawn: str | None
    nautical_dusk: str | None
    astronomical_dawn: str | None
    astronomical_dusk: str | None
    day_length_minutes: float
    timezone: str

    def event(self, event: SunEvent) -> str | None:
        return getattr(self, event.value)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SunPositionSample:
    date: str
    time: str  # HH:MM:SS, UTC
    azimuth_deg: float  # from north through east
    altitude_deg: float
    declination_deg: float
    right_ascension_h: float  # [0, 24)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PhaseOccurrence:
    date: str
    phase: MoonPhase

    def as_dict(self) -> dict[str, Any]:
        return {"date": self.date, "phase": self.phase.value}


@dataclass(frozen=True)
class SunEventOccurrence:
    date: str  # calendar date in the output timezone
    time: str  # formatted instant
    event: SunEvent
    instant: datetime  # aware, UTC

    def as_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "time": self.time,
            "event": self.event.value,
            "utc": self.instant.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
