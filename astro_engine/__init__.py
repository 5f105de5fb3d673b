"""Moon-phase and sun event/position computations on top of a low-precision ephemeris."""

from astro_engine.errors import (
    AstroError,
    EventNotFound,
    InvalidDateFormat,
    InvalidLocation,
    InvalidParameter,
    InvalidRange,
    InvalidTimeFormat,
    PhaseNotFound,
)
from astro_engine.models import (
    Location,
    MoonPhase,
    MoonPhaseSample,
    PhaseOccurrence,
    SunEvent,
    SunEventOccurrence,
    SunPositionSample,
    SunTimesSample,
)

__version__ = "0.1.0"

__all__ = [
    "AstroError",
    "EventNotFound",
    "InvalidDateFormat",
    "InvalidLocation",
    "InvalidParameter",
    "InvalidRange",
    "InvalidTimeFormat",
    "Location",
    "MoonPhase",
    "MoonPhaseSample",
    "PhaseNotFound",
    "PhaseOccurrence",
    "SunEvent",
    "SunEventOccurrence",
    "SunPositionSample",
    "SunTimesSample",
]
