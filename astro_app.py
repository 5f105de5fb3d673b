# astro_app.py
from datetime import date
from typing import List, Optional, Set

from fastapi import FastAPI, HTTPException, Query
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse, ORJSONResponse, PlainTextResponse
from pydantic import BaseModel

from astro_engine import moon, render, sun
from astro_engine.config import cfg
from astro_engine.errors import AstroError, NotFound
from astro_engine.models import Location
from astro_engine.timeutil import date_span

# =========================
# Helpers
# =========================

def _err(msg: str, code: int = 400):
    raise HTTPException(code, msg)

def _call(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except NotFound as e:
        _err(str(e), 404)
    except AstroError as e:
        _err(str(e), 400)

def _location(lat: float, lon: float) -> Location:
    return _call(Location, lat, lon)

def _check_count(count: int) -> int:
    if count < 1 or count > cfg.MAX_COUNT:
        _err(f"Parameter 'count' must be between 1 and {cfg.MAX_COUNT}.")
    return count

def _check_span(start: str, end: str):
    s, e = _call(date_span, start, end)
    n = (e - s).days + 1
    if n > cfg.MAX_RANGE_DAYS:
        _err(f"Range covers {n} days; limit is {cfg.MAX_RANGE_DAYS}.")

ALLOWED_MODES = {"truncate"}

def _parse_modes(mode: Optional[str]) -> Set[str]:
    if not mode:
        return set()
    items = {m.strip().lower() for m in mode.split(",") if m.strip()}
    bad = [m for m in items if m not in ALLOWED_MODES]
    if bad:
        _err(f"Unsupported mode(s): {','.join(bad)}. Allowed: {','.join(sorted(ALLOWED_MODES))}")
    return items

def _apply_modes(rows: List[dict], modes: Set[str]) -> List[dict]:
    if "truncate" in modes:
        for row in rows:
            for k, v in row.items():
                if isinstance(v, float):
                    row[k] = round(v, 4)
    return rows

ALLOWED_FORMATS = {"json", "text"}

def _check_format(fmt: str) -> str:
    fmt = (fmt or "json").strip().lower()
    if fmt not in ALLOWED_FORMATS:
        _err(f"Unsupported format: {fmt}. Allowed: {','.join(sorted(ALLOWED_FORMATS))}")
    return fmt

# =========================
# FastAPI app & docs
# =========================

app = FastAPI(docs_url=None, default_response_class=ORJSONResponse)

def generate_custom_openapi():
    if app.openapi_schema: return app.openapi_schema
    openapi_schema = get_openapi(
        title="Astro Events API",
        version="0.1.0",
        description=(
            "Moon phase and sun event/position calculations from a low-precision ephemeris.\n\n"
            "* Dates are YYYY-MM-DD (UTC midnight) or ISO-8601 datetimes; times are HH:MM:SS UTC.\n"
            f"* Range endpoints cover at most {cfg.MAX_RANGE_DAYS} days (inclusive); searches return at most {cfg.MAX_COUNT} occurrences.\n"
            "* Event times are ISO-8601 in the requested timezone, or UTC when none (or an invalid one) is given.\n"
            "* format=text returns a plain-text summary instead of JSON.\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema

@app.get("/api/swagger/astro/openapi.json", include_in_schema=False)
async def custom_openapi(): return JSONResponse(generate_custom_openapi())

@app.get("/api/swagger/astro", include_in_schema=False)
async def custom_swagger_ui_html():
    return get_swagger_ui_html(openapi_url="/api/swagger/astro/openapi.json", title="Astro API Docs")

class MoonPhaseRow(BaseModel):
    date: date
    phase: float
    phase_name: str
    illumination: float
    age: float
    distance_km: float
    apparent_diameter_deg: float
    is_waxing: bool

class PhaseOccurrenceRow(BaseModel):
    date: date
    phase: str

class SunTimesRow(BaseModel):
    date: date
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    solar_noon: Optional[str] = None
    dawn: Optional[str] = None
    dusk: Optional[str] = None
    night_start: Optional[str] = None
    night_end: Optional[str] = None
    golden_hour_start: Optional[str] = None
    golden_hour_end: Optional[str] = None
    nautical_dawn: Optional[str] = None
    nautical_dusk: Optional[str] = None
    astronomical_dawn: Optional[str] = None
    astronomical_dusk: Optional[str] = None
    day_length_minutes: float
    timezone: str

class SunPositionRow(BaseModel):
    date: date
    time: str
    azimuth_deg: float
    altitude_deg: float
    declination_deg: float
    right_ascension_h: float

class SunEventRow(BaseModel):
    date: date
    time: str
    event: str
    utc: str

# =========================
# Endpoints
# =========================

@app.get("/api/astro/moon/phase", response_model=MoonPhaseRow, tags=["Moon"], summary="Moon phase for a date")
async def read_moon_phase(
    date: Optional[str] = Query(None, description="Date YYYY-MM-DD (default: now)"),
    lat: float = Query(0.0, description="Latitude [-90,90] (affects distance/diameter only)"),
    lon: float = Query(0.0, description="Longitude [-180,180]"),
    mode: Optional[str] = Query(None, description="Allowed modes: truncate (round floats to 4 decimals)."),
    format: str = Query("json", description="Response format: json or text (plain-text summary)."),
):
    """
    Phase (0=new, 0.5=full), phase name, illuminated fraction, age in days, distance and apparent diameter.

    #### Usage
    * /api/astro/moon/phase?date=2024-01-11
    * /api/astro/moon/phase?date=2024-01-11&format=text
    """
    modes = _parse_modes(mode)
    fmt = _check_format(format)
    sample = _call(moon.classify, date, _location(lat, lon))
    if fmt == "text":
        return PlainTextResponse(render.moon_phase(sample))
    return ORJSONResponse(_apply_modes([sample.as_dict()], modes)[0])

@app.get("/api/astro/moon/phases", response_model=List[MoonPhaseRow], tags=["Moon"], summary="Daily moon phases for a date range")
async def read_moon_phases(
    start: str = Query(..., description="Start date YYYY-MM-DD (inclusive)"),
    end: str = Query(..., description="End date YYYY-MM-DD (inclusive)"),
    lat: float = Query(0.0, description="Latitude [-90,90]"),
    lon: float = Query(0.0, description="Longitude [-180,180]"),
    mode: Optional[str] = Query(None, description="Allowed modes: truncate."),
    format: str = Query("json", description="Response format: json or text (plain-text summary)."),
):
    modes = _parse_modes(mode)
    fmt = _check_format(format)
    _check_span(start, end)
    samples = _call(moon.sample_range, start, end, _location(lat, lon))
    if fmt == "text":
        return PlainTextResponse(render.moon_phases(samples))
    return ORJSONResponse(_apply_modes([s.as_dict() for s in samples], modes))

@app.get("/api/astro/moon/next", response_model=List[PhaseOccurrenceRow], tags=["Moon"], summary="Next occurrences of a moon phase")
async def read_next_moon_phase(
    phase: str = Query(..., description="New, First Quarter, Full or Last Quarter"),
    date: Optional[str] = Query(None, description="Search start YYYY-MM-DD (default: now)"),
    count: int = Query(1, description="Number of occurrences"),
    format: str = Query("json", description="Response format: json or text (plain-text summary)."),
):
    """
    Daily-step search: a lunation whose phase day falls between two samples can be skipped.
    """
    fmt = _check_format(format)
    _check_count(count)
    found = _call(moon.next_occurrences, phase, date, count)
    if fmt == "text":
        return PlainTextResponse(render.next_phases(found))
    return ORJSONResponse([o.as_dict() for o in found])

@app.get("/api/astro/sun/times", response_model=SunTimesRow, tags=["Sun"], summary="Sun event times for a date")
async def read_sun_times(
    lat: float = Query(..., description="Latitude [-90,90]"),
    lon: float = Query(..., description="Longitude [-180,180]"),
    date: Optional[str] = Query(None, description="Date YYYY-MM-DD (default: today, UTC)"),
    tz: Optional[str] = Query(None, description="IANA timezone or numeric offset (default: UTC)"),
    format: str = Query("json", description="Response format: json or text (plain-text summary)."),
):
    """
    Sunrise/sunset, solar noon, civil/nautical/astronomical twilight and golden hour.
    Events that do not occur on that day (polar day/night) are null and day_length_minutes is 0.
    """
    fmt = _check_format(format)
    location = _location(lat, lon)
    sample = _call(sun.sun_times, location, date, tz)
    if fmt == "text":
        return PlainTextResponse(render.sun_times(sample, location))
    return ORJSONResponse(sample.as_dict())

@app.get("/api/astro/sun/times/range", response_model=List[SunTimesRow], tags=["Sun"], summary="Daily sun event times for a date range")
async def read_sun_times_range(
    start: str = Query(..., description="Start date YYYY-MM-DD (inclusive)"),
    end: str = Query(..., description="End date YYYY-MM-DD (inclusive)"),
    lat: float = Query(..., description="Latitude [-90,90]"),
    lon: float = Query(..., description="Longitude [-180,180]"),
    tz: Optional[str] = Query(None, description="IANA timezone or numeric offset (default: UTC)"),
    format: str = Query("json", description="Response format: json or text (plain-text summary)."),
):
    fmt = _check_format(format)
    _check_span(start, end)
    location = _location(lat, lon)
    samples = _call(sun.sun_times_range, start, end, location, tz)
    if fmt == "text":
        return PlainTextResponse(render.sun_times_range(samples, location))
    return ORJSONResponse([s.as_dict() for s in samples])

@app.get("/api/astro/sun/position", response_model=SunPositionRow, tags=["Sun"], summary="Sun horizontal and equatorial coordinates")
async def read_sun_position(
    lat: float = Query(..., description="Latitude [-90,90]"),
    lon: float = Query(..., description="Longitude [-180,180]"),
    date: Optional[str] = Query(None, description="Date YYYY-MM-DD (default: now)"),
    time: Optional[str] = Query(None, description="UTC time HH:MM:SS, overrides the time of day"),
    mode: Optional[str] = Query(None, description="Allowed modes: truncate."),
    format: str = Query("json", description="Response format: json or text (plain-text summary)."),
):
    modes = _parse_modes(mode)
    fmt = _check_format(format)
    location = _location(lat, lon)
    sample = _call(sun.position, location, date, time)
    if fmt == "text":
        return PlainTextResponse(render.sun_position(sample, location))
    return ORJSONResponse(_apply_modes([sample.as_dict()], modes)[0])

@app.get("/api/astro/sun/next", response_model=List[SunEventRow], tags=["Sun"], summary="Next occurrences of a sun event")
async def read_next_sun_event(
    event: str = Query(..., description="sunrise, sunset, solar_noon, dawn, dusk, night_start, night_end, golden_hour_start, golden_hour_end, nautical_dawn, nautical_dusk, astronomical_dawn, astronomical_dusk"),
    lat: float = Query(..., description="Latitude [-90,90]"),
    lon: float = Query(..., description="Longitude [-180,180]"),
    date: Optional[str] = Query(None, description="Search start YYYY-MM-DD or ISO datetime (default: now)"),
    count: int = Query(1, description="Number of occurrences"),
    tz: Optional[str] = Query(None, description="IANA timezone or numeric offset (default: UTC)"),
    format: str = Query("json", description="Response format: json or text (plain-text summary)."),
):
    fmt = _check_format(format)
    _check_count(count)
    found = _call(sun.next_occurrences, event, _location(lat, lon), date, count, tz)
    if fmt == "text":
        return PlainTextResponse(render.next_events(found))
    return ORJSONResponse([o.as_dict() for o in found])
