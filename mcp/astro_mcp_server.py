"""
Astro MCP server exposing moon-phase and sun tools:

1. moon.phase / moon.phases_range – phase name, illumination, age and size.
2. moon.next_phase                – next New / First Quarter / Full / Last Quarter dates.
3. sun.times / sun.times_range    – sunrise, sunset, twilights and day length.
4. sun.position                   – azimuth/altitude and right ascension/declination.
5. sun.next_event                 – next occurrences of a named sun event.

All tools compute locally (PyEphem); nothing is fetched over the network.
Configure limits via the ASTRO_* environment vars.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable, Literal, Sequence, TypeVar

from fastmcp.exceptions import NotFoundError, ToolError
from fastmcp.server import FastMCP
from fastmcp.tools import Tool

from astro_engine import moon, render, sun
from astro_engine.config import cfg
from astro_engine.errors import AstroError, NotFound
from astro_engine.models import Location
from astro_engine.timeutil import date_span

PHASE_TARGETS = Literal["New", "First Quarter", "Full", "Last Quarter"]
SUN_EVENTS = Literal[
    "sunrise",
    "sunset",
    "solar_noon",
    "dawn",
    "dusk",
    "night_start",
    "night_end",
    "golden_hour_start",
    "golden_hour_end",
    "nautical_dawn",
    "nautical_dusk",
    "astronomical_dawn",
    "astronomical_dusk",
]
OutputFormat = Literal["json", "text"]

T = TypeVar("T")

logger = logging.getLogger("astro_mcp")
if not logger.handlers:
    logging.basicConfig(
        level=cfg.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

app = FastMCP(
    name="astro-mcp",
    version="0.1.0",
    instructions=(
        "Provides moon phase and sun event/position tools computed from a low-precision "
        "ephemeris. Use moon.* tools for phases and sun.* tools for rise/set times, "
        "twilights and sun coordinates. Dates are YYYY-MM-DD (UTC)."
    ),
)


def _run(label: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call into the engine, translating its errors into MCP errors."""
    try:
        return fn(*args, **kwargs)
    except NotFound as exc:
        raise NotFoundError(f"{label} failed: {exc}") from exc
    except AstroError as exc:
        raise ToolError(f"{label} failed: {exc}") from exc


def _location(latitude: float | None, longitude: float | None, *, required: bool) -> Location:
    if required and (latitude is None or longitude is None):
        raise ToolError("latitude and longitude are required.")
    return _run(
        "location",
        Location,
        0.0 if latitude is None else float(latitude),
        0.0 if longitude is None else float(longitude),
    )


def _check_count(count: int) -> int:
    if not 1 <= count <= cfg.MAX_COUNT:
        raise ToolError(f"count must be between 1 and {cfg.MAX_COUNT}.")
    return count


def _check_span(start_date: str, end_date: str) -> None:
    start_day, end_day = _run("date range", date_span, start_date, end_date)
    days = (end_day - start_day).days + 1
    if days > cfg.MAX_RANGE_DAYS:
        raise ToolError(f"Range covers {days} days; the limit is {cfg.MAX_RANGE_DAYS}.")


def _check_format(fmt: str) -> None:
    if fmt not in {"json", "text"}:
        raise ToolError(f"Unsupported format '{fmt}'. Allowed: ['json', 'text'].")


def moon_phase(
    *,
    date: str | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    format: OutputFormat = "json",
) -> dict[str, Any] | str:
    """Moon phase, illumination, age, distance and apparent size for a date (default: now)."""

    logger.info("moon.phase invoked date=%s lat=%s lon=%s", date, latitude, longitude)
    _check_format(format)
    location = _location(latitude, longitude, required=False)
    sample = _run("moon.phase", moon.classify, date, location)
    if format == "text":
        return render.moon_phase(sample)
    return sample.as_dict()


def moon_phases_range(
    *,
    start_date: str,
    end_date: str,
    latitude: float | None = None,
    longitude: float | None = None,
    format: OutputFormat = "json",
) -> list[dict[str, Any]] | str:
    """Daily moon phase samples from start_date to end_date (inclusive)."""

    logger.info(
        "moon.phases_range invoked start=%s end=%s lat=%s lon=%s",
        start_date,
        end_date,
        latitude,
        longitude,
    )
    _check_format(format)
    _check_span(start_date, end_date)
    location = _location(latitude, longitude, required=False)
    samples = _run("moon.phases_range", moon.sample_range, start_date, end_date, location)
    if format == "text":
        return render.moon_phases(samples)
    return [s.as_dict() for s in samples]


def moon_next_phase(
    *,
    phase: PHASE_TARGETS,
    date: str | None = None,
    count: int = 1,
    format: OutputFormat = "json",
) -> list[dict[str, Any]] | str:
    """Dates of the next occurrence(s) of a principal moon phase."""

    logger.info("moon.next_phase invoked phase=%s date=%s count=%s", phase, date, count)
    _check_format(format)
    _check_count(count)
    found = _run("moon.next_phase", moon.next_occurrences, phase, date, count)
    if format == "text":
        return render.next_phases(found)
    return [o.as_dict() for o in found]


def sun_times(
    *,
    latitude: float,
    longitude: float,
    date: str | None = None,
    timezone: str | None = None,
    format: OutputFormat = "json",
) -> dict[str, Any] | str:
    """Sunrise, sunset, solar noon, twilights and golden hour for one day."""

    logger.info(
        "sun.times invoked lat=%s lon=%s date=%s tz=%s", latitude, longitude, date, timezone
    )
    _check_format(format)
    location = _location(latitude, longitude, required=True)
    sample = _run("sun.times", sun.sun_times, location, date, timezone)
    if format == "text":
        return render.sun_times(sample, location)
    return sample.as_dict()


def sun_times_range(
    *,
    start_date: str,
    end_date: str,
    latitude: float,
    longitude: float,
    timezone: str | None = None,
    format: OutputFormat = "json",
) -> list[dict[str, Any]] | str:
    """Daily sun times from start_date to end_date (inclusive)."""

    logger.info(
        "sun.times_range invoked start=%s end=%s lat=%s lon=%s tz=%s",
        start_date,
        end_date,
        latitude,
        longitude,
        timezone,
    )
    _check_format(format)
    _check_span(start_date, end_date)
    location = _location(latitude, longitude, required=True)
    samples = _run("sun.times_range", sun.sun_times_range, start_date, end_date, location, timezone)
    if format == "text":
        return render.sun_times_range(samples, location)
    return [s.as_dict() for s in samples]


def sun_position(
    *,
    latitude: float,
    longitude: float,
    date: str | None = None,
    time: str | None = None,
    format: OutputFormat = "json",
) -> dict[str, Any] | str:
    """Sun azimuth/altitude and equatorial coordinates at a date and UTC time."""

    logger.info(
        "sun.position invoked lat=%s lon=%s date=%s time=%s", latitude, longitude, date, time
    )
    _check_format(format)
    location = _location(latitude, longitude, required=True)
    sample = _run("sun.position", sun.position, location, date, time)
    if format == "text":
        return render.sun_position(sample, location)
    return sample.as_dict()


def sun_next_event(
    *,
    event: SUN_EVENTS,
    latitude: float,
    longitude: float,
    date: str | None = None,
    count: int = 1,
    timezone: str | None = None,
    format: OutputFormat = "json",
) -> list[dict[str, Any]] | str:
    """Next occurrence(s) of a sun event strictly after date (default: now)."""

    logger.info(
        "sun.next_event invoked event=%s lat=%s lon=%s date=%s count=%s tz=%s",
        event,
        latitude,
        longitude,
        date,
        count,
        timezone,
    )
    _check_format(format)
    _check_count(count)
    location = _location(latitude, longitude, required=True)
    found = _run("sun.next_event", sun.next_occurrences, event, location, date, count, timezone)
    if format == "text":
        return render.next_events(found)
    return [o.as_dict() for o in found]


app.add_tool(
    Tool.from_function(
        moon_phase,
        name="moon.phase",
        description="Get moon phase information (name, illumination, age, distance, size) for a date.",
    )
)

app.add_tool(
    Tool.from_function(
        moon_phases_range,
        name="moon.phases_range",
        description="Get daily moon phase information for an inclusive date range.",
    )
)

app.add_tool(
    Tool.from_function(
        moon_next_phase,
        name="moon.next_phase",
        description="Find the next date(s) of a New, First Quarter, Full or Last Quarter moon.",
    )
)

app.add_tool(
    Tool.from_function(
        sun_times,
        name="sun.times",
        description=(
            "Get sunrise, sunset, solar noon, civil/nautical/astronomical twilight and golden "
            "hour times plus day length for a date and location."
        ),
    )
)

app.add_tool(
    Tool.from_function(
        sun_times_range,
        name="sun.times_range",
        description="Get daily sun times for an inclusive date range and location.",
    )
)

app.add_tool(
    Tool.from_function(
        sun_position,
        name="sun.position",
        description=(
            "Get the sun's azimuth/altitude and right ascension/declination for a date, "
            "UTC time and location."
        ),
    )
)

app.add_tool(
    Tool.from_function(
        sun_next_event,
        name="sun.next_event",
        description="Find the next occurrence(s) of a sun event (e.g. sunset) at a location.",
    )
)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the astro MCP server.")
    parser.add_argument(
        "--transport",
        choices=["http", "stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport protocol to use (default: stdio).",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host for HTTP transport (default: 0.0.0.0).")
    parser.add_argument("--port", type=int, default=8766, help="Port for HTTP transport.")
    parser.add_argument(
        "--path",
        default="/mcp/astro",
        help="Base URL path when using HTTP transports (useful when reverse-proxied).",
    )
    args = parser.parse_args(argv)

    run_kwargs: dict[str, Any] = {}
    if args.transport in {"http", "sse", "streamable-http"}:
        run_kwargs.update({"host": args.host, "port": args.port, "path": args.path})
    logger.info("starting astro MCP server transport=%s", args.transport)
    app.run(transport=args.transport, **run_kwargs)


if __name__ == "__main__":  # pragma: no cover - manual invocation entrypoint
    main(sys.argv[1:])
