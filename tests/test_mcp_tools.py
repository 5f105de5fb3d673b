import importlib
import sys
from pathlib import Path

import pytest
from fastmcp.exceptions import NotFoundError, ToolError

from astro_engine.models import SunEvent

MCP_DIR = Path(__file__).resolve().parent.parent / "mcp"
if str(MCP_DIR) not in sys.path:
    sys.path.insert(0, str(MCP_DIR))


@pytest.fixture
def server():
    return importlib.import_module("astro_mcp_server")


def test_moon_phase_json_and_text(server, use_default_provider, linear_moon):
    use_default_provider(linear_moon(period=28.0))
    data = server.moon_phase(date="2024-01-08")
    assert data["phase_name"] == "First Quarter"
    assert data["phase"] == pytest.approx(0.25)

    text = server.moon_phase(date="2024-01-08", format="text")
    assert text == "Moon phase for 2024-01-08: First Quarter (50.0% illuminated)"


def test_moon_phases_range_text(server, use_default_provider, linear_moon):
    use_default_provider(linear_moon(period=28.0))
    text = server.moon_phases_range(start_date="2024-01-01", end_date="2024-01-02", format="text")
    lines = text.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("2024-01-01: New")


def test_range_over_limit_is_tool_error(server, use_default_provider, linear_moon):
    use_default_provider(linear_moon())
    with pytest.raises(ToolError, match="limit is 366"):
        server.moon_phases_range(start_date="2024-01-01", end_date="2025-06-01")


def test_moon_next_phase(server, use_default_provider, linear_moon):
    use_default_provider(linear_moon(period=28.0))
    found = server.moon_next_phase(phase="Full", date="2024-01-01", count=2)
    assert found == [
        {"date": "2024-01-15", "phase": "Full"},
        {"date": "2024-02-12", "phase": "Full"},
    ]
    text = server.moon_next_phase(phase="New", date="2024-01-01", format="text")
    assert text == "Next New: 2024-01-29"


def test_moon_next_phase_not_found(server, use_default_provider, constant_moon):
    use_default_provider(constant_moon(0.25))
    with pytest.raises(NotFoundError, match="PhaseNotFound"):
        server.moon_next_phase(phase="Full", date="2024-01-01")


@pytest.mark.parametrize("count", [0, 101])
def test_count_bounds(count, server):
    with pytest.raises(ToolError, match="count must be between 1 and 100"):
        server.moon_next_phase(phase="Full", count=count)


def test_sun_times_text(server, use_default_provider, fixed_sun):
    use_default_provider(fixed_sun())
    text = server.sun_times(latitude=40, longitude=-74, date="2024-06-01", format="text")
    assert text.splitlines() == [
        "Sun times for 2024-06-01 at latitude 40.0, longitude -74.0:",
        "Sunrise: 2024-06-01T06:00:00Z",
        "Sunset: 2024-06-01T18:00:00Z",
        "Day length: 12h 0m",
        "Solar noon: 2024-06-01T12:00:00Z",
        "Dawn: 2024-06-01T05:30:00Z",
        "Dusk: 2024-06-01T18:30:00Z",
    ]


def test_sun_times_range_json(server, use_default_provider, fixed_sun):
    use_default_provider(fixed_sun(missing=[SunEvent.SUNSET]))
    rows = server.sun_times_range(
        start_date="2024-06-01", end_date="2024-06-03", latitude=40, longitude=-74, timezone="UTC"
    )
    assert [r["date"] for r in rows] == ["2024-06-01", "2024-06-02", "2024-06-03"]
    assert all(r["sunset"] is None and r["day_length_minutes"] == 0 for r in rows)


def test_sun_tools_require_location(server):
    with pytest.raises(ToolError, match="latitude and longitude are required"):
        server.sun_times(latitude=None, longitude=10.0)


def test_invalid_location_is_tool_error(server):
    with pytest.raises(ToolError, match="InvalidLocation"):
        server.sun_position(latitude=40.0, longitude=200.0)


def test_sun_position_text(server, use_default_provider, fixed_sun):
    use_default_provider(fixed_sun())
    text = server.sun_position(
        latitude=40, longitude=-74, date="2024-06-01", time="12:00:00", format="text"
    )
    assert "Azimuth: 180.00°" in text
    assert "Altitude: 30.00°" in text
    assert "Declination: -20.00°" in text


def test_sun_next_event(server, use_default_provider, fixed_sun):
    use_default_provider(fixed_sun())
    found = server.sun_next_event(event="solar_noon", latitude=40, longitude=-74, date="2024-06-01T13:00:00Z")
    assert found == [
        {
            "date": "2024-06-02",
            "time": "2024-06-02T12:00:00Z",
            "event": "solar_noon",
            "utc": "2024-06-02T12:00:00Z",
        }
    ]
    text = server.sun_next_event(event="sunset", latitude=40, longitude=-74, date="2024-06-01", format="text")
    assert text == "Next sunset: 2024-06-01 at 2024-06-01T18:00:00Z"


def test_sun_next_event_not_found(server, use_default_provider, fixed_sun):
    use_default_provider(fixed_sun(missing=list(SunEvent)))
    with pytest.raises(NotFoundError, match="EventNotFound"):
        server.sun_next_event(event="sunrise", latitude=80, longitude=0, date="2024-06-01")


def test_unsupported_format(server):
    with pytest.raises(ToolError, match="Unsupported format"):
        server.moon_phase(format="xml")


def test_main_passes_http_options(server, monkeypatch):
    calls = []
    monkeypatch.setattr(server.app, "run", lambda **kwargs: calls.append(kwargs))
    server.main(["--transport", "http", "--port", "9000"])
    assert calls == [{"transport": "http", "host": "0.0.0.0", "port": 9000, "path": "/mcp/astro"}]

    calls.clear()
    server.main([])
    assert calls == [{"transport": "stdio"}]
