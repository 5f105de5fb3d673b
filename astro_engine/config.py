"""Runtime configuration, read once from ASTRO_* environment variables."""

from __future__ import annotations

import os

DEFAULT_SEARCH_HORIZON_DAYS = 366
DEFAULT_MAX_COUNT = 100
DEFAULT_MAX_RANGE_DAYS = 366
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(ValueError):
    """Malformed ASTRO_* environment variable."""


def _env_int(var: str, default: int, minimum: int = 1) -> int:
    value = os.getenv(var)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid int value for {var}: {value}") from exc
    if parsed < minimum:
        raise ConfigError(f"{var} must be >= {minimum}, got {parsed}")
    return parsed


class Cfg:
    # day-stepping searches give up after this many days without a hit
    SEARCH_HORIZON_DAYS = _env_int("ASTRO_SEARCH_HORIZON_DAYS", DEFAULT_SEARCH_HORIZON_DAYS)
    # ceilings enforced by the MCP tools and the HTTP API, not by the engine
    MAX_COUNT = _env_int("ASTRO_MAX_COUNT", DEFAULT_MAX_COUNT)
    MAX_RANGE_DAYS = _env_int("ASTRO_MAX_RANGE_DAYS", DEFAULT_MAX_RANGE_DAYS)
    LOG_LEVEL = os.getenv("ASTRO_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


cfg = Cfg()
