"""Parsing and formatting of dates, clock times and timezones."""

from __future__ import annotations

import logging
import re
from datetime import date as date_cls, datetime, time as time_cls, timedelta, timezone, tzinfo
from typing import Iterator

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from astro_engine.errors import InvalidDateFormat, InvalidRange, InvalidTimeFormat

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6}))?)?$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(value: str | datetime | date_cls | None) -> datetime:
    """Parse a date or ISO datetime into an aware UTC datetime.

    ``YYYY-MM-DD`` means midnight UTC of that day, naive datetimes are taken
    as UTC and ``None`` means now.
    """
    if value is None:
        return utcnow()
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date_cls):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if DATE_RE.match(text):
                dt = datetime.strptime(text, "%Y-%m-%d")
            else:
                dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateFormat(
                f"Invalid date '{value}' (expected YYYY-MM-DD or ISO-8601 datetime)."
            ) from exc
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(value: str | date_cls) -> date_cls:
    return parse_instant(value).date()


def parse_clock(value: str) -> time_cls:
    """Parse ``HH:MM`` or ``HH:MM:SS`` (optionally with a fraction)."""
    match = CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidTimeFormat(f"Invalid time '{value}' (expected HH:MM:SS).")
    hours, minutes, seconds, fraction = match.groups()
    micro = int(fraction.ljust(6, "0")) if fraction else 0
    try:
        return time_cls(int(hours), int(minutes), int(seconds or 0), micro)
    except ValueError as exc:
        raise InvalidTimeFormat(f"Invalid time '{value}' (expected HH:MM:SS).") from exc


def at_clock(day: datetime, clock: time_cls) -> datetime:
    """Replace the UTC time-of-day of ``day``."""
    return day.astimezone(timezone.utc).replace(
        hour=clock.hour, minute=clock.minute, second=clock.second, microsecond=clock.microsecond
    )


def day_start(day: date_cls) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def date_span(start: str | date_cls, end: str | date_cls) -> tuple[date_cls, date_cls]:
    """Validate an inclusive date range and return it as dates."""
    start_day = parse_date(start)
    end_day = parse_date(end)
    if start_day > end_day:
        raise InvalidRange(f"Start date {start_day} must not be after end date {end_day}.")
    return start_day, end_day


def iter_days(start: date_cls, end: date_cls) -> Iterator[date_cls]:
    n = (end - start).days + 1
    for i in range(n):
        yield start + timedelta(days=i)


def _timezone_from_numeric(value: str) -> timezone:
    raw = value.strip()
    if not raw:
        raise ValueError("empty offset")
    sign = 1
    if raw[0] in "+-":
        sign = 1 if raw[0] == "+" else -1
        raw = raw[1:]
    if raw.count(":") == 1:
        h, m = raw.split(":")
        hours = int(h)
        minutes = int(m)
    elif "." in raw:
        val = float(raw)
        hours = int(val)
        minutes = int(round((val - hours) * 60))
    else:
        hours = int(raw)
        minutes = 0
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def resolve_timezone(tz_value: str | None) -> tzinfo | None:
    """Resolve an IANA name, ``UTC``/``Z`` or a numeric offset.

    Returns None when no timezone was requested or when the value is not a
    usable timezone; the latter is logged and callers format in UTC.
    """
    if tz_value is None or not str(tz_value).strip():
        return None
    raw = str(tz_value).strip()
    if raw.upper() in {"Z", "UTC", "GMT"}:
        return timezone.utc
    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # tz-database directories such as "America" surface as OSError
        pass
    try:
        return _timezone_from_numeric(raw)
    except (ValueError, OverflowError) as exc:
        logger.warning("Invalid timezone '%s' (%s); using UTC.", raw, exc)
        return None


def timezone_label(tz: tzinfo | None) -> str:
    if tz is None or tz is timezone.utc:
        return "UTC"
    key = getattr(tz, "key", None)
    if key:
        return key
    return str(tz)


def format_instant(instant: datetime | None, tz: tzinfo | None = None) -> str | None:
    """ISO-8601 in ``tz`` with its offset, or UTC with a ``Z`` suffix."""
    if instant is None:
        return None
    if tz is None:
        return instant.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return instant.astimezone(tz).isoformat(timespec="seconds")


def local_date(instant: datetime, tz: tzinfo | None = None) -> str:
    return instant.astimezone(tz or timezone.utc).date().isoformat()
