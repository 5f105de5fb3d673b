"""Error kinds raised by the engine.

Every error carries a ``kind`` label so that the MCP and HTTP surfaces can
translate it without string matching. Invalid timezones are not errors: they
are recovered in :mod:`astro_engine.timeutil` with a warning.
"""

from __future__ import annotations


class AstroError(Exception):
    kind = "AstroError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidDateFormat(AstroError):
    kind = "InvalidDateFormat"


class InvalidTimeFormat(AstroError):
    kind = "InvalidTimeFormat"


class InvalidRange(AstroError):
    kind = "InvalidRange"


class InvalidLocation(AstroError):
    kind = "InvalidLocation"


class InvalidParameter(AstroError):
    kind = "InvalidParameter"


class NotFound(AstroError):
    """Search horizon exhausted without a single hit."""

    kind = "NotFound"


class PhaseNotFound(NotFound):
    kind = "PhaseNotFound"


class EventNotFound(NotFound):
    kind = "EventNotFound"
