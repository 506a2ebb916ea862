"""Shared Google Calendar API transport infrastructure."""

from calendar_digest.google.errors import (
    CalendarAPIError,
    DecodeError,
    TransportError,
)
from calendar_digest.google.transport import (
    DEFAULT_API_URL,
    BearerTransport,
    CalendarTransport,
    TransportResponse,
    get_json,
)

__all__ = [
    "DEFAULT_API_URL",
    "BearerTransport",
    "CalendarTransport",
    "TransportResponse",
    "get_json",
    "CalendarAPIError",
    "TransportError",
    "DecodeError",
]
