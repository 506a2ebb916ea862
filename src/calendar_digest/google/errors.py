"""Error classes for Google Calendar API access."""


class CalendarAPIError(Exception):
    """Raised when a Google Calendar API call fails."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class TransportError(CalendarAPIError):
    """Raised when the API answers with a non-success status or is unreachable."""

    def __init__(
        self, message: str, url: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message, url)
        self.status_code = status_code


class DecodeError(CalendarAPIError):
    """Raised when an API response body is not the JSON we expect."""
