"""calendar-digest: day-by-day digests of Google calendars."""

__version__ = "0.1.0"
