"""Calendar event data as returned by the Google Calendar API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from calendar_digest.calendar.dates import field_value


@dataclass
class CalendarEvent:
    """Represents a single event from a Google calendar."""

    id: str
    summary: str
    location: str | None = None
    html_link: str | None = None
    start: dict[str, str] | None = None  # {"date": ...} or {"dateTime": ...}
    end: dict[str, str] | None = None
    all_day: bool = False
    time_string: str = ""
    calendar_id: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any], calendar_id: str | None = None) -> CalendarEvent:
        """Build an event from one entry of an API ``items`` list."""
        return cls(
            id=str(item.get("id", "")),
            summary=item.get("summary") or "",
            location=item.get("location") or None,
            html_link=item.get("htmlLink") or None,
            start=item.get("start") or None,
            end=item.get("end") or None,
            calendar_id=calendar_id,
        )

    @property
    def start_value(self) -> str | None:
        """Raw start date or dateTime string."""
        return field_value(self.start)

    @property
    def end_value(self) -> str | None:
        """Raw end date or dateTime string."""
        return field_value(self.end)

    @property
    def sort_key(self) -> tuple[str, str, str]:
        """Ordering used when a day's events have to be resorted."""
        return (self.start_value or "", self.end_value or "", self.summary or "")


@dataclass
class EventPage:
    """A flat run of events plus the date range they were requested for."""

    events: list[CalendarEvent] = field(default_factory=list)
    next_page_token: str | None = None
    range_start: datetime | None = None
    range_end: datetime | None = None

    def __len__(self) -> int:
        return len(self.events)


@dataclass
class CalendarInfo:
    """Title and description of a calendar."""

    id: str
    title: str
    description: str
    time_zone: str | None = None
