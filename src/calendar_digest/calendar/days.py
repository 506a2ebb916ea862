"""Grouping of calendar events into per-day buckets."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from calendar_digest.calendar.dates import (
    DateError,
    parse_date_string,
    resolve_from_spec,
    start_to_date,
    truncate_to_day,
)
from calendar_digest.calendar.events import CalendarEvent
from calendar_digest.calendar.formats import DEFAULT_FORMATS, CalendarFormats
from calendar_digest.calendar.timestrings import is_all_day, make_time_string

if TYPE_CHECKING:
    from calendar_digest.calendar.client import CalendarClient

logger = logging.getLogger(__name__)

DEFAULT_FROM = "1"  # tomorrow


@dataclass
class DayBucket:
    """The events that start on one calendar date."""

    date: str  # YYYY-MM-DD
    long_name: str
    short_name: str
    anchor_date: datetime
    events: list[CalendarEvent] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.events)


@dataclass
class BucketedResult:
    """Events grouped by day, with the range that was requested and found."""

    days: dict[str, DayBucket] = field(default_factory=dict)
    start_date: datetime | None = None
    end_date: datetime | None = None
    req_start: datetime | None = None
    req_end: datetime | None = None
    start: str = ""
    end: str = ""
    next_page_token: str | None = None
    skipped: int = 0

    def sorted_days(self) -> list[DayBucket]:
        """Buckets in date order."""
        return [self.days[key] for key in sorted(self.days)]

    @property
    def event_count(self) -> int:
        return sum(len(bucket) for bucket in self.days.values())


def range_strings(
    start_date: datetime | None,
    end_date: datetime | None,
    formats: CalendarFormats = DEFAULT_FORMATS,
) -> tuple[str, str]:
    """Day labels for a range. The end is exclusive, so the label is for the day before it."""
    start = start_date.strftime(formats.day) if start_date else ""
    end = (end_date - timedelta(seconds=1)).strftime(formats.day) if end_date else ""
    return start, end


def make_bucket(date: str, formats: CalendarFormats = DEFAULT_FORMATS) -> DayBucket:
    """Create an empty bucket named after its date."""
    anchor = parse_date_string(date)
    return DayBucket(
        date=date,
        long_name=anchor.strftime(formats.longday),
        short_name=anchor.strftime(formats.day),
        anchor_date=anchor,
    )


def bucket_events(
    events: Iterable[CalendarEvent],
    formats: CalendarFormats = DEFAULT_FORMATS,
    diagnostics: logging.Logger | None = None,
) -> tuple[dict[str, DayBucket], int]:
    """
    Partition events by the date their start falls on.

    Events keep their input order inside each bucket. Events without a usable
    start (or with an unparseable end) are skipped with a warning.

    Args:
        events: Events to group.
        formats: Patterns and strings for day names and time strings.
        diagnostics: Logger that receives a warning per skipped event.

    Returns:
        The date-keyed buckets and the number of events skipped.
    """
    diagnostics = diagnostics or logger
    days: dict[str, DayBucket] = {}
    skipped = 0

    for event in events:
        try:
            date = start_to_date(event.start)
            bucket = days.get(date)
            if bucket is None:
                bucket = make_bucket(date, formats)
            time_string = make_time_string(event.start, event.end, bucket.anchor_date, formats)
            all_day = is_all_day(event.start, event.end)
        except DateError as e:
            diagnostics.warning(f"No usable date for event '{event.summary}': {e}")
            skipped += 1
            continue

        days.setdefault(date, bucket).events.append(
            replace(event, all_day=all_day, time_string=time_string)
        )

    return days, skipped


class DayBucketizer:
    """Fetches a calendar's events for a run of days and groups them by day."""

    def __init__(
        self,
        client: CalendarClient,
        formats: CalendarFormats = DEFAULT_FORMATS,
        diagnostics: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.formats = formats
        self.diagnostics = diagnostics

    def request_range(
        self, days: int, from_spec: object = DEFAULT_FROM, today: datetime | None = None
    ) -> tuple[datetime, datetime]:
        """
        Work out the requested window.

        The window starts at midnight of the resolved from day and ends
        ``days + 1`` days later, since the API's upper bound is exclusive.
        """
        if days < 0:
            raise ValueError(f"days must not be negative (got {days})")

        anchor = resolve_from_spec(from_spec, today, self.formats.shortdays)
        req_start = truncate_to_day(anchor)
        return req_start, req_start + timedelta(days=days + 1)

    def bucketize(
        self,
        calendar_id: str,
        days: int,
        from_spec: object = DEFAULT_FROM,
        today: datetime | None = None,
        diagnostics: logging.Logger | None = None,
    ) -> BucketedResult:
        """
        Fetch events for a calendar and group them into days.

        Args:
            calendar_id: The calendar to fetch.
            days: Number of days after the from day to include.
            from_spec: Where the window starts (see ``resolve_from_spec``).
            today: Override for the current day.
            diagnostics: Logger for skipped events (defaults to the one given
                at construction).

        Returns:
            The bucketed events and their ranges.

        Raises:
            TransportError: If the API request fails.
            DecodeError: If an API response cannot be decoded.
        """
        req_start, req_end = self.request_range(days, from_spec, today)

        page = self.client.fetch_all_events(calendar_id, time_min=req_start, time_max=req_end)
        buckets, skipped = bucket_events(
            page.events, self.formats, diagnostics or self.diagnostics
        )

        start_date = page.range_start or req_start
        end_date = page.range_end or req_end
        start, end = range_strings(start_date, end_date, self.formats)

        return BucketedResult(
            days=buckets,
            start_date=start_date,
            end_date=end_date,
            req_start=req_start,
            req_end=req_end,
            start=start,
            end=end,
            next_page_token=page.next_page_token,
            skipped=skipped,
        )
