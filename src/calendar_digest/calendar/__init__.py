"""Google Calendar event retrieval, day bucketing and merging."""

from calendar_digest.calendar.client import CalendarClient, build_query
from calendar_digest.calendar.dates import (
    DateError,
    FromSpec,
    MissingDateError,
    ParseError,
    human_time,
    parse_date_string,
    parse_from_spec,
    resolve_from_spec,
    same_day,
)
from calendar_digest.calendar.days import (
    BucketedResult,
    DayBucket,
    DayBucketizer,
    bucket_events,
)
from calendar_digest.calendar.events import CalendarEvent, CalendarInfo, EventPage
from calendar_digest.calendar.formats import DEFAULT_FORMATS, CalendarFormats
from calendar_digest.calendar.merge import fetch_digest, merge_buckets, merge_flat
from calendar_digest.calendar.timestrings import inclusive_end, is_all_day, make_time_string

__all__ = [
    # Data classes
    "CalendarEvent",
    "CalendarInfo",
    "EventPage",
    "DayBucket",
    "BucketedResult",
    "CalendarFormats",
    "DEFAULT_FORMATS",
    "FromSpec",
    # Error classes
    "DateError",
    "ParseError",
    "MissingDateError",
    # Dates and time strings
    "parse_date_string",
    "parse_from_spec",
    "resolve_from_spec",
    "same_day",
    "human_time",
    "is_all_day",
    "inclusive_end",
    "make_time_string",
    # Retrieval
    "CalendarClient",
    "build_query",
    "DayBucketizer",
    "bucket_events",
    # Merging
    "merge_flat",
    "merge_buckets",
    "fetch_digest",
]
