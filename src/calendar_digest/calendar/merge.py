"""Merging of event pages and of day-bucketed results from several calendars."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

from calendar_digest.calendar.dates import today_utc
from calendar_digest.calendar.days import DEFAULT_FROM, BucketedResult, DayBucket, range_strings
from calendar_digest.calendar.events import EventPage
from calendar_digest.calendar.formats import DEFAULT_FORMATS, CalendarFormats

if TYPE_CHECKING:
    from calendar_digest.calendar.days import DayBucketizer

logger = logging.getLogger(__name__)


def _earliest(first: datetime | None, second: datetime | None) -> datetime | None:
    if first is None:
        return second
    if second is None:
        return first
    return min(first, second)


def _latest(first: datetime | None, second: datetime | None) -> datetime | None:
    if first is None:
        return second
    if second is None:
        return first
    return max(first, second)


def merge_flat(primary: EventPage, secondary: EventPage) -> EventPage:
    """
    Append one page of events to another.

    The range widens to cover both pages and the continuation token is
    taken from ``secondary``. Neither input is modified.
    """
    return EventPage(
        events=primary.events + secondary.events,
        next_page_token=secondary.next_page_token,
        range_start=_earliest(primary.range_start, secondary.range_start),
        range_end=_latest(primary.range_end, secondary.range_end),
    )


def _copy_bucket(bucket: DayBucket) -> DayBucket:
    return replace(bucket, events=list(bucket.events))


def merge_buckets(
    primary: BucketedResult,
    secondary: BucketedResult,
    formats: CalendarFormats = DEFAULT_FORMATS,
) -> BucketedResult:
    """
    Merge two bucketed results into a new one.

    Days only in ``secondary`` are copied over whole. For days in both,
    events from ``secondary`` whose id is not already in the primary day are
    appended and the day is resorted by (start, end, summary). Events without
    an id are never treated as duplicates. Days that gain nothing keep their
    order. The ranges widen to cover both results.

    Merging a result with itself changes nothing when every event has an id,
    and the merged ranges do not depend on argument order. The order of
    events with identical sort keys does.
    """
    days = {key: _copy_bucket(bucket) for key, bucket in primary.days.items()}

    for key, bucket in secondary.days.items():
        existing = days.get(key)
        if existing is None:
            days[key] = _copy_bucket(bucket)
            continue

        # Only ids already in the primary day count as duplicates
        seen = {event.id for event in existing.events if event.id}
        added = False
        for event in bucket.events:
            if event.id and event.id in seen:
                continue
            existing.events.append(event)
            added = True

        if added:
            existing.events.sort(key=lambda event: event.sort_key)

    start_date = _earliest(primary.start_date, secondary.start_date)
    end_date = _latest(primary.end_date, secondary.end_date)
    start, end = range_strings(start_date, end_date, formats)

    return BucketedResult(
        days=days,
        start_date=start_date,
        end_date=end_date,
        req_start=_earliest(primary.req_start, secondary.req_start),
        req_end=_latest(primary.req_end, secondary.req_end),
        start=start,
        end=end,
        next_page_token=primary.next_page_token,
        skipped=primary.skipped + secondary.skipped,
    )


def fetch_digest(
    bucketizer: DayBucketizer,
    calendar_ids: Sequence[str],
    days: int,
    from_spec: object = DEFAULT_FROM,
    today: datetime | None = None,
    diagnostics_for: Callable[[str], logging.Logger] | None = None,
) -> BucketedResult:
    """
    Fetch several calendars and merge them into a single day-bucketed view.

    Calendars are fetched one after another in the order given and merged in
    that order. Any failure aborts the whole digest.

    Args:
        bucketizer: Fetches and buckets a single calendar.
        calendar_ids: Calendars to include, at least one.
        days: Number of days after the from day to include.
        from_spec: Where the window starts.
        today: Override for the current day, shared by every calendar.
        diagnostics_for: Returns the logger for skipped events of a calendar.

    Returns:
        The merged result.
    """
    if not calendar_ids:
        raise ValueError("No calendars specified")

    if today is None:
        today = today_utc()

    result: BucketedResult | None = None
    for calendar_id in calendar_ids:
        diagnostics = diagnostics_for(calendar_id) if diagnostics_for else None
        fetched = bucketizer.bucketize(
            calendar_id, days, from_spec, today=today, diagnostics=diagnostics
        )
        logger.info(
            f"Fetched {fetched.event_count} events over {len(fetched.days)} day(s) from {calendar_id}"
        )
        result = fetched if result is None else merge_buckets(result, fetched, bucketizer.formats)

    return result
