"""Human-readable time descriptions for calendar events."""

from collections.abc import Mapping
from datetime import datetime, timedelta

from calendar_digest.calendar.dates import human_time, is_date_only, parse_field
from calendar_digest.calendar.formats import DEFAULT_FORMATS, CalendarFormats

EventTime = Mapping[str, str]


def is_all_day(start: EventTime | None, end: EventTime | None) -> bool:
    """
    Check whether an event covers one or more whole days.

    Google stores all-day events as date-only values with an exclusive end,
    so a one-day event on the 1st ends on the 2nd.
    """
    if not (is_date_only(start) and is_date_only(end)):
        return False
    return parse_field(end) >= parse_field(start) + timedelta(days=1)


def inclusive_end(start: EventTime | None, end: EventTime | None) -> datetime | None:
    """Last day covered by an all-day event, or None for timed events."""
    if not is_all_day(start, end):
        return None
    return parse_field(end) - timedelta(days=1)


def make_time_string(
    start: EventTime | None,
    end: EventTime | None,
    reference: datetime,
    formats: CalendarFormats = DEFAULT_FORMATS,
) -> str:
    """
    Describe when an event happens.

    Args:
        start: The event's ``start`` mapping.
        end: The event's ``end`` mapping.
        reference: The day the event is listed under. Times on this day are
            shown without a date.
        formats: Patterns and strings to use.

    Returns:
        A string such as "All day" or "From 10:00 to 11:00".

    Raises:
        ParseError: If either time cannot be parsed.
    """
    if not start:
        return formats.all_day

    start_date = parse_field(start)
    start_only = is_date_only(start)

    if not end:
        return formats.starting + human_time(start_date, reference, start_only, formats)

    end_date = parse_field(end)
    end_only = is_date_only(end)

    # Date-only ends are exclusive
    if start_only and end_only:
        end_date -= timedelta(days=1)

    if start_date == end_date:
        return formats.all_day
    if start_date > end_date:
        return formats.starting + human_time(start_date, reference, start_only, formats)
    if start_date < end_date:
        return (
            formats.from_
            + human_time(start_date, reference, start_only, formats)
            + formats.to
            + human_time(end_date, reference, end_only, formats)
        )

    return formats.unknown
