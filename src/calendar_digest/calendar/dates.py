"""Date parsing and normalization for Google Calendar values.

Every instant handed out by this module is a timezone-aware ``datetime``.
Date-only values ("2024-01-01") become midnight UTC on that day.

The "from" specification accepted by :func:`resolve_from_spec` describes
where a day-range query starts. It may be:

- a ``datetime`` or ``date`` instance, used as-is;
- a signed integer (or its string form), an offset in days from today;
- an ISO8601 date or datetime string;
- ``=<seconds>``, an absolute Unix timestamp;
- a weekday name, optionally prefixed with ``-``, meaning the next (or, with
  ``-``, the previous) occurrence of that weekday, never today itself. Only
  the first three characters count, so "Friday" and "fri." both mean Friday.

Anything else resolves to today.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calendar_digest.calendar.formats import DEFAULT_FORMATS, CalendarFormats

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})(?:T(\d{2}):(\d{2}):(\d{2})(?:\.\d+)?(.*))?$"
)
_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_OFFSET_ZONE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")
_OFFSET_SPEC = re.compile(r"^(-?\d+)$")
_EPOCH_SPEC = re.compile(r"^=(-?\d+)$")


class DateError(ValueError):
    """Base class for date handling failures."""


class ParseError(DateError):
    """Raised when date text does not describe a valid date or datetime."""


class MissingDateError(DateError):
    """Raised when an event time has neither a date nor a dateTime."""


def _parse_zone(zone: str | None) -> timezone | ZoneInfo:
    if not zone or zone == "Z":
        return timezone.utc

    match = _OFFSET_ZONE.match(zone)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-offset if sign == "-" else offset)

    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ParseError(f"Unknown time zone {zone!r}") from e


def parse_date_string(text: str) -> datetime:
    """
    Parse an ISO8601 date or datetime string.

    Args:
        text: Either ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM:SS`` followed by an
            optional fraction and zone (``Z``, ``+01:00``, ``+0100`` or an
            IANA zone name). A missing zone means UTC.

    Returns:
        A timezone-aware datetime.

    Raises:
        ParseError: If the text is not a valid date or datetime.
    """
    match = DATE_PATTERN.match(text or "")
    if not match:
        raise ParseError(f"Unable to parse date {text!r}")

    year, month, day, hour, minute, second, zone = match.groups()
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            tzinfo=_parse_zone(zone),
        )
    except ValueError as e:
        raise ParseError(f"Invalid date {text!r}: {e}") from e


def truncate_to_day(instant: datetime) -> datetime:
    """Drop the time of day, keeping the instant's zone."""
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def today_utc() -> datetime:
    """Midnight UTC at the start of the current day."""
    return truncate_to_day(datetime.now(timezone.utc))


def _as_instant(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# "from" specifications


@dataclass(frozen=True)
class InstantSpec:
    """An already-resolved date or datetime."""

    value: date | datetime

    def resolve(self, today: datetime) -> datetime:
        return _as_instant(self.value)


@dataclass(frozen=True)
class OffsetSpec:
    """A number of days before or after today."""

    days: int

    def resolve(self, today: datetime) -> datetime:
        return today + timedelta(days=self.days)


@dataclass(frozen=True)
class AbsoluteSpec:
    """An ISO8601 date or datetime string."""

    text: str

    def resolve(self, today: datetime) -> datetime:
        return parse_date_string(self.text)


@dataclass(frozen=True)
class EpochSpec:
    """Seconds since the Unix epoch."""

    seconds: int

    def resolve(self, today: datetime) -> datetime:
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc)


@dataclass(frozen=True)
class WeekdaySpec:
    """The nearest previous or next occurrence of a weekday."""

    day: str
    index: int  # 0 = Monday
    previous: bool = False

    def resolve(self, today: datetime) -> datetime:
        diff = self.index - today.weekday()

        if self.previous and diff >= 0:
            diff -= 7
        if not self.previous and diff <= 0:
            diff += 7

        return today + timedelta(days=diff)


@dataclass(frozen=True)
class TodaySpec:
    """Fallback for anything unrecognised."""

    def resolve(self, today: datetime) -> datetime:
        return today


FromSpec = InstantSpec | OffsetSpec | AbsoluteSpec | EpochSpec | WeekdaySpec | TodaySpec


def parse_from_spec(
    value: object, shortdays: Sequence[str] = DEFAULT_FORMATS.shortdays
) -> FromSpec:
    """
    Classify a "from" value. The first matching rule wins.

    Args:
        value: A date/datetime, an int, or a string.
        shortdays: Abbreviated weekday names, Monday first.

    Returns:
        The matching FromSpec variant. Never raises.
    """
    if isinstance(value, FromSpec):
        return value
    if isinstance(value, (date, datetime)):
        return InstantSpec(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return OffsetSpec(value)
    if not isinstance(value, str):
        return TodaySpec()

    text = value.strip()

    match = _OFFSET_SPEC.match(text)
    if match:
        return OffsetSpec(int(match.group(1)))

    if DATE_PATTERN.match(text):
        return AbsoluteSpec(text)

    match = _EPOCH_SPEC.match(text)
    if match:
        return EpochSpec(int(match.group(1)))

    previous = text.startswith("-")
    day = (text[1:] if previous else text)[:3].lower()
    if day in shortdays:
        return WeekdaySpec(day=day, index=list(shortdays).index(day), previous=previous)

    return TodaySpec()


def resolve_from_spec(
    value: object,
    today: datetime | None = None,
    shortdays: Sequence[str] = DEFAULT_FORMATS.shortdays,
) -> datetime:
    """
    Turn a "from" value into an absolute instant.

    Args:
        value: See the module docstring for the accepted forms.
        today: Midnight of the current day (defaults to today in UTC).
        shortdays: Abbreviated weekday names, Monday first.

    Returns:
        A timezone-aware datetime. Unrecognised or invalid input yields today.
    """
    if today is None:
        today = today_utc()

    spec = parse_from_spec(value, shortdays)
    try:
        return spec.resolve(today)
    except (ValueError, OverflowError, OSError) as e:
        logger.warning(f"Ignoring unusable from value {value!r}: {e}")
        return today


# ---------------------------------------------------------------------------
# Comparisons and display


def same_day(first: datetime, second: datetime) -> bool:
    """Check whether two instants fall on the same UTC day."""
    first_day = first.astimezone(timezone.utc).date()
    second_day = second.astimezone(timezone.utc).date()
    return first_day == second_day


def human_time(
    instant: datetime,
    reference: datetime,
    date_only: bool = False,
    formats: CalendarFormats = DEFAULT_FORMATS,
) -> str:
    """
    Describe an instant relative to a reference day.

    On the reference day only the time is shown (or the day label when
    ``date_only`` is set). On any other day the day label is shown, followed
    by the time unless ``date_only`` is set.
    """
    if same_day(instant, reference):
        return instant.strftime(formats.day if date_only else formats.time)

    pattern = formats.day if date_only else formats.day + formats.at
    return instant.strftime(pattern)


def format_rfc3339(instant: datetime) -> str:
    """Render an instant as an RFC3339 timestamp, using ``Z`` for UTC."""
    instant = _as_instant(instant)
    if instant.utcoffset() == timedelta(0):
        return instant.strftime("%Y-%m-%dT%H:%M:%SZ")
    return instant.isoformat(timespec="seconds")


# ---------------------------------------------------------------------------
# Google event time fields


def field_value(field: Mapping[str, str] | None) -> str | None:
    """
    Return the raw ``date`` or ``dateTime`` string of an event time.

    Raises:
        ParseError: If the event time is not a mapping of strings.
    """
    if not field:
        return None
    if not isinstance(field, Mapping):
        raise ParseError(f"Unexpected event time {field!r}")

    value = field.get("date") or field.get("dateTime") or None
    if value is not None and not isinstance(value, str):
        raise ParseError(f"Unexpected date value {value!r}")
    return value


def is_date_only(field: Mapping[str, str] | None) -> bool:
    """Check whether an event time carries a date without a time of day."""
    if not isinstance(field, Mapping):
        return False
    return isinstance(field.get("date"), str) and bool(field["date"]) and not field.get("dateTime")


def parse_field(field: Mapping[str, str] | None) -> datetime:
    """
    Parse an event ``start``/``end`` mapping into an instant.

    Raises:
        MissingDateError: If neither ``date`` nor ``dateTime`` is present.
        ParseError: If the value cannot be parsed.
    """
    value = field_value(field)
    if value is None:
        raise MissingDateError("No date specified")
    return parse_date_string(value)


def start_to_date(start: Mapping[str, str] | None) -> str:
    """
    Work out which day an event belongs to.

    Args:
        start: The event's ``start`` mapping.

    Returns:
        The date portion of the start, as ``YYYY-MM-DD``.

    Raises:
        MissingDateError: If the start has no date or dateTime.
        ParseError: If the value does not begin with a date.
    """
    value = field_value(start)
    if value is None:
        raise MissingDateError("No start date provided")

    match = _DATE_PREFIX.match(value)
    if not match:
        raise ParseError(f"Unable to find a date in {value!r}")
    return match.group(1)
