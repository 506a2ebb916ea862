"""Event retrieval from the Google Calendar API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import quote

from calendar_digest.calendar.dates import DateError, format_rfc3339, parse_field
from calendar_digest.calendar.events import CalendarEvent, CalendarInfo, EventPage
from calendar_digest.calendar.merge import merge_flat
from calendar_digest.google import DEFAULT_API_URL, CalendarTransport, DecodeError, get_json

logger = logging.getLogger(__name__)


def build_query(
    *,
    time_min: datetime | None = None,
    time_max: datetime | None = None,
    page_token: str | None = None,
    max_results: int | None = None,
    order_by: str = "startTime",
    single_events: bool = True,
) -> dict[str, str]:
    """Build the query parameters for an events list request."""
    params = {
        "orderBy": order_by,
        "singleEvents": "true" if single_events else "false",
    }
    if time_min is not None:
        params["timeMin"] = format_rfc3339(time_min)
    if time_max is not None:
        params["timeMax"] = format_rfc3339(time_max)
    if page_token:
        params["pageToken"] = page_token
    if max_results is not None:
        params["maxResults"] = str(max_results)
    return params


def _range_bound(field: Mapping[str, str] | None, event: CalendarEvent) -> datetime | None:
    try:
        return parse_field(field)
    except DateError as e:
        logger.warning(f"Unable to derive range from event '{event.summary}': {e}")
        return None


class CalendarClient:
    """Reads events and metadata for Google calendars.

    The client does not authenticate; the transport it is given must attach
    valid credentials to each request.
    """

    def __init__(
        self,
        transport: CalendarTransport,
        *,
        api_url: str = DEFAULT_API_URL,
        max_results: int | None = None,
    ) -> None:
        self.transport = transport
        self.api_url = api_url.rstrip("/")
        self.max_results = max_results

    def _calendar_url(self, calendar_id: str, *parts: str) -> str:
        return "/".join([self.api_url, "calendars", quote(calendar_id, safe=""), *parts])

    def list_events(
        self,
        calendar_id: str,
        *,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
        order_by: str = "startTime",
        single_events: bool = True,
    ) -> EventPage:
        """
        Fetch a single page of events.

        Args:
            calendar_id: The calendar to query.
            time_min: Lower bound (inclusive) on event end times.
            time_max: Upper bound (exclusive) on event start times.
            page_token: Continuation token from a previous page.
            max_results: Maximum events per page.
            order_by: Server-side ordering.
            single_events: Expand recurring events into instances.

        Returns:
            The page's events, continuation token and date range. When no
            bounds were requested the range comes from the first event's
            start and the last event's end.

        Raises:
            TransportError: If the request fails.
            DecodeError: If the response is not a valid events list.
        """
        url = self._calendar_url(calendar_id, "events")
        params = build_query(
            time_min=time_min,
            time_max=time_max,
            page_token=page_token,
            max_results=max_results if max_results is not None else self.max_results,
            order_by=order_by,
            single_events=single_events,
        )

        payload = get_json(self.transport, url, params)
        if not isinstance(payload, dict):
            raise DecodeError("Events response is not a JSON object", url)

        items = payload.get("items", [])
        if not isinstance(items, list):
            raise DecodeError("Events response 'items' is not a list", url)

        events = [
            CalendarEvent.from_api(item, calendar_id)
            for item in items
            if isinstance(item, dict)
        ]

        page = EventPage(
            events=events,
            next_page_token=payload.get("nextPageToken") or None,
            range_start=time_min,
            range_end=time_max,
        )

        if events:
            if page.range_start is None:
                page.range_start = _range_bound(events[0].start, events[0])
            if page.range_end is None:
                page.range_end = _range_bound(events[-1].end, events[-1])

        return page

    def fetch_all_events(
        self,
        calendar_id: str,
        *,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
        max_results: int | None = None,
        order_by: str = "startTime",
        single_events: bool = True,
    ) -> EventPage:
        """
        Fetch every page of events for a calendar.

        Takes the same arguments as :meth:`list_events`, minus the page token.
        Any failure aborts the whole fetch.
        """
        result = EventPage()
        page_token: str | None = None
        pages = 0

        while True:
            page = self.list_events(
                calendar_id,
                time_min=time_min,
                time_max=time_max,
                page_token=page_token,
                max_results=max_results,
                order_by=order_by,
                single_events=single_events,
            )
            pages += 1
            result = merge_flat(result, page)
            page_token = page.next_page_token
            if not page_token:
                break

        logger.debug(f"Fetched {len(result)} events for {calendar_id} in {pages} page(s)")
        return result

    def calendar_info(self, calendar_id: str) -> CalendarInfo:
        """
        Fetch the title and description of a calendar.

        Raises:
            TransportError: If the request fails.
            DecodeError: If the response is not a JSON object.
        """
        url = self._calendar_url(calendar_id)
        payload = get_json(self.transport, url)
        if not isinstance(payload, dict):
            raise DecodeError("Calendar response is not a JSON object", url)

        return CalendarInfo(
            id=payload.get("id") or calendar_id,
            title=payload.get("summary") or "",
            description=payload.get("description") or "",
            time_zone=payload.get("timeZone"),
        )
