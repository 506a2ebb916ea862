"""Tests for grouping events into days."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from calendar_digest.calendar.client import CalendarClient
from calendar_digest.calendar.days import (
    BucketedResult,
    DayBucketizer,
    bucket_events,
    make_bucket,
    range_strings,
)
from calendar_digest.calendar.events import CalendarEvent

UTC = timezone.utc


def events_from(*items: dict) -> list[CalendarEvent]:
    return [CalendarEvent.from_api(item) for item in items]


class TestBucketEvents:
    """Tests for partitioning events by start date."""

    def test_partition_and_skip_counts(self, item) -> None:
        """Every event lands in exactly one bucket or is counted as skipped."""
        events = events_from(
            item("a", start="2024-01-01T09:00:00Z", end="2024-01-01T10:00:00Z"),
            item("b", start="2024-01-01", end="2024-01-02"),
            item("c", start="2024-01-02T15:00:00Z", end="2024-01-02T16:00:00Z"),
            item("d", "No start", start=None, end=None),
            {"id": "e", "summary": "Empty start", "start": {}, "end": {}},
        )
        diagnostics = MagicMock()

        days, skipped = bucket_events(events, diagnostics=diagnostics)

        assert sorted(days) == ["2024-01-01", "2024-01-02"]
        assert [event.id for event in days["2024-01-01"].events] == ["a", "b"]
        assert [event.id for event in days["2024-01-02"].events] == ["c"]
        assert skipped == 2
        assert sum(len(bucket) for bucket in days.values()) + skipped == len(events)
        assert diagnostics.warning.call_count == 2
        messages = [call.args[0] for call in diagnostics.warning.call_args_list]
        assert "'No start'" in messages[0]
        assert "'Empty start'" in messages[1]

    def test_bucket_names_and_anchor(self, item) -> None:
        days, _ = bucket_events(events_from(item("a")))
        bucket = days["2024-01-01"]
        assert bucket.date == "2024-01-01"
        assert bucket.long_name == "Monday, 01 January 2024"
        assert bucket.short_name == "Mon, 01 Jan 2024"
        assert bucket.anchor_date == datetime(2024, 1, 1, tzinfo=UTC)

    def test_time_string_and_all_day(self, item) -> None:
        days, _ = bucket_events(events_from(
            item("a", start="2024-01-01", end="2024-01-02"),
            item("b", start="2024-01-01T10:00:00Z", end="2024-01-01T11:00:00Z"),
            item("c", start="2024-01-01", end="2024-01-03"),
        ))
        all_day, timed, span = days["2024-01-01"].events
        assert (all_day.all_day, all_day.time_string) == (True, "All day")
        assert (timed.all_day, timed.time_string) == (False, "From 10:00 to 11:00")
        assert span.all_day is True
        assert span.time_string == "From Mon, 01 Jan 2024 to Tue, 02 Jan 2024"

    def test_input_events_are_not_modified(self, item) -> None:
        events = events_from(item("a"))
        bucket_events(events)
        assert events[0].time_string == ""

    def test_insertion_order_is_kept(self, item) -> None:
        """Buckets are not resorted while bucketing."""
        days, _ = bucket_events(events_from(
            item("late", start="2024-01-01T15:00:00Z", end="2024-01-01T16:00:00Z"),
            item("early", start="2024-01-01T08:00:00Z", end="2024-01-01T09:00:00Z"),
        ))
        assert [event.id for event in days["2024-01-01"].events] == ["late", "early"]

    def test_bucket_uses_local_date_portion(self, item) -> None:
        """An event at 00:30+01:00 on the 2nd goes in the 2nd's bucket."""
        days, _ = bucket_events(events_from(
            item("a", start="2024-01-02T00:30:00+01:00", end="2024-01-02T01:30:00+01:00"),
        ))
        assert list(days) == ["2024-01-02"]

    def test_malformed_end_is_skipped(self, item) -> None:
        events = events_from(item("a"))
        events[0].end = {"dateTime": "whenever"}
        diagnostics = MagicMock()

        days, skipped = bucket_events(events, diagnostics=diagnostics)

        assert days == {}
        assert skipped == 1
        diagnostics.warning.assert_called_once()

    def test_malformed_start_shapes_are_skipped(self, item) -> None:
        """Only the malformed events are lost, each with one warning."""
        events = events_from(
            {"id": "text", "summary": "Text start", "start": "2024-01-02", "end": "2024-01-03"},
            {"id": "number", "summary": "Number start", "start": {"date": 20240102}},
            item("good"),
        )
        diagnostics = MagicMock()

        days, skipped = bucket_events(events, diagnostics=diagnostics)

        assert [event.id for event in days["2024-01-01"].events] == ["good"]
        assert skipped == 2
        assert diagnostics.warning.call_count == 2

    def test_no_events(self) -> None:
        assert bucket_events([]) == ({}, 0)


class TestRangeStrings:
    """Tests for range labels."""

    def test_end_label_is_last_included_day(self) -> None:
        start, end = range_strings(datetime(2024, 1, 2, tzinfo=UTC), datetime(2024, 1, 5, tzinfo=UTC))
        assert start == "Tue, 02 Jan 2024"
        assert end == "Thu, 04 Jan 2024"

    def test_unset_range(self) -> None:
        assert range_strings(None, None) == ("", "")


class TestDayBucketizer:
    """Tests for fetching and bucketing a calendar."""

    def test_request_window(self, fake_transport, respond, item, monday) -> None:
        """From tomorrow for two days covers Tuesday to Thursday inclusive."""
        transport = fake_transport([
            respond({"items": [
                item("a", start="2024-01-02T09:00:00Z", end="2024-01-02T10:00:00Z"),
                item("b", start="2024-01-04", end="2024-01-05"),
            ]})
        ])
        bucketizer = DayBucketizer(CalendarClient(transport))

        result = bucketizer.bucketize("primary", 2, "1", today=monday)

        params = transport.requests[0][1]
        assert params["timeMin"] == "2024-01-02T00:00:00Z"
        assert params["timeMax"] == "2024-01-05T00:00:00Z"
        assert result.req_start == datetime(2024, 1, 2, tzinfo=UTC)
        assert result.req_end == datetime(2024, 1, 5, tzinfo=UTC)
        assert result.start_date == result.req_start
        assert result.end_date == result.req_end
        assert result.start == "Tue, 02 Jan 2024"
        assert result.end == "Thu, 04 Jan 2024"
        assert sorted(result.days) == ["2024-01-02", "2024-01-04"]
        assert result.event_count == 2
        assert result.skipped == 0

    def test_zero_days_is_one_day(self, fake_transport, respond, monday) -> None:
        transport = fake_transport([respond({"items": []})])
        result = DayBucketizer(CalendarClient(transport)).bucketize("primary", 0, "0", today=monday)
        assert result.req_end - result.req_start == datetime(2024, 1, 2) - datetime(2024, 1, 1)
        assert result.days == {}

    def test_start_is_truncated_to_day(self, fake_transport, respond, monday) -> None:
        transport = fake_transport([respond({"items": []})])
        result = DayBucketizer(CalendarClient(transport)).bucketize(
            "primary", 1, "2024-03-10T15:45:00Z", today=monday
        )
        assert result.req_start == datetime(2024, 3, 10, tzinfo=UTC)

    def test_previous_weekday(self, fake_transport, respond, monday) -> None:
        transport = fake_transport([respond({"items": []})])
        result = DayBucketizer(CalendarClient(transport)).bucketize("primary", 7, "-fri", today=monday)
        assert result.req_start == datetime(2023, 12, 29, tzinfo=UTC)

    def test_skipped_events_reported(self, fake_transport, respond, item, monday) -> None:
        transport = fake_transport([respond({"items": [item("a", "Broken", start=None), item("b")]})])
        diagnostics = MagicMock()
        bucketizer = DayBucketizer(CalendarClient(transport), diagnostics=diagnostics)

        result = bucketizer.bucketize("primary", 1, "0", today=monday)

        assert result.skipped == 1
        assert result.event_count == 1
        diagnostics.warning.assert_called_once()

    def test_text_start_does_not_abort(self, fake_transport, respond, item, monday) -> None:
        transport = fake_transport([
            respond({"items": [
                {"id": "bad", "summary": "Bad", "start": "2024-01-02", "end": "2024-01-03"},
                item("good", start="2024-01-02T09:00:00Z", end="2024-01-02T10:00:00Z"),
            ]})
        ])

        result = DayBucketizer(CalendarClient(transport)).bucketize("primary", 2, "1", today=monday)

        assert result.skipped == 1
        assert [event.id for event in result.days["2024-01-02"].events] == ["good"]

    def test_negative_days_rejected(self, fake_transport) -> None:
        bucketizer = DayBucketizer(CalendarClient(fake_transport([])))
        with pytest.raises(ValueError):
            bucketizer.bucketize("primary", -1)


class TestBucketedResult:
    """Tests for result helpers."""

    def test_sorted_days(self) -> None:
        result = BucketedResult(days={
            "2024-01-03": make_bucket("2024-01-03"),
            "2024-01-01": make_bucket("2024-01-01"),
        })
        assert [bucket.date for bucket in result.sorted_days()] == ["2024-01-01", "2024-01-03"]
