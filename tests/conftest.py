"""Pytest fixtures for calendar-digest tests."""

import json
from datetime import datetime, timezone
from typing import Any

import pytest

from calendar_digest.google import TransportResponse
from calendar_digest.logging import reset_logging


class FakeTransport:
    """Transport that replays canned responses and records every request."""

    def __init__(self, responses: list[TransportResponse]) -> None:
        self.responses = list(responses)
        self.requests: list[tuple[str, dict[str, str]]] = []
        self.closed = False

    def get(self, url: str, params: dict[str, str] | None = None) -> TransportResponse:
        self.requests.append((url, dict(params or {})))
        if not self.responses:
            raise AssertionError(f"Unexpected request to {url}")
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def json_response(payload: Any, status: int = 200, reason: str = "OK") -> TransportResponse:
    """Build a transport response with a JSON body."""
    return TransportResponse(status_code=status, body=json.dumps(payload), reason=reason)


def make_item(
    id: str,
    summary: str = "Event",
    start: str | None = "2024-01-01T10:00:00Z",
    end: str | None = "2024-01-01T11:00:00Z",
    **extra: Any,
) -> dict[str, Any]:
    """Build an API event item. Values without a 'T' become date-only times."""
    item: dict[str, Any] = {"id": id, "summary": summary, **extra}
    if start is not None:
        item["start"] = {"dateTime": start} if "T" in start else {"date": start}
    if end is not None:
        item["end"] = {"dateTime": end} if "T" in end else {"date": end}
    return item


@pytest.fixture
def fake_transport():
    """Factory for transports that replay the given responses."""
    return FakeTransport


@pytest.fixture
def respond():
    """Factory for JSON transport responses."""
    return json_response


@pytest.fixture
def item():
    """Factory for API event items."""
    return make_item


@pytest.fixture
def monday() -> datetime:
    """Midnight UTC on Monday 1 January 2024."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def wednesday() -> datetime:
    """Midnight UTC on Wednesday 3 January 2024."""
    return datetime(2024, 1, 3, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_logging():
    """Close any log files opened by a test."""
    yield
    reset_logging()
