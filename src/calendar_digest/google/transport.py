"""Authenticated HTTP transport for the Google Calendar API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from calendar_digest.google.errors import DecodeError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://www.googleapis.com/calendar/v3"


@dataclass
class TransportResponse:
    """Status and body of a completed GET request."""

    status_code: int
    body: str
    reason: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


class CalendarTransport(Protocol):
    """Anything that can issue an authenticated GET against the API."""

    def get(self, url: str, params: dict[str, str] | None = None) -> TransportResponse: ...


class BearerTransport:
    """GET transport that attaches a bearer access token to every request.

    Token acquisition and refresh happen elsewhere; this class only sends
    whatever token it was given.
    """

    def __init__(
        self,
        access_token: str,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.access_token = access_token
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def get(self, url: str, params: dict[str, str] | None = None) -> TransportResponse:
        """
        Issue a GET request.

        Args:
            url: Absolute URL to fetch.
            params: Query parameters to append.

        Returns:
            The response status and decoded body text.

        Raises:
            TransportError: If the request could not be completed at all.
        """
        headers = {"Authorization": f"Bearer {self.access_token}"}
        logger.debug(f"GET {url} params={params}")
        try:
            response = self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Google API request failed: {e}", url) from e

        return TransportResponse(
            status_code=response.status_code,
            body=response.text,
            reason=response.reason_phrase,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> BearerTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def get_json(
    transport: CalendarTransport, url: str, params: dict[str, str] | None = None
) -> Any:
    """
    Fetch a URL through the transport and decode the JSON body.

    Args:
        transport: The authenticated transport to use.
        url: Absolute URL to fetch.
        params: Query parameters to append.

    Returns:
        The decoded JSON document.

    Raises:
        TransportError: If the response status is not a success.
        DecodeError: If the body is not valid JSON.
    """
    response = transport.get(url, params)

    if not response.is_success:
        raise TransportError(
            f"Google API request failed: {response.status_line}",
            url,
            status_code=response.status_code,
        )

    try:
        return json.loads(response.body)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON in API response: {e}", url) from e
