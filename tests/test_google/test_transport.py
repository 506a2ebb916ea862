"""Tests for the bearer-token HTTP transport."""

import httpx
import pytest

from calendar_digest.google import (
    BearerTransport,
    DecodeError,
    TransportError,
    TransportResponse,
    get_json,
)

URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"


def client_for(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestTransportResponse:
    """Tests for response helpers."""

    @pytest.mark.parametrize("status,expected", [(200, True), (204, True), (301, False), (404, False)])
    def test_is_success(self, status: int, expected: bool) -> None:
        assert TransportResponse(status, "").is_success is expected

    def test_status_line(self) -> None:
        assert TransportResponse(404, "", "Not Found").status_line == "404 Not Found"
        assert TransportResponse(500, "").status_line == "500"


class TestBearerTransport:
    """Tests for issuing requests."""

    def test_sends_token_and_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": []})

        transport = BearerTransport("secret", client=client_for(handler))
        response = transport.get(URL, {"singleEvents": "true", "pageToken": "t1"})

        assert response.status_code == 200
        assert response.reason == "OK"
        assert '"items"' in response.body
        request = seen[0]
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.url.params["singleEvents"] == "true"
        assert request.url.params["pageToken"] == "t1"
        assert str(request.url).startswith(URL)

    def test_error_status_is_returned(self) -> None:
        transport = BearerTransport(
            "secret", client=client_for(lambda request: httpx.Response(404, text="gone"))
        )
        response = transport.get(URL)
        assert response.status_code == 404
        assert response.body == "gone"
        assert response.is_success is False

    def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = BearerTransport("secret", client=client_for(handler))
        with pytest.raises(TransportError) as exc_info:
            transport.get(URL)
        assert exc_info.value.status_code is None
        assert exc_info.value.url == URL
        assert "connection refused" in str(exc_info.value)

    def test_given_client_is_not_closed(self) -> None:
        client = client_for(lambda request: httpx.Response(200, json={}))
        with BearerTransport("secret", client=client):
            pass
        assert client.is_closed is False

    def test_own_client_is_closed(self) -> None:
        transport = BearerTransport("secret")
        transport.close()
        assert transport._client.is_closed is True


class TestGetJson:
    """Tests for decoding API responses."""

    def test_decodes_body(self, fake_transport, respond) -> None:
        transport = fake_transport([respond({"items": [{"id": "a"}]})])
        assert get_json(transport, URL, {"a": "b"}) == {"items": [{"id": "a"}]}
        assert transport.requests == [(URL, {"a": "b"})]

    def test_non_success_status(self, fake_transport) -> None:
        transport = fake_transport([TransportResponse(404, "{}", "Not Found")])
        with pytest.raises(TransportError) as exc_info:
            get_json(transport, URL)
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL
        assert str(exc_info.value) == "Google API request failed: 404 Not Found"

    def test_invalid_json(self, fake_transport) -> None:
        transport = fake_transport([TransportResponse(200, "not json", "OK")])
        with pytest.raises(DecodeError) as exc_info:
            get_json(transport, URL)
        assert exc_info.value.url == URL

    def test_through_http_client(self) -> None:
        transport = BearerTransport(
            "secret", client=client_for(lambda request: httpx.Response(500, text="boom"))
        )
        with pytest.raises(TransportError) as exc_info:
            get_json(transport, URL)
        assert exc_info.value.status_code == 500
