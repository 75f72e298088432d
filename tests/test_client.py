"""Tests for the listings API transport."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from curl_cffi import CurlMime
from curl_cffi.requests import RequestsError

from listings_mcp.api.client import (
    ApiClient,
    RequestFailed,
    TransportError,
    failure_message,
)
from listings_mcp.api.multipart import MultipartForm
from listings_mcp.models import HttpMethod
from tests.conftest import MockResponse, json_response

TEST_URL = "http://api.test/api/listings"
JSON_HEADERS = {"Content-Type": "application/json"}


@pytest.mark.asyncio
async def test_get_success(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(200, {"listings": []}))
        mock_session.close = AsyncMock()
        async with client:
            result = await client.send(HttpMethod.GET, TEST_URL, JSON_HEADERS, {"ignored": True})
    assert result == {"listings": []}
    args, kwargs = mock_session.request.call_args
    assert args == ("GET", TEST_URL)
    assert "data" not in kwargs
    assert "multipart" not in kwargs


@pytest.mark.asyncio
async def test_post_serializes_json(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(201, {"ok": True}))
        mock_session.close = AsyncMock()
        async with client:
            await client.send(HttpMethod.POST, TEST_URL, JSON_HEADERS, {"username": "a"})
    kwargs = mock_session.request.call_args[1]
    assert json.loads(kwargs["data"]) == {"username": "a"}
    assert kwargs["headers"] == JSON_HEADERS


@pytest.mark.asyncio
async def test_post_without_body_sends_nothing(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(200, {}))
        mock_session.close = AsyncMock()
        async with client:
            await client.send(HttpMethod.POST, TEST_URL, JSON_HEADERS, None)
    assert "data" not in mock_session.request.call_args[1]


@pytest.mark.asyncio
async def test_multipart_body(client):
    form = MultipartForm()
    form.append("title", "Flat")
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(200, {}))
        mock_session.close = AsyncMock()
        async with client:
            await client.send(HttpMethod.POST, TEST_URL, {}, form)
    kwargs = mock_session.request.call_args[1]
    assert isinstance(kwargs["multipart"], CurlMime)
    assert "data" not in kwargs


@pytest.mark.asyncio
async def test_error_field_becomes_message(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(401, {"error": "Invalid credentials"}))
        mock_session.close = AsyncMock()
        async with client:
            with pytest.raises(RequestFailed, match="Invalid credentials") as exc_info:
                await client.send(HttpMethod.POST, TEST_URL, JSON_HEADERS, {})
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_message_field_used_when_no_error(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(404, {"message": "Not found"}))
        mock_session.close = AsyncMock()
        async with client:
            with pytest.raises(RequestFailed, match="Not found"):
                await client.send(HttpMethod.DELETE, TEST_URL, JSON_HEADERS, None)


@pytest.mark.asyncio
async def test_non_json_body_raises_transport_error(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=MockResponse(502, "<html>Bad gateway</html>"))
        mock_session.close = AsyncMock()
        async with client:
            with pytest.raises(TransportError, match="Invalid JSON"):
                await client.send(HttpMethod.GET, TEST_URL, JSON_HEADERS)


@pytest.mark.asyncio
async def test_connection_error_raises_transport_error(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(side_effect=RequestsError("connection refused"))
        mock_session.close = AsyncMock()
        async with client:
            with pytest.raises(TransportError, match="connection refused"):
                await client.send(HttpMethod.GET, TEST_URL, JSON_HEADERS)
    # No automatic retry
    assert mock_session.request.call_count == 1


@pytest.mark.asyncio
async def test_session_settings(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(200, {}))
        mock_session.close = AsyncMock()
        async with client:
            await client.send(HttpMethod.GET, TEST_URL, JSON_HEADERS)
    call_kwargs = MockSession.call_args[1]
    assert call_kwargs["impersonate"] == "chrome136"
    assert call_kwargs["timeout"] == 30.0


@pytest.mark.asyncio
async def test_context_manager_closes_session(client):
    with patch("listings_mcp.api.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.request = AsyncMock(return_value=json_response(200, {}))
        mock_session.close = AsyncMock()
        async with client:
            await client.send(HttpMethod.GET, TEST_URL, JSON_HEADERS)
    assert client._client is None
    mock_session.close.assert_awaited_once()


class TestFailureMessage:
    def test_prefers_error(self):
        assert failure_message({"error": "E", "message": "M"}) == "E"

    def test_falls_back_to_message(self):
        assert failure_message({"message": "M"}) == "M"

    def test_default(self):
        assert failure_message({}) == "Request failed"
        assert failure_message(["not", "a", "dict"]) == "Request failed"
        assert failure_message({"error": ""}) == "Request failed"
