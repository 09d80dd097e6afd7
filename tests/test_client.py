#!/usr/bin/env python3
"""Unit tests for the Google API HTTP client.

Tests cover:
    - Successful JSON and empty responses
    - Status code to exception mapping
    - Token invalidation on 401
    - Network error wrapping
"""

import sys
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.cartsync.api.client import DIRECTORY_BASE_URL, GoogleAPIClient
from src.cartsync.api.exceptions import (
    APIError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TokenExpiredError,
    ValidationError,
)


def make_response(status: int, body: str = "", headers: dict | None = None):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=body)
    response.headers = headers or {}
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


@pytest.fixture
def token_manager():
    manager = MagicMock()
    manager.get_token = AsyncMock(return_value="token_abc")
    manager.invalidate = MagicMock()
    return manager


@pytest.fixture
def client(token_manager):
    """Client with a mocked session, as if inside ``async with``."""
    api_client = GoogleAPIClient(token_manager, DIRECTORY_BASE_URL)
    api_client._session = MagicMock()
    return api_client


# ============================================
# Construction
# ============================================

class TestGoogleAPIClientInit:
    def test_empty_base_url_raises(self, token_manager):
        with pytest.raises(ConfigurationError):
            GoogleAPIClient(token_manager, "")

    def test_trailing_slash_stripped(self, token_manager):
        api_client = GoogleAPIClient(token_manager, "https://example.com/api/")
        assert api_client.base_url == "https://example.com/api"

    async def test_request_outside_context_manager(self, token_manager):
        api_client = GoogleAPIClient(token_manager, DIRECTORY_BASE_URL)

        with pytest.raises(RuntimeError, match="async context manager"):
            await api_client.get("/customer/my_customer/orgunits")

    async def test_context_manager_opens_and_closes_session(self, token_manager):
        async with GoogleAPIClient(token_manager, DIRECTORY_BASE_URL) as api_client:
            assert isinstance(api_client._session, aiohttp.ClientSession)
        assert api_client._session is None


# ============================================
# Requests
# ============================================

class TestGoogleAPIClientRequests:
    async def test_get_returns_json(self, client, token_manager):
        client._session.request = MagicMock(
            return_value=make_response(200, '{"organizationUnits": []}')
        )

        data = await client.get("/customer/my_customer/orgunits", params={"type": "all"})

        assert data == {"organizationUnits": []}
        kwargs = client._session.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == f"{DIRECTORY_BASE_URL}/customer/my_customer/orgunits"
        assert kwargs["params"] == {"type": "all"}
        assert kwargs["headers"]["Authorization"] == "Bearer token_abc"

    async def test_empty_body_returns_empty_dict(self, client):
        client._session.request = MagicMock(return_value=make_response(204, ""))

        assert await client.put("/customer/c/devices/chromeos/1", json_body={"notes": "x"}) == {}

    async def test_post_sends_json_body(self, client):
        client._session.request = MagicMock(return_value=make_response(200, "{}"))

        await client.post("/customer/c/orgunits", json_body={"name": "A"})

        kwargs = client._session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["json"] == {"name": "A"}


class TestGoogleAPIClientErrors:
    @pytest.mark.parametrize(
        "status,expected",
        [
            (400, ValidationError),
            (403, APIError),
            (404, NotFoundError),
            (429, RateLimitError),
            (500, ServerError),
            (503, ServerError),
        ],
    )
    async def test_status_mapping(self, client, status, expected):
        client._session.request = MagicMock(return_value=make_response(status, "oops"))

        with pytest.raises(expected) as exc:
            await client.get("/customer/c/devices/chromeos")

        assert exc.value.status_code == status

    async def test_google_error_message_used(self, client):
        body = '{"error": {"code": 403, "message": "Not Authorized to access this resource/api"}}'
        client._session.request = MagicMock(return_value=make_response(403, body))

        with pytest.raises(APIError) as exc:
            await client.get("/customer/c/devices/chromeos")

        assert exc.value.message == "Not Authorized to access this resource/api"

    async def test_error_text_carries_code_and_status(self, client):
        body = '{"error": {"code": 503, "message": "Backend Error"}}'
        client._session.request = MagicMock(return_value=make_response(503, body))

        with pytest.raises(ServerError) as exc:
            await client.put("/customer/c/devices/chromeos/1", json_body={})

        assert exc.value.method == "PUT"
        assert exc.value.endpoint == "/customer/c/devices/chromeos/1"
        assert str(exc.value) == "[SERVER_ERROR] Backend Error (HTTP 503)"

    async def test_401_invalidates_token(self, client, token_manager):
        client._session.request = MagicMock(return_value=make_response(401, "unauthorized"))

        with pytest.raises(TokenExpiredError):
            await client.get("/customer/c/orgunits")

        token_manager.invalidate.assert_called_once()

    async def test_connection_error_wrapped(self, client):
        client._session.request = MagicMock(
            side_effect=aiohttp.ClientConnectionError("refused")
        )

        with pytest.raises(ConnectionError):
            await client.get("/customer/c/orgunits")

    async def test_client_error_wrapped(self, client):
        client._session.request = MagicMock(side_effect=aiohttp.ClientPayloadError("bad"))

        with pytest.raises(NetworkError):
            await client.get("/customer/c/orgunits")


# ============================================
# Run tests
# ============================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
