#!/usr/bin/env python3
"""Generic HTTP Client for Google Workspace REST APIs.

This module provides a small async HTTP client that handles the common
concerns of talking to the Admin SDK Directory API and the Sheets API:

    - Bearer authentication via ServiceAccountTokenManager
    - Token invalidation on 401 responses (the next call re-authenticates)
    - Connection pooling via a shared aiohttp session
    - Error handling with typed exceptions

Design Philosophy:
    This client knows HOW to talk to Google, but not WHAT to fetch.
    It has no knowledge of devices, org units or spreadsheets. That
    knowledge belongs in the adapters that compose this client.

    There is no retry loop and no total request timeout:
    a failed call surfaces immediately so the caller can record it as a
    failed outcome for the record being processed.

Usage:
    async with GoogleAPIClient(token_manager, DIRECTORY_BASE_URL) as client:
        data = await client.get("/customer/my_customer/orgunits", params={"type": "all"})
"""
import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from .exceptions import (
    APIError,
    CartSyncError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimeoutError,
    TokenExpiredError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DIRECTORY_BASE_URL = "https://admin.googleapis.com/admin/directory/v1"
SHEETS_BASE_URL = "https://sheets.googleapis.com/v4"


class GoogleAPIClient:
    """Async HTTP client for Google REST APIs.

    Use as an async context manager to ensure the session is closed:

        async with GoogleAPIClient(token_manager, DIRECTORY_BASE_URL) as client:
            data = await client.get("/some/endpoint")

    Attributes:
        token_manager: Object exposing ``async get_token()`` and ``invalidate()``
        base_url: Base URL for API requests
    """

    def __init__(self, token_manager, base_url: str):
        """Initialize the client.

        Args:
            token_manager: Token provider (ServiceAccountTokenManager or compatible)
            base_url: API base URL (e.g. DIRECTORY_BASE_URL)

        Raises:
            ConfigurationError: If base_url is empty.
        """
        self.token_manager = token_manager
        self.base_url = (base_url or "").rstrip("/")

        if not self.base_url:
            raise ConfigurationError("Base URL is required for GoogleAPIClient")

        self._session: Optional[aiohttp.ClientSession] = None

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "GoogleAPIClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=4, limit_per_host=4),
            timeout=aiohttp.ClientTimeout(total=None),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ----------------------------------------
    # Low-Level Request Method
    # ----------------------------------------

    async def _get_auth_headers(self) -> dict[str, str]:
        token = await self.token_manager.get_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a single HTTP request.

        Args:
            method: HTTP method (GET, POST, PUT)
            endpoint: Path relative to base_url
            params: Query parameters
            json_body: JSON request body

        Returns:
            Parsed JSON response as dict ({} for an empty body)

        Raises:
            APIError: If response status is not 2xx
            RuntimeError: If called outside of async context manager
            ConnectionError: If connection to server fails
            TimeoutError: If the connection times out
        """
        if not self._session:
            raise RuntimeError(
                "GoogleAPIClient must be used as async context manager: "
                "async with GoogleAPIClient(...) as client:"
            )

        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {endpoint} params={params}")

        try:
            headers = await self._get_auth_headers()

            async with self._session.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json_body,
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    if response.status == 401:
                        self.token_manager.invalidate()
                    raise self._create_api_error(
                        status=response.status,
                        method=method,
                        endpoint=endpoint,
                        response_body=error_text,
                    )

                body = await response.text()
                return json.loads(body) if body else {}

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {self.base_url}",
                host=self.base_url,
                cause=e,
            )

        except asyncio.TimeoutError as e:
            raise TimeoutError(f"Request to {endpoint} timed out", cause=e)

        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during {method} {endpoint}: {e}",
                cause=e,
            )

    def _create_api_error(
        self,
        status: int,
        method: str,
        endpoint: str,
        response_body: str,
    ) -> CartSyncError:
        """Create appropriate APIError subclass based on status code."""
        message = _google_error_message(response_body)
        context = {"method": method, "endpoint": endpoint}

        if status == 401:
            return TokenExpiredError(f"Access token expired or invalid for {method} {endpoint}")

        if status == 404:
            return NotFoundError(message or f"{endpoint} not found", **context)

        if status == 429:
            return RateLimitError(message or f"Rate limit exceeded for {endpoint}", **context)

        if status in (400, 422):
            return ValidationError(
                message or f"Validation failed for {method} {endpoint}",
                status_code=status,
                **context,
            )

        if status >= 500:
            return ServerError(
                message or f"Server error for {method} {endpoint}",
                status_code=status,
                **context,
            )

        return APIError(message or f"{method} {endpoint} failed", status, **context)

    # ----------------------------------------
    # High-Level Request Methods
    # ----------------------------------------

    async def get(self, endpoint: str, params: Optional[dict] = None) -> dict[str, Any]:
        return await self.request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        json_body: dict,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        return await self.request("POST", endpoint, params=params, json_body=json_body)

    async def put(
        self,
        endpoint: str,
        json_body: dict,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        return await self.request("PUT", endpoint, params=params, json_body=json_body)


def _google_error_message(response_body: str) -> Optional[str]:
    """Pull ``error.message`` out of a Google JSON error body, if present."""
    try:
        data = json.loads(response_body)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message")
    return None
