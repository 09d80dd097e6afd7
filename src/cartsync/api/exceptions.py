#!/usr/bin/env python3
"""Errors raised by the Google API client, the roster adapters and config.

Every error carries a short machine-readable ``code``. ``str(error)``
renders as ``"[CODE] message"`` and API errors add the HTTP status, so a
failed record's message says what went wrong without a traceback:

    Error updating device 'SN1': [SERVER_ERROR] Backend error (HTTP 503)

Hierarchy:
    CartSyncError
    ├── ConfigurationError      missing or invalid settings, ends the run
    ├── AuthenticationError
    │   ├── TokenFetchError
    │   ├── TokenExpiredError
    │   └── InvalidCredentialsError
    ├── APIError                non-2xx reply, fails one record
    │   ├── RateLimitError
    │   ├── NotFoundError
    │   ├── ValidationError
    │   └── ServerError
    ├── NetworkError
    │   ├── ConnectionError
    │   └── TimeoutError
    └── RosterError
        ├── RosterReadError     ends the run
        └── RosterWriteError
"""
from typing import Optional


class CartSyncError(Exception):
    """Base class for all cart sync errors.

    Attributes:
        message: Human-readable description
        code: Machine-readable code, e.g. "TOKEN_EXPIRED"
    """

    default_code = "CART_SYNC_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(CartSyncError):
    """Settings are missing or invalid.

    ``missing_keys`` names the settings the operator has to supply.
    """

    default_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list[str]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.missing_keys = list(missing_keys or [])


# ============================================
# Authentication
# ============================================

class AuthenticationError(CartSyncError):
    default_code = "AUTHENTICATION_ERROR"


class TokenFetchError(AuthenticationError):
    """No access token could be obtained for the delegated admin."""

    default_code = "TOKEN_FETCH_ERROR"


class TokenExpiredError(AuthenticationError):
    """The API rejected the bearer token (HTTP 401)."""

    default_code = "TOKEN_EXPIRED"

    def __init__(self, message: str = "Access token has expired", **kwargs):
        super().__init__(message, **kwargs)


class InvalidCredentialsError(AuthenticationError):
    """The service account key or the delegated admin was refused."""

    default_code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid service account credentials", **kwargs):
        super().__init__(message, **kwargs)


# ============================================
# API responses
# ============================================

class APIError(CartSyncError):
    """A Google API call returned a non-2xx status.

    Attributes:
        status_code: HTTP status code
        method: HTTP method of the failed call
        endpoint: Path relative to the API base URL
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        method: Optional[str] = None,
        endpoint: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message, code=code or f"API_ERROR_{status_code}")
        self.status_code = status_code
        self.method = method
        self.endpoint = endpoint

    def __str__(self) -> str:
        return f"{super().__str__()} (HTTP {self.status_code})"


class RateLimitError(APIError):
    """HTTP 429."""

    def __init__(self, message: str = "Rate limit exceeded", status_code: int = 429, **kwargs):
        super().__init__(message, status_code, code="RATE_LIMIT_EXCEEDED", **kwargs)


class NotFoundError(APIError):
    """HTTP 404."""

    def __init__(self, message: str = "Resource not found", status_code: int = 404, **kwargs):
        super().__init__(message, status_code, code="NOT_FOUND", **kwargs)


class ValidationError(APIError):
    """HTTP 400 or 422: the request body or query was refused."""

    def __init__(self, message: str, status_code: int = 400, **kwargs):
        super().__init__(message, status_code, code="VALIDATION_ERROR", **kwargs)


class ServerError(APIError):
    """HTTP 5xx."""

    def __init__(self, message: str = "Server error", status_code: int = 500, **kwargs):
        super().__init__(message, status_code, code="SERVER_ERROR", **kwargs)


# ============================================
# Network
# ============================================

class NetworkError(CartSyncError):
    default_code = "NETWORK_ERROR"


class ConnectionError(NetworkError):
    """The API host could not be reached."""

    default_code = "CONNECTION_ERROR"

    def __init__(
        self,
        message: str = "Failed to connect to server",
        host: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.host = host


class TimeoutError(NetworkError):
    default_code = "TIMEOUT_ERROR"

    def __init__(self, message: str = "Request timed out", **kwargs):
        super().__init__(message, **kwargs)


# ============================================
# Roster files
# ============================================

class RosterError(CartSyncError):
    """A roster file could not be read or written.

    Attributes:
        path: The file involved, when known
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.path = path


class RosterReadError(RosterError):
    """The input roster is missing or malformed; the run cannot start."""

    default_code = "ROSTER_READ_ERROR"


class RosterWriteError(RosterError):
    """The failure report could not be written."""

    default_code = "ROSTER_WRITE_ERROR"
