"""Google Workspace API modules.

This package provides the HTTP client, service-account authentication and
the exception hierarchy shared by the directory and spreadsheet adapters.

Classes:
    GoogleAPIClient: Generic async HTTP client with typed errors
    ServiceAccountTokenManager: Delegated service-account OAuth2 tokens

Exceptions:
    CartSyncError: Base exception for all errors
    ConfigurationError: Missing or invalid configuration
    AuthenticationError: Authentication failures
    APIError: API request failures
    NetworkError: Network connectivity issues
    RosterReadError / RosterWriteError: Roster file failures
"""
from .auth import (
    DEFAULT_SCOPES,
    DIRECTORY_DEVICE_SCOPE,
    DIRECTORY_ORGUNIT_SCOPE,
    SHEETS_SCOPE,
    CachedToken,
    ServiceAccountTokenManager,
    load_credentials,
)
from .client import DIRECTORY_BASE_URL, SHEETS_BASE_URL, GoogleAPIClient
from .exceptions import (
    APIError,
    AuthenticationError,
    CartSyncError,
    ConfigurationError,
    ConnectionError,
    InvalidCredentialsError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RosterError,
    RosterReadError,
    RosterWriteError,
    ServerError,
    TimeoutError,
    TokenExpiredError,
    TokenFetchError,
    ValidationError,
)

__all__ = [
    # Auth
    "ServiceAccountTokenManager",
    "load_credentials",
    "CachedToken",
    "DEFAULT_SCOPES",
    "DIRECTORY_DEVICE_SCOPE",
    "DIRECTORY_ORGUNIT_SCOPE",
    "SHEETS_SCOPE",
    # Client
    "GoogleAPIClient",
    "DIRECTORY_BASE_URL",
    "SHEETS_BASE_URL",
    # Exceptions
    "CartSyncError",
    "ConfigurationError",
    "AuthenticationError",
    "TokenFetchError",
    "TokenExpiredError",
    "InvalidCredentialsError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
    "ServerError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "RosterError",
    "RosterReadError",
    "RosterWriteError",
]
