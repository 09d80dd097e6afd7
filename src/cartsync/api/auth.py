#!/usr/bin/env python3
"""Service-account token management for Google Workspace APIs.

Access tokens come from google-auth service-account credentials with
domain-wide delegation: the credentials impersonate a Workspace admin user
(``subject``) so the Directory API accepts Chrome OS device and org-unit
calls. google-auth's refresh is blocking, so it runs in a worker thread.

Features:
    - Token caching with an expiry safety buffer
    - Serialized refresh using asyncio.Lock
    - Backoff on transport failures (1s, 2s)
    - invalidate() hook used by the HTTP client on 401 responses

Security Notes:
    - Tokens are cached in memory only (never persisted to disk)
    - Token ID in debug output uses SHA-256 hash (first 8 chars)

Example:
    >>> manager = ServiceAccountTokenManager("service-account.json", "admin@example.com")
    >>> token = await manager.get_token()
"""
import asyncio
import hashlib
import logging
import os
import time
from dataclasses import dataclass
from datetime import timezone
from pathlib import Path
from typing import Optional

import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from .exceptions import (
    ConfigurationError,
    InvalidCredentialsError,
    TokenFetchError,
)

logger = logging.getLogger(__name__)

DIRECTORY_DEVICE_SCOPE = "https://www.googleapis.com/auth/admin.directory.device.chromeos"
DIRECTORY_ORGUNIT_SCOPE = "https://www.googleapis.com/auth/admin.directory.orgunit"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

DEFAULT_SCOPES = (DIRECTORY_DEVICE_SCOPE, DIRECTORY_ORGUNIT_SCOPE)

# google-auth tokens last an hour
DEFAULT_TOKEN_LIFETIME = 3600


@dataclass
class CachedToken:
    """Container for a cached OAuth2 access token.

    Attributes:
        access_token: The OAuth2 bearer token string.
        expires_at: Unix timestamp when the token expires.
    """
    access_token: str
    expires_at: float

    BUFFER_SECONDS = 60

    @property
    def token_id(self) -> str:
        """Safe identifier for logging (SHA-256 hash, first 8 chars)."""
        return hashlib.sha256(self.access_token.encode()).hexdigest()[:8]

    @property
    def is_expired(self) -> bool:
        return time.time() >= (self.expires_at - self.BUFFER_SECONDS)

    @property
    def time_remaining(self) -> float:
        return max(0, self.expires_at - time.time())


def load_credentials(
    path: str,
    subject: str,
    scopes: list[str],
) -> service_account.Credentials:
    """Load delegated credentials from a service-account JSON key file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a
            service-account key.
    """
    if not Path(path).is_file():
        raise ConfigurationError(
            f"Service account file not found: {path}",
            missing_keys=["serviceAccount"],
        )

    try:
        return service_account.Credentials.from_service_account_file(
            path, scopes=scopes, subject=subject
        )
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Invalid service account file {path}: {e}", cause=e)


class ServiceAccountTokenManager:
    """OAuth2 token manager for a delegated Google service account.

    Attributes:
        credentials: google-auth service-account credentials.
        subject: Workspace admin user to impersonate (from env: CARTSYNC_ADMIN_USER).
        scopes: OAuth2 scopes requested for the token.

    Example:
        >>> manager = ServiceAccountTokenManager(
        ...     "service-account.json",
        ...     subject="admin@example.com",
        ...     scopes=[DIRECTORY_DEVICE_SCOPE, SHEETS_SCOPE],
        ... )
        >>> token = await manager.get_token()
    """

    def __init__(
        self,
        service_account_file: Optional[str] = None,
        subject: Optional[str] = None,
        scopes: Optional[list[str]] = None,
    ):
        service_account_file = service_account_file or os.getenv("CARTSYNC_SERVICE_ACCOUNT")
        self.subject = subject or os.getenv("CARTSYNC_ADMIN_USER")

        missing = []
        if not service_account_file:
            missing.append("CARTSYNC_SERVICE_ACCOUNT")
        if not self.subject:
            missing.append("CARTSYNC_ADMIN_USER")
        if missing:
            raise ConfigurationError(
                f"Missing required settings: {', '.join(missing)}",
                missing_keys=missing,
            )

        self.scopes = list(scopes or DEFAULT_SCOPES)
        self.credentials = load_credentials(service_account_file, self.subject, self.scopes)

        self._cached_token: Optional[CachedToken] = None
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        """Get a valid access token, fetching or refreshing as needed.

        Raises:
            TokenFetchError: If token cannot be obtained after retries
            InvalidCredentialsError: If Google rejects the grant
        """
        if self._cached_token and not self._cached_token.is_expired:
            return self._cached_token.access_token

        async with self._lock:
            if self._cached_token and not self._cached_token.is_expired:
                return self._cached_token.access_token

            self._cached_token = await self._fetch_token()
            return self._cached_token.access_token

    async def _fetch_token(self, max_retries: int = 3) -> CachedToken:
        """Refresh the credentials and cache the new access token.

        Raises:
            TokenFetchError: If the token endpoint stays unreachable
            InvalidCredentialsError: If the grant is rejected
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, max_retries + 1):
            try:
                await asyncio.to_thread(self.credentials.refresh, Request())
            except google.auth.exceptions.RefreshError as e:
                if not getattr(e, "retryable", False):
                    # invalid_grant / unauthorized_client: delegation or key problem
                    raise InvalidCredentialsError(f"Token request rejected: {e}", cause=e)
                last_error = e
                logger.warning(f"Token fetch attempt {attempt}/{max_retries} failed: {e}")
            except google.auth.exceptions.TransportError as e:
                last_error = e
                logger.warning(f"Token fetch attempt {attempt}/{max_retries} failed: {e}")
            else:
                return self._cache_credentials_token()

            if attempt < max_retries:
                wait_time = 2 ** (attempt - 1)
                logger.debug(f"Waiting {wait_time}s before retry")
                await asyncio.sleep(wait_time)

        raise TokenFetchError(
            f"Failed to fetch token after {max_retries} attempts: {last_error}",
            cause=last_error,
        )

    def _cache_credentials_token(self) -> CachedToken:
        access_token = self.credentials.token
        if not access_token:
            raise TokenFetchError("Token refresh returned no access token")

        expiry = self.credentials.expiry
        if expiry is None:
            expires_at = time.time() + DEFAULT_TOKEN_LIFETIME
        else:
            # google-auth keeps expiry as a naive UTC datetime
            expires_at = expiry.replace(tzinfo=timezone.utc).timestamp()

        token = CachedToken(access_token=access_token, expires_at=expires_at)
        logger.info(
            f"Token fetched (id={token.token_id}) for {self.subject}, "
            f"expires in {int(token.time_remaining)}s"
        )
        return token

    def invalidate(self):
        """Invalidate the cached token."""
        self._cached_token = None

    @property
    def token_info(self) -> Optional[dict]:
        """Debug info about the cached token (hash only, never the token)."""
        if not self._cached_token:
            return None
        return {
            "token_id": self._cached_token.token_id,
            "is_expired": self._cached_token.is_expired,
            "time_remaining_seconds": self._cached_token.time_remaining,
            "subject": self.subject,
        }
