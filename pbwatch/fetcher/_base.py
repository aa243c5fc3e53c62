"""Base classes and utilities for osu! API fetchers.

This module provides the foundational classes for fetching data from the osu! API,
including the OAuth token cache and HTTP request handling.

Classes:
    TokenAuthError: Exception raised when token authorization fails.
    BaseFetcher: Base class for all fetchers with OAuth and request handling.
"""

import asyncio
from collections.abc import Sequence
from typing import Any

from pbwatch.log import fetcher_logger
from pbwatch.storage import KeyValueStore

from httpx import AsyncClient, HTTPStatusError, Limits, TimeoutException, TransportError

logger = fetcher_logger("Fetcher")


class TokenAuthError(Exception):
    """Exception raised when token authorization fails."""

    pass


class BaseFetcher:
    """Base class for all osu! API fetchers.

    Provides the bearer token cache and request handling. The token lives only
    in the injected key-value store: its TTL is the single source of truth for
    expiry, so a cache miss is the only renewal trigger besides an explicit
    renewal request.

    Attributes:
        client_id: The OAuth client ID.
        client_secret: The OAuth client secret.
        store: The key-value store holding the cached token.
        token_key: The store key of the cached token.
        base_url: The osu! web base URL.
        api_version: The value sent in the `x-api-version` header.
        scope: The OAuth scopes to request.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        store: KeyValueStore,
        *,
        token_key: str = "osu_v2_token",
        base_url: str = "https://osu.ppy.sh",
        api_version: str = "20240529",
        scope: Sequence[str] = ("public",),
        client: AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the fetcher with OAuth credentials.

        Args:
            client_id: The OAuth client ID.
            client_secret: The OAuth client secret.
            store: The key-value store used as token cache.
            token_key: The store key of the cached token. Defaults to "osu_v2_token".
            base_url: The osu! web base URL. Defaults to "https://osu.ppy.sh".
            api_version: The `x-api-version` header value. Defaults to "20240529".
            scope: The OAuth scopes to request. Defaults to ("public",).
            client: An existing HTTP client to reuse. The fetcher creates and
                owns one when omitted.
            timeout: Request timeout in seconds for an owned client.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.store = store
        self.token_key = token_key
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.scope = list(scope)
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._token_lock = asyncio.Lock()

    async def _get_client(self) -> AsyncClient:
        """Get or create the shared HTTP client.

        Returns:
            The shared AsyncClient instance.
        """
        if self._client is None:
            self._client = AsyncClient(
                timeout=self._timeout,
                limits=Limits(max_keepalive_connections=5, max_connections=10),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def header(self, token: str) -> dict[str, str]:
        """Get the HTTP headers for API requests.

        Args:
            token: The bearer token.

        Returns:
            A dictionary containing the Authorization, Accept and API version headers.
        """
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "x-api-version": self.api_version,
        }

    async def get_token(self, force_renew: bool = False) -> str | None:
        """Return a bearer token, from cache when possible.

        Args:
            force_renew: Skip the cache and request a new token.

        Returns:
            The access token, or None if a new token could not be granted.
        """
        async with self._token_lock:
            if not force_renew:
                cached_token = await self.store.get(self.token_key)
                if cached_token is not None:
                    return cached_token

            logger.info("Renewing osu! API v2 token")
            try:
                return await self.grant_access_token()
            except TokenAuthError as e:
                logger.error(f"Failed to get osu! API v2 token: {e}")
                return None

    async def grant_access_token(self, retries: int = 3, backoff: float = 1.0) -> str:
        """Request a new access token using client credentials.

        The token is cached with a TTL equal to the reported `expires_in`, so
        it disappears from the store when it expires. Only transport-level
        failures are retried; a non-success status fails immediately.

        Args:
            retries: The number of attempts on timeouts and transport errors. Defaults to 3.
            backoff: The base backoff time in seconds between retries. Defaults to 1.0.

        Returns:
            The new access token.

        Raises:
            TokenAuthError: If the token endpoint answers with a non-success
                status or every attempt fails.
        """
        client = await self._get_client()
        last_error: Exception | None = None
        for attempt in range(1, retries + 1):
            try:
                response = await client.post(
                    f"{self.base_url}/oauth/token",
                    headers={"Accept": "application/json"},
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "grant_type": "client_credentials",
                        "scope": " ".join(self.scope),
                    },
                )
                response.raise_for_status()
                token_data = response.json()
                access_token: str = token_data["access_token"]
                expires_in = int(token_data["expires_in"])
                if expires_in > 0:
                    await self.store.put(self.token_key, access_token, ttl=expires_in)
                else:
                    # a non-positive TTL would cache the token forever
                    logger.warning(f"Token for client {self.client_id} reported expires_in={expires_in}, not caching it")
                logger.success(f"Granted new access token for client {self.client_id}, expires in {expires_in} seconds")
                return access_token

            except HTTPStatusError as exc:
                raise TokenAuthError(
                    f"token endpoint returned {exc.response.status_code} {exc.response.text}"
                ) from exc
            except (TimeoutException, TransportError) as exc:
                last_error = exc
                logger.warning(
                    f"Transport error while requesting access token for client {self.client_id}"
                    f" ({type(exc).__name__}, attempt {attempt}/{retries})"
                )
            except (KeyError, ValueError) as exc:
                raise TokenAuthError(f"malformed token response: {exc}") from exc

            if attempt < retries:
                await asyncio.sleep(backoff * attempt)

        raise TokenAuthError("Failed to grant access token after retries") from last_error

    async def request_api(self, url: str, token: str, method: str = "GET", **kwargs) -> Any:
        """Send an authorized API request.

        A 401 response forces one token renewal followed by a single retry.

        Args:
            url: The API endpoint URL.
            token: The bearer token to use.
            method: The HTTP method to use. Defaults to "GET".
            **kwargs: Additional arguments to pass to the HTTP client.

        Returns:
            The decoded JSON response.

        Raises:
            TokenAuthError: If the token could not be renewed after a 401.
            HTTPStatusError: If the API answers with any other non-success status.
        """
        client = await self._get_client()
        headers = kwargs.pop("headers", {}).copy()

        for attempt in range(2):
            response = await client.request(method, url, headers={**headers, **self.header(token)}, **kwargs)
            if response.status_code == 401 and attempt == 0:
                logger.warning(f"Received 401 for {url}, renewing token")
                renewed = await self.get_token(force_renew=True)
                if renewed is None:
                    raise TokenAuthError(f"Failed to renew token after 401 for {url}")
                token = renewed
                continue
            response.raise_for_status()
            return response.json()

        raise TokenAuthError(f"Failed to authorize after retries for {url}")
