"""Legrand hub authentication."""

import asyncio
import logging
from typing import Optional

import aiohttp

from constants import HTTP_REQUEST_TIMEOUT
from errors import AuthError
from models import Credentials, HubEndpoint, Session

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Logs in to the Legrand hub and holds the resulting token.

    With reuse_session off (the default) every call to get_session() logs in
    again. With it on, the last session is reused for the same hub address
    until invalidate() is called.
    """

    def __init__(self, reuse_session: bool = False, timeout: float = HTTP_REQUEST_TIMEOUT):
        self.reuse_session = reuse_session
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.http: Optional[aiohttp.ClientSession] = None
        self._cached: Optional[Session] = None

    def _client(self) -> aiohttp.ClientSession:
        if self.http is None or self.http.closed:
            self.http = aiohttp.ClientSession(timeout=self.timeout)
        return self.http

    async def close(self):
        """Close the HTTP session."""
        if self.http and not self.http.closed:
            await self.http.close()
        self.http = None

    @property
    def cached(self) -> Optional[Session]:
        return self._cached

    def invalidate(self):
        """Forget the cached session so the next cycle logs in again."""
        if self._cached is not None:
            logger.info("Invalidating cached Legrand session")
        self._cached = None

    async def get_session(self, endpoint: HubEndpoint, credentials: Credentials) -> Session:
        """Return a usable session, logging in unless a cached one applies."""
        cached = self._cached
        if self.reuse_session and cached is not None and cached.endpoint.base_url == endpoint.base_url:
            logger.debug(f"Reusing Legrand session for {endpoint.base_url}")
            return cached
        try:
            session = await self.authenticate(endpoint, credentials)
        except AuthError:
            self.invalidate()
            raise
        if self.reuse_session:
            self._cached = session
        return session

    async def authenticate(self, endpoint: HubEndpoint, credentials: Credentials) -> Session:
        """POST {base}/login and extract the token."""
        url = f"{endpoint.base_url}/login"
        payload = {"username": credentials.username, "password": credentials.password}
        try:
            async with self._client().post(url, json=payload) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise AuthError(f"Legrand login rejected: HTTP {resp.status}")
                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise AuthError(f"Legrand login returned invalid JSON: {e}") from e
        except aiohttp.ClientError as e:
            raise AuthError(f"Cannot reach Legrand hub at {endpoint.base_url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise AuthError(f"Timeout logging in to Legrand hub at {endpoint.base_url}") from e

        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError("Legrand login response did not contain a token")

        logger.info(f"Authenticated against Legrand hub at {endpoint.base_url}")
        return Session(token=token, endpoint=endpoint)
