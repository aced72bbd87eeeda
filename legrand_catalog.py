"""Legrand device catalog client."""

import asyncio
import logging
from typing import List, Optional

import aiohttp

from constants import HTTP_REQUEST_TIMEOUT
from errors import FetchError, SessionRejected
from legrand_helpers import parse_devices
from models import Device, HubEndpoint, Session

logger = logging.getLogger(__name__)


class DeviceCatalog:
    """Reads the full device list from the Legrand hub."""

    def __init__(self, timeout: float = HTTP_REQUEST_TIMEOUT):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.http: Optional[aiohttp.ClientSession] = None

    def _client(self) -> aiohttp.ClientSession:
        if self.http is None or self.http.closed:
            self.http = aiohttp.ClientSession(timeout=self.timeout)
        return self.http

    async def close(self):
        """Close the HTTP session."""
        if self.http and not self.http.closed:
            await self.http.close()
        self.http = None

    async def list(self, endpoint: HubEndpoint, session: Session) -> List[Device]:
        """GET {base}/devices with the session's bearer token."""
        url = f"{endpoint.base_url}/devices"
        headers = {"Authorization": f"Bearer {session.token}"}
        try:
            async with self._client().get(url, headers=headers) as resp:
                if resp.status in (401, 403):
                    raise SessionRejected(f"Legrand hub rejected session: HTTP {resp.status}")
                if resp.status < 200 or resp.status >= 300:
                    raise FetchError(f"Legrand device list failed: HTTP {resp.status}")
                try:
                    records = await resp.json(content_type=None)
                except ValueError as e:
                    raise FetchError(f"Legrand device list returned invalid JSON: {e}") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Cannot reach Legrand hub at {endpoint.base_url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout reading devices from {endpoint.base_url}") from e

        if not isinstance(records, list):
            raise FetchError(f"Unexpected device list format: {type(records).__name__}")

        devices = parse_devices(records)
        logger.debug(f"Retrieved {len(devices)} devices from Legrand")
        return devices
