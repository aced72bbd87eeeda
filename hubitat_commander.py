"""Hubitat Maker API command client."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from constants import HTTP_REQUEST_TIMEOUT, HUBITAT_CMD_OFF, HUBITAT_CMD_ON
from errors import DispatchError
from models import Command

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Send on/off commands to Hubitat devices."""

    def __init__(self, base_url: str, access_token: str, timeout: float = HTTP_REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
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

    async def send(self, command: Command):
        """GET {base}/devices/{id}/{action}; any 2xx is success."""
        if command.action not in (HUBITAT_CMD_ON, HUBITAT_CMD_OFF):
            raise ValueError(f"Invalid action: {command.action}")

        device_id = command.target_device_id
        url = f"{self.base_url}/devices/{device_id}/{command.action}"
        try:
            logger.debug(f"Sending {command.action} command to Hubitat device {device_id}")
            async with self._client().get(url, params={"access_token": self.access_token}) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise DispatchError(device_id, f"Hubitat returned HTTP {resp.status}")
        except aiohttp.ClientError as e:
            raise DispatchError(device_id, f"Cannot reach Hubitat at {self.base_url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise DispatchError(device_id, "Timeout sending command to Hubitat") from e

        logger.info(f'Sent command "{command.action}" to Hubitat device {device_id}')

    async def list_devices(self) -> List[Dict[str, Any]]:
        """GET {base}/devices; used by the health check."""
        url = f"{self.base_url}/devices"
        try:
            async with self._client().get(url, params={"access_token": self.access_token}) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise DispatchError("*", f"Hubitat returned HTTP {resp.status}")
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise DispatchError("*", f"Cannot reach Hubitat at {self.base_url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise DispatchError("*", "Timeout listing Hubitat devices") from e
        except ValueError as e:
            raise DispatchError("*", f"Hubitat returned invalid JSON: {e}") from e
        return data if isinstance(data, list) else []
