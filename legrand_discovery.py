"""Legrand hub discovery over mDNS."""

import asyncio
import logging
from typing import Any, Callable, Optional, Tuple

from zeroconf import ServiceBrowser, ServiceStateChange, Zeroconf

from constants import (
    DEFAULT_DISCOVERY_TIMEOUT_MS,
    HTTP_SERVICE_TYPE,
    LEGRAND_VENDOR_ID,
    SERVICE_INFO_TIMEOUT_MS,
)
from errors import DiscoveryTimeout
from models import HubEndpoint

logger = logging.getLogger(__name__)


def _base_url(address: str, port: Optional[int]) -> str:
    host = f"[{address}]" if ":" in address else address
    if port and port != 80:
        return f"http://{host}:{port}"
    return f"http://{host}"


class HubLocator:
    """
    Finds the Legrand hub by browsing "http over TCP" advertisements.

    Zeroconf delivers advertisements on its own thread; the first match is
    handed back to the event loop and settles a single future. The browser
    and the Zeroconf instance are torn down on every exit path.
    """

    def __init__(
        self,
        vendor_id: str = LEGRAND_VENDOR_ID,
        service_type: str = HTTP_SERVICE_TYPE,
        zeroconf_factory: Callable[[], Any] = Zeroconf,
        browser_factory: Callable[..., Any] = ServiceBrowser,
    ):
        self.vendor_id = vendor_id.lower()
        self.service_type = service_type
        self.zeroconf_factory = zeroconf_factory
        self.browser_factory = browser_factory

    def matches(self, name: str, host: str) -> bool:
        """Case-insensitive vendor match on service name or host."""
        return self.vendor_id in (name or "").lower() or self.vendor_id in (host or "").lower()

    async def locate(self, timeout_ms: int = DEFAULT_DISCOVERY_TIMEOUT_MS) -> Optional[HubEndpoint]:
        """Return the first matching hub, or None once timeout_ms has elapsed."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000.0
        found: asyncio.Future = loop.create_future()

        def _settle(endpoint: HubEndpoint):
            if not found.done():
                found.set_result(endpoint)

        def _on_state_change(zeroconf, service_type: str, name: str, state_change) -> None:
            if state_change is not ServiceStateChange.Added or found.done():
                return
            try:
                endpoint = self._resolve(zeroconf, service_type, name)
            except Exception as e:
                logger.debug(f"Could not resolve service {name}: {e}")
                return
            if endpoint is None:
                return
            try:
                loop.call_soon_threadsafe(_settle, endpoint)
            except RuntimeError:
                # resolve outlived locate() and its event loop
                logger.debug(f"Ignoring late advertisement {name}: event loop is closed")

        logger.debug(f"Browsing for {self.service_type} advertisements matching '{self.vendor_id}'")
        zc, browser = await asyncio.to_thread(self._start, _on_state_change)
        try:
            remaining = max(0.0, deadline - loop.time())
            try:
                endpoint = await asyncio.wait_for(asyncio.shield(found), timeout=remaining)
            except asyncio.TimeoutError:
                # The loop may fire a timer marginally early; never report not-found before the deadline.
                remaining = deadline - loop.time()
                if remaining > 0:
                    await asyncio.sleep(remaining)
                if found.done():
                    endpoint = found.result()
                else:
                    logger.warning(f"No Legrand hub discovered within {timeout_ms} ms")
                    return None
            logger.info(f"Discovered Legrand hub at {endpoint.base_url}")
            return endpoint
        finally:
            await asyncio.to_thread(self._stop, zc, browser)

    async def locate_or_raise(self, timeout_ms: int = DEFAULT_DISCOVERY_TIMEOUT_MS) -> HubEndpoint:
        """Like locate(), but raises DiscoveryTimeout instead of returning None."""
        endpoint = await self.locate(timeout_ms)
        if endpoint is None:
            raise DiscoveryTimeout(f"No Legrand hub discovered within {timeout_ms} ms")
        return endpoint

    def _start(self, handler) -> Tuple[Any, Any]:
        zc = self.zeroconf_factory()
        try:
            browser = self.browser_factory(zc, self.service_type, handlers=[handler])
        except Exception:
            zc.close()
            raise
        return zc, browser

    def _stop(self, zc, browser) -> None:
        try:
            browser.cancel()
        finally:
            zc.close()
        logger.debug("mDNS browser stopped")

    def _resolve(self, zeroconf, service_type: str, name: str) -> Optional[HubEndpoint]:
        info = zeroconf.get_service_info(service_type, name, timeout=SERVICE_INFO_TIMEOUT_MS)
        if info is None:
            return None
        host = info.server or ""
        if not self.matches(name, host):
            return None
        addresses = info.parsed_addresses()
        if not addresses:
            logger.warning(f"Legrand service {name} advertised without an address")
            return None
        return HubEndpoint(base_url=_base_url(addresses[0], info.port))
