"""Main Legrand2Hubitat bridge application."""

import asyncio
import logging
from typing import List, Optional, Set

from config import BridgeConfig
from constants import OUTCOME_OVERLAP_DROPPED
from hubitat_commander import CommandDispatcher
from legrand_catalog import DeviceCatalog
from legrand_discovery import HubLocator
from legrand_session import SessionManager
from models import CycleReport
from mqtt_bridge import StatusPublisher
from reconciler import ReconciliationLoop

logger = logging.getLogger(__name__)


class Legrand2Hubitat:
    """Main bridge application."""

    def __init__(
        self,
        config: BridgeConfig,
        locator: Optional[HubLocator] = None,
        sessions: Optional[SessionManager] = None,
        catalog: Optional[DeviceCatalog] = None,
        dispatcher: Optional[CommandDispatcher] = None,
        publisher: Optional[StatusPublisher] = None,
    ):
        self.config = config

        self.locator = locator or HubLocator(config.vendor_id, config.service_type)
        self.sessions = sessions or SessionManager(config.reuse_session, config.http_timeout)
        self.catalog = catalog or DeviceCatalog(config.http_timeout)
        self.dispatcher = dispatcher or CommandDispatcher(
            config.hubitat_base_url, config.hubitat_access_token, config.http_timeout
        )
        if publisher is None and config.mqtt is not None:
            publisher = StatusPublisher(config.mqtt.host, config.mqtt.port, config.mqtt.topic_prefix)
        self.publisher = publisher

        self.reconciler = ReconciliationLoop(
            self.locator,
            self.sessions,
            self.catalog,
            self.dispatcher,
            config.credentials,
            discovery_timeout_ms=config.discovery_timeout_ms,
            max_concurrent_dispatches=config.max_concurrent_dispatches,
        )

        self.last_report: Optional[CycleReport] = None
        self._tasks: List[asyncio.Task] = []
        self._cycles: Set[asyncio.Task] = set()
        self.running = True

    async def start(self):
        """Start the bridge."""
        if self.publisher is not None:
            try:
                self.publisher.connect()
            except Exception as e:
                logger.warning(f"MQTT status publishing disabled: {e}")
                self.publisher = None

        logger.info(f"Syncing Legrand -> Hubitat every {self.config.interval_ms} ms")
        self._tasks = [asyncio.create_task(self.scheduler_task(), name="scheduler")]

        # Wait until tasks finish (they won't until stopped)
        await asyncio.gather(*self._tasks)

    async def stop(self):
        """Stop the bridge."""
        if not self.running:
            return
        self.running = False

        # Cancel scheduler and in-flight cycles first
        tasks = list(self._tasks) + list(self._cycles)
        for t in tasks:
            t.cancel()
        for t in tasks:
            try:
                await t
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Task ended with error during shutdown: {e}")

        # Then close resources
        for client in (self.sessions, self.catalog, self.dispatcher):
            try:
                await client.close()
            except Exception as e:
                logger.debug(f"Error closing {type(client).__name__}: {e}")
        if self.publisher is not None:
            try:
                self.publisher.close()
            except Exception as e:
                logger.debug(f"Error closing MQTT publisher: {e}")

    async def scheduler_task(self):
        """Fire a sync cycle every interval, independent of cycle duration."""
        interval = self.config.interval_ms / 1000.0
        while self.running:
            self.trigger_cycle()
            await asyncio.sleep(interval)

    def trigger_cycle(self) -> asyncio.Task:
        """Start a cycle in the background; overlapping starts are dropped by the reconciler."""
        task = asyncio.create_task(self.run_cycle(), name="sync_cycle")
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task

    async def run_cycle(self) -> Optional[CycleReport]:
        """Run one cycle and publish its report; never raises."""
        try:
            report = await self.reconciler.run_cycle()
        except Exception as e:
            logger.error(f"Sync cycle error: {e}", exc_info=True)
            return None

        if report.outcome == OUTCOME_OVERLAP_DROPPED:
            # the cycle still in flight owns last_report and the status topic
            return report

        self.last_report = report
        if self.publisher is not None:
            try:
                self.publisher.publish_report(report)
            except Exception as e:
                logger.warning(f"Failed to publish cycle report: {e}")
        return report
