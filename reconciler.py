"""One Legrand -> Hubitat synchronization cycle."""

import asyncio
import logging
import time
from typing import List, Optional, Tuple

from constants import (
    DEFAULT_DISCOVERY_TIMEOUT_MS,
    DEVICE_TYPE_LIGHT,
    OUTCOME_AUTH_FAILED,
    OUTCOME_FETCH_FAILED,
    OUTCOME_HUB_NOT_FOUND,
    OUTCOME_OVERLAP_DROPPED,
)
from errors import AuthError, DispatchError, FetchError, SessionRejected
from hubitat_commander import CommandDispatcher
from legrand_catalog import DeviceCatalog
from legrand_discovery import HubLocator
from legrand_helpers import derive_command
from legrand_session import SessionManager
from models import Command, Credentials, CycleReport, Device

logger = logging.getLogger(__name__)


class ReconciliationLoop:
    """
    Runs discovery, login, catalog read and dispatch, in that order.

    A failure before dispatch ends the cycle early with a report; a failure
    while dispatching is recorded against that device only. run_cycle()
    never raises for a cycle outcome, and drops a start request while a
    previous cycle is still running.
    """

    def __init__(
        self,
        locator: HubLocator,
        sessions: SessionManager,
        catalog: DeviceCatalog,
        dispatcher: CommandDispatcher,
        credentials: Credentials,
        discovery_timeout_ms: int = DEFAULT_DISCOVERY_TIMEOUT_MS,
        max_concurrent_dispatches: int = 1,
    ):
        self.locator = locator
        self.sessions = sessions
        self.catalog = catalog
        self.dispatcher = dispatcher
        self.credentials = credentials
        self.discovery_timeout_ms = discovery_timeout_ms
        self.max_concurrent_dispatches = max(1, max_concurrent_dispatches)
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    async def run_cycle(self) -> CycleReport:
        """Run one full re-sync and return its report."""
        if self._in_progress:
            logger.warning("Previous sync cycle still running, dropping this one")
            report = CycleReport(outcome=OUTCOME_OVERLAP_DROPPED)
            report.finished_at = report.started_at
            return report

        self._in_progress = True
        report = CycleReport()
        try:
            await self._run(report)
        finally:
            report.finished_at = time.time()
            self._in_progress = False
        self._log_summary(report)
        return report

    async def _run(self, report: CycleReport):
        try:
            endpoint = await self.locator.locate(self.discovery_timeout_ms)
        except OSError as e:
            logger.error(f"Legrand hub discovery failed: {e}")
            endpoint = None
        if endpoint is None:
            report.outcome = OUTCOME_HUB_NOT_FOUND
            return

        try:
            session = await self.sessions.get_session(endpoint, self.credentials)
        except AuthError as e:
            logger.error(f"Legrand authentication failed: {e}")
            report.outcome = OUTCOME_AUTH_FAILED
            return

        try:
            devices = await self.catalog.list(endpoint, session)
        except FetchError as e:
            if isinstance(e, SessionRejected):
                self.sessions.invalidate()
            logger.error(f"Legrand device fetch failed: {e}")
            report.outcome = OUTCOME_FETCH_FAILED
            return

        report.considered = len(devices)
        pending: List[Tuple[Device, Command]] = []
        for device in devices:
            command = derive_command(device)
            if command is None:
                report.skipped += 1
                self._log_skip(device)
                continue
            pending.append((device, command))
        commands = [command for _, command in pending]

        if self.max_concurrent_dispatches == 1:
            outcomes = [await self._dispatch(cmd) for cmd in commands]
        else:
            sem = asyncio.Semaphore(self.max_concurrent_dispatches)

            async def _limited(cmd: Command) -> Optional[str]:
                async with sem:
                    return await self._dispatch(cmd)

            outcomes = await asyncio.gather(*(_limited(cmd) for cmd in commands))

        # keyed by Legrand device; several devices may share one Hubitat id
        for (device, _), error in zip(pending, outcomes):
            if error is None:
                report.sent += 1
            else:
                report.errors += 1
                report.failures[device.id] = error

    async def _dispatch(self, command: Command) -> Optional[str]:
        """Send one command; return an error message instead of raising."""
        try:
            await self.dispatcher.send(command)
            return None
        except DispatchError as e:
            logger.error(f"Failed to send {command.action} to Hubitat device {command.target_device_id}: {e}")
            return str(e)
        except Exception as e:
            logger.error(
                f"Unexpected error sending {command.action} to Hubitat device {command.target_device_id}: {e}",
                exc_info=True,
            )
            return str(e) or type(e).__name__

    @staticmethod
    def _log_skip(device: Device):
        if device.type != DEVICE_TYPE_LIGHT:
            logger.debug(f"Skipping Legrand device {device.name}: type {device.type}")
        else:
            logger.warning(f"No Hubitat ID mapped for Legrand device {device.name}")

    @staticmethod
    def _log_summary(report: CycleReport):
        summary = (
            f"Sync cycle {report.outcome}: considered={report.considered} sent={report.sent} "
            f"skipped={report.skipped} errors={report.errors}"
        )
        if report.errors:
            logger.warning(summary)
        else:
            logger.info(summary)
