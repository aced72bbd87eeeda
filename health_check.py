#!/usr/bin/env python3
"""Connectivity check for the Hubitat Maker API and the Legrand hub."""

import asyncio
import logging
import sys

from config import BridgeConfig, load_config
from errors import BridgeError
from hubitat_commander import CommandDispatcher
from legrand_catalog import DeviceCatalog
from legrand_discovery import HubLocator
from legrand_session import SessionManager

logger = logging.getLogger(__name__)


async def check_hubitat(config: BridgeConfig, dispatcher: CommandDispatcher = None) -> bool:
    print("Checking Hubitat connectivity...")
    dispatcher = dispatcher or CommandDispatcher(
        config.hubitat_base_url, config.hubitat_access_token, config.http_timeout
    )
    try:
        devices = await dispatcher.list_devices()
    except BridgeError as e:
        print(f"FAIL Hubitat Maker API: {e}")
        return False
    finally:
        await dispatcher.close()
    print(f"OK   Hubitat Maker API reachable ({len(devices)} devices).")
    return True


async def check_legrand(
    config: BridgeConfig,
    locator: HubLocator = None,
    sessions: SessionManager = None,
    catalog: DeviceCatalog = None,
) -> bool:
    print("Checking Legrand hub connectivity...")
    locator = locator or HubLocator(config.vendor_id, config.service_type)
    sessions = sessions or SessionManager(timeout=config.http_timeout)
    catalog = catalog or DeviceCatalog(config.http_timeout)
    try:
        endpoint = await locator.locate_or_raise(config.discovery_timeout_ms)
        session = await sessions.authenticate(endpoint, config.credentials)
        devices = await catalog.list(endpoint, session)
    except (BridgeError, OSError) as e:
        print(f"FAIL Legrand hub: {e}")
        return False
    finally:
        await sessions.close()
        await catalog.close()
    print(f"OK   Legrand hub reachable at {endpoint.base_url} ({len(devices)} devices).")
    return True


async def run_checks(config: BridgeConfig) -> bool:
    hubitat_ok = await check_hubitat(config)
    legrand_ok = await check_legrand(config)
    return hubitat_ok and legrand_ok


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        config = load_config()
    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    sys.exit(0 if asyncio.run(run_checks(config)) else 1)
