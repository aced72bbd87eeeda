#!/usr/bin/env python3
"""Legrand to Hubitat bridge."""

import asyncio
import logging
import signal
import sys

from config import load_config
from legrand2hubitat_app import Legrand2Hubitat

logger = logging.getLogger(__name__)


async def main(app: Legrand2Hubitat):
    """Main entry point."""
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    async def runner():
        try:
            await app.start()
        except asyncio.CancelledError:
            pass
        finally:
            await app.stop()
            stop_event.set()

    task = loop.create_task(runner())

    def _shutdown():
        if not task.done():
            logger.info("Shutting down...")
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown)
        except NotImplementedError:
            pass

    await stop_event.wait()


if __name__ == "__main__":
    try:
        config = load_config()
    except ValueError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting Legrand -> Hubitat connector...")
    asyncio.run(main(Legrand2Hubitat(config)))
