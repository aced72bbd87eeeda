#!/usr/bin/env python3
"""Send a single on/off command to a Hubitat device."""

import argparse
import asyncio
import logging
import sys

from config import load_config
from constants import HUBITAT_CMD_OFF, HUBITAT_CMD_ON
from errors import DispatchError
from hubitat_commander import CommandDispatcher
from models import Command

logger = logging.getLogger(__name__)


async def send_one(dispatcher: CommandDispatcher, command: Command) -> bool:
    try:
        await dispatcher.send(command)
    except DispatchError as e:
        logger.error(f"Failed to send command to Hubitat device {e.device_id}: {e}")
        return False
    finally:
        await dispatcher.close()
    return True


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("device_id", help="Hubitat device id")
    parser.add_argument("action", choices=[HUBITAT_CMD_ON, HUBITAT_CMD_OFF])
    return parser.parse_args(argv)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = parse_args()
    try:
        config = load_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    dispatcher = CommandDispatcher(config.hubitat_base_url, config.hubitat_access_token, config.http_timeout)
    command = Command(target_device_id=args.device_id, action=args.action)
    sys.exit(0 if asyncio.run(send_one(dispatcher, command)) else 1)
