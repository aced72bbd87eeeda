"""Helper functions for parsing Legrand device records."""

import logging
from typing import Any, Dict, List, Optional

from constants import (
    DEVICE_STATE_OFF,
    DEVICE_STATE_ON,
    DEVICE_STATE_UNKNOWN,
    DEVICE_TYPE_LIGHT,
    DEVICE_TYPE_OTHER,
    HUBITAT_CMD_OFF,
    HUBITAT_CMD_ON,
    LEGRAND_STATE_OFF,
    LEGRAND_STATE_ON,
    LEGRAND_TARGET_ID_FIELD,
    LEGRAND_TYPE_LIGHT,
)
from models import Command, Device

logger = logging.getLogger(__name__)


def _as_id(value: Any) -> Optional[str]:
    """
    Ids come back as strings or numbers depending on firmware.
    Returns a stripped string, or None if empty/unusable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _normalize_type(value: Any) -> str:
    if value == LEGRAND_TYPE_LIGHT:
        return DEVICE_TYPE_LIGHT
    return DEVICE_TYPE_OTHER


def _normalize_state(value: Any) -> str:
    # exact match only; "ON" or " on" is unknown and syncs as off
    if value == LEGRAND_STATE_ON:
        return DEVICE_STATE_ON
    if value == LEGRAND_STATE_OFF:
        return DEVICE_STATE_OFF
    return DEVICE_STATE_UNKNOWN


def parse_device(record: Any, index: int = 0) -> Optional[Device]:
    """
    Map one raw record from GET /devices into a Device.
    Missing or malformed fields degrade per field; a record without a usable
    id falls back to its name, then to its catalog index. Only a record that
    is not an object is dropped (returns None).
    """
    if not isinstance(record, dict):
        return None

    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        name = None
    device_id = _as_id(record.get("id")) or name or f"#{index}"
    if name is None:
        name = device_id

    return Device(
        id=device_id,
        name=name,
        type=_normalize_type(record.get("type")),
        state=_normalize_state(record.get("state")),
        target_id=_as_id(record.get(LEGRAND_TARGET_ID_FIELD)),
    )


def parse_devices(records: List[Dict[str, Any]]) -> List[Device]:
    """Parse a catalog response, keeping catalog order."""
    devices: List[Device] = []
    for index, record in enumerate(records):
        device = parse_device(record, index)
        if device is None:
            logger.warning(f"Dropping malformed Legrand device record at index {index}: {record!r}")
            continue
        devices.append(device)
    return devices


def is_eligible(device: Device) -> bool:
    """Only mapped lights are forwarded to Hubitat."""
    return device.type == DEVICE_TYPE_LIGHT and bool(device.target_id)


def derive_command(device: Device) -> Optional[Command]:
    """
    Derive the Hubitat command for a device, or None if it is ineligible.
    Anything other than "on" (including unknown) maps to "off".
    """
    if not is_eligible(device):
        return None
    action = HUBITAT_CMD_ON if device.state == DEVICE_STATE_ON else HUBITAT_CMD_OFF
    return Command(target_device_id=device.target_id, action=action)
