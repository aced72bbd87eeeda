"""Configuration loading for the Legrand2Hubitat bridge."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_DISCOVERY_TIMEOUT_MS,
    DEFAULT_MAX_CONCURRENT_DISPATCHES,
    DEFAULT_MQTT_PORT,
    DEFAULT_MQTT_TOPIC_PREFIX,
    DEFAULT_SYNC_INTERVAL_MS,
    HTTP_REQUEST_TIMEOUT,
    HTTP_SERVICE_TYPE,
    LEGRAND_VENDOR_ID,
)
from models import Credentials

logger = logging.getLogger(__name__)

# env var -> (section, key)
ENV_OVERRIDES = {
    "LEGRAND_USERNAME": ("legrand", "username"),
    "LEGRAND_PASSWORD": ("legrand", "password"),
    "DISCOVERY_TIMEOUT_MS": ("legrand", "discovery_timeout_ms"),
    "HUBITAT_BASE_URL": ("hubitat", "base_url"),
    "HUBITAT_ACCESS_TOKEN": ("hubitat", "access_token"),
    "SYNC_INTERVAL": ("sync", "interval_ms"),
    "MQTT_HOST": ("mqtt", "host"),
    "LOG_LEVEL": ("logging", "level"),
}


@dataclass(frozen=True)
class MqttConfig:
    host: str
    port: int = DEFAULT_MQTT_PORT
    topic_prefix: str = DEFAULT_MQTT_TOPIC_PREFIX


@dataclass(frozen=True)
class BridgeConfig:
    """Validated bridge settings."""
    legrand_username: str
    legrand_password: str
    hubitat_base_url: str
    hubitat_access_token: str
    vendor_id: str = LEGRAND_VENDOR_ID
    service_type: str = HTTP_SERVICE_TYPE
    discovery_timeout_ms: int = DEFAULT_DISCOVERY_TIMEOUT_MS
    reuse_session: bool = False
    interval_ms: int = DEFAULT_SYNC_INTERVAL_MS
    max_concurrent_dispatches: int = DEFAULT_MAX_CONCURRENT_DISPATCHES
    http_timeout: float = HTTP_REQUEST_TIMEOUT
    mqtt: Optional[MqttConfig] = None
    log_level: str = "INFO"

    @property
    def credentials(self) -> Credentials:
        return Credentials(username=self.legrand_username, password=self.legrand_password)


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        logger.info(f"Configuration file '{path}' not found, using environment only")
        return {}

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in '{path}': {e}")

    if not config:
        raise ValueError(f"'{path}' is empty")
    if not isinstance(config, dict):
        raise ValueError(f"'{path}' must contain a mapping at the top level")
    return config


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    return section


def _required_str(section: Dict[str, Any], name: str, key: str) -> str:
    value = section.get(key)
    if value is None or str(value).strip() == "":
        raise ValueError(f"Missing '{name}.{key}' in configuration")
    return str(value).strip()


def _positive_int(section: Dict[str, Any], name: str, key: str, default: int) -> int:
    value = section.get(key, default)
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}.{key}' must be an integer, got {value!r}")
    if value <= 0:
        raise ValueError(f"'{name}.{key}' must be positive, got {value}")
    return value


def _positive_float(section: Dict[str, Any], name: str, key: str, default: float) -> float:
    value = section.get(key, default)
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}.{key}' must be a number, got {value!r}")
    if value <= 0:
        raise ValueError(f"'{name}.{key}' must be positive, got {value}")
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(
    path: str = DEFAULT_CONFIG_FILE,
    environ: Optional[Mapping[str, str]] = None,
    dotenv: bool = True,
) -> BridgeConfig:
    """
    Load the YAML file, apply environment overrides and validate.

    Raises ValueError naming the offending key on any problem.
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    config = _read_yaml(path)
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            if config.get(section) is None:
                config[section] = {}
            if not isinstance(config[section], dict):
                raise ValueError(f"'{section}' section must be a mapping")
            config[section][key] = value

    legrand = _section(config, "legrand")
    hubitat = _section(config, "hubitat")
    sync = _section(config, "sync")
    http = _section(config, "http")
    mqtt = _section(config, "mqtt")
    log = _section(config, "logging")

    mqtt_config = None
    if mqtt.get("host"):
        mqtt_config = MqttConfig(
            host=str(mqtt["host"]),
            port=_positive_int(mqtt, "mqtt", "port", DEFAULT_MQTT_PORT),
            topic_prefix=str(mqtt.get("topic_prefix") or DEFAULT_MQTT_TOPIC_PREFIX).strip("/"),
        )

    return BridgeConfig(
        legrand_username=_required_str(legrand, "legrand", "username"),
        legrand_password=_required_str(legrand, "legrand", "password"),
        hubitat_base_url=_required_str(hubitat, "hubitat", "base_url").rstrip("/"),
        hubitat_access_token=_required_str(hubitat, "hubitat", "access_token"),
        vendor_id=str(legrand.get("vendor_id") or LEGRAND_VENDOR_ID),
        service_type=str(legrand.get("service_type") or HTTP_SERVICE_TYPE),
        discovery_timeout_ms=_positive_int(
            legrand, "legrand", "discovery_timeout_ms", DEFAULT_DISCOVERY_TIMEOUT_MS
        ),
        reuse_session=_as_bool(legrand.get("reuse_session", False)),
        interval_ms=_positive_int(sync, "sync", "interval_ms", DEFAULT_SYNC_INTERVAL_MS),
        max_concurrent_dispatches=_positive_int(
            sync, "sync", "max_concurrent_dispatches", DEFAULT_MAX_CONCURRENT_DISPATCHES
        ),
        http_timeout=_positive_float(http, "http", "timeout", HTTP_REQUEST_TIMEOUT),
        mqtt=mqtt_config,
        log_level=str(log.get("level") or "INFO").upper(),
    )
