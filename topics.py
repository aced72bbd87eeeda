"""Topic utilities for MQTT."""

from constants import DEFAULT_MQTT_TOPIC_PREFIX


def topic_status(prefix: str = DEFAULT_MQTT_TOPIC_PREFIX) -> str:
    """Get MQTT topic for the last cycle report."""
    return f"{prefix}/status"


def topic_available(prefix: str = DEFAULT_MQTT_TOPIC_PREFIX) -> str:
    """Get MQTT topic for bridge availability."""
    return f"{prefix}/available"
