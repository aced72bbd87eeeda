"""MQTT status publisher."""

import json
import logging

import paho.mqtt.client as mqtt

from constants import (
    DEFAULT_MQTT_PORT,
    DEFAULT_MQTT_TOPIC_PREFIX,
    MQTT_KEEPALIVE,
    MQTT_PAYLOAD_AVAILABLE,
    MQTT_PAYLOAD_UNAVAILABLE,
    MQTT_QOS,
)
from models import CycleReport
from topics import topic_available, topic_status

logger = logging.getLogger(__name__)


class StatusPublisher:
    """Publishes bridge availability and cycle reports to MQTT."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_MQTT_PORT,
        topic_prefix: str = DEFAULT_MQTT_TOPIC_PREFIX,
        client=None,
    ):
        self.host = host
        self.port = port
        self.topic_prefix = topic_prefix
        self.client = client or mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)

        self.client.on_connect = self._on_connect
        self.client.will_set(
            topic_available(self.topic_prefix),
            payload=MQTT_PAYLOAD_UNAVAILABLE,
            qos=MQTT_QOS,
            retain=True,
        )

    def connect(self):
        """Connect to MQTT broker."""
        try:
            self.client.connect(self.host, self.port, keepalive=MQTT_KEEPALIVE)
            self.client.loop_start()
            logger.info(f"Connected to MQTT broker at {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            raise

    def close(self):
        """Mark the bridge unavailable and close the MQTT connection."""
        try:
            self.publish_retained(topic_available(self.topic_prefix), MQTT_PAYLOAD_UNAVAILABLE)
            self.client.loop_stop()
        finally:
            self.client.disconnect()

    def publish_retained(self, topic: str, payload: str):
        """Publish a retained message."""
        self.client.publish(topic, payload=payload, qos=MQTT_QOS, retain=True)
        logger.debug(f"Published to {topic}: {payload}")

    def publish_report(self, report: CycleReport):
        """Publish the cycle summary."""
        self.publish_retained(topic_status(self.topic_prefix), json.dumps(report.to_dict()))

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Handle MQTT connection."""
        if reason_code == 0:
            logger.info("Connected to MQTT broker successfully")
        else:
            logger.warning(f"Connected to MQTT broker with code {reason_code}")
        # retained availability survives broker-side restarts of subscribers
        self.publish_retained(topic_available(self.topic_prefix), MQTT_PAYLOAD_AVAILABLE)
