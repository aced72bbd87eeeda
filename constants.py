"""Constants for Legrand2Hubitat bridge."""

# Discovery
HTTP_SERVICE_TYPE = "_http._tcp.local."
LEGRAND_VENDOR_ID = "legrand"
DEFAULT_DISCOVERY_TIMEOUT_MS = 5000
SERVICE_INFO_TIMEOUT_MS = 3000

# Legrand device fields
LEGRAND_TYPE_LIGHT = "light"
LEGRAND_STATE_ON = "on"
LEGRAND_STATE_OFF = "off"
LEGRAND_TARGET_ID_FIELD = "hubitatId"

# Normalized device values
DEVICE_TYPE_LIGHT = "light"
DEVICE_TYPE_OTHER = "other"
DEVICE_STATE_ON = "on"
DEVICE_STATE_OFF = "off"
DEVICE_STATE_UNKNOWN = "unknown"

# Hubitat commands
HUBITAT_CMD_ON = "on"
HUBITAT_CMD_OFF = "off"

# Cycle outcomes
OUTCOME_COMPLETED = "completed"
OUTCOME_HUB_NOT_FOUND = "hub_not_found"
OUTCOME_AUTH_FAILED = "auth_failed"
OUTCOME_FETCH_FAILED = "fetch_failed"
OUTCOME_OVERLAP_DROPPED = "overlap_dropped"

# Default configuration paths
DEFAULT_CONFIG_FILE = "legrand2hubitat.yaml"

# Timeouts (seconds)
HTTP_REQUEST_TIMEOUT = 10.0

# Sync interval (milliseconds)
DEFAULT_SYNC_INTERVAL_MS = 60000
DEFAULT_MAX_CONCURRENT_DISPATCHES = 1

# MQTT settings
DEFAULT_MQTT_PORT = 1883
DEFAULT_MQTT_TOPIC_PREFIX = "legrand2hubitat"
MQTT_PAYLOAD_AVAILABLE = "true"
MQTT_PAYLOAD_UNAVAILABLE = "false"
MQTT_QOS = 1
MQTT_KEEPALIVE = 60
