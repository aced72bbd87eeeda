"""Tests for configuration loading."""

import pytest

from config import load_config

BASE_YAML = """
legrand:
  username: user
  password: secret
hubitat:
  base_url: http://hubitat.local/apps/api/7/
  access_token: hub-token
"""


def write(tmp_path, text):
    path = tmp_path / "legrand2hubitat.yaml"
    path.write_text(text)
    return str(path)


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        config = load_config(write(tmp_path, BASE_YAML), environ={})
        assert config.credentials.username == "user"
        assert config.credentials.password == "secret"
        assert config.hubitat_base_url == "http://hubitat.local/apps/api/7"
        assert config.vendor_id == "legrand"
        assert config.service_type == "_http._tcp.local."
        assert config.discovery_timeout_ms == 5000
        assert config.interval_ms == 60000
        assert config.max_concurrent_dispatches == 1
        assert config.reuse_session is False
        assert config.mqtt is None
        assert config.log_level == "INFO"

    def test_full_file(self, tmp_path):
        text = BASE_YAML + """
sync:
  interval_ms: 15000
  max_concurrent_dispatches: 4
http:
  timeout: 2.5
mqtt:
  host: broker.local
  port: 1884
  topic_prefix: /bridge/
logging:
  level: debug
"""
        text = text.replace("  password: secret\n", "  password: secret\n  reuse_session: true\n")
        config = load_config(write(tmp_path, text), environ={})
        assert config.reuse_session is True
        assert config.interval_ms == 15000
        assert config.max_concurrent_dispatches == 4
        assert config.http_timeout == 2.5
        assert config.mqtt.host == "broker.local"
        assert config.mqtt.port == 1884
        assert config.mqtt.topic_prefix == "bridge"
        assert config.log_level == "DEBUG"

    def test_environment_overrides_file(self, tmp_path):
        env = {"SYNC_INTERVAL": "30000", "HUBITAT_ACCESS_TOKEN": "from-env", "MQTT_HOST": "mqtt.lan"}
        config = load_config(write(tmp_path, BASE_YAML), environ=env)
        assert config.interval_ms == 30000
        assert config.hubitat_access_token == "from-env"
        assert config.mqtt.host == "mqtt.lan"

    def test_environment_only(self, tmp_path):
        env = {
            "LEGRAND_USERNAME": "u",
            "LEGRAND_PASSWORD": "p",
            "HUBITAT_BASE_URL": "http://h/apps/api/1",
            "HUBITAT_ACCESS_TOKEN": "t",
            "DISCOVERY_TIMEOUT_MS": "1500",
        }
        config = load_config(str(tmp_path / "missing.yaml"), environ=env)
        assert config.legrand_username == "u"
        assert config.discovery_timeout_ms == 1500

    def test_missing_required_value(self, tmp_path):
        text = BASE_YAML.replace("  access_token: hub-token\n", "")
        with pytest.raises(ValueError, match="hubitat.access_token"):
            load_config(write(tmp_path, text), environ={})

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(write(tmp_path, "legrand: [unclosed"), environ={})

    def test_empty_file(self, tmp_path):
        with pytest.raises(ValueError, match="empty"):
            load_config(write(tmp_path, ""), environ={})

    def test_non_positive_interval(self, tmp_path):
        with pytest.raises(ValueError, match="sync.interval_ms"):
            load_config(write(tmp_path, BASE_YAML), environ={"SYNC_INTERVAL": "0"})

    def test_non_numeric_timeout(self, tmp_path):
        with pytest.raises(ValueError, match="legrand.discovery_timeout_ms"):
            load_config(write(tmp_path, BASE_YAML), environ={"DISCOVERY_TIMEOUT_MS": "soon"})
