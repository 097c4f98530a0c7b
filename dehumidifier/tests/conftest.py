"""
Shared test fixtures for collector tests.

Provides environment variable fixtures for Settings configuration tests and
sample discovery reports. All collector env vars are cleaned before each
test to ensure isolation.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import pytest

# All Settings environment variable names, used for cleanup.
_ALL_COLLECTOR_ENV_VARS = (
    "MEASUREMENT_NAME_DEHUMIDIFIER",
    "INFLUX_SERVER",
    "INFLUX_BUCKET",
    "INFLUX_USER",
    "INFLUX_PASSWORD",
    "INFLUX_TOKEN",
    "INFLUX_ORG",
    "INFLUX_HEALTH_CHECK_DISABLED",
    "MQTT_HOST",
    "MQTT_PORT",
    "MQTT_USERNAME",
    "MQTT_PASSWORD",
    "MQTT_TOPIC",
    "HEARTBEAT_URL",
    "MIDEA_BEAUTIFUL_AIR_CLI_DISCOVER_ARGS",
    "DISCOVER_TIMEOUT_S",
)

SAMPLE_REPORT = """\
id 0/DEV1
addr = 1.2.3.4
online = true
temp = 20
humid% = 40
error = 0
id 0/DEV2
addr = 1.2.3.5
online = false
temp = 0
"""
"""Two devices: DEV1 reportable, DEV2 offline with a zero temperature."""


@pytest.fixture(autouse=True)
def _clean_collector_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all collector env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env or ./config.json file is
    accidentally loaded.
    """
    for var in _ALL_COLLECTOR_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_influx(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set the environment for an InfluxDB-only collector.

    Returns the dict of env var names to values for assertion convenience.
    """
    env = {
        "INFLUX_SERVER": "http://influx.local:8086",
        "INFLUX_BUCKET": "home",
        "INFLUX_TOKEN": "influx-token-abc",
        "INFLUX_ORG": "house",
        "MIDEA_BEAUTIFUL_AIR_CLI_DISCOVER_ARGS": '["--account", "me@example.com"]',
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every environment variable, both sinks configured."""
    env = {
        "MEASUREMENT_NAME_DEHUMIDIFIER": "dehumidifier",
        "INFLUX_SERVER": "http://influx.local:8086",
        "INFLUX_BUCKET": "home",
        "INFLUX_USER": "collector",
        "INFLUX_PASSWORD": "secret-password",
        "INFLUX_TOKEN": "",
        "INFLUX_ORG": "house",
        "INFLUX_HEALTH_CHECK_DISABLED": "true",
        "MQTT_HOST": "broker.local",
        "MQTT_PORT": "8883",
        "MQTT_USERNAME": "mqtt-user",
        "MQTT_PASSWORD": "mqtt-secret",
        "MQTT_TOPIC": "home/midea",
        "HEARTBEAT_URL": "https://hc-ping.com/abc",
        "MIDEA_BEAUTIFUL_AIR_CLI_DISCOVER_ARGS": '["--address", "192.168.1.20"]',
        "DISCOVER_TIMEOUT_S": "30",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def sample_report() -> str:
    """Discovery report with one reportable and one offline device."""
    return SAMPLE_REPORT
