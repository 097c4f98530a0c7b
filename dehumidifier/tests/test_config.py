"""
Unit tests for collector configuration (Settings).

Tests verify:
- Config loads from environment variables with correct defaults.
- Discovery arguments are required and must not be empty.
- Half-configured sinks are rejected and at least one sink is required.
- Numeric and URL constraints are enforced.
- JSON config files load and take priority over the environment.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from dehumidifier.src.config import (
    DEFAULT_MEASUREMENT_NAME,
    ConfigError,
    Settings,
    find_default_config,
    load_settings,
)


class TestSettingsLoadsFromEnv:
    """Config loads all values from environment variables."""

    def test_loads_all_env_vars(self, env_vars_full: dict[str, str]) -> None:
        settings = Settings()

        assert settings.measurement_name_dehumidifier == "dehumidifier"
        assert settings.influx_server == env_vars_full["INFLUX_SERVER"]
        assert settings.influx_bucket == env_vars_full["INFLUX_BUCKET"]
        assert settings.influx_user == env_vars_full["INFLUX_USER"]
        assert settings.influx_password == env_vars_full["INFLUX_PASSWORD"]
        assert settings.influx_org == env_vars_full["INFLUX_ORG"]
        assert settings.influx_health_check_disabled is True
        assert settings.mqtt_host == env_vars_full["MQTT_HOST"]
        assert settings.mqtt_port == 8883
        assert settings.mqtt_username == env_vars_full["MQTT_USERNAME"]
        assert settings.mqtt_password == env_vars_full["MQTT_PASSWORD"]
        assert settings.mqtt_topic == env_vars_full["MQTT_TOPIC"]
        assert settings.heartbeat_url == env_vars_full["HEARTBEAT_URL"]
        assert settings.midea_beautiful_air_cli_discover_args == ["--address", "192.168.1.20"]
        assert settings.discover_timeout_s == 30.0
        assert settings.influx_configured is True
        assert settings.mqtt_configured is True

    def test_defaults_applied_when_optional_vars_missing(
        self, env_vars_influx: dict[str, str]
    ) -> None:
        settings = Settings()

        assert settings.measurement_name_dehumidifier == DEFAULT_MEASUREMENT_NAME
        assert settings.influx_health_check_disabled is False
        assert settings.mqtt_port == 1883
        assert settings.heartbeat_url == ""
        assert settings.discover_timeout_s == 120.0
        assert settings.influx_configured is True
        assert settings.mqtt_configured is False

    def test_empty_measurement_name_falls_back_to_default(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MEASUREMENT_NAME_DEHUMIDIFIER", "")

        assert Settings().measurement_name_dehumidifier == DEFAULT_MEASUREMENT_NAME


class TestDiscoverArgs:
    """Discovery CLI arguments are required."""

    def test_missing_discover_args_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFLUX_SERVER", "http://influx:8086")
        monkeypatch.setenv("INFLUX_BUCKET", "home")

        with pytest.raises(ValidationError) as exc_info:
            Settings()
        assert "midea_beautiful_air_cli_discover_args" in str(exc_info.value).lower()

    def test_empty_discover_args_raises(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MIDEA_BEAUTIFUL_AIR_CLI_DISCOVER_ARGS", "[]")

        with pytest.raises(ValidationError, match="must not be empty"):
            Settings()


class TestSinkSelection:
    """At least one complete sink, never a half-configured one."""

    def test_no_sink_configured_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIDEA_BEAUTIFUL_AIR_CLI_DISCOVER_ARGS", '["--address", "x"]')

        with pytest.raises(ValidationError, match="no output configured"):
            Settings()

    def test_influx_server_without_bucket_raises(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("INFLUX_BUCKET")

        with pytest.raises(ValidationError, match="INFLUX_SERVER and INFLUX_BUCKET"):
            Settings()

    def test_mqtt_host_without_topic_raises(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MQTT_HOST", "broker.local")

        with pytest.raises(ValidationError, match="MQTT_HOST and MQTT_TOPIC"):
            Settings()

    def test_mqtt_only(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MQTT_HOST", "broker.local")
        monkeypatch.setenv("MQTT_TOPIC", "home/midea")
        monkeypatch.setenv("MIDEA_BEAUTIFUL_AIR_CLI_DISCOVER_ARGS", '["--address", "x"]')

        settings = Settings()

        assert settings.mqtt_configured is True
        assert settings.influx_configured is False


class TestFieldValidation:
    """Ranges and URL format."""

    @pytest.mark.parametrize("port", ["0", "65536", "-1"])
    def test_invalid_mqtt_port_raises(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch, port: str
    ) -> None:
        monkeypatch.setenv("MQTT_PORT", port)

        with pytest.raises(ValidationError, match="MQTT_PORT"):
            Settings()

    @pytest.mark.parametrize("url", ["not a url", "ftp://example.com/x", "https://"])
    def test_invalid_heartbeat_url_raises(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch, url: str
    ) -> None:
        monkeypatch.setenv("HEARTBEAT_URL", url)

        with pytest.raises(ValidationError, match="HEARTBEAT_URL"):
            Settings()

    @pytest.mark.parametrize(
        "url", ["http://influx:80a6", "influx:8086", "ftp://influx:8086", "http://"]
    )
    def test_invalid_influx_server_raises(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch, url: str
    ) -> None:
        monkeypatch.setenv("INFLUX_SERVER", url)

        with pytest.raises(ValidationError, match="INFLUX_SERVER"):
            Settings()

    def test_influx_server_with_port_and_path_accepted(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INFLUX_SERVER", "https://influx.example.com:8443/proxy")

        assert Settings().influx_server == "https://influx.example.com:8443/proxy"

    def test_non_positive_discover_timeout_raises(
        self, env_vars_influx: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DISCOVER_TIMEOUT_S", "0")

        with pytest.raises(ValidationError, match="DISCOVER_TIMEOUT_S"):
            Settings()


class TestLoadSettings:
    """JSON config file loading."""

    def test_loads_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "influx_server": "http://influx:8086",
                    "influx_bucket": "home",
                    "influx_token": "tok",
                    "midea_beautiful_air_cli_discover_args": ["--account", "me"],
                    "some_unknown_key": 1,
                }
            )
        )

        settings = load_settings(path)

        assert settings.influx_server == "http://influx:8086"
        assert settings.influx_token == "tok"
        assert settings.midea_beautiful_air_cli_discover_args == ["--account", "me"]

    def test_file_values_override_environment(
        self, env_vars_influx: dict[str, str], tmp_path: Path
    ) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"influx_bucket": "from-file"}))

        settings = load_settings(path)

        assert settings.influx_bucket == "from-file"
        assert settings.influx_server == env_vars_influx["INFLUX_SERVER"]

    def test_no_file_uses_environment(self, env_vars_influx: dict[str, str]) -> None:
        assert load_settings(None).influx_bucket == env_vars_influx["INFLUX_BUCKET"]

    def test_missing_file_raises_config_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="failed to read"):
            load_settings(tmp_path / "nope.json")

    def test_invalid_json_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_non_object_json_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigError, match="JSON object"):
            load_settings(path)


class TestFindDefaultConfig:
    """Default config file discovery."""

    def test_none_when_absent(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "dehumidifier.src.config.DEFAULT_CONFIG_PATHS", (Path("/nonexistent/config.json"),)
        )

        assert find_default_config() is None

    def test_local_config_json_found(self, tmp_path: Path) -> None:
        (tmp_path / "config.json").write_text("{}")

        found = find_default_config()

        assert found is not None
        assert found.name == "config.json"
