"""
Collector configuration loaded from environment variables or a JSON file.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Field names double as the keys of the JSON config file, so a file such as::

    {
      "influx_server": "http://influx:8086",
      "influx_bucket": "home",
      "influx_token": "...",
      "midea_beautiful_air_cli_discover_args": ["--account", "me@example.com",
                                                 "--password", "..."]
    }

can be passed with ``--config``. Values from the file take priority over
environment variables.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import urlparse

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

DEFAULT_MEASUREMENT_NAME = "midea_dehumidifier"

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (Path("/config.json"), Path("./config.json"))


class ConfigError(Exception):
    """The config file could not be read or is not a JSON object."""


class Settings(BaseSettings):
    """Collector configuration.

    At least one sink (InfluxDB or MQTT) must be fully configured; a sink
    with only half of its required settings is rejected.

    Attributes:
        measurement_name_dehumidifier: Measurement name for all records.
            Empty falls back to ``midea_dehumidifier``.
        influx_server: InfluxDB base URL. Required together with bucket.
        influx_bucket: InfluxDB bucket.
        influx_user: Username (1.8-style auth).
        influx_password: Password (1.8-style auth).
        influx_token: API token, used when user/password are unset.
        influx_org: InfluxDB organization.
        influx_health_check_disabled: Skip the startup health check.
        mqtt_host: Broker host. Required together with mqtt_topic.
        mqtt_port: Broker port (default 1883).
        mqtt_username: Broker username.
        mqtt_password: Broker password.
        mqtt_topic: Base topic; messages go to ``<topic>/<id>/<field>``.
        heartbeat_url: Optional http(s) URL pinged after delivery.
        midea_beautiful_air_cli_discover_args: Extra arguments passed after
            ``discover``. Must not be empty.
        discover_timeout_s: Upper bound for the discovery run in seconds.
    """

    measurement_name_dehumidifier: str = DEFAULT_MEASUREMENT_NAME
    influx_server: str = ""
    influx_bucket: str = ""
    influx_user: str = ""
    influx_password: str = ""
    influx_token: str = ""
    influx_org: str = ""
    influx_health_check_disabled: bool = False
    mqtt_host: str = ""
    mqtt_port: int = 1883
    mqtt_username: str = ""
    mqtt_password: str = ""
    mqtt_topic: str = ""
    heartbeat_url: str = ""
    midea_beautiful_air_cli_discover_args: list[str]
    discover_timeout_s: float = 120.0

    @property
    def influx_configured(self) -> bool:
        return bool(self.influx_server and self.influx_bucket)

    @property
    def mqtt_configured(self) -> bool:
        return bool(self.mqtt_host and self.mqtt_topic)

    @field_validator("measurement_name_dehumidifier")
    @classmethod
    def measurement_name_defaults_when_empty(cls, v: str) -> str:
        return v or DEFAULT_MEASUREMENT_NAME

    @field_validator("midea_beautiful_air_cli_discover_args")
    @classmethod
    def discover_args_must_not_be_empty(cls, v: list[str]) -> list[str]:
        """The discovery CLI needs at least credentials or an address."""
        if not v:
            raise ValueError("MIDEA_BEAUTIFUL_AIR_CLI_DISCOVER_ARGS must not be empty")
        return v

    @field_validator("mqtt_port")
    @classmethod
    def mqtt_port_must_be_valid(cls, v: int) -> int:
        """Validate broker port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("MQTT_PORT must be between 1 and 65535")
        return v

    @field_validator("discover_timeout_s")
    @classmethod
    def discover_timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("DISCOVER_TIMEOUT_S must be > 0")
        return v

    @field_validator("influx_server")
    @classmethod
    def influx_server_must_be_http(cls, v: str) -> str:
        """Validate InfluxDB server is an absolute http(s) URL with a usable port."""
        if not v:
            return v
        parsed = urlparse(v)
        try:
            parsed.port
        except ValueError as exc:
            raise ValueError(f"INFLUX_SERVER has an invalid port (got: '{v}')") from exc
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"INFLUX_SERVER must be an http(s) URL (got: '{v}')")
        return v

    @field_validator("heartbeat_url")
    @classmethod
    def heartbeat_url_must_be_http(cls, v: str) -> str:
        """Validate heartbeat URL is an absolute http(s) URL when set."""
        if not v:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"HEARTBEAT_URL must be an http(s) URL (got: '{v}')")
        return v

    @model_validator(mode="after")
    def _sinks_fully_configured(self) -> Settings:
        """Reject half-configured sinks and require at least one sink."""
        if bool(self.influx_server) != bool(self.influx_bucket):
            raise ValueError("INFLUX_SERVER and INFLUX_BUCKET must be set together")
        if bool(self.mqtt_host) != bool(self.mqtt_topic):
            raise ValueError("MQTT_HOST and MQTT_TOPIC must be set together")
        if not (self.influx_configured or self.mqtt_configured):
            raise ValueError(
                "no output configured: set INFLUX_SERVER/INFLUX_BUCKET "
                "and/or MQTT_HOST/MQTT_TOPIC"
            )
        return self

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def find_default_config() -> Path | None:
    """Return the first existing default config file path, if any."""
    for path in DEFAULT_CONFIG_PATHS:
        if path.is_file():
            return path
    return None


def load_settings(config_file: str | Path | None = None) -> Settings:
    """Build Settings from the environment, overlaid with *config_file*.

    Raises:
        ConfigError: If the file cannot be read or is not a JSON object.
        pydantic.ValidationError: If the resulting settings are invalid.
    """
    if config_file is None:
        return Settings()

    path = Path(config_file)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"failed to read config file '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config file '{path}' must contain a JSON object")
    return Settings(**data)
