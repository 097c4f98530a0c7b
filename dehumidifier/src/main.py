"""
One-shot collector run: discover dehumidifiers, parse, filter, deliver, ping.

Steps, each awaited in turn on a single event loop:
1. **Preconditions**: resolve the discovery CLI on PATH and, unless disabled,
   check InfluxDB health. Failure aborts before any sink I/O.
2. **Discovery**: run ``midea-beautiful-air-cli discover <args>`` and capture
   its report.
3. **Parse + filter**: build one Record per device and drop offline devices
   and zero-temperature readings. Nothing left means exit code 11.
4. **Dispatch**: write the records to each configured sink with bounded,
   independent retry.
5. **Heartbeat**: best-effort GET to the configured monitoring URL.

Structured JSON logging is used for all events.

Exit codes:
- 0: every configured sink accepted the records.
- 1: a precondition failed or at least one sink exhausted its retries.
- 11: no device had data worth reporting.
- 78: the configuration is missing or invalid.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from dehumidifier.src import __version__
from dehumidifier.src.broker import MqttSink
from dehumidifier.src.config import ConfigError, find_default_config, load_settings
from dehumidifier.src.discovery import DiscoveryError, find_cli, run_discovery
from dehumidifier.src.dispatcher import dispatch
from dehumidifier.src.filters import filter_records
from dehumidifier.src.heartbeat import send_heartbeat
from dehumidifier.src.influx import InfluxHealthError, InfluxSink
from dehumidifier.src.parser import parse_report

if TYPE_CHECKING:
    from dehumidifier.src.config import Settings
    from dehumidifier.src.dispatcher import Sink

logger = logging.getLogger(__name__)

PROGRAM_NAME = "midea-telemetry"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NO_DEVICES = 11
EXIT_NOT_CONFIGURED = 78


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


def configure_logging(debug: bool = False) -> None:
    """Configure structured JSON logging for the collector.

    Sets up the root logger with a JSON-formatted handler writing to stderr.

    Args:
        debug: Log at DEBUG level instead of INFO.
    """

    class _JsonFormatter(logging.Formatter):
        """Minimal JSON log formatter."""

        def format(self, record: logging.LogRecord) -> str:
            log_entry = {
                "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info and record.exc_info[1] is not None:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)


def _masked_token(value: str | None) -> str:
    """Return a short non-reversible token fingerprint for diagnostics."""
    if not value:
        return "empty"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:10]
    return f"len={len(value)} sha256={digest}"


def log_config_summary(settings: Settings) -> None:
    """Log a config summary at startup, with secrets masked.

    The discovery arguments usually carry cloud credentials, so only their
    count is logged.
    """
    logger.info(
        "Collector starting with config: "
        "measurement=%s, influx_server=%s, influx_bucket=%s, influx_org=%s, "
        "influx_user=%s, influx_password_masked=%s, influx_token_masked=%s, "
        "influx_health_check_disabled=%s, mqtt_host=%s, mqtt_port=%s, "
        "mqtt_topic=%s, mqtt_username=%s, mqtt_password_masked=%s, "
        "heartbeat_url_set=%s, discover_arg_count=%d, discover_timeout_s=%s",
        settings.measurement_name_dehumidifier,
        settings.influx_server,
        settings.influx_bucket,
        settings.influx_org,
        settings.influx_user,
        _masked_token(settings.influx_password),
        _masked_token(settings.influx_token),
        settings.influx_health_check_disabled,
        settings.mqtt_host,
        settings.mqtt_port,
        settings.mqtt_topic,
        settings.mqtt_username,
        _masked_token(settings.mqtt_password),
        bool(settings.heartbeat_url),
        len(settings.midea_beautiful_air_cli_discover_args),
        settings.discover_timeout_s,
    )


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def build_sinks(settings: Settings) -> list[Sink]:
    """Create a sink for every fully configured output, InfluxDB first."""
    sinks: list[Sink] = []
    if settings.influx_configured:
        sinks.append(
            InfluxSink(
                settings.influx_server,
                settings.influx_bucket,
                org=settings.influx_org,
                user=settings.influx_user,
                password=settings.influx_password,
                token=settings.influx_token,
            )
        )
    if settings.mqtt_configured:
        sinks.append(
            MqttSink(
                settings.mqtt_host,
                settings.mqtt_topic,
                port=settings.mqtt_port,
                username=settings.mqtt_username,
                password=settings.mqtt_password,
            )
        )
    return sinks


async def run(settings: Settings) -> int:
    """Execute one collection run and return the process exit code."""
    try:
        cli_path = find_cli()
    except DiscoveryError as exc:
        logger.error("Discovery CLI unavailable: %s", exc)
        return EXIT_FAILURE

    sinks = build_sinks(settings)

    for sink in sinks:
        if isinstance(sink, InfluxSink) and not settings.influx_health_check_disabled:
            try:
                await sink.check_health()
            except InfluxHealthError as exc:
                logger.error("InfluxDB health check failed: %s", exc)
                return EXIT_FAILURE

    try:
        report = await run_discovery(
            cli_path,
            settings.midea_beautiful_air_cli_discover_args,
            timeout_s=settings.discover_timeout_s,
        )
    except DiscoveryError as exc:
        logger.error("Discovery failed: %s", exc)
        return EXIT_FAILURE

    parsed = parse_report(report, measurement=settings.measurement_name_dehumidifier)
    records = filter_records(parsed)
    logger.info("Parsed %d devices, %d with data to report", len(parsed), len(records))
    if not records:
        logger.error("No devices with data to report found")
        return EXIT_NO_DEVICES

    results = await dispatch(sinks, records)

    if settings.heartbeat_url:
        await send_heartbeat(settings.heartbeat_url)

    if all(result.ok for result in results):
        return EXIT_OK
    return EXIT_FAILURE


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


app = typer.Typer(
    help="Poll Midea dehumidifiers and forward their readings to InfluxDB and/or MQTT.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


@app.command()
def collect(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        dir_okay=False,
        help="Configuration JSON file (defaults to /config.json or ./config.json if present).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    version: bool = typer.Option(False, "--version", help="Print version and exit."),
) -> None:
    """Run a single collection cycle."""
    if version:
        typer.echo(f"{PROGRAM_NAME} {__version__}")
        raise typer.Exit(code=EXIT_OK)

    configure_logging(debug)

    config_file = config if config is not None else find_default_config()
    try:
        settings = load_settings(config_file)
    except (ConfigError, ValidationError) as exc:
        logger.error("Loading config from '%s' failed: %s", config_file or "environment", exc)
        raise typer.Exit(code=EXIT_NOT_CONFIGURED) from exc

    log_config_summary(settings)
    raise typer.Exit(code=asyncio.run(run(settings)))


def main() -> None:
    """Synchronous entrypoint for the collector."""
    app()


if __name__ == "__main__":
    main()
