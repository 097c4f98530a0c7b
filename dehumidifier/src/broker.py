"""
MQTT sink: publishes every Record field as its own message.

A Record expands into one message per field, published to
``<base_topic>/<device-id>/<field>`` with the value rendered as plain text
(``true``/``false`` for booleans, shortest decimal for numbers). Each publish
is awaited before the next one; any failure aborts the whole attempt so a
retry resends every message.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import aiomqtt

from dehumidifier.src.convert import format_value
from dehumidifier.src.models import Record

logger = logging.getLogger(__name__)

MQTT_TIMEOUT_S: float = 3.0
"""Timeout for connecting and for each publish in seconds."""

MQTT_DEFAULT_PORT: int = 1883


def build_messages(records: Sequence[Record], base_topic: str) -> list[tuple[str, str]]:
    """Expand records into ``(topic, payload)`` pairs, one per field.

    The device segment of the topic is the record's ``id`` tag, falling back
    to the marker device ID when the tag is missing.
    """
    base = base_topic.rstrip("/")
    messages: list[tuple[str, str]] = []
    for record in records:
        for key, value in record.fields.items():
            messages.append((f"{base}/{record.topic_id}/{key}", format_value(value)))
    return messages


class MqttSink:
    """Broker sink publishing per-field messages with QoS 0.

    Args:
        host: Broker hostname or IP address.
        base_topic: Topic prefix, e.g. ``home/midea``.
        port: Broker port (default 1883).
        username: Optional username.
        password: Optional password.
        timeout_s: Connect/publish timeout in seconds.
    """

    name = "mqtt"

    def __init__(
        self,
        host: str,
        base_topic: str,
        *,
        port: int = MQTT_DEFAULT_PORT,
        username: str | None = None,
        password: str | None = None,
        timeout_s: float = MQTT_TIMEOUT_S,
    ) -> None:
        self._host = host
        self._port = port
        self._base_topic = base_topic
        self._username = username or None
        self._password = password or None
        self._timeout_s = timeout_s

    async def write(self, records: Sequence[Record]) -> None:
        """Connect, publish every message, disconnect.

        Raises:
            aiomqtt.MqttError: On connection or publish failure.
        """
        messages = build_messages(records, self._base_topic)
        async with aiomqtt.Client(
            self._host,
            port=self._port,
            username=self._username,
            password=self._password,
            identifier=f"midea-telemetry-{int(time.time())}",
            timeout=self._timeout_s,
        ) as client:
            logger.debug("Connected to MQTT broker %s:%d", self._host, self._port)
            for topic, payload in messages:
                await client.publish(topic, payload=payload, qos=0, retain=False)
                logger.debug("Published to MQTT topic %s: %s", topic, payload)
