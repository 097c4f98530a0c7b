"""
InfluxDB sink: writes Records as line protocol over the HTTP write API.

All Records of a run go out in a single ``POST /api/v2/write`` request per
attempt, bounded by a short timeout. The endpoint is served by InfluxDB 2.x
and by the 1.8 compatibility API, so both token and ``user:password``
authentication work through the same ``Authorization: Token ...`` header.

Operations:
- write(records): POST all records as one line-protocol batch.
- check_health(): GET ``/health`` and require ``status == "pass"``.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import httpx

from dehumidifier.src.convert import format_float
from dehumidifier.src.models import Record

logger = logging.getLogger(__name__)

INFLUX_TIMEOUT_S: float = 3.0
"""Timeout per InfluxDB request in seconds."""


class InfluxWriteError(RuntimeError):
    """InfluxDB rejected a write (non-2xx response)."""


class InfluxHealthError(RuntimeError):
    """InfluxDB did not pass its health check."""


# ---------------------------------------------------------------------------
# Line protocol encoding
# ---------------------------------------------------------------------------


def _escape_measurement(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def _escape_key(value: str) -> str:
    """Escape a tag key, tag value or field key."""
    return (
        value.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace("=", "\\=")
        .replace(" ", "\\ ")
    )


def _encode_field_value(value: bool | float) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    if not math.isfinite(value):
        return None
    return format_float(value)


def to_line_protocol(record: Record) -> str | None:
    """Encode one Record as an InfluxDB line-protocol line.

    Tags are sorted by key; empty tag values are left out since line
    protocol cannot carry them. No timestamp is written, so the server
    assigns its receive time.

    Returns:
        The encoded line, or ``None`` if the record has no encodable field.
    """
    parts = [_escape_measurement(record.measurement)]
    for key in sorted(record.tags):
        value = record.tags[key]
        if value:
            parts.append(f"{_escape_key(key)}={_escape_key(value)}")

    fields: list[str] = []
    for key, value in record.fields.items():
        encoded = _encode_field_value(value)
        if encoded is None:
            logger.debug("Device %s: skipping non-finite field %s", record.device_id, key)
            continue
        fields.append(f"{_escape_key(key)}={encoded}")

    if not fields:
        return None
    return ",".join(parts) + " " + ",".join(fields)


# ---------------------------------------------------------------------------
# Sink
# ---------------------------------------------------------------------------


class InfluxSink:
    """Time-series sink backed by the InfluxDB HTTP write API.

    Args:
        server: Base URL of the InfluxDB server, e.g. ``http://influx:8086``.
        bucket: Target bucket (or ``database/retention-policy`` on 1.8).
        org: Organization name; may be empty on InfluxDB 1.8.
        user: Username for 1.8-style ``user:password`` auth.
        password: Password for 1.8-style auth.
        token: API token, used when neither user nor password is set.
        timeout_s: Timeout per request in seconds.

    Usage::

        sink = InfluxSink(server="http://influx:8086", bucket="home", token="t")
        await sink.check_health()
        await sink.write(records)
    """

    name = "influx"

    def __init__(
        self,
        server: str,
        bucket: str,
        *,
        org: str = "",
        user: str = "",
        password: str = "",
        token: str = "",
        timeout_s: float = INFLUX_TIMEOUT_S,
    ) -> None:
        self._server = server.rstrip("/")
        self._bucket = bucket
        self._org = org
        self._timeout_s = timeout_s
        self._headers: dict[str, str] = {}
        if user or password:
            self._headers["Authorization"] = f"Token {user}:{password}"
        elif token:
            self._headers["Authorization"] = f"Token {token}"

    async def check_health(self) -> None:
        """Raise :class:`InfluxHealthError` unless the server reports ``pass``."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await client.get(f"{self._server}/health", headers=self._headers)
            body = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise InfluxHealthError(f"failed to check InfluxDB health: {exc}") from exc

        status = body.get("status") if isinstance(body, dict) else None
        if status != "pass":
            message = body.get("message", "") if isinstance(body, dict) else ""
            raise InfluxHealthError(
                f"InfluxDB did not pass health check: status {status}; message {message!r}"
            )
        logger.debug("InfluxDB passed health check")

    async def write(self, records: Sequence[Record]) -> None:
        """POST all records as one line-protocol batch.

        Raises:
            httpx.HTTPError: On connection errors and timeouts.
            InfluxWriteError: If the server answers with a non-2xx status.
        """
        lines = [line for line in map(to_line_protocol, records) if line is not None]
        if not lines:
            logger.warning(
                "None of %d records has an encodable field, nothing written to InfluxDB",
                len(records),
            )
            return

        params = {"bucket": self._bucket, "precision": "ns"}
        if self._org:
            params["org"] = self._org

        async with httpx.AsyncClient(timeout=self._timeout_s) as client:
            response = await client.post(
                f"{self._server}/api/v2/write",
                params=params,
                content="\n".join(lines).encode("utf-8"),
                headers={**self._headers, "Content-Type": "text/plain; charset=utf-8"},
            )

        if not 200 <= response.status_code < 300:
            raise InfluxWriteError(
                f"InfluxDB write failed (HTTP {response.status_code}): {response.text}"
            )
        logger.debug("Wrote %d lines to InfluxDB", len(lines))
