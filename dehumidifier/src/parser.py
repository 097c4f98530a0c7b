"""
Parser that turns the ``midea-beautiful-air-cli discover`` text report into Records.

The discovery report lists devices one after another. Each device block
starts with a marker line ``id <prefix>/<device-id>`` followed by indented
``key = value`` lines::

    id 0/DEV1
      addr    = 192.168.1.20
      s/n     = 000000P0000000Q1...
      online  = True
      humid%  = 48
      temp    = 21.5
      error   = 0

Known keys are mapped to Record tags (identity/metadata) or typed fields
(readings). A token that fails to convert is logged at debug level and the
field is left out; parsing itself never fails.

This is a pure function apart from logging: no I/O, no clock.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from dehumidifier.src.convert import (
    InvalidBoolean,
    InvalidNumber,
    celsius_to_fahrenheit,
    convert_bool,
    convert_float,
)
from dehumidifier.src.models import Record

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key mappings: report key -> Record tag / field name
# ---------------------------------------------------------------------------

_MARKER_RE = re.compile(r"id (\S*/\S*)")
"""Device-start marker, matched against the untrimmed line."""

_TAG_KEYS: dict[str, str] = {
    "id": "id",
    "addr": "addr",
    "s/n": "sn",
    "name": "name",
    "version": "version",
}

_BOOL_KEYS: dict[str, str] = {
    "online": "online",
    "running": "running",
    "tank": "tank_full",
    "filter": "filter_needs_cleaning",
    "sleep": "sleep",
}

_FLOAT_KEYS: dict[str, str] = {
    "humid%": "humidity_pct",
    "target%": "target_humidity_pct",
    "fan": "fan",
}


# ---------------------------------------------------------------------------
# Parser state
# ---------------------------------------------------------------------------


@dataclass
class _ParserState:
    """Records parsed so far and the index of the one being filled."""

    measurement: str
    records: list[Record] = field(default_factory=list)
    current: int | None = None

    def start_record(self, device_id: str) -> None:
        self.records.append(Record(measurement=self.measurement, device_id=device_id))
        self.current = len(self.records) - 1

    @property
    def record(self) -> Record | None:
        if self.current is None:
            return None
        return self.records[self.current]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_report(text: str, *, measurement: str) -> list[Record]:
    """Parse the full discovery report into one Record per device.

    Args:
        text: Complete stdout of the discovery command. May be empty.
        measurement: Measurement name stamped on every Record.

    Returns:
        Records in the order their marker lines appear in *text*.
    """
    state = _ParserState(measurement=measurement)

    for raw_line in text.split("\n"):
        raw_line = raw_line.rstrip("\r")

        device_id = _match_marker(raw_line)
        if device_id is not None:
            state.start_record(device_id)
            continue

        line = raw_line.strip()
        if not line:
            continue

        key, sep, value = line.partition("=")
        if not sep:
            logger.debug("Ignoring line of unknown format: %r", line)
            continue

        record = state.record
        if record is None:
            logger.debug("Ignoring %r: no device marker seen yet", line)
            continue

        _apply(record, key.strip(), value.strip())

    return state.records


def _match_marker(line: str) -> str | None:
    """Return the device ID if *line* is an ``id <prefix>/<device-id>`` marker."""
    match = _MARKER_RE.match(line)
    if match is None:
        return None
    return match.group(1).split("/", 1)[1]


def _apply(record: Record, key: str, value: str) -> None:
    """Store one ``key = value`` pair on *record* according to the key mappings."""
    if key in _TAG_KEYS:
        record.add_tag(_TAG_KEYS[key], value)
    elif key in _BOOL_KEYS:
        try:
            record.add_field(_BOOL_KEYS[key], convert_bool(value))
        except InvalidBoolean as exc:
            logger.debug("Failed to convert %r to bool: %s", key, exc)
    elif key in _FLOAT_KEYS:
        try:
            record.add_field(_FLOAT_KEYS[key], convert_float(value))
        except InvalidNumber as exc:
            logger.debug("Failed to convert %r to float: %s", key, exc)
    elif key == "temp":
        try:
            temp_c = convert_float(value)
        except InvalidNumber as exc:
            logger.debug("Failed to convert 'temp' to float: %s", exc)
            return
        record.add_field("temp_c", temp_c)
        record.add_field("temp_f", celsius_to_fahrenheit(temp_c))
    elif key == "error":
        if value != "0":
            logger.warning("Device %s reports error %s", record.device_id, value)
    else:
        logger.debug("Ignoring unknown key %r", key)
