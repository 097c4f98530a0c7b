"""
Record filter that drops devices with nothing worth reporting.

A device is dropped when it is explicitly offline (``online = false``) or
when it reports a temperature of exactly 0 °C, which the dehumidifiers use
as a "no reading" sentinel. A missing ``online`` or ``temp_c`` field never
excludes a record.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dehumidifier.src.models import Record

logger = logging.getLogger(__name__)


def is_reportable(record: Record) -> bool:
    """Return False for offline devices and zero-temperature readings."""
    if record.fields.get("online") is False:
        return False
    temp_c = record.fields.get("temp_c")
    return not (temp_c is not None and temp_c == 0)


def filter_records(records: Iterable[Record]) -> list[Record]:
    """Keep the reportable records, preserving their order."""
    kept: list[Record] = []
    for record in records:
        if is_reportable(record):
            kept.append(record)
        else:
            logger.debug("Dropping device %s: offline or no temperature", record.device_id)
    return kept
