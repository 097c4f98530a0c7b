"""
Pydantic models for parsed dehumidifier measurements and delivery outcomes.

Defines the Record model that represents a single discovered device's
snapshot (identity tags plus typed readings), and the SinkResult model that
reports how delivery to one telemetry sink went.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Record(BaseModel):
    """A single device measurement snapshot parsed from the discovery report.

    Records are only built by the parser. Tags carry identity and metadata
    strings, fields carry the actual readings. Both mappings keep insertion
    order, which is the order the keys appeared in the report.

    Attributes:
        measurement: Measurement name, fixed for a run (configured).
        device_id: Device identifier taken from the ``id <prefix>/<id>``
            marker line that started this record.
        tags: Identity/metadata tags (``id``, ``addr``, ``sn``, ``name``,
            ``version``).
        fields: Typed readings (``online``, ``temp_c``, ``humidity_pct`` ...).
    """

    measurement: str
    device_id: str = ""
    tags: dict[str, str] = Field(default_factory=dict)
    fields: dict[str, bool | float] = Field(default_factory=dict)

    def add_tag(self, key: str, value: str) -> None:
        """Set a tag unless it is already set; tags never change once set."""
        if key in self.tags:
            logger.debug(
                "Device %s: ignoring repeated tag %s=%r (kept %r)",
                self.device_id,
                key,
                value,
                self.tags[key],
            )
            return
        self.tags[key] = value

    def add_field(self, key: str, value: bool | float) -> None:
        """Set a field; a repeated key replaces the earlier reading."""
        self.fields[key] = value

    @property
    def topic_id(self) -> str:
        """Device identifier used in broker topics: the ``id`` tag if present."""
        return self.tags.get("id") or self.device_id


class SinkResult(BaseModel):
    """Outcome of delivering one batch of records to one sink.

    Attributes:
        sink: Sink name (``influx`` or ``mqtt``).
        ok: True if any attempt succeeded.
        attempts: Number of attempts made.
        error: Text of the last error when ``ok`` is False.
    """

    sink: str
    ok: bool
    attempts: int
    error: str | None = None
