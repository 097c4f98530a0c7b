"""
Sink dispatcher: delivers Records to every configured sink with bounded retry.

Each sink is attempted on its own: a fixed number of attempts with a fixed
delay between them (no backoff growth). A sink that exhausts its attempts
produces a failed :class:`~dehumidifier.src.models.SinkResult` instead of
raising, so the remaining sinks are still attempted. Sinks run one after the
other, never in parallel.

Operations:
- deliver(sink, records): retry loop for a single sink.
- dispatch(sinks, records): deliver() for each sink in order.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from dehumidifier.src.models import Record, SinkResult

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS: int = 3
"""Attempts per sink before giving up."""

DEFAULT_RETRY_DELAY_S: float = 1.0
"""Fixed delay between attempts in seconds."""


class Sink(Protocol):
    """A telemetry destination accepting a batch of records."""

    name: str

    async def write(self, records: Sequence[Record]) -> None:
        """Deliver *records*; raise on any failure."""
        ...


async def deliver(
    sink: Sink,
    records: Sequence[Record],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    delay_s: float = DEFAULT_RETRY_DELAY_S,
) -> SinkResult:
    """Write *records* to *sink*, retrying up to *attempts* times.

    Catches every exception raised by the sink so that one failing sink
    never short-circuits its siblings.

    Args:
        sink: The destination.
        records: Records to deliver (all of them on every attempt).
        attempts: Maximum number of attempts (at least 1).
        delay_s: Seconds to sleep between attempts.

    Returns:
        A SinkResult with ``ok=True`` on the first successful attempt, or
        ``ok=False`` carrying the last error after all attempts failed.
    """
    total = max(attempts, 1)
    last_error: Exception | None = None
    attempt = 0
    for attempt in range(1, total + 1):
        if attempt > 1:
            await asyncio.sleep(delay_s)
        try:
            await sink.write(records)
        except Exception as exc:
            last_error = exc
            logger.warning(
                "Attempt %d/%d to write to %s failed: %s",
                attempt,
                total,
                sink.name,
                exc,
            )
            continue
        return SinkResult(sink=sink.name, ok=True, attempts=attempt)

    return SinkResult(
        sink=sink.name,
        ok=False,
        attempts=attempt,
        error=str(last_error) or type(last_error).__name__,
    )


async def dispatch(
    sinks: Sequence[Sink],
    records: Sequence[Record],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    delay_s: float = DEFAULT_RETRY_DELAY_S,
) -> list[SinkResult]:
    """Deliver *records* to each sink in turn and collect the results."""
    results: list[SinkResult] = []
    for sink in sinks:
        result = await deliver(sink, records, attempts=attempts, delay_s=delay_s)
        if result.ok:
            logger.info("Wrote %d records to %s", len(records), sink.name)
        else:
            logger.error(
                "Failed to write %d records to %s: %s",
                len(records),
                sink.name,
                result.error,
            )
        results.append(result)
    return results
