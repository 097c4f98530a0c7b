"""
Best-effort liveness heartbeat for external monitoring.

Issues a single GET to a monitoring URL (healthchecks.io, Uptime Kuma push
monitors and the like) after the sinks have been written. The response body
is ignored; a transport error or an error status is logged and otherwise
has no effect on the run. Never retried.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

HEARTBEAT_TIMEOUT_S: float = 10.0
"""Timeout for the heartbeat request in seconds."""


async def send_heartbeat(url: str, *, timeout_s: float = HEARTBEAT_TIMEOUT_S) -> bool:
    """GET *url* once.

    Args:
        url: Heartbeat endpoint.
        timeout_s: Request timeout in seconds.

    Returns:
        True if the request completed with a non-error status, else False.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.warning("Failed to send heartbeat to %s: %s", url, exc)
        return False

    if response.is_error:
        logger.warning("Heartbeat to %s returned HTTP %d", url, response.status_code)
        return False

    logger.debug("Sent heartbeat to %s", url)
    return True
