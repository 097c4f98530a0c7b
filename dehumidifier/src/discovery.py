"""
Runs the ``midea-beautiful-air-cli discover`` command and captures its report.

The discovery CLI talks to the dehumidifiers (locally or through the Midea
cloud, depending on the configured arguments) and prints a plain-text report
on stdout. The whole output is captured before parsing starts.

- The executable is resolved on ``PATH`` once per run.
- A non-zero exit or a timeout is a hard failure: stdout and stderr are
  logged for diagnostics and :class:`DiscoveryError` is raised.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Sequence

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CLI_NAME: str = "midea-beautiful-air-cli"
"""Name of the discovery executable looked up on PATH."""

DISCOVER_TIMEOUT_S: float = 120.0
"""Default upper bound for a single discovery run in seconds."""


class DiscoveryError(RuntimeError):
    """The discovery CLI is missing, failed, or timed out."""


def find_cli(name: str = CLI_NAME) -> str:
    """Resolve the discovery executable on PATH.

    Raises:
        DiscoveryError: If the executable cannot be found.
    """
    path = shutil.which(name)
    if path is None:
        raise DiscoveryError(f"could not find {name} in PATH")
    logger.debug("%s found at %s", name, path)
    return path


async def run_discovery(
    cli_path: str,
    args: Sequence[str],
    *,
    timeout_s: float = DISCOVER_TIMEOUT_S,
) -> str:
    """Run ``<cli_path> discover <args...>`` and return its stdout.

    Args:
        cli_path: Path of the discovery executable (see :func:`find_cli`).
        args: Extra arguments appended after ``discover``.
        timeout_s: Seconds to wait for the process to finish.

    Returns:
        The decoded standard output of the command.

    Raises:
        DiscoveryError: On spawn failure, timeout, or non-zero exit status.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            cli_path,
            "discover",
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise DiscoveryError(f"failed to start {cli_path}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except TimeoutError as exc:
        proc.kill()
        await proc.wait()
        raise DiscoveryError(f"{cli_path} did not finish within {timeout_s}s") from exc

    out = stdout.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        logger.error("stdout: %s", out)
        logger.error("stderr: %s", stderr.decode("utf-8", errors="replace"))
        raise DiscoveryError(f"{cli_path} exited with status {proc.returncode}")

    logger.debug("Discovery produced %d bytes of output", len(out))
    return out
