"""Supported clock table discovery via nvidia-smi."""

import logging
import re
import shutil
import subprocess
from typing import Optional

from nvidia_oc.core.types import SupportedClocks

logger = logging.getLogger(__name__)

NVIDIA_SMI = "nvidia-smi"

# "Memory : 10501 MHz", "Graphics : 2100 MHz", or a bare "2100 MHz"
_CLOCK_LINE = re.compile(r"^(?:(?P<kind>Graphics|Memory)\b[^:]*:)?\s*(?P<mhz>\d+)\s*MHz$")


def parse_supported_clocks(text: str) -> SupportedClocks:
    """Parse `nvidia-smi -q -d SUPPORTED_CLOCKS` output.

    Handles both the labelled layout (every value line names its domain) and
    the header layout (a bare "Graphics"/"Memory" line followed by value
    lines). Values are de-duplicated and sorted ascending.

    Args:
        text: Raw nvidia-smi output

    Returns:
        SupportedClocks (empty if nothing was recognised)
    """
    graphics: list[int] = []
    memory: list[int] = []
    mode = None

    for line in text.splitlines():
        stripped = line.strip()
        if stripped in ("Graphics", "Memory"):
            mode = stripped
            continue

        match = _CLOCK_LINE.match(stripped)
        if match is None:
            continue

        kind = match.group("kind") or mode
        value = int(match.group("mhz"))
        if kind == "Graphics":
            graphics.append(value)
        elif kind == "Memory":
            memory.append(value)

    return SupportedClocks(graphics=tuple(graphics), memory=tuple(memory))


def query_supported_clocks(index: int = 0, timeout_s: float = 30.0) -> Optional[SupportedClocks]:
    """Ask nvidia-smi for the supported clock table of one GPU.

    Returns:
        SupportedClocks, or None if nvidia-smi is missing or fails
    """
    if shutil.which(NVIDIA_SMI) is None:
        logger.warning("nvidia-smi not found; clock offsets will not be searched")
        return None

    try:
        output = subprocess.run(
            [NVIDIA_SMI, "-q", "-d", "SUPPORTED_CLOCKS", "-i", str(index)],
            capture_output=True,
            text=True,
            timeout=timeout_s,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Failed to query supported clocks: {e}")
        return None

    if output.returncode != 0:
        logger.warning(f"nvidia-smi exited with code {output.returncode} while querying supported clocks")
        return None

    clocks = parse_supported_clocks(output.stdout)
    logger.debug(f"Supported clocks: {len(clocks.graphics)} graphics, {len(clocks.memory)} memory")
    return clocks
