"""Privilege escalation for commands that write device settings."""

import logging
import os
import shutil
import sys

logger = logging.getLogger(__name__)

ESCALATION_TOOLS = ("sudo", "doas", "pkexec")


def running_as_root() -> bool:
    return os.geteuid() == 0


def escalate_permissions() -> None:
    """Re-run the current command as root if needed.

    Replaces the current process with `<tool> python -m nvidia_oc ...` using
    the first of sudo, doas or pkexec found on PATH. Returns only when already
    running as root.

    Raises:
        PermissionError: If no escalation tool is installed
    """
    if running_as_root():
        return

    for tool in ESCALATION_TOOLS:
        path = shutil.which(tool)
        if path is None:
            continue
        logger.debug(f"Escalating privileges with {tool}")
        os.execvp(path, [path, sys.executable, "-m", "nvidia_oc", *sys.argv[1:]])

    raise PermissionError(
        "Please install sudo, doas or pkexec and try again. Alternatively, run the program as root."
    )
