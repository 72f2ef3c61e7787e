"""
Resolve the systemd service that owns a process.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import psutil

logger = logging.getLogger(__name__)

SERVICE_PATTERN = re.compile(r"/system\.slice/([^/\s]+)\.service")


@dataclass
class ServiceIdentity:
    """Supervising service of a process and its full command line."""

    service_name: str
    command: str


def read_command_line(pid: int) -> Optional[str]:
    """Return the process arguments joined by spaces, or None if unreadable."""
    try:
        args = psutil.Process(pid).cmdline()
    except (psutil.Error, OSError) as e:
        logger.debug(f"Cannot read cmdline for pid {pid}: {e}")
        return None
    return " ".join(arg.replace("\0", " ") for arg in args).strip() or None


def resolve_service_identity(
    pid: int, proc_root: Union[str, Path] = "/proc"
) -> Optional[ServiceIdentity]:
    """
    Find the systemd service for a process via its cgroup membership.

    An unresolved identity is a normal outcome, so every failure yields None.

    Args:
        pid: Process ID
        proc_root: Mount point of the process filesystem

    Returns:
        ServiceIdentity, or None if the process is not a system service
    """
    if pid <= 0:
        return None

    try:
        cgroup = (Path(proc_root) / str(pid) / "cgroup").read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read cgroup for pid {pid}: {e}")
        return None

    match = SERVICE_PATTERN.search(cgroup)
    if not match:
        return None

    service_name = match.group(1)
    command = read_command_line(pid)
    return ServiceIdentity(service_name=service_name, command=command or service_name)
