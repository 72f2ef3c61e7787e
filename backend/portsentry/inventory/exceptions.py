"""
Error taxonomy for the port inventory and control engine.

Malformed listing lines and identity/block lookup misses are not errors; they are
absorbed where they happen. Everything below always reaches the caller.
"""

from typing import Optional, Union


class PortSentryError(Exception):
    """Base class for all inventory and control failures."""


class ExecutionError(PortSentryError):
    """An external command exited non-zero, could not be spawned, or timed out."""

    def __init__(self, command: str, exit_code: Union[int, str], message: str):
        self.command = command
        self.exit_code = exit_code
        self.message = message
        super().__init__(
            f"Command failed: {command}\nExit code: {exit_code}\nError: {message}"
        )


class PrivilegeRequiredError(PortSentryError, PermissionError):
    """The current process is not running with root privileges."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "This operation requires root privileges. Please run with sudo or as root."
        )


class OperationError(PortSentryError):
    """A mutating action could not be carried out."""
