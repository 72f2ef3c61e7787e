"""
Port inventory and control engine.
"""

from .commands import CommandRunner, CommandResult
from .engine import PortControlEngine
from .exceptions import ExecutionError, OperationError, PortSentryError, PrivilegeRequiredError
from .firewall import get_blocked_ports
from .identity import ServiceIdentity, resolve_service_identity
from .parser import parse_ss_output

__all__ = [
    "CommandRunner",
    "CommandResult",
    "PortControlEngine",
    "ExecutionError",
    "OperationError",
    "PortSentryError",
    "PrivilegeRequiredError",
    "get_blocked_ports",
    "ServiceIdentity",
    "resolve_service_identity",
    "parse_ss_output",
]
