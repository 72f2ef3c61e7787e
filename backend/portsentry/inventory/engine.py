"""
Port inventory and control engine.

Builds the full port inventory from the live system and carries out the four
corrective actions. Every call re-derives state; nothing is cached between calls.
"""

import logging
from typing import List, Optional

from .commands import CommandRunner
from .exceptions import ExecutionError, OperationError
from .firewall import find_rule_number, get_blocked_ports, list_rules_command
from .identity import resolve_service_identity
from .parser import parse_ss_output
from ..config import settings
from ..models import PortRecord, base_protocol

logger = logging.getLogger(__name__)

# -t TCP, -u UDP, -l listening, -p process info, -n no name resolution
SS_COMMAND = ["ss", "-tulpn"]


class PortControlEngine:
    """Orchestrate inventory reads and mutating actions on the local host."""

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        proc_root: Optional[str] = None,
        chain: Optional[str] = None,
    ):
        self.runner = runner or CommandRunner(
            timeout=settings.command_timeout_seconds,
            output_limit=settings.command_output_limit,
        )
        self.proc_root = proc_root or settings.proc_root
        self.chain = chain or settings.firewall_chain

    def list_inventory(self) -> List[PortRecord]:
        """
        Build the current port inventory.

        Returns:
            Deduplicated port records with service identity and block status

        Raises:
            PrivilegeRequiredError: If not running as root
            ExecutionError: If the socket listing fails
        """
        result = self.runner.execute_elevated(SS_COMMAND)
        ports = parse_ss_output(result.stdout)

        for record in ports:
            try:
                identity = resolve_service_identity(record.process.pid, self.proc_root)
            except Exception as e:
                logger.debug(f"Service lookup failed for pid {record.process.pid}: {e}")
                continue
            if identity:
                record.process.is_systemd_service = True
                record.process.service_name = identity.service_name
                record.process.command = identity.command

        # One firewall snapshot per pass
        blocked = get_blocked_ports(self.runner, self.chain)
        for record in ports:
            record.is_blocked = record.key in blocked

        logger.debug(f"Inventory built: {len(ports)} port(s), {len(blocked)} blocked rule(s)")
        return ports

    def kill_process(self, pid: int) -> None:
        """Send SIGKILL to a process."""
        logger.info(f"Killing process {pid}")
        try:
            self.runner.execute_elevated(["kill", "-9", str(pid)])
        except ExecutionError as e:
            raise OperationError(f"Failed to kill process {pid}: {e.message}") from e

    def restart_service(self, service_name: str) -> None:
        """
        Restart a systemd service.

        The name must already be validated against ``^[a-zA-Z0-9._-]+$``.
        """
        logger.info(f"Restarting service {service_name}")
        try:
            self.runner.execute_elevated(["systemctl", "restart", service_name])
        except ExecutionError as e:
            raise OperationError(
                f"Failed to restart service {service_name}: {e.message}"
            ) from e

    def block_port(self, port: int, protocol: str) -> None:
        """Append a DROP rule for the destination port."""
        proto = base_protocol(protocol)
        logger.info(f"Blocking {proto}:{port}")
        try:
            self.runner.execute_elevated(
                ["iptables", "-A", self.chain, "-p", proto, "--dport", str(port), "-j", "DROP"]
            )
        except ExecutionError as e:
            raise OperationError(f"Failed to block port {port}: {e.message}") from e

    def unblock_port(self, port: int, protocol: str) -> None:
        """
        Delete the first DROP rule matching the destination port and protocol.

        Raises:
            OperationError: If no rule matches or the deletion fails
        """
        proto = base_protocol(protocol)
        logger.info(f"Unblocking {proto}:{port}")
        try:
            listing = self.runner.execute_elevated(list_rules_command(self.chain))
            rule_number = find_rule_number(listing.stdout, port, proto)
            if rule_number is None:
                raise OperationError(
                    f"Failed to unblock port {port}: "
                    f"No matching firewall rule found for {proto}:{port}"
                )
            self.runner.execute_elevated(["iptables", "-D", self.chain, str(rule_number)])
        except ExecutionError as e:
            raise OperationError(f"Failed to unblock port {port}: {e.message}") from e
