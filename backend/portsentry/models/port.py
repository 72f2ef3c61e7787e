"""
Port and process models for the live port inventory.

Records are built fresh for every inventory pass and never persisted.
"""

from dataclasses import dataclass
from typing import Literal, Optional

Protocol = Literal["tcp", "tcp6", "udp", "udp6"]

PROTOCOLS = ("tcp", "tcp6", "udp", "udp6")


def base_protocol(protocol: str) -> str:
    """Strip the IPv6 suffix: tcp6 -> tcp, udp6 -> udp."""
    return protocol[:-1] if protocol.endswith("6") else protocol


@dataclass
class ProcessIdentity:
    """Owner of a port. pid 0 means the listing did not name a process."""

    pid: int
    name: str
    command: str
    is_systemd_service: bool = False
    service_name: Optional[str] = None


@dataclass
class PortRecord:
    """One entry per unique (protocol, port) pair observed in a listing."""

    port: int
    protocol: Protocol
    state: str
    local_address: str
    process: ProcessIdentity
    remote_address: Optional[str] = None
    connections: int = 1
    is_blocked: bool = False

    @property
    def key(self) -> str:
        """Deduplication and firewall lookup key, e.g. ``tcp:22``."""
        return f"{self.protocol}:{self.port}"

    def __repr__(self):
        return (
            f"<PortRecord(port={self.port}, protocol='{self.protocol}', "
            f"pid={self.process.pid}, connections={self.connections})>"
        )
