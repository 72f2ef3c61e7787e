"""
Parser for ``ss -tulpn`` output.

Expected line layout (the trailing process column is optional)::

    Netid State  Recv-Q Send-Q Local Address:Port Peer Address:Port Process
    tcp   LISTEN 0      128    0.0.0.0:22         0.0.0.0:*         users:(("sshd",pid=1234,fd=3))
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..models import PortRecord, ProcessIdentity

logger = logging.getLogger(__name__)

MIN_FIELDS = 6
UNCONNECTED_STATE = "UNCONN"
UNSPECIFIED_IPV6 = "::"

PROCESS_PATTERN = re.compile(r'users:\(\("([^"]+)",pid=(\d+)')


def split_address(local: str) -> Optional[Tuple[str, int]]:
    """
    Split an ``address:port`` token.

    ``:::8080`` is the all-interfaces IPv6 form; everything else is split on the last
    colon, which handles dotted IPv4 and bracket-free IPv6 alike.

    Returns:
        (address, port), or None if the port is not an integer in 1-65535
    """
    if local.startswith(":::"):
        address, port_str = UNSPECIFIED_IPV6, local[3:]
    else:
        address, sep, port_str = local.rpartition(":")
        if not sep:
            return None

    try:
        port = int(port_str)
    except ValueError:
        return None

    if port < 1 or port > 65535:
        return None
    return address, port


def classify_protocol(address: str, state: str) -> str:
    """Derive tcp/tcp6/udp/udp6 from address family and socket state."""
    is_ipv6 = ":" in address or address == UNSPECIFIED_IPV6
    transport = "udp" if state == UNCONNECTED_STATE else "tcp"
    return f"{transport}6" if is_ipv6 else transport


def parse_process(process_field: str) -> Tuple[str, int]:
    """Extract (name, pid) from the ``users:((...))`` column, or ("Unknown", 0)."""
    match = PROCESS_PATTERN.search(process_field)
    if not match:
        return "Unknown", 0
    return match.group(1), int(match.group(2))


def _is_header(line: str) -> bool:
    return "State" in line and "Recv-Q" in line


def _parse_line(line: str) -> Optional[PortRecord]:
    parts = line.split()
    if len(parts) < MIN_FIELDS:
        return None

    state = parts[1]
    split = split_address(parts[4])
    if split is None:
        return None
    address, port = split

    name, pid = parse_process(" ".join(parts[6:]))
    return PortRecord(
        port=port,
        protocol=classify_protocol(address, state),
        state="LISTEN" if state == UNCONNECTED_STATE else state,
        local_address=address,
        remote_address=parts[5] or None,
        process=ProcessIdentity(pid=pid, name=name, command=name),
    )


def parse_ss_output(output: str) -> List[PortRecord]:
    """
    Parse socket listing text into deduplicated port records.

    The first line seen for a (protocol, port) key wins; later lines for the same key
    only bump its ``connections`` count. Malformed lines are skipped, never raised.

    Args:
        output: Raw ``ss`` output

    Returns:
        Port records in first-seen order
    """
    records: Dict[str, PortRecord] = {}

    for line in output.splitlines():
        if not line.strip() or _is_header(line):
            continue

        try:
            record = _parse_line(line)
        except Exception as e:
            logger.debug(f"Skipping unparsable ss line {line!r}: {e}")
            continue

        if record is None:
            logger.debug(f"Skipping malformed ss line: {line!r}")
            continue

        existing = records.get(record.key)
        if existing is None:
            records[record.key] = record
        else:
            existing.connections += 1

    return list(records.values())
