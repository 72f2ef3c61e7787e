"""
iptables rule listing: blocked-port snapshot and rule lookup.

Listing lines look like::

    num  target  prot opt source     destination
    1    DROP    tcp  --  0.0.0.0/0  0.0.0.0/0    tcp dpt:8080
"""

import logging
import re
from typing import Optional, Set

from .commands import CommandRunner
from .exceptions import PortSentryError

logger = logging.getLogger(__name__)

DEFAULT_CHAIN = "INPUT"

DPORT_PATTERN = re.compile(r"dpt:(\d+)")
RULE_PATTERN = re.compile(r"^\s*(\d+)\s+(\S+)\s+(\S+)")


def list_rules_command(chain: str = DEFAULT_CHAIN) -> list:
    return ["iptables", "-L", chain, "-n", "--line-numbers"]


def parse_blocked_ports(listing: str) -> Set[str]:
    """
    Collect ``protocol:port`` keys of DROP rules with a destination port.

    Args:
        listing: Output of ``iptables -L <chain> -n --line-numbers``

    Returns:
        Set of keys such as ``tcp:8080``
    """
    blocked: Set[str] = set()
    for line in listing.splitlines():
        if "DROP" not in line or "dpt:" not in line:
            continue
        port_match = DPORT_PATTERN.search(line)
        rule_match = RULE_PATTERN.match(line)
        if port_match and rule_match:
            blocked.add(f"{rule_match.group(3).lower()}:{port_match.group(1)}")
    return blocked


def find_rule_number(listing: str, port: int, protocol: str) -> Optional[int]:
    """
    Return the 1-based index of the first DROP rule for ``protocol`` and ``port``.

    The port must match exactly, so ``dpt:80`` never selects a ``dpt:8080`` rule.
    """
    for line in listing.splitlines():
        rule_match = RULE_PATTERN.match(line)
        if not rule_match:
            continue
        number, target, prot = rule_match.groups()
        if target != "DROP" or prot.lower() != protocol:
            continue
        if any(int(p) == port for p in DPORT_PATTERN.findall(line)):
            return int(number)
    return None


def get_blocked_ports(runner: CommandRunner, chain: str = DEFAULT_CHAIN) -> Set[str]:
    """
    Snapshot blocked ports from the firewall.

    Failing to read the rules (not root, iptables missing) yields an empty set:
    nothing is confirmed blocked.
    """
    try:
        result = runner.execute_elevated(list_rules_command(chain))
    except PortSentryError as e:
        logger.warning(f"Failed to check iptables: {e}")
        return set()
    return parse_blocked_ports(result.stdout)
