"""
Domain models package.
"""

from .port import PortRecord, ProcessIdentity, Protocol, PROTOCOLS, base_protocol

__all__ = [
    "PortRecord",
    "ProcessIdentity",
    "Protocol",
    "PROTOCOLS",
    "base_protocol",
]
