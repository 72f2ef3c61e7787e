"""
Authentication package.
"""

from .security import SessionGate, SessionIdentity
from .dependencies import get_current_session, get_session_gate

__all__ = [
    "SessionGate",
    "SessionIdentity",
    "get_current_session",
    "get_session_gate",
]
