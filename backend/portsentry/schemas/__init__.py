"""
Pydantic schemas package.
"""

from .auth import LoginRequest, LoginResponse, SessionResponse
from .port import (
    ProcessResponse,
    PortResponse,
    PortListResponse,
    ProcessActionRequest,
    ProcessActionResponse,
    ServiceRestartRequest,
    ServiceRestartResponse,
    PortBlockRequest,
    PortBlockResponse,
)

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "SessionResponse",
    # Ports
    "ProcessResponse",
    "PortResponse",
    "PortListResponse",
    "ProcessActionRequest",
    "ProcessActionResponse",
    "ServiceRestartRequest",
    "ServiceRestartResponse",
    "PortBlockRequest",
    "PortBlockResponse",
]
