"""
Pydantic schemas for the port inventory and port actions.

These enforce the input rules the engine relies on: positive pids, ports in
1-65535, known protocols and shell-safe service names.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import Protocol

SERVICE_NAME_PATTERN = r"^[a-zA-Z0-9._-]+$"


class ProcessResponse(BaseModel):
    """Owning process of a port."""

    pid: int
    name: str
    command: str
    is_systemd_service: bool
    service_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PortResponse(BaseModel):
    """Port response schema."""

    port: int
    protocol: Protocol
    state: str
    local_address: str
    remote_address: Optional[str] = None
    process: ProcessResponse
    connections: int
    is_blocked: bool

    model_config = ConfigDict(from_attributes=True)


class PortListResponse(BaseModel):
    """Inventory response with a millisecond timestamp."""

    ports: List[PortResponse]
    timestamp: int
    total_ports: int


class ProcessActionRequest(BaseModel):
    """Kill request schema."""

    pid: int = Field(..., ge=1, description="Process ID to terminate")
    port: Optional[int] = Field(None, ge=1, le=65535)


class ProcessActionResponse(BaseModel):
    success: bool
    message: str
    pid: Optional[int] = None
    port: Optional[int] = None


class ServiceRestartRequest(BaseModel):
    """Service restart request schema."""

    service_name: str = Field(..., pattern=SERVICE_NAME_PATTERN, max_length=256)
    port: Optional[int] = Field(None, ge=1, le=65535)


class ServiceRestartResponse(BaseModel):
    success: bool
    message: str
    service_name: Optional[str] = None


class PortBlockRequest(BaseModel):
    """Block/unblock request schema."""

    port: int = Field(..., ge=1, le=65535)
    protocol: Protocol


class PortBlockResponse(BaseModel):
    success: bool
    message: str
    port: Optional[int] = None
    protocol: Optional[Protocol] = None
    is_blocked: Optional[bool] = None
