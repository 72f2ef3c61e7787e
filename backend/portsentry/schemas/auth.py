"""
Pydantic schemas for authentication.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Login request schema."""

    username: str
    password: str


class LoginResponse(BaseModel):
    """Login/logout response schema."""

    success: bool
    message: str
    redirect: Optional[str] = None
    access_token: Optional[str] = None
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    """Current session schema."""

    username: str
    session_id: str
    expires_at: datetime
