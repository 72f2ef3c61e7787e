"""
FastAPI dependencies for the authentication gate.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .security import SessionGate, SessionIdentity
from ..config import settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_gate(request: Request) -> SessionGate:
    """Return the gate created at startup."""
    return request.app.state.session_gate


def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    gate: SessionGate = Depends(get_session_gate),
) -> SessionIdentity:
    """
    Resolve the caller's session from the session cookie or a bearer token.

    The cookie is tried first; a stale cookie does not hide a valid bearer token.

    Raises:
        HTTPException: 401 if no valid session is presented
    """
    session = gate.validate(request.cookies.get(settings.session_cookie_name))
    if session is None and credentials is not None:
        session = gate.validate(credentials.credentials)

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
