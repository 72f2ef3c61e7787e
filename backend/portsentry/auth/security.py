"""
Signed session tokens and operator credential checks.
"""

import hmac
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from ..config import Settings


@dataclass
class SessionIdentity:
    """An authenticated operator session."""

    username: str
    session_id: str
    expires_at: datetime


class SessionGate:
    """
    Issue and validate time-bounded session tokens.

    Built once at startup from configuration and handed to the route layer.
    """

    def __init__(
        self,
        secret_key: str,
        admin_username: str,
        admin_password: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ):
        self.secret_key = secret_key
        self.admin_username = admin_username
        self.admin_password = admin_password
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, config: Settings) -> "SessionGate":
        return cls(
            secret_key=config.session_secret,
            admin_username=config.admin_username,
            admin_password=config.admin_password,
            algorithm=config.session_algorithm,
            expire_minutes=config.session_expire_minutes,
        )

    @property
    def max_age_seconds(self) -> int:
        return self.expire_minutes * 60

    def verify_credentials(self, username: str, password: str) -> bool:
        """Constant-time check against the configured operator account."""
        if not username or not password:
            return False
        user_ok = hmac.compare_digest(username.encode(), self.admin_username.encode())
        password_ok = hmac.compare_digest(password.encode(), self.admin_password.encode())
        return user_ok and password_ok

    def issue(self, username: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed token for ``username``."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        payload = {
            "sub": username,
            "sid": str(uuid.uuid4()),
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: Optional[str]) -> Optional[SessionIdentity]:
        """
        Verify signature and expiry of a token.

        Returns:
            SessionIdentity, or None for a missing, tampered or expired token
        """
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

        username = payload.get("sub")
        session_id = payload.get("sid")
        expires = payload.get("exp")
        if not username or not session_id or not isinstance(expires, (int, float)):
            return None

        return SessionIdentity(
            username=username,
            session_id=session_id,
            expires_at=datetime.fromtimestamp(expires, tz=timezone.utc),
        )
