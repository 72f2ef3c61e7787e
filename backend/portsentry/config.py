"""
Configuration settings for the port sentry backend.
"""

import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PASSWORD = "changeme"
DEFAULT_SESSION_SECRET = "dev-secret-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Port Sentry API"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Security
    admin_username: str = "admin"
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    session_secret: str = DEFAULT_SESSION_SECRET
    session_algorithm: str = "HS256"
    session_expire_minutes: int = 60
    session_cookie_name: str = "session"
    login_failure_delay_seconds: float = 3.0

    # External commands
    command_timeout_seconds: float = 30.0
    command_output_limit: int = 10 * 1024 * 1024  # 10 MiB per stream
    proc_root: str = "/proc"
    firewall_chain: str = "INPUT"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


def warn_insecure_defaults(config: Settings) -> list[str]:
    """
    Log a warning for every credential still at its built-in default in production.

    Returns:
        The warning messages that were logged (empty outside production)
    """
    if not config.is_production:
        return []

    warnings = []
    if config.admin_password == DEFAULT_ADMIN_PASSWORD:
        warnings.append(
            "Using default ADMIN_PASSWORD in production! Please set a secure password."
        )
    if config.session_secret == DEFAULT_SESSION_SECRET:
        warnings.append(
            "Using default SESSION_SECRET in production! Please set a secure secret."
        )
    for message in warnings:
        logger.warning(message)
    return warnings


# Global settings instance
settings = Settings()
