"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API can start without any configuration in development.  In a
production deployment override at least ``SECRET_KEY`` and
``DATABASE_URL``.
"""

import os
from dataclasses import dataclass
from typing import Optional

SUPPORTED_ALGORITHM = "HS256"


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Agency API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    # Tokens are signed with HMAC-SHA256; no other algorithm is implemented.
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Path to the SQLite database file.  A relative path is resolved
    # against the package root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "agency.db")

    # Seconds every storage call may wait on a locked database before
    # giving up.  Applied uniformly to every connection.
    db_timeout_seconds: float = float(os.getenv("DB_TIMEOUT_SECONDS", "10"))

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    def __post_init__(self) -> None:
        if self.algorithm != SUPPORTED_ALGORITHM:
            raise ValueError(
                f"Unsupported token algorithm {self.algorithm!r}; only {SUPPORTED_ALGORITHM} is implemented"
            )


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before importing this module.
settings = Settings()
