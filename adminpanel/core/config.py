"""
Centralized configuration management using Pydantic Settings.

This module provides type-safe configuration for the admin panel,
loading settings from environment variables (prefixed with PANEL_)
and .env files.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Admin panel settings loaded from environment variables.

    All settings can be overridden via environment variables, e.g.
    PANEL_DATABASE_URL or PANEL_SESSION_MAX_AGE_SECONDS.
    Secrets should never be committed to code - use .env file (gitignored).
    """

    # Relational backends (SQLAlchemy Core and ORM)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/panel.db",
        description="Async SQLAlchemy database URL"
    )

    # Document backend
    mongo_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )
    mongo_database: str = Field(
        default="panel",
        description="MongoDB database name"
    )

    # Authentication
    set_authentication: bool = Field(
        default=True,
        description="Require login; provisions the admin_users store on startup"
    )
    admin_username: str = Field(
        default="admin",
        description="Username of the bootstrap administrator"
    )
    admin_password: str = Field(
        default="admin",
        description="Password of the bootstrap administrator (hashed before storage)"
    )

    # Sessions
    session_cookie_name: str = Field(
        default="session_id",
        description="Cookie carrying the opaque session token"
    )
    session_max_age_seconds: int = Field(
        default=3600,
        gt=0,
        description="Lifetime of a session after login"
    )
    session_cleanup_interval_seconds: int = Field(
        default=300,
        gt=0,
        description="Seconds between periodic sweeps of expired sessions"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root logging level"
    )
    log_json: bool = Field(
        default=True,
        description="Emit logs as single-line JSON"
    )

    model_config = SettingsConfigDict(
        env_prefix="PANEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate database URL format.

        Only async drivers are accepted since every data access
        operation is awaited.
        """
        if not v or v.strip() == "":
            raise ValueError("PANEL_DATABASE_URL is required and cannot be empty")

        valid_schemes = ["sqlite+aiosqlite", "postgresql+asyncpg", "mysql+aiomysql"]
        if not any(v.startswith(scheme + "://") for scheme in valid_schemes):
            raise ValueError(
                f"PANEL_DATABASE_URL must start with one of: {', '.join(valid_schemes)}. "
                f"Got: {v[:20]}..."
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("admin_username")
    @classmethod
    def validate_admin_username(cls, v: str) -> str:
        if not v or v.strip() == "":
            raise ValueError("PANEL_ADMIN_USERNAME cannot be empty")
        return v.strip()


# Global settings instance
# Import this instance throughout the application
settings = Settings()
