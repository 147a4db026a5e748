"""
Configuration management using Pydantic Settings.

Type-safe, validated configuration loaded from environment variables
(prefix ``SESSION_``). The settings object is the only place durations and
table names are parsed; the engine itself receives the immutable
SessionConfig built by ``to_session_config()``.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic

Usage:
    from session_engine.core.config import get_settings

    settings = get_settings()
    config = settings.to_session_config()

Environment:
    SESSION_DATABASE_URL=postgresql+asyncpg://user:pass@db/app
    SESSION_EXPIRES=900            # seconds, or ISO 8601 (PT15M)
    SESSION_CACHE_TTL=120
    SESSION_ID_PATH=params.session-id
    SESSION_SECURED=true
"""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from session_engine.core.enums import Environment
from session_engine.domain.value_objects import SessionConfig

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _split_path(value: str) -> tuple[str, ...]:
    separator = "," if "," in value else "."
    return tuple(part.strip() for part in value.split(separator) if part.strip())


class SessionSettings(BaseSettings):
    """
    Session engine settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values (only for non-sensitive config)
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Storage backend
    store_backend: Literal["database", "memory"] = Field(
        default="database",
        description="Session store adapter (database or in-process memory)",
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./sessions.db",
        description="SQLAlchemy async database URL",
    )
    db_echo: bool = Field(
        default=False,
        description="Log all SQL statements",
    )

    # Storage layout
    sessions_table: str = Field(
        default="sessions",
        description="Name of the sessions table",
    )
    variables_table: str = Field(
        default="session_variables",
        description="Name of the session variables table",
    )

    # Request context
    session_key: str = Field(
        default="session",
        description="Request context key a session record is stored under",
    )
    id_path: str = Field(
        default="params.session-id",
        description="Path to the session id in the request context (dot or comma separated)",
    )
    remote_ip_path: str = Field(
        default="remote_ip",
        description="Path to the remote IP address in the request context",
    )
    id_field: str | None = Field(
        default=None,
        description="Session id parameter name (defaults to last id_path element)",
    )

    # Timing
    expires: timedelta | None = Field(
        default=timedelta(minutes=15),
        description="Session inactivity timeout (0 or empty disables expiry)",
    )
    hard_expires: timedelta | None = Field(
        default=timedelta(minutes=30),
        description="Hard expiry inactivity threshold",
    )
    cache_ttl: timedelta | None = Field(
        default=timedelta(minutes=2),
        description="TTL of memoized session lookups (0 or empty disables caching)",
    )
    cache_size: int = Field(
        default=2048,
        description="Maximum number of memoized session lookups",
    )
    token_cache_ttl: timedelta | None = Field(
        default=timedelta(minutes=5),
        description="TTL of memoized secure token verifications",
    )
    token_cache_size: int = Field(
        default=1024,
        description="Maximum number of memoized token verifications",
    )

    # Security
    secured: bool = Field(
        default=False,
        description="Require a secure token in every session id",
    )
    single_session: bool = Field(
        default=False,
        description="Allow only one session per user (variables are user-wide)",
    )
    bad_ip_expires: bool = Field(
        default=False,
        description="Treat an IP address mismatch as session expiry",
    )

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Normalize and validate the log level name.

        Raises:
            ValueError: If the level is not a standard logging level.
        """
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("id_path", "remote_ip_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """
        Validate a dot or comma separated request context path.

        Raises:
            ValueError: If the path has no elements.
        """
        if not _split_path(v):
            raise ValueError("path must contain at least one element")
        return v.strip()

    @field_validator(
        "expires", "hard_expires", "cache_ttl", "token_cache_ttl", mode="before"
    )
    @classmethod
    def parse_optional_duration(cls, v: object) -> object:
        """
        Map empty strings to None; plain numbers are seconds.
        """
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if v.isdigit():
                return timedelta(seconds=int(v))
        return v

    @field_validator("cache_size", "token_cache_size")
    @classmethod
    def validate_cache_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache sizes must be at least 1")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def to_session_config(self) -> SessionConfig:
        """
        Build the immutable engine configuration.

        Raises:
            ValueError: If the combination of values is invalid.
        """
        return SessionConfig(
            sessions_table=self.sessions_table,
            variables_table=self.variables_table,
            session_key=self.session_key,
            id_path=_split_path(self.id_path),
            id_field=self.id_field,
            remote_ip_path=_split_path(self.remote_ip_path),
            expires=self.expires,
            hard_expires=self.hard_expires,
            cache_ttl=self.cache_ttl,
            cache_size=self.cache_size,
            token_cache_ttl=self.token_cache_ttl,
            token_cache_size=self.token_cache_size,
            secured=self.secured,
            single_session=self.single_session,
            bad_ip_expires=self.bad_ip_expires,
        )


@lru_cache
def get_settings() -> SessionSettings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        SessionSettings: Cached settings instance.
    """
    return SessionSettings()
