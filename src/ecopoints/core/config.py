"""Application configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="ecopoints-backend", description="Application name")
    environment: Literal["development", "testing", "staging", "production"] = Field(
        default="development", description="Runtime environment"
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # API
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 prefix")
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="CORS allowed origins",
    )
    identity_header: str = Field(
        default="X-User-Id",
        description="Header carrying the user id asserted by the upstream gateway",
    )

    # Database
    db_host: str = Field(default="localhost", description="PostgreSQL host")
    db_port: int = Field(default=5432, description="PostgreSQL port")
    db_user: str = Field(default="postgres", description="PostgreSQL user")
    db_password: str = Field(default="postgres", description="PostgreSQL password")
    db_name: str = Field(default="ecopoints", description="PostgreSQL database name")
    db_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy async URL, overrides the db_* components",
    )

    # Transactions (optimistic concurrency retry policy)
    transaction_max_attempts: int = Field(
        default=5, ge=1, le=50, description="Attempts per transaction before giving up"
    )
    transaction_retry_backoff_ms: int = Field(
        default=20, ge=0, description="Base backoff between attempts (milliseconds)"
    )
    transaction_retry_backoff_max_ms: int = Field(
        default=500, ge=0, description="Upper bound for a single backoff (milliseconds)"
    )
    transaction_retry_jitter: bool = Field(
        default=True, description="Randomize backoff to spread out retries"
    )

    # Claim codes
    claim_code_length: int = Field(default=8, ge=4, le=32, description="Claim code length")
    claim_code_alphabet: str = Field(
        default="ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789",
        description="Characters claim codes are drawn from",
    )
    claim_code_max_attempts: int = Field(
        default=5, ge=1, description="Collision retries before giving up on a code"
    )

    # Redemption policy
    restore_stock_on_cancel: bool = Field(
        default=False,
        description="Return the reserved unit to the catalog when a redemption is cancelled",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )

    @field_validator("claim_code_alphabet")
    @classmethod
    def _alphabet_has_unique_characters(cls, value: str) -> str:
        if len(value) < 2 or len(set(value)) != len(value):
            raise ValueError("claim_code_alphabet needs at least two distinct characters")
        return value

    @computed_field
    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        if self.db_url:
            return self.db_url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
