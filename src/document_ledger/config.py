"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class UnresolvedAccountPolicy(str, Enum):
    """What a transaction generator does with an account key it cannot map."""

    RAISE = "raise"
    SKIP = "skip"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Override via
    environment variables (prefixed with DL_) or .env file.

    Examples:
        DL_LOG_LEVEL=DEBUG
        DL_ENVIRONMENT=production
        DL_BALANCE_TOLERANCE=0.005
        DL_TOTALS_UNRESOLVED_ACCOUNT_POLICY=raise
    """

    model_config = SettingsConfigDict(
        env_prefix="DL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Document Ledger"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default=None,
        validate_default=True,
        description="Log output format; unset means json in production, console elsewhere",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Tax calculation
    tax_rounding_places: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places tax amounts are rounded to when calculated",
    )
    strict_tax_types: bool = Field(
        default=False,
        description="Reject unknown tax types instead of computing zero tax",
    )

    # Transaction generation
    balance_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        description="Maximum allowed difference between debits and credits",
    )
    template_unresolved_account_policy: UnresolvedAccountPolicy = (
        UnresolvedAccountPolicy.RAISE
    )
    totals_unresolved_account_policy: UnresolvedAccountPolicy = (
        UnresolvedAccountPolicy.SKIP
    )

    @field_validator("balance_tolerance", mode="after")
    @classmethod
    def validate_balance_tolerance(cls, v: Decimal) -> Decimal:
        """A balance tolerance must be positive and stay below one unit."""
        if v <= 0 or v >= 1:
            raise ValueError(
                f"balance_tolerance must be greater than 0 and less than 1, got {v}"
            )
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str | None, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
