"""
Application configuration using Pydantic Settings.

Loads configuration from HUSH_* environment variables and .env file.
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LEDGER_FILENAME = "hush-suppressions.json"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="HUSH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="hush-core", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="WARNING", description="Logging level")

    # Ledger
    ledger_filename: str = Field(
        default=DEFAULT_LEDGER_FILENAME,
        description="Ledger file name used when no explicit location is given",
    )
    config_dir: str = Field(default=".hush", description="Project configuration directory")

    # Reconciliation default. A future major version may flip this.
    apply_suppressions: bool = Field(
        default=False,
        description="Reconcile every result batch before returning it",
    )

    # Logging / Privacy
    log_redaction_enabled: bool = Field(default=True, description="Redact home directories in logs")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


# Global settings instance
settings = Settings()
