"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # INGESTION API
    # ===================
    ingestion_api_url: str = Field(
        default="http://localhost:5000",
        description="Base URL of the platform API that ingests uploaded contacts"
    )
    ingestion_api_key: Optional[str] = Field(
        None,
        description="Bearer token sent to the ingestion API"
    )
    import_timeout_seconds: float = Field(
        default=300,
        gt=0,
        le=1800,
        description="Upper bound on a single bulk import request"
    )
    account_list_timeout_seconds: float = Field(
        default=10,
        gt=0,
        le=120,
        description="Timeout for loading the account list"
    )

    # ===================
    # IMPORT WIZARD
    # ===================
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1024,
        description="Largest CSV file accepted by the wizard"
    )
    wizard_ttl_minutes: int = Field(
        default=60,
        ge=1,
        le=1440,
        description="Minutes an idle wizard session is kept in memory"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins allowed to call the API"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def ingestion_configured(self) -> bool:
        """Check if an API key is set for the ingestion API."""
        return bool(self.ingestion_api_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
