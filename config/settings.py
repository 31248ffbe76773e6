"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
All variables are prefixed with TERMINAL_ (e.g. TERMINAL_API_BASE_URL).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Terminal settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="TERMINAL_",
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # WAREHOUSE BACKEND
    # ===================
    api_base_url: str = Field(
        default="http://localhost:3000",
        min_length=1,
        description="Base URL of the warehouse backend"
    )
    use_simulated_backend: bool = Field(
        default=False,
        description="Answer requests from the in-memory simulated backend (development only)"
    )

    # ===================
    # REQUEST POLICY
    # ===================
    request_timeout_ms: int = Field(
        default=10000,
        ge=100,
        le=120000,
        description="Timeout per request attempt in milliseconds"
    )
    request_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt for transient failures"
    )
    max_backoff_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Ceiling for the exponential backoff delay"
    )

    # ===================
    # SCANNED CODES
    # ===================
    code_format_version: str = Field(
        default="v3",
        description="Revision of the code length table (see config/code_formats.py)"
    )
    box_code_length: Optional[int] = Field(
        None,
        ge=1,
        le=64,
        description="Override: digits in a box code"
    )
    pallet_code_lengths: Optional[list[int]] = Field(
        None,
        description="Override: accepted digit counts for pallet codes"
    )

    # ===================
    # SCAN SESSION
    # ===================
    history_capacity: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Maximum scan results kept per terminal session"
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
        default="127.0.0.1",
        description="Terminal API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="Terminal API port"
    )

    @model_validator(mode='after')
    def validate_simulated_backend(self):
        """The simulated backend must never run in a production build."""
        if self.use_simulated_backend and self.environment == "production":
            raise ValueError("use_simulated_backend cannot be enabled in production")
        return self

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000


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
