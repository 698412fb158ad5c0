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
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # STORAGE
    # ===================
    product_images_bucket: str = Field(
        default="product-images",
        min_length=1,
        description="Storage bucket that holds product images"
    )

    # ===================
    # IMAGE LIMITS
    # ===================
    image_allowed_extension: str = Field(
        default=".webp",
        pattern=r"^\.[a-z0-9]+$",
        description="Only image files with this extension are accepted"
    )
    image_allowed_content_type: str = Field(
        default="image/webp",
        description="Only image files with this MIME type are accepted"
    )
    image_max_size_mb: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum size of a single product image in MB"
    )

    # ===================
    # BULK UPLOAD WIZARD
    # ===================
    wizard_session_ttl_minutes: int = Field(
        default=60,
        ge=5,
        le=1440,
        description="Minutes an idle bulk upload session is kept in memory"
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

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def image_max_size_bytes(self) -> int:
        """Image size ceiling in bytes."""
        return self.image_max_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
