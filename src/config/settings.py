"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a real bucket.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "R2 Image Host API"
    api_version: str = "v1"
    environment: Literal["development", "production"] = Field(
        default="development",
        description="Deployment environment. Session cookies are marked Secure in production."
    )

    # R2/S3 Storage Configuration
    r2_account_id: str = Field(
        default="",
        description="Cloudflare account ID for R2"
    )
    r2_access_key_id: str = Field(
        default="",
        description="R2 access key ID"
    )
    r2_secret_access_key: str = Field(
        default="",
        description="R2 secret access key"
    )
    r2_bucket_name: str = Field(
        default="images",
        description="R2 bucket name for uploaded images"
    )
    r2_endpoint_url: Optional[str] = Field(
        default=None,
        description="R2 endpoint URL. Auto-constructed from account_id if not provided."
    )
    r2_public_url: str = Field(
        default="",
        description="Public base URL the bucket is served from (custom domain or r2.dev URL)"
    )
    r2_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real R2. Enables local dev without object storage."
    )
    presigned_url_expiry_seconds: int = Field(
        default=3600,
        description="Lifetime of presigned upload URLs."
    )

    # Authentication
    admin_password: str = Field(
        default="",
        description="Shared admin password exchanged for a session cookie."
    )
    session_secret: str = Field(
        default="",
        description="Key used to sign session cookies. Falls back to the admin password when empty."
    )
    session_max_age_seconds: int = Field(
        default=24 * 60 * 60,
        description="How long a session cookie stays valid."
    )
    protect_management_endpoints: bool = Field(
        default=True,
        description="Require a session for listing and deleting images, not only for uploads."
    )

    # Upload Behavior
    default_use_hash_name: bool = Field(
        default=False,
        description="Use random hex names when the upload form does not say otherwise."
    )
    default_enable_webp_compression: bool = Field(
        default=False,
        description="Re-encode uploads to WebP when the upload form does not say otherwise."
    )
    default_quality: int = Field(
        default=80,
        ge=1,
        le=100,
        description="WebP quality used when the upload form does not provide one."
    )
    max_file_size: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum upload size in bytes."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:4321",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def r2_endpoint(self) -> str:
        """
        Construct R2 endpoint URL from account ID.

        R2 endpoints follow the pattern: https://{account_id}.r2.cloudflarestorage.com
        This is S3-compatible but uses Cloudflare's network.
        """
        if self.r2_endpoint_url:
            return self.r2_endpoint_url
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"

    @property
    def public_base_url(self) -> str:
        """Public URL without a trailing slash, so keys can be appended with '/'."""
        return self.r2_public_url.rstrip("/")

    @property
    def session_signing_key(self) -> str:
        return self.session_secret or self.admin_password

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.admin_password:
            missing.append("ADMIN_PASSWORD")

        # R2 only required if not in mock mode
        if not self.r2_mock_mode:
            if not self.r2_account_id and not self.r2_endpoint_url:
                missing.append("R2_ACCOUNT_ID or R2_ENDPOINT_URL")
            if not self.r2_access_key_id:
                missing.append("R2_ACCESS_KEY_ID")
            if not self.r2_secret_access_key:
                missing.append("R2_SECRET_ACCESS_KEY")
            if not self.r2_public_url:
                missing.append("R2_PUBLIC_URL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
