"""
Application configuration settings.
Handles environment variables and application-wide settings.
"""
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application settings
    app_name: str = Field(default="Ecomhub API", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    app_description: str = Field(
        default="Storefront and admin REST API: catalog, cart, orders, payments and roles",
        description="OpenAPI description",
    )
    debug: bool = Field(default=False, description="Expose exception text in 500 responses")

    # Server settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5001)
    reload: bool = Field(default=False)

    # Database settings
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    database_name: str = Field(default="ecomhub")

    # MongoDB connection settings
    server_selection_timeout_ms: int = Field(default=30000, alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS")
    connect_timeout_ms: int = Field(default=30000, alias="MONGODB_CONNECT_TIMEOUT_MS")
    socket_timeout_ms: int = Field(default=30000, alias="MONGODB_SOCKET_TIMEOUT_MS")
    max_pool_size: int = Field(default=10, alias="MONGODB_MAX_POOL_SIZE")
    min_pool_size: int = Field(default=1, alias="MONGODB_MIN_POOL_SIZE")
    retry_writes: bool = Field(default=True, alias="MONGODB_RETRY_WRITES")
    direct_connection: bool = Field(default=False, alias="MONGODB_DIRECT_CONNECTION")

    # Token settings
    jwt_secret: str = Field(default="dev-access-token-secret-change-me-in-production")
    jwt_refresh_secret: str = Field(default="dev-refresh-token-secret-change-me-in-production")
    jwt_admin_secret: str = Field(default="dev-admin-token-secret-change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    access_token_minutes: int = Field(default=15)
    refresh_token_days: int = Field(default=7)
    admin_token_hours: int = Field(default=24)
    admin_remember_me_days: int = Field(default=30)
    bcrypt_rounds: int = Field(default=10, ge=4, le=16)

    # OTP settings
    otp_ttl_seconds: int = Field(default=300)
    otp_max_attempts: int = Field(default=3)
    otp_reset_window_seconds: int = Field(default=600)
    default_country_code: str = Field(default="+91")

    # Email (SMTP) settings
    email_host: Optional[str] = Field(default=None)
    email_port: int = Field(default=587)
    email_user: Optional[str] = Field(default=None)
    email_pass: Optional[str] = Field(default=None)

    # SMS (Twilio) settings
    twilio_account_sid: Optional[str] = Field(default=None)
    twilio_auth_token: Optional[str] = Field(default=None)
    twilio_phone_number: Optional[str] = Field(default=None)

    # Payment gateway settings
    razorpay_key_id: str = Field(default="rzp_test_placeholder")
    razorpay_key_secret: str = Field(default="placeholder_secret")
    payment_currency: str = Field(default="INR")

    # CORS
    frontend_url: Optional[str] = Field(default="http://localhost:5173")

    # Rate limiting (window seconds / max requests)
    general_rate_window: int = Field(default=15 * 60)
    general_rate_limit: int = Field(default=500)
    auth_rate_window: int = Field(default=5 * 60)
    auth_rate_limit: int = Field(default=100)
    otp_rate_window: int = Field(default=5 * 60)
    otp_rate_limit: int = Field(default=50)

    # Bootstrap staff account, created on startup when no staff users exist
    bootstrap_admin_email: Optional[str] = Field(default=None)
    bootstrap_admin_password: Optional[str] = Field(default=None)
    bootstrap_admin_name: str = Field(default="Administrator")

    # Logging settings
    log_level: str = Field(default="INFO")

    # API settings
    api_prefix: str = Field(default="/api")

    # Pagination defaults
    default_page_size: int = Field(default=12)
    admin_page_size: int = Field(default=20)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    def cors_origin_regex(self) -> str:
        """Any localhost port is allowed during development."""
        return r"^http://localhost(:\d+)?$"

    def cors_origins(self) -> List[str]:
        return [self.frontend_url] if self.frontend_url else []


@lru_cache()
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
