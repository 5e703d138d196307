from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_RESEND_API_KEY = "re_your_api_key_here"

DEFAULT_ALLOWED_ORIGINS = ",".join([
    "http://localhost:3000",
    "https://vo.flashspace.co",
    "https://virtual.flashspace.co",
    "https://flashspace.co",
    "https://www.flashspace.co",
    "https://flashspace01-flash-space-google-ads.vercel.app",
])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5000, validation_alias="PORT")
    service_name: str = Field(default="FlashSpace Backend API", validation_alias="SERVICE_NAME")
    service_version: str = Field(default="1.0.0", validation_alias="SERVICE_VERSION")
    brand_name: str = Field(default="FlashSpace", validation_alias="BRAND_NAME")

    # Email (Resend)
    resend_api_key: Optional[str] = Field(default=None, validation_alias="RESEND_API_KEY")
    resend_api_url: str = Field(default="https://api.resend.com/emails", validation_alias="RESEND_API_URL")
    email_from: str = Field(
        default="FlashSpace Virtual Office <onboarding@resend.dev>",
        validation_alias="EMAIL_FROM",
    )
    email_to: str = Field(default="sales@flashspace.co", validation_alias="EMAIL_TO")

    # Google Sheets
    google_sheets_id: Optional[str] = Field(default=None, validation_alias="GOOGLE_SHEETS_ID")
    google_sheet_range: str = Field(default="Sheet1!A:P", validation_alias="GOOGLE_SHEET_NAME")
    google_service_account_key_base64: Optional[str] = Field(
        default=None, validation_alias="GOOGLE_SERVICE_ACCOUNT_KEY_BASE64"
    )
    google_service_account_key: Optional[str] = Field(
        default=None, validation_alias="GOOGLE_SERVICE_ACCOUNT_KEY"
    )

    # CORS
    allowed_origins: str = Field(default=DEFAULT_ALLOWED_ORIGINS, validation_alias="ALLOWED_ORIGINS")

    # Leads
    lead_id_prefix: str = Field(default="FS-", validation_alias="LEAD_ID_PREFIX")
    estimated_lead_value: str = Field(default="₹2,500", validation_alias="ESTIMATED_LEAD_VALUE")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    # Monitoring
    sentry_dsn: Optional[str] = Field(default=None, validation_alias="SENTRY_DSN")
    metrics_enabled: bool = Field(default=True, validation_alias="METRICS_ENABLED")

    @field_validator("environment")
    def validate_environment(cls, v):
        valid_envs = ["development", "testing", "staging", "production"]
        if v not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v):
        valid_formats = ["json", "console"]
        if v not in valid_formats:
            raise ValueError(f"log_format must be one of {valid_formats}")
        return v

    @field_validator(
        "resend_api_key",
        "google_sheets_id",
        "google_service_account_key_base64",
        "google_service_account_key",
        "sentry_dsn",
    )
    def blank_as_unset(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def email_configured(self) -> bool:
        """True when a usable Resend API key is set."""
        return bool(self.resend_api_key) and self.resend_api_key != PLACEHOLDER_RESEND_API_KEY

    def origins(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
