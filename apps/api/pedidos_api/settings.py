"""Application settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    port: int = 3000
    api_host: str = "0.0.0.0"
    environment: str = "development"

    # Logging
    log_level: str = "INFO"

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # SMTP (Gmail relay by default)
    gmail_user: Optional[str] = None
    gmail_pass: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_use_tls: bool = True
    mail_from: str = '"Streak.xit" <streakxit@gmail.com>'

    # Notifications
    notifications_enabled: bool = True
    notification_timeout_seconds: float = 10.0

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @property
    def smtp_configured(self) -> bool:
        """Check if SMTP credentials are present."""
        return bool(self.gmail_user and self.gmail_pass)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
