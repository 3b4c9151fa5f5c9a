"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    photos_bucket: str = "photos"
    registrations_table: str = "registrations"
    allowlist_table: str = "allowed_users"
    app_base_url: str = "http://localhost:3000"
    signed_url_ttl_seconds: int = 60 * 60
    list_limit: int = 200
    success_dismiss_seconds: float = 2.0
    page_ttl_seconds: int = 60 * 60
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def register_url(self) -> str:
        """Absolute URL the one-time login link redirects back to."""
        return f"{self.app_base_url.rstrip('/')}/register"
