"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SDK settings loaded from environment variables (prefix ``EGOI_PUSH_``)."""

    # Backend
    host: str = "https://api.egoiapp.com"
    os_name: str = "ios"
    # Seconds before an outbound backend request is abandoned
    request_timeout: float = 10.0

    # Presentation
    # Upper bound for the notification image download (seconds)
    image_timeout: float = 10.0
    # Delay before a locally presented notification is shown (seconds)
    notification_delay: float = 1.0
    # Pause after registering a display category so the host picks it up
    category_registration_delay: float = 0.5

    # Persistence
    # Empty path keeps the credential store in memory
    storage_path: str = ""
    # Fernet key; empty stores values unencrypted
    encryption_key: str = ""

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EGOI_PUSH_",
        extra="ignore",
    )

    @property
    def backend_url(self) -> str:
        return self.host.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
