"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ACTIVITY_EVENTS = [
    "connection_test",
    "emails_fetched",
    "email_sent",
    "messages_marked_read",
    "folders_listed",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Mail Gateway"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=3000, validation_alias=AliasChoices("api_port", "port"))
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    static_dir: Path | None = None

    # TLS: None means "strict in production, permissive elsewhere"
    tls_verify: bool | None = None

    # IMAP timeouts (seconds)
    imap_connect_timeout: float = Field(default=10.0, gt=0)
    imap_auth_timeout: float = Field(default=5.0, gt=0)
    imap_operation_timeout: float = Field(default=30.0, gt=0)

    # SMTP timeouts (seconds)
    smtp_connect_timeout: float = Field(default=10.0, gt=0)
    smtp_greeting_timeout: float = Field(default=5.0, gt=0)
    smtp_operation_timeout: float = Field(default=30.0, gt=0)

    # Providers
    providers_file: Path | None = None

    # Fetching
    default_fetch_count: int = Field(default=10, ge=1)
    max_fetch_count: int = Field(default=200, ge=1)
    date_format: str = "%d.%m.%Y, %H:%M:%S"
    unknown_placeholder: str = "Unknown"
    no_subject_placeholder: str = "No subject"

    # Activity reporting
    activity_api_url: str | None = None
    activity_api_key: SecretStr | None = None
    activity_timeout: float = Field(default=5.0, gt=0)
    activity_events: list[str] = Field(default_factory=lambda: list(DEFAULT_ACTIVITY_EVENTS))

    @computed_field
    @property
    def verify_tls(self) -> bool:
        """Certificate validation default for mail sessions."""
        if self.tls_verify is not None:
            return self.tls_verify
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
