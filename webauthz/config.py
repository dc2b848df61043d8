"""Configuration for the webauthz client runtime."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Settings for the file store and logging, shared by the runtime and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="WEBAUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage (JsonFileStore)
    storage_path: Path = Field(
        default=Path.home() / ".webauthz",
        description="Directory holding the JSON file store",
    )
    encryption_key: str | None = Field(
        default=None, description="Fernet key for encrypting the file store at rest"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known logging level name."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper


class WebauthzSettings(StoreSettings):
    """Client settings loaded from ``WEBAUTHZ_*`` environment variables."""

    # Registration
    client_name: str = Field(
        default="Webauthz Client",
        description="Application name sent when registering with an authorization server",
    )
    grant_redirect_uri: str = Field(
        ...,
        description="Where the authorization server redirects the user after a grant, "
        "e.g. https://app.example.com/webauthz/grant",
    )

    # Network
    http_timeout: float = Field(
        default=30.0, description="Timeout in seconds for the default HTTP client"
    )

    # Concurrency
    single_flight: bool = Field(
        default=False,
        description="Serialize refresh and cache fill per key. When False, concurrent "
        "callers may each perform their own exchange or registration.",
    )

    @field_validator("grant_redirect_uri")
    @classmethod
    def validate_grant_redirect_uri(cls, v: str) -> str:
        """Validate that grant_redirect_uri is an HTTP(S) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("grant_redirect_uri must start with http:// or https://")
        return v
