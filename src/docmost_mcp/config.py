"""Configuration management for Docmost MCP"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 3000
DEFAULT_MAX_BODY_BYTES = 5_000_000


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Docmost instance
    docmost_base_url: str
    docmost_api_token: str | None = None
    docmost_email: str | None = None
    docmost_password: str | None = None
    docmost_public_url: str | None = None

    # Policy
    read_only: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_BYTES, gt=0)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("docmost_base_url", "docmost_public_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Require an http(s) URL and drop the trailing slash."""
        if v is None:
            return v
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("must be an http:// or https:// URL")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def check_credentials(self) -> "Settings":
        """Either an API token or login credentials must be configured."""
        if not self.docmost_api_token and not (self.docmost_email and self.docmost_password):
            raise ValueError(
                "Set DOCMOST_API_TOKEN, or DOCMOST_EMAIL and DOCMOST_PASSWORD, "
                "to authenticate against Docmost"
            )
        return self

    @property
    def needs_login(self) -> bool:
        """Session-cookie login is only used when no token is configured."""
        return not self.docmost_api_token

    @property
    def public_url(self) -> str:
        return self.docmost_public_url or self.docmost_base_url
