from typing import Self

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    session_secret_key: str  # HMAC secret for session credentials, rotating it logs everyone out
    session_ttl_hours: int = 24
    share_default_ttl_days: int = 7
    share_max_ttl_days: int = 365
    reaper_interval_seconds: int = 3600  # How often expired share grants are swept
    reaper_enabled: bool = True
    public_url: str = "http://localhost:8000"  # Base URL for share links, e.g. https://notes.example.com
    cors_origins: list[str] = []

    model_config = {
        "env_file": [".env"],
        "env_prefix": "NOTEVAULT_",
        "extra": "ignore",
    }

    @field_validator("session_secret_key")
    @classmethod
    def validate_session_secret_key(cls, value: str) -> str:
        if len(value) < 32:
            raise ValueError("session_secret_key must be at least 32 characters long")
        return value

    @field_validator("session_ttl_hours", "share_default_ttl_days", "share_max_ttl_days", "reaper_interval_seconds")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("public_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def validate_share_ttl_bounds(self) -> Self:
        if self.share_default_ttl_days > self.share_max_ttl_days:
            raise ValueError("share_default_ttl_days must not exceed share_max_ttl_days")
        return self
