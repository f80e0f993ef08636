"""Configuration management for Where 2 Watch."""

from pydantic import PositiveInt, SecretStr, field_validator
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from urllib.parse import urlparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # TMDB (imports fall back to synthetic data when unset)
    tmdb_api_key: str | None = None
    tmdb_language: str = "en-US"
    tmdb_timeout: PositiveInt = 10  # Per sub-request, in seconds
    watch_region: str = "US"  # Region block read from watch/providers

    # Database
    database_url: str = "sqlite:///./where2watch.db"

    # Admin PIN for write routes, disabled when unset
    admin_pin: SecretStr | None = None

    # Network settings
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    @field_validator("watch_region")
    @classmethod
    def validate_watch_region(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 2 or not v.isalpha():
            raise ValueError("Watch region must be a two-letter country code")
        return v

    # App settings
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
