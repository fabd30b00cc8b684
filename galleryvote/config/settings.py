"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Supabase project (GoTrue auth + PostgREST)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""

    # OAuth: the return address <site_url>/auth/callback must be registered
    # with the provider exactly as built here
    site_url: str = "http://localhost:8000"
    oauth_provider: str = "google"

    # Tables
    content_table: str = "captions"
    vote_table: str = "caption_votes"

    # Session cookies
    session_cookie_name: str = "gv-session"
    session_secret: str | None = None
    session_cookie_secure: bool = False

    # HTTP
    http_timeout: float = 30.0

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def callback_url(self) -> str:
        """Fixed OAuth return address."""
        return f"{self.site_url.rstrip('/')}/auth/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
