"""
Configuration settings for the Parcel Tracker Backend.

This module handles application configuration using Pydantic settings.
Every value can be overridden through environment variables or a .env file.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Parcel Tracker Backend"
    api_version: str = "v1"
    debug: bool = True

    # Local parcel store
    database_url: str = "sqlite+aiosqlite:///./parcels.db"
    db_echo: bool = False

    # Thailand Post tracking API
    thailand_post_api_url: str = "https://trackapi.thailandpost.co.th/post/api/v1/track"
    thailand_post_api_token: str = ""
    thailand_post_language: str = "EN"
    thailand_post_timeout_ms: int = 30000

    # Tracking cache
    tracking_cache_ttl_seconds: int = 300

    @property
    def thailand_post_timeout_seconds(self) -> float:
        return self.thailand_post_timeout_ms / 1000

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
