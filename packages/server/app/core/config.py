"""
Application configuration loaded from environment variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Sitework server configuration."""

    model_config = SettingsConfigDict(env_prefix="SITEWORK_", env_file=".env", extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./sitework.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "console"] = "json"

    # Listing
    default_page_size: int = 25
    max_page_size: int = 100

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
