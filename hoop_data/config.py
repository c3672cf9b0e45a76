"""Application settings loaded from ``HOOP_DATA_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from hoop_data.data.bref.client import BASE_URL, DEFAULT_USER_AGENT, BRefClient


class Settings(BaseSettings):
    """Runtime configuration.

    Sources, highest priority first: environment variables (``HOOP_DATA_``
    prefix), a ``.env`` file, then the defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOOP_DATA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream
    base_url: str = BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = 30.0
    min_request_delay: float = 1.0
    http_cache: bool = False
    http_cache_name: str = "bref_cache"

    # Storage
    database_path: Path = Path("data/hoop_data.duckdb")

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 3001

    # Sync pacing
    index_delay: float = 1.5
    player_delay: float = 2.0
    batch_size: int = 20

    # Recurring sync
    schedule_enabled: bool = False
    schedule_initial_delay: float = 15.0
    schedule_interval: float = 24 * 60 * 60.0
    # Seconds to wait for an active sync to wind down on shutdown
    shutdown_timeout: float = 30.0

    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def build_client(settings: Settings) -> BRefClient:
    """Return an upstream client configured from ``settings``."""

    return BRefClient(
        user_agent=settings.user_agent,
        base_url=settings.base_url,
        min_delay=settings.min_request_delay,
        timeout=settings.request_timeout,
        enable_cache=settings.http_cache,
        cache_name=settings.http_cache_name,
    )


__all__ = ["Settings", "build_client", "get_settings"]
