# Client library settings — env-driven configuration via pydantic-settings.
# Created: 2026-10-02

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime settings for the client library.

    Every field can be overridden with a ``CLIENTLIB_`` prefixed env var,
    e.g. ``CLIENTLIB_DEBUG=true`` or ``CLIENTLIB_HEARTBEAT_INTERVAL=5``.
    """

    model_config = SettingsConfigDict(env_prefix="CLIENTLIB_", extra="ignore")

    # Build flavour: selects the debug side of every Credential pair
    debug: bool = False

    config_dir: Path = Field(default_factory=lambda: Path.home() / ".clientlib")

    # Messaging
    websocket_url: str = "ws://localhost:8080/ws"
    heartbeat_interval: float = 10.0  # seconds

    # HTTP
    request_timeout: float = 30.0
    connect_timeout: float = 10.0

    # App identity
    app_name: str = "clientlib"
    app_version: str = "0.4.0"
    build_number: int = 1

    @property
    def heartbeat_ms(self) -> int:
        return int(self.heartbeat_interval * 1000)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (cached)."""
    return Settings()


def get_config_dir() -> Path:
    """Get/create the directory that holds persisted preferences."""
    d = get_settings().config_dir
    d.mkdir(parents=True, exist_ok=True)
    return d


def is_debug() -> bool:
    return get_settings().debug


@dataclass(frozen=True)
class AppInfo:
    """Name and version of the embedding application."""

    name: str
    version: str
    build_number: int


def app_info(settings: Settings | None = None) -> AppInfo:
    settings = settings or get_settings()
    return AppInfo(
        name=settings.app_name,
        version=settings.app_version,
        build_number=settings.build_number,
    )
