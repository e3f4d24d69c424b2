"""Configuration models for the inventory editor."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_DATABASE_URL = "sqlite:///data/inventory.db"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class StoreConfig:
    """Connection settings for the relational product store."""

    database_url: str = DEFAULT_DATABASE_URL
    echo: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        env = os.environ if environ is None else environ
        return cls(
            database_url=env.get("INVENTORY_DATABASE_URL") or DEFAULT_DATABASE_URL,
            echo=env.get("INVENTORY_DB_ECHO", "").strip().lower() in _TRUTHY,
        )

    @property
    def sqlite_path(self) -> Optional[Path]:
        """Filesystem path of a file-backed SQLite database, if that is what is configured."""
        prefix = "sqlite:///"
        if not self.database_url.startswith(prefix):
            return None
        location = self.database_url[len(prefix):]
        if not location or location == ":memory:":
            return None
        return Path(location)


@dataclass
class AppConfig:
    """Aggregate configuration for the web application."""

    store: StoreConfig = field(default_factory=StoreConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        return cls(
            store=StoreConfig.from_env(env),
            log_level=(env.get("INVENTORY_LOG_LEVEL") or "INFO").upper(),
        )
