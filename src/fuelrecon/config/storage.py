"""Locations of the local reports database and the feed response cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATA_DIR_ENV: Final[str] = "FUELRECON_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DEFAULT_DB_FILENAME: Final[str] = "fuelrecon.db"
HTTP_CACHE_FILENAME: Final[str] = "feed_cache.db"


def _platform_data_dir() -> Path:
    if os.name == "nt":
        configured = os.getenv("LOCALAPPDATA")
        fallback = Path.home() / "AppData" / "Local"
    else:
        configured = os.getenv("XDG_DATA_HOME")
        fallback = Path.home() / ".local" / "share"
    return (Path(configured) if configured else fallback) / "fuelrecon"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    @classmethod
    def from_environment(cls) -> StorageConfig:
        configured = os.getenv(DATA_DIR_ENV)
        return cls(data_dir=Path(configured) if configured else _platform_data_dir())

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def file(self, name: str, *, ensure: bool = True) -> Path:
        """Path of ``name`` inside the data directory, creating the directory if asked."""

        base = self.resolve_data_dir()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / name


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    return StorageConfig.from_environment()


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """An explicit ``DATABASE_URI`` wins over the SQLite file in the data directory."""

    override = os.getenv(DATABASE_URI_ENV)
    if override:
        return DatabaseConfig(uri=override)
    path = (storage or get_storage_config()).file(DEFAULT_DB_FILENAME)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")


def get_http_cache_path() -> Path:
    return get_storage_config().file(HTTP_CACHE_FILENAME)
