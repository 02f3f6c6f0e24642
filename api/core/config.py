"""
Process configuration read from environment variables.

Settings are loaded once in the app lifespan and passed down explicitly;
nothing below `core/` reads the environment on its own.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

BACKEND_SQLITE = "sqlite"
BACKEND_JSON = "json"
BACKENDS = {BACKEND_SQLITE, BACKEND_JSON}

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB


@dataclass(frozen=True)
class Settings:
    backend: str
    database_path: Path
    items_json_path: Path
    images_dir: Path
    front_url: str
    max_upload_bytes: int
    db_timeout_s: float
    log_level: str
    port: int
    # Unset: clients can only submit images by upload.
    image_source_dir: Path | None = None


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"Invalid {name}. It must be an integer.")
    if value <= 0:
        raise RuntimeError(f"Invalid {name}. It must be > 0.")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"Invalid {name}. It must be a number.")
    if value <= 0:
        raise RuntimeError(f"Invalid {name}. It must be > 0.")
    return value


def _env_log_level() -> str:
    name = _env_str("LOG_LEVEL", "INFO").upper()
    # getLevelName maps unknown names to a "Level X" string, not an int.
    if not isinstance(logging.getLevelName(name), int):
        raise RuntimeError(f"Invalid LOG_LEVEL '{name}'.")
    return name


def _env_optional_path(name: str) -> Path | None:
    raw = os.environ.get(name, "").strip()
    return Path(raw) if raw else None


def catalog_backend() -> str:
    backend = _env_str("CATALOG_BACKEND", BACKEND_SQLITE).lower()
    if backend not in BACKENDS:
        raise RuntimeError(
            f"Unsupported CATALOG_BACKEND '{backend}'. Allowed: {sorted(BACKENDS)}"
        )
    return backend


def load_settings() -> Settings:
    return Settings(
        backend=catalog_backend(),
        database_path=Path(_env_str("DATABASE_PATH", "db/items.db")),
        items_json_path=Path(_env_str("ITEMS_JSON_PATH", "items.json")),
        images_dir=Path(_env_str("IMAGES_DIR", "images")),
        front_url=_env_str("FRONT_URL", "http://localhost:3000"),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        db_timeout_s=_env_float("DB_TIMEOUT_S", 5.0),
        log_level=_env_log_level(),
        port=_env_int("PORT", 9000),
        image_source_dir=_env_optional_path("IMAGE_SOURCE_DIR"),
    )
