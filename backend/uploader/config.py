"""Image upload service configuration.

Loads settings from an optional YAML file (``uploader.settings.yaml``) and
then applies process environment overrides:

  * PORT         : listening port (default 5001)
  * DATABASE_URL : DuckDB database path (``MONGO_URI`` accepted as alias)
  * UPLOAD_DIR   : storage directory for accepted images
  * LOG_LEVEL    : root logger level
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("uploader.settings.yaml")
SETTINGS_ENV_VAR = "UPLOADER_SETTINGS"

MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str       = "0.0.0.0"
    port:            int       = 5001
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class DatabaseSettings(BaseModel):
    url: str = "uploads.duckdb"


class StorageSettings(BaseModel):
    """Where accepted images live and how large they may be."""
    upload_dir:          str = "uploads"
    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES

    @field_validator("max_file_size_bytes")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_file_size_bytes must be positive")
        return value


class LoggingSettings(BaseModel):
    level: str = "info"


class AppSettings(BaseModel):
    server:   ServerSettings   = Field(default_factory=ServerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage:  StorageSettings  = Field(default_factory=StorageSettings)
    logging:  LoggingSettings  = Field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------


def _apply_env_overrides(data: Dict[str, Any], environ: Dict[str, str]) -> None:
    """Overlay recognised environment variables onto raw settings data."""
    port = environ.get("PORT")
    if port:
        data.setdefault("server", {})["port"] = port

    db_url = environ.get("DATABASE_URL") or environ.get("MONGO_URI")
    if db_url:
        data.setdefault("database", {})["url"] = db_url

    upload_dir = environ.get("UPLOAD_DIR")
    if upload_dir:
        data.setdefault("storage", {})["upload_dir"] = upload_dir

    level = environ.get("LOG_LEVEL")
    if level:
        data.setdefault("logging", {})["level"] = level


def _resolve_relative(value: str, base_dir: Path) -> str:
    if value == ":memory:" or Path(value).is_absolute():
        return value
    return str(base_dir / value)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_settings(
    settings_path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> AppSettings:
    """Load the YAML settings file and environment into an *AppSettings*.

    Relative ``database.url`` and ``storage.upload_dir`` values found in the
    settings file resolve against that file's directory. Values coming from
    the environment are taken as given.
    """
    environ = dict(os.environ) if environ is None else environ
    if settings_path is None:
        settings_path = Path(environ.get(SETTINGS_ENV_VAR) or SETTINGS_FILE)

    settings_data = _load_yaml(settings_path)
    if settings_data:
        base_dir = settings_path.resolve().parent
        db = settings_data.get("database") or {}
        if db.get("url"):
            db["url"] = _resolve_relative(str(db["url"]), base_dir)
        storage = settings_data.get("storage") or {}
        if storage.get("upload_dir"):
            storage["upload_dir"] = _resolve_relative(str(storage["upload_dir"]), base_dir)

    _apply_env_overrides(settings_data, environ)

    app_settings = AppSettings(**settings_data)
    logger.info(
        "Settings loaded (server=%s:%s, database=%s, upload_dir=%s)",
        app_settings.server.host,
        app_settings.server.port,
        app_settings.database.url,
        app_settings.storage.upload_dir,
    )
    return app_settings
