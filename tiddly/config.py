"""Configuration loading for the tiddler server.

This module loads application configuration with the following rules:
- Primary source: `tiddly_config.json` in the working directory.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("tiddly_config.json")
DEFAULT_INDEX_PATH = Path(__file__).resolve().parent / "static" / "index.html"
DEFAULT_PORT = 8080
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class StoreConfig(BaseModel):
    project: str
    dsn: str = Field(default="sqlite+pysqlite:///:memory:")
    auto_migrate: bool = Field(default=True)

    @field_validator("project")
    @classmethod
    def project_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("store.project must be set (TIDDLY_PROJECT)")
        return v.strip()

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("store.dsn must be a non-empty string")
        return v


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)


class AuthConfig(BaseModel):
    header: str = Field(default="X-Webauth-User")

    @field_validator("header")
    @classmethod
    def header_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("auth.header must be a non-empty header name")
        return v.strip()


class FrontendConfig(BaseModel):
    index_path: Path = Field(default=DEFAULT_INDEX_PATH)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = str(v).strip().upper()
        if level not in allowed:
            raise ValueError(f"logging.level must be one of {sorted(allowed)}")
        return level


class AppConfig(BaseModel):
    store: StoreConfig
    server: ServerConfig = Field(default_factory=ServerConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    frontend: FrontendConfig = Field(default_factory=FrontendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _is_true(value: object) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) tiddly_config.json in the working directory
    4) Safe defaults for development

    Raises pydantic.ValidationError when the store project is missing.
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    # Store
    project = (
        _env("TIDDLY_PROJECT")
        or _env("GCP_PROJECT")
        or _read_config_file("store.project")
        or _base("store.project")
        or ""
    )
    dsn = _env("DATABASE_URL") or _read_config_file("database.url") or _base("store.dsn", "sqlite+pysqlite:///:memory:")
    auto_migrate_text = _env("AUTO_APPLY_MIGRATIONS") or _read_config_file("store.auto_migrate") or _base("store.auto_migrate", "true")

    # Server
    host = _env("HOST") or _read_config_file("server.host") or _base("server.host", "0.0.0.0")
    port_text = _env("PORT") or _read_config_file("server.port") or _base("server.port")
    if not port_text:
        logger.info("Defaulting to port %s", DEFAULT_PORT)
        port_text = str(DEFAULT_PORT)

    # Auth / frontend / logging
    header = _env("TRUSTED_USER_HEADER") or _read_config_file("auth.header") or _base("auth.header", "X-Webauth-User")
    index_path = _env("INDEX_HTML_PATH") or _read_config_file("frontend.index_path") or _base("frontend.index_path")
    level = _env("LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")

    try:
        cfg = AppConfig(
            store=StoreConfig(project=project, dsn=dsn, auto_migrate=_is_true(auto_migrate_text)),
            server=ServerConfig(host=host, port=int(str(port_text).strip())),
            auth=AuthConfig(header=header),
            frontend=FrontendConfig(index_path=Path(index_path)) if index_path else FrontendConfig(),
            logging=LoggingConfig(level=level),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "StoreConfig",
    "ServerConfig",
    "AuthConfig",
    "FrontendConfig",
    "LoggingConfig",
    "load_config",
]
