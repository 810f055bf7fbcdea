"""JSON configuration loading and database URL construction."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlalchemy.engine import URL

from .errors import ConfigError
from .utils import DEFAULT_STATE_FILE

log = logging.getLogger(__name__)

MYSQL_TYPES = ("mysql",)
POSTGRES_TYPES = ("postgres", "postgresql")
SQLITE_TYPES = ("sqlite", "sqlite3")


@dataclass(frozen=True)
class DatabaseConfig:
    type: str = ""
    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    database: str = ""


@dataclass(frozen=True)
class GCPConfig:
    project_id: str = ""
    credentials_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Everything read from ``config.json``."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    gcp: GCPConfig = field(default_factory=GCPConfig)
    base_url: str = ""
    album_id: str = ""
    statefile: str = DEFAULT_STATE_FILE

    @property
    def state_path(self) -> Path:
        return Path(self.statefile)


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"error decoding config file: '{key}' must be an object")
    return value


def parse_config(raw: Any) -> AppConfig:
    """Build an :class:`AppConfig` from already-decoded JSON."""
    if not isinstance(raw, dict):
        raise ConfigError("error decoding config file: top level must be an object")

    db = _section(raw, "database")
    gcp = _section(raw, "gcp")
    try:
        port = int(db.get("port") or 0)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"error decoding config file: invalid port: {exc}") from exc

    return AppConfig(
        database=DatabaseConfig(
            type=str(db.get("type", "")),
            host=str(db.get("host", "")),
            port=port,
            user=str(db.get("user", "")),
            password=str(db.get("password", "")),
            database=str(db.get("database", "")),
        ),
        gcp=GCPConfig(
            project_id=str(gcp.get("project_id", "")),
            credentials_file=str(gcp.get("credentials_file", "")),
        ),
        base_url=str(raw.get("base_url", "")),
        album_id=str(raw.get("album_id", "")),
        statefile=str(raw.get("statefile") or DEFAULT_STATE_FILE),
    )


def load_config(path: Path) -> AppConfig:
    """Read and parse the JSON configuration file at *path*.

    Raises:
        ConfigError: the file cannot be opened or is not valid JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except OSError as exc:
        raise ConfigError(f"error opening config file: {exc}") from exc
    except ValueError as exc:
        raise ConfigError(f"error decoding config file: {exc}") from exc

    config = parse_config(raw)
    log.debug(
        "Loaded config from %s: database=%s album=%s statefile=%s",
        path,
        config.database.type,
        config.album_id,
        config.statefile,
    )
    return config


def build_database_url(db: DatabaseConfig) -> URL:
    """Map the configured backend onto a SQLAlchemy connection URL.

    SQLite only uses ``database`` as a file path; the other backends use
    every field.
    """
    kind = db.type.lower()
    if kind in MYSQL_TYPES:
        drivername = "mysql+pymysql"
    elif kind in POSTGRES_TYPES:
        drivername = "postgresql+psycopg2"
    elif kind in SQLITE_TYPES:
        return URL.create("sqlite", database=db.database)
    else:
        raise ConfigError(f"unsupported database type: {db.type}")

    return URL.create(
        drivername,
        username=db.user or None,
        password=db.password or None,
        host=db.host or None,
        port=db.port or None,
        database=db.database or None,
    )
