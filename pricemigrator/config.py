"""Runtime configuration for the snapshot migrator."""

from __future__ import annotations

import logging
import os
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from . import settings_io
from .errors import MigrationConfigError

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_DB_NAME = "products.db"

DEFAULTS = OrderedDict(
    [
        ("TARGET_DB_URL", ""),
        ("TARGET_DB_USER", ""),
        ("TARGET_DB_PASSWORD", ""),
        ("SOURCE_FOLDER_PATH", ""),
        ("SNAPSHOT_DB_NAME", DEFAULT_SNAPSHOT_DB_NAME),
        ("TIMEZONE", ""),
        ("LOG_LEVEL", "INFO"),
        ("LOG_FILE", ""),
    ]
)


@dataclass(frozen=True)
class MigratorConfig:
    target_url: str
    target_user: Optional[str]
    target_password: Optional[str] = field(default=None, repr=False)
    source_root: Optional[Path] = None
    snapshot_db_name: str = DEFAULT_SNAPSHOT_DB_NAME
    timezone: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_settings(cls, cfg: Mapping[str, Any]) -> "MigratorConfig":
        source = cfg.get("SOURCE_FOLDER_PATH") or ""
        return cls(
            target_url=(cfg.get("TARGET_DB_URL") or "").strip(),
            target_user=cfg.get("TARGET_DB_USER") or None,
            target_password=cfg.get("TARGET_DB_PASSWORD") or None,
            source_root=Path(source).expanduser() if source else None,
            snapshot_db_name=cfg.get("SNAPSHOT_DB_NAME") or DEFAULT_SNAPSHOT_DB_NAME,
            timezone=cfg.get("TIMEZONE") or None,
            log_level=(cfg.get("LOG_LEVEL") or "INFO").upper(),
            log_file=cfg.get("LOG_FILE") or None,
        )

    def with_updates(self, **kwargs: Any) -> "MigratorConfig":
        return replace(self, **kwargs)

    def validate(self) -> "MigratorConfig":
        """Return ``self`` or raise :class:`MigrationConfigError`."""

        missing = []
        if not self.target_url:
            missing.append("TARGET_DB_URL")
        if self.source_root is None:
            missing.append("SOURCE_FOLDER_PATH")
        if missing:
            raise MigrationConfigError(
                "Missing required settings: " + ", ".join(missing)
            )
        if self.timezone:
            resolve_timezone(self.timezone)
        return self


def resolve_timezone(name: Optional[str]) -> Optional[ZoneInfo]:
    """Return the ``ZoneInfo`` for ``name`` or ``None`` for the local zone."""

    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise MigrationConfigError(f"Unknown timezone: {name!r}") from exc


def _raise_read_error(message: str, exc: Exception) -> None:
    raise MigrationConfigError(f"{message}: {exc}") from exc


def load_settings(env_path: Optional[Path] = None) -> "OrderedDict[str, str]":
    """Merge defaults, the ``.env`` file and the process environment."""

    env_path = env_path or settings_io.ENV_PATH
    if not env_path.exists():
        logger.debug(
            "No settings file at %s; %s lists the available keys",
            env_path,
            settings_io.EXAMPLE_PATH,
        )
    values = OrderedDict(DEFAULTS)
    values.update(
        settings_io.load_settings(env_path=env_path, logger=_raise_read_error)
    )
    for key in settings_io.KNOWN_KEYS:
        if key in os.environ:
            values[key] = os.environ[key]
    return values


def load_config(env_path: Optional[Path] = None) -> MigratorConfig:
    """Return an unvalidated :class:`MigratorConfig` for the current process."""

    return MigratorConfig.from_settings(load_settings(env_path))


__all__ = [
    "DEFAULTS",
    "DEFAULT_SNAPSHOT_DB_NAME",
    "MigratorConfig",
    "load_config",
    "load_settings",
    "resolve_timezone",
]
