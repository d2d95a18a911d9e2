"""Helpers for loading configuration values from ``.env`` files."""

from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import Callable, Mapping, Optional

from dotenv import dotenv_values

ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH = ROOT_DIR / ".env"
EXAMPLE_PATH = ROOT_DIR / ".env.example"

# Keys understood by the migrator, in the order they are documented.
KNOWN_KEYS = (
    "TARGET_DB_URL",
    "TARGET_DB_USER",
    "TARGET_DB_PASSWORD",
    "SOURCE_FOLDER_PATH",
    "SNAPSHOT_DB_NAME",
    "TIMEZONE",
    "LOG_LEVEL",
    "LOG_FILE",
)


def _load_values(path: Path) -> Mapping[str, Optional[str]]:
    return dotenv_values(path)


def load_settings(
    *,
    env_path: Path = ENV_PATH,
    logger: Optional[Callable[[str, Exception], None]] = None,
) -> "OrderedDict[str, str]":
    """Return configuration values read from ``env_path``.

    Known keys come first in their documented order; any other keys found in
    the file are appended afterwards. A missing file yields an empty mapping.
    """

    if not env_path.exists():
        return OrderedDict()

    try:
        current = _load_values(env_path)
    except OSError as exc:
        if logger is not None:
            logger(f"Failed to read {env_path}", exc)
        return OrderedDict()

    values: "OrderedDict[str, str]" = OrderedDict()
    for key in KNOWN_KEYS:
        if key in current:
            values[key] = current[key] or ""
    for key, val in current.items():
        if key not in values:
            values[key] = val or ""
    return values


__all__ = [
    "ENV_PATH",
    "EXAMPLE_PATH",
    "KNOWN_KEYS",
    "load_settings",
]
