"""Discovery and reading of per-timestamp snapshot databases."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional

from .config import DEFAULT_SNAPSHOT_DB_NAME
from .db import sqlite_connect
from .errors import SnapshotOpenError, SourceUnavailable

logger = logging.getLogger(__name__)

# Tables SQLite maintains itself (``sqlite_sequence``, ``sqlite_stat1`` ...).
RESERVED_TABLE_PREFIX = "sqlite_"


class SnapshotRow(NamedTuple):
    price: int
    url: str


def locate_snapshots(root: Path) -> List[Path]:
    """Return the snapshot directories directly under ``root`` sorted by name."""

    root = Path(root)
    if not root.exists():
        raise SourceUnavailable(f"Snapshot root {root} does not exist")
    if not root.is_dir():
        raise SourceUnavailable(f"Snapshot root {root} is not a directory")
    try:
        entries = [entry for entry in root.iterdir() if entry.is_dir()]
    except OSError as exc:
        raise SourceUnavailable(f"Snapshot root {root} is not readable: {exc}") from exc
    return sorted(entries, key=lambda entry: entry.name)


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SnapshotReader:
    """Read-only access to the product tables of one snapshot."""

    def __init__(self, snapshot_dir: Path, db_name: str = DEFAULT_SNAPSHOT_DB_NAME):
        self.path = Path(snapshot_dir) / db_name
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "SnapshotReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if not self.path.is_file():
            raise SnapshotOpenError(f"Snapshot database {self.path} not found")
        try:
            conn = sqlite_connect(self.path, read_only=True)
        except sqlite3.Error as exc:
            raise SnapshotOpenError(
                f"Failed to open snapshot database {self.path}: {exc}"
            ) from exc
        try:
            # Touching the catalog fails early on files that are not SQLite.
            conn.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
        except sqlite3.Error as exc:
            conn.close()
            raise SnapshotOpenError(
                f"Snapshot database {self.path} is not readable: {exc}"
            ) from exc
        self._conn = conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise SnapshotOpenError(f"Snapshot database {self.path} is not open")
        return self._conn

    def tables(self) -> List[str]:
        """Return the data tables in catalog order."""

        try:
            rows = self.conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        except sqlite3.Error as exc:
            raise SnapshotOpenError(
                f"Failed to list tables of {self.path}: {exc}"
            ) from exc
        names = []
        for (name,) in rows:
            if name.startswith(RESERVED_TABLE_PREFIX):
                logger.debug("Skipping reserved table %s in %s", name, self.path)
                continue
            names.append(name)
        return names

    def rows(self, table: str) -> Iterator[SnapshotRow]:
        """Yield ``(price, url)`` rows of ``table`` lazily."""

        # SQLite coerces text and real prices the way an integer getter would:
        # "12 zl" reads as 12, NULL as 0.
        sql = (
            "SELECT COALESCE(CAST(price AS INTEGER), 0) AS price, link "
            f"FROM {_quote_identifier(table)}"
        )
        try:
            cursor = self.conn.execute(sql)
        except sqlite3.Error as exc:
            raise SnapshotOpenError(
                f"Failed to read table {table!r} from {self.path}: {exc}"
            ) from exc
        try:
            for price, link in cursor:
                yield SnapshotRow(price, link)
        except sqlite3.Error as exc:
            raise SnapshotOpenError(
                f"Failed to read table {table!r} from {self.path}: {exc}"
            ) from exc
        finally:
            # An abandoned generator may be finalized after close().
            if self._conn is not None:
                cursor.close()


__all__ = [
    "RESERVED_TABLE_PREFIX",
    "SnapshotReader",
    "SnapshotRow",
    "locate_snapshots",
]
