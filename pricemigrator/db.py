import logging
import sqlite3
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from .models import Base

logger = logging.getLogger(__name__)

engine = None
SessionLocal = None

SQLITE_CONNECT_ARGS = {"check_same_thread": False, "timeout": 5}
SQLITE_JOURNAL_MODE = "WAL"
SQLITE_BUSY_TIMEOUT_MS = 30000

JDBC_PREFIX = "jdbc:"


def _configure_sqlite_connection(dbapi_connection):
    """Apply common SQLite PRAGMA settings to the given connection."""

    cursor = dbapi_connection.cursor()
    try:
        try:
            cursor.execute(f"PRAGMA journal_mode={SQLITE_JOURNAL_MODE}")
        except sqlite3.OperationalError as exc:
            logger.warning(
                "Unable to set SQLite journal_mode to %s; continuing without WAL mode: %s",
                SQLITE_JOURNAL_MODE,
                exc,
            )
        else:
            # ``journal_mode`` returns the active mode as a row.
            cursor.fetchone()

        cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def sqlite_connect(db_path, *, read_only=False, apply_pragmas=False, **kwargs):
    """Return a SQLite connection to ``db_path``.

    ``read_only`` opens the file through a ``mode=ro`` URI so a missing file
    raises instead of being created.
    """

    params = {**SQLITE_CONNECT_ARGS, **kwargs}
    if read_only:
        uri = Path(db_path).resolve().as_uri() + "?mode=ro"
        conn = sqlite3.connect(uri, uri=True, **params)
    else:
        conn = sqlite3.connect(str(db_path), **params)
    if apply_pragmas:
        _configure_sqlite_connection(conn)
    return conn


def build_url(url, user=None, password=None):
    """Return a SQLAlchemy URL for ``url`` with credentials applied.

    JDBC-style connection strings (``jdbc:postgresql://host/db``) are
    accepted and mapped onto the matching SQLAlchemy dialect.
    """

    if url.startswith(JDBC_PREFIX):
        url = url[len(JDBC_PREFIX):]
    parsed = make_url(url)
    if user:
        parsed = parsed.set(username=user)
    if password:
        parsed = parsed.set(password=password)
    return parsed


def configure_engine(url, user=None, password=None):
    """Create SQLAlchemy engine and session factory for ``url``."""
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()

    target = build_url(url, user, password)
    if target.get_backend_name() == "sqlite":
        engine = create_engine(target, future=True, connect_args=SQLITE_CONNECT_ARGS)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, _record):  # pragma: no cover - SQLAlchemy hook
            _configure_sqlite_connection(dbapi_connection)

    else:
        engine = create_engine(target, future=True)

    SessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
    logger.debug("Configured target engine for %s", target.render_as_string(hide_password=True))
    return engine


def create_session():
    """Return a new session bound to the configured target engine."""
    if SessionLocal is None:
        raise RuntimeError("Database not configured. Call configure_engine() first.")
    return SessionLocal()


def init_db():
    """Create the target tables if they do not exist yet."""
    Base.metadata.create_all(engine)

