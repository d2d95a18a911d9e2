import sqlite3

import pytest

import pricemigrator.db as db
from pricemigrator.config import MigratorConfig
from pricemigrator.models import Category, Product, ProductPrice


@pytest.fixture
def target_db(tmp_path):
    """Configure an isolated SQLite target database with the schema created."""
    original_engine = db.engine
    original_session_local = db.SessionLocal
    db_path = tmp_path / "target.db"
    url = f"sqlite:///{db_path}"

    db.engine = None
    db.configure_engine(url)
    db.init_db()
    try:
        yield url
    finally:
        if db.engine is not None and db.engine is not original_engine:
            db.engine.dispose()
        db.engine = original_engine
        db.SessionLocal = original_session_local


@pytest.fixture
def session(target_db):
    session = db.SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def source_root(tmp_path):
    root = tmp_path / "results"
    root.mkdir()
    return root


@pytest.fixture
def make_snapshot(source_root):
    """Create ``<source_root>/<name>/products.db`` holding the given tables.

    ``tables`` maps table names to lists of ``(price, link)`` rows. Tables use
    AUTOINCREMENT so SQLite adds its own ``sqlite_sequence`` table.
    """

    def _make(name, tables, db_name="products.db"):
        folder = source_root / name
        folder.mkdir()
        conn = sqlite3.connect(folder / db_name)
        try:
            for table, rows in tables.items():
                conn.execute(
                    f'CREATE TABLE "{table}" ('
                    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                    "price INTEGER, link TEXT)"
                )
                conn.executemany(
                    f'INSERT INTO "{table}" (price, link) VALUES (?, ?)', rows
                )
            conn.commit()
        finally:
            conn.close()
        return folder

    return _make


@pytest.fixture
def config(target_db, source_root):
    return MigratorConfig(
        target_url=target_db,
        target_user=None,
        source_root=source_root,
        timezone="UTC",
    )


@pytest.fixture
def table_counts(target_db):
    """Return a callable reporting committed ``(categories, products, prices)``."""

    def _counts():
        with db.create_session() as session:
            return (
                session.query(Category).count(),
                session.query(Product).count(),
                session.query(ProductPrice).count(),
            )

    return _counts
