"""Fold timestamped snapshot databases into the normalized price schema."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import db
from .config import MigratorConfig
from .domain.prices import record_price
from .errors import TargetConnectionError, WriteError
from .parsing import parse_snapshot_date
from .repositories.identity_repository import IdentityResolver
from .snapshots import SnapshotReader, locate_snapshots

logger = logging.getLogger(__name__)


@dataclass
class MigrationSummary:
    snapshots: int = 0
    tables: int = 0
    categories_created: int = 0
    products_created: int = 0
    prices_written: int = 0
    dry_run: bool = False


class MigrationRunner:
    """Run one all-or-nothing migration over every snapshot directory.

    The whole run shares a single session and therefore a single
    transaction: nothing is committed until every snapshot has been
    processed, and any failure rolls everything back.
    """

    def __init__(
        self,
        config: MigratorConfig,
        session_factory: Optional[Callable[[], Session]] = None,
        *,
        dry_run: bool = False,
    ):
        self.config = config
        self.dry_run = dry_run
        self._session_factory = session_factory
        self.summary = MigrationSummary(dry_run=dry_run)

    def _open_session(self) -> Session:
        factory = self._session_factory or db.create_session
        session = factory()
        try:
            session.connection()
        except SQLAlchemyError as exc:
            session.close()
            raise TargetConnectionError(
                f"Failed to connect to the target database: {exc}"
            ) from exc
        return session

    def run(self) -> MigrationSummary:
        self.config.validate()
        folders = locate_snapshots(self.config.source_root)
        logger.info(
            "Found %d snapshot folder(s) under %s", len(folders), self.config.source_root
        )

        session = self._open_session()
        resolver = IdentityResolver(session)
        try:
            for folder in folders:
                self._process_folder(session, resolver, folder)
            if self.dry_run:
                session.rollback()
                logger.info("Dry run requested, discarding all changes")
            else:
                try:
                    session.commit()
                except SQLAlchemyError as exc:
                    raise WriteError(f"Failed to commit migration: {exc}") from exc
        except Exception as exc:
            logger.error("Migration failed, rolling back: %s", exc)
            try:
                session.rollback()
            except SQLAlchemyError as rollback_exc:
                logger.warning("Rollback failed: %s", rollback_exc)
            raise
        finally:
            session.close()

        self.summary.categories_created = resolver.categories_created
        self.summary.products_created = resolver.products_created
        logger.info(
            "Migrated %d snapshot(s): %d table(s), %d new categories, "
            "%d new products, %d prices",
            self.summary.snapshots,
            self.summary.tables,
            self.summary.categories_created,
            self.summary.products_created,
            self.summary.prices_written,
        )
        return self.summary

    def _process_folder(
        self, session: Session, resolver: IdentityResolver, folder: Path
    ) -> None:
        observed_at = parse_snapshot_date(folder.name, self.config.timezone)
        logger.info("Processing snapshot %s (%s)", folder.name, observed_at.isoformat())

        with SnapshotReader(folder, self.config.snapshot_db_name) as reader:
            for table in reader.tables():
                self._process_table(session, resolver, reader, table, observed_at)
        self.summary.snapshots += 1

    def _process_table(
        self,
        session: Session,
        resolver: IdentityResolver,
        reader: SnapshotReader,
        table: str,
        observed_at: datetime,
    ) -> None:
        category_id = resolver.resolve_category(table)
        written = 0
        for row in reader.rows(table):
            product_id = resolver.resolve_product(row.url, category_id)
            record_price(
                session,
                product_id=product_id,
                observed_at=observed_at,
                price=row.price,
            )
            written += 1
        logger.debug("Table %s: %d price(s)", table, written)
        self.summary.tables += 1
        self.summary.prices_written += written


def run_migration(config: MigratorConfig, *, dry_run: bool = False) -> MigrationSummary:
    """Configure the target engine from ``config`` and run a migration."""

    config.validate()
    try:
        db.configure_engine(
            config.target_url, config.target_user, config.target_password
        )
    except (SQLAlchemyError, ImportError) as exc:
        raise TargetConnectionError(
            f"Failed to configure the target database: {exc}"
        ) from exc
    return MigrationRunner(config, dry_run=dry_run).run()


__all__ = ["MigrationRunner", "MigrationSummary", "run_migration"]
