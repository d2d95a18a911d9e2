"""Command line entry point for the snapshot migration."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

from .config import MigratorConfig, load_config
from .errors import MigrationError
from .migration import run_migration

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(level: str, log_file: Optional[str] = None) -> None:
    formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)

    # Replace existing file handlers so a new LOG_FILE takes effect.
    file_handlers = [h for h in root_logger.handlers if isinstance(h, logging.FileHandler)]
    for handler in file_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def build_config(args: argparse.Namespace) -> MigratorConfig:
    config = load_config(args.env_file)
    updates = {}
    if args.source:
        updates["source_root"] = args.source
    if args.target_url:
        updates["target_url"] = args.target_url
    if args.target_user:
        updates["target_user"] = args.target_user
    if args.target_password:
        updates["target_password"] = args.target_password
    if args.snapshot_db_name:
        updates["snapshot_db_name"] = args.snapshot_db_name
    if args.timezone:
        updates["timezone"] = args.timezone
    if args.log_level:
        updates["log_level"] = args.log_level.upper()
    if args.log_file:
        updates["log_file"] = str(args.log_file)
    if updates:
        config = config.with_updates(**updates)
    return config


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Migrate timestamped price snapshots into the target database"
    )
    parser.add_argument("--env-file", type=Path, help="Path to the .env settings file")
    parser.add_argument(
        "--source",
        type=Path,
        help="Directory holding the YYYY-MM-DD_hh-mm-ss snapshot folders",
    )
    parser.add_argument("--target-url", help="Target database URL")
    parser.add_argument("--target-user", help="Target database user")
    parser.add_argument("--target-password", help="Target database password")
    parser.add_argument(
        "--snapshot-db-name",
        help="File name of the database inside each snapshot folder",
    )
    parser.add_argument(
        "--timezone",
        help="IANA timezone of the folder timestamps (default: local time)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Process every snapshot but roll back instead of committing",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = build_config(args)
    except MigrationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    try:
        configure_logging(config.log_level, config.log_file)
    except OSError as exc:
        LOGGER.error("Cannot open log file %s: %s", config.log_file, exc)
        return 1
    LOGGER.debug("Effective configuration: %s", config)

    try:
        summary = run_migration(config, dry_run=args.dry_run)
    except MigrationError as exc:
        LOGGER.error("Migration failed: %s", exc)
        return 1
    except Exception:
        LOGGER.exception("Migration failed with an unexpected error")
        return 1

    if summary.dry_run:
        print(
            f"Dry run finished: {summary.prices_written} prices from "
            f"{summary.snapshots} snapshots were rolled back"
        )
    else:
        print(
            f"Migration completed successfully: {summary.snapshots} snapshots, "
            f"{summary.categories_created} new categories, "
            f"{summary.products_created} new products, "
            f"{summary.prices_written} prices"
        )
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
