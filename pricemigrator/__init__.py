"""Migrate timestamped price snapshots into a normalized database."""

from .config import MigratorConfig, load_config
from .migration import MigrationRunner, MigrationSummary, run_migration

__all__ = [
    "MigratorConfig",
    "MigrationRunner",
    "MigrationSummary",
    "load_config",
    "run_migration",
]
