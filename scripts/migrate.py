"""CLI entry point for schema migrations.

Usage:
    python -m scripts.migrate up               # apply all pending migrations
    python -m scripts.migrate down [--steps N] # roll back N revisions (default 1)
    python -m scripts.migrate reset            # roll back everything, then apply everything
"""

import argparse
import logging
import sys

from alembic.util import CommandError
from sqlalchemy.exc import SQLAlchemyError

from ingestion.config import load_settings
from ingestion.errors import IngestError
from rankdb.migrations import MigrationError, Migrator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

FATAL_ERRORS = (IngestError, MigrationError, CommandError, SQLAlchemyError, OSError)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apply or roll back schema migrations")
    parser.add_argument("action", choices=["up", "down", "reset"])
    parser.add_argument("--steps", type=int, default=1, help="Migrations to roll back with down")
    parser.add_argument("--db-url", help="Database URL (defaults to $POSTGRES_URI)")
    parser.add_argument("--migrations-dir", help="Alembic script directory (env.py and versions/)")
    parser.add_argument("--env-file", default=".env", help="Optional dotenv file")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.steps < 1:
        logger.error("--steps must be at least 1")
        return 2

    try:
        settings = load_settings(
            args.env_file, database_url=args.db_url, migrations_dir=args.migrations_dir
        )
        migrator = Migrator(settings.database_url, settings.migrations_dir)
        if args.action == "up":
            revisions = migrator.up()
            logger.info("Applied %d migration(s): %s", len(revisions), revisions)
        elif args.action == "down":
            revisions = migrator.down(args.steps)
            logger.info("Rolled back %d migration(s): %s", len(revisions), revisions)
        else:
            reverted, applied = migrator.reset()
            logger.info("Database reset: %d reverted, %d applied", len(reverted), len(applied))
    except FATAL_ERRORS as e:
        logger.error("Migration %s failed: %s", args.action, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
