"""CLI entry point for the Majestic Million ingest.

Usage:
    python -m scripts.ingest_csv [--file csv/majestic_million.csv] [--db-url postgresql://...]
                                 [--buffer-size 500] [--mode copy|insert] [--workers 8]

POSTGRES_URI is read from the environment or from a .env file in the working
directory when --db-url is not given.
"""

import argparse
import logging
import sqlite3
import sys

import psycopg2

from ingestion.config import load_settings
from ingestion.csv_ingest import MODES, run_ingest
from ingestion.errors import IngestError
from ingestion.parallel_insert import DEFAULT_WORKERS

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

FATAL_ERRORS = (IngestError, OSError, psycopg2.Error, sqlite3.Error)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bulk-load the Majestic Million CSV into domain_ranking"
    )
    parser.add_argument("--db-url", help="Database URL (defaults to $POSTGRES_URI)")
    parser.add_argument("--file", help="Path to CSV file (defaults to $CSV_PATH)")
    parser.add_argument("--buffer-size", type=int, help="Rows buffered between reader and database")
    parser.add_argument("--pool-size", type=int, help="Database connection pool size")
    parser.add_argument("--env-file", default=".env", help="Optional dotenv file")
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="copy",
        help="copy: one atomic COPY (default); insert: row-at-a-time worker pool",
    )
    parser.add_argument(
        "--workers", type=int, default=DEFAULT_WORKERS, help="Worker threads for --mode insert"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = load_settings(
            args.env_file,
            database_url=args.db_url,
            csv_path=args.file,
            buffer_size=args.buffer_size,
            pool_size=args.pool_size,
        )
        result = run_ingest(settings, mode=args.mode, workers=args.workers)
    except FATAL_ERRORS as e:
        logger.error("Ingest failed: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted; nothing was committed")
        return 130

    logger.info(
        "Done. %d rows loaded (%d estimated) in %.2fs.",
        result.rows_copied,
        result.rows_estimated,
        result.elapsed,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
