"""Streaming CSV ingestion into the domain_ranking table."""

import csv
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from queue import Queue
from typing import TextIO

from ingestion.config import Settings
from ingestion.mapping import build_index_map, map_headers
from ingestion.parallel_insert import DEFAULT_WORKERS, insert_parallel
from ingestion.pipeline import (
    CsvProducer,
    ProgressCounter,
    RowSource,
    count_csv_rows,
    read_header,
)
from ingestion.progress import DEFAULT_INTERVAL, ProgressReporter
from ingestion.schema import (
    DB_COLUMNS,
    DEFAULT_BUFFER_SIZE,
    DOMAIN_RANKING_TABLE,
    HEADER_TO_COLUMN,
)
from rankdb import create_service
from rankdb.service import DatabaseService

logger = logging.getLogger(__name__)

MODES = ("copy", "insert")


@dataclass(frozen=True)
class IngestResult:
    rows_copied: int
    rows_estimated: int
    rows_published: int
    elapsed: float


def ingest_csv(
    service: DatabaseService,
    file_path: str | Path,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    mode: str = "copy",
    workers: int = DEFAULT_WORKERS,
    progress_interval: float = DEFAULT_INTERVAL,
    stream: TextIO | None = None,
) -> IngestResult:
    """Load a Majestic Million CSV into domain_ranking.

    In "copy" mode the whole file is one bulk copy: either every row lands or
    none does. Header problems are raised before anything is sent to the
    database. "insert" mode runs the row-at-a-time worker pool instead.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown ingest mode: {mode}")

    start = time.monotonic()
    total = count_csv_rows(file_path)
    logger.info("Pre-pass counted %d data rows in %s", total, file_path)

    with open(file_path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f, strict=True)
        header = read_header(reader, file_path)
        index_map = build_index_map(map_headers(header, HEADER_TO_COLUMN), DB_COLUMNS)
        logger.debug("CSV header %s -> column positions %s", header, index_map)

        counter = ProgressCounter()
        buffer: Queue = Queue(maxsize=buffer_size)
        producer = CsvProducer(reader, index_map, buffer, counter, expected_fields=len(header))
        reporter = ProgressReporter(counter, total, progress_interval, stream)
        source = RowSource(buffer)

        producer.start()
        reporter.start()
        logger.info("Loading %s via %s", DOMAIN_RANKING_TABLE, mode)
        try:
            if mode == "copy":
                copied = service.copy_rows(DOMAIN_RANKING_TABLE, DB_COLUMNS, source)
            else:
                copied = insert_parallel(
                    service, DOMAIN_RANKING_TABLE, DB_COLUMNS, source, workers
                )
        except BaseException as exc:
            producer.cancel()
            producer.join()
            reporter.stop()
            cause = producer.error
            if cause is not None and cause is not exc and isinstance(exc, Exception):
                # The driver may replace the producer's error with its own abort error.
                raise cause from exc
            raise
        producer.join()

        elapsed = time.monotonic() - start
        reporter.finish(copied, elapsed)

    if copied != total:
        logger.warning("Pre-pass counted %d rows but %d were loaded", total, copied)
    logger.info("Loaded %d rows into %s in %.2fs", copied, DOMAIN_RANKING_TABLE, elapsed)
    return IngestResult(
        rows_copied=copied,
        rows_estimated=total,
        rows_published=counter.value,
        elapsed=elapsed,
    )


def run_ingest(
    settings: Settings,
    mode: str = "copy",
    workers: int = DEFAULT_WORKERS,
) -> IngestResult:
    """Open the pool, check connectivity, ingest settings.csv_path, close the pool."""
    pool_size = settings.pool_size if mode == "copy" else max(settings.pool_size, workers)
    service = create_service(settings.database_url, pool_size)
    try:
        service.connect()
        service.ping()
        logger.info("Database reachable")
        return ingest_csv(service, settings.csv_path, settings.buffer_size, mode, workers)
    finally:
        service.close()
