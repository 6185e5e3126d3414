"""Row-at-a-time insert across a pool of worker threads.

Kept as a comparison point for the COPY path: every row is its own
transaction, so a failure leaves the rows inserted before it in place.
"""

import logging
import threading

from rankdb.service import DatabaseService
from rankdb.types import CopySource

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8


def insert_parallel(
    service: DatabaseService,
    table: str,
    columns: list[str],
    source: CopySource,
    workers: int = DEFAULT_WORKERS,
) -> int:
    """Insert every row pulled from source; returns rows inserted.

    The first worker error stops the other workers and is re-raised, as is
    a terminal error reported by the source.
    """
    if workers < 1:
        raise ValueError("workers must be at least 1")

    source_lock = threading.Lock()
    stop = threading.Event()
    errors: list[BaseException] = []
    inserted = 0

    def next_row() -> tuple | None:
        with source_lock:
            if stop.is_set() or not source.advance():
                return None
            return tuple(source.current())

    def worker(index: int) -> None:
        nonlocal inserted
        done = 0
        while True:
            row = next_row()
            if row is None:
                return
            try:
                with service.transaction():
                    service.batch_insert(table, columns, [row])
            except Exception as e:
                errors.append(e)
                stop.set()
                return
            done += 1
            with source_lock:
                inserted += 1
            if done % 1000 == 0:
                logger.debug("Worker %d inserted %d rows", index, done)

    threads = [
        threading.Thread(target=worker, args=(i,), name=f"insert-worker-{i}")
        for i in range(workers)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    if errors:
        raise errors[0]
    err = source.error()
    if err is not None:
        raise err
    return inserted
