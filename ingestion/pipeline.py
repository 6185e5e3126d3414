"""Producer / consumer plumbing between the CSV reader and the bulk copy.

The producer thread decodes the CSV, reorders each record into target column
order and publishes it to a bounded queue. RowSource drains that queue
through the pull-style advance()/current()/error() interface the database
layer consumes. End of stream travels through the queue as a _Closed marker
carrying the producer's terminal error, if any.
"""

import csv
import logging
import threading
from pathlib import Path
from queue import Full, Queue
from typing import Iterator, Sequence

from ingestion.errors import CsvDecodeError, EmptyFile
from ingestion.mapping import reorder
from rankdb.types import drain

logger = logging.getLogger(__name__)

PUBLISH_POLL_INTERVAL = 0.1


class _Closed:
    __slots__ = ("error",)

    def __init__(self, error: BaseException | None = None):
        self.error = error


class ProgressCounter:
    """Monotonic row counter: one writer, any number of readers."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self, n: int = 1) -> None:
        with self._lock:
            self._value += n

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class RowSource:
    """Pull-side view of the row queue, consumed by DatabaseService.copy_rows()."""

    def __init__(self, buffer: Queue):
        self._buffer = buffer
        self._row: list[str] | None = None
        self._error: BaseException | None = None
        self._closed = False

    def advance(self) -> bool:
        if self._closed:
            return False
        item = self._buffer.get()
        if isinstance(item, _Closed):
            self._closed = True
            self._row = None
            self._error = item.error
            return False
        self._row = item
        return True

    def current(self) -> list[str]:
        if self._row is None:
            raise RuntimeError("current() called without a successful advance()")
        return self._row

    def error(self) -> BaseException | None:
        return self._error

    def __iter__(self) -> Iterator[list[str]]:
        return drain(self)


def read_header(reader, path: str | Path) -> list[str]:
    """Consume the header record from a csv reader."""
    try:
        for record in reader:
            if record:
                return record
    except csv.Error as exc:
        raise CsvDecodeError(reader.line_num, str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise CsvDecodeError(reader.line_num, f"invalid UTF-8: {exc.reason}") from exc
    raise EmptyFile(path)


def count_csv_rows(path: str | Path) -> int:
    """Count data records (header excluded) in a lenient pre-pass.

    Malformed quoting does not fail here; the ingest pass reports it with a
    line number. An empty or header-only file counts 0.
    """
    with open(path, newline="", encoding="utf-8", errors="replace") as f:
        reader = csv.reader(f)
        try:
            records = sum(1 for record in reader if record)
        except csv.Error as exc:
            raise CsvDecodeError(reader.line_num, str(exc)) from exc
    return max(records - 1, 0)


class CsvProducer:
    """Reads data records, reorders them and publishes them to the buffer.

    The header must already have been consumed from reader. Blocks on a full
    buffer; cancel() releases it when the consumer has gone away.
    """

    def __init__(
        self,
        reader,
        index_map: Sequence[int],
        buffer: Queue,
        counter: ProgressCounter,
        expected_fields: int,
    ):
        self._reader = reader
        self._index_map = index_map
        self._buffer = buffer
        self._counter = counter
        self._expected_fields = expected_fields
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self.run, name="csv-producer", daemon=True)
        self.error: BaseException | None = None

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def cancel(self) -> None:
        self._cancelled.set()

    def _records(self) -> Iterator[list[str]]:
        reader = self._reader
        try:
            for record in reader:
                if not record:
                    continue
                if len(record) != self._expected_fields:
                    raise CsvDecodeError(
                        reader.line_num,
                        f"expected {self._expected_fields} fields, got {len(record)}",
                    )
                yield record
        except csv.Error as exc:
            raise CsvDecodeError(reader.line_num, str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise CsvDecodeError(reader.line_num, f"invalid UTF-8: {exc.reason}") from exc

    def _publish(self, item) -> bool:
        while not self._cancelled.is_set():
            try:
                self._buffer.put(item, timeout=PUBLISH_POLL_INTERVAL)
                return True
            except Full:
                continue
        return False

    def run(self) -> None:
        error: BaseException | None = None
        try:
            for record in self._records():
                if not self._publish(reorder(record, self._index_map)):
                    logger.debug("Producer cancelled after %d rows", self._counter.value)
                    return
                self._counter.increment()
        except Exception as exc:
            logger.error("Producer stopped: %s", exc)
            error = exc
        self.error = error
        self._publish(_Closed(error))
