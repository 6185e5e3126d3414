"""PostgreSQL implementation of DatabaseService."""

import csv
import io
import logging
import threading
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Any, Iterator

import psycopg2
import psycopg2.extras

from rankdb.service import DatabaseService
from rankdb.types import CopySource, Params, ParamsList

logger = logging.getLogger(__name__)

COPY_READ_SIZE = 64 * 1024


class CopySourceReader:
    """Read-only file-like view over a CopySource for cursor.copy_expert().

    Every pulled row is written as one fully quoted CSV line, so an empty
    field reaches the server as an empty string rather than NULL.
    """

    def __init__(self, source: CopySource):
        self._source = source
        self._buffer = io.StringIO()
        self._writer = csv.writer(self._buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        self._exhausted = False
        self.rows = 0
        self.failure: BaseException | None = None

    def read(self, size: int = -1) -> str:
        try:
            self._fill(size)
        except BaseException as exc:
            # psycopg2 aborts the COPY and reports its own error in place of this one.
            self.failure = exc
            raise
        data = self._buffer.getvalue()
        self._buffer.seek(0)
        self._buffer.truncate()
        return data

    def _fill(self, size: int) -> None:
        while not self._exhausted and (size < 0 or self._buffer.tell() < size):
            if self._source.advance():
                self._writer.writerow(self._source.current())
                self.rows += 1
                continue
            self._exhausted = True
            err = self._source.error()
            if err is not None:
                raise err


class PostgresDatabaseService(DatabaseService):
    """PostgreSQL backend using psycopg2.

    Thread-safe via a connection pool (Queue). Each transaction() call
    acquires a dedicated connection and returns it on exit.
    """

    def __init__(self, dsn: str, pool_size: int = 4):
        self._dsn = dsn
        self._pool_size = pool_size
        self._pool: Queue = Queue(maxsize=pool_size)
        self._local = threading.local()

    def connect(self) -> None:
        for _ in range(self._pool_size):
            conn = psycopg2.connect(self._dsn)
            conn.autocommit = False
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def ping(self) -> None:
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
                cur.fetchone()
            conn.rollback()
        finally:
            self._release(conn)

    def _acquire(self):
        return self._pool.get(timeout=30)

    def _release(self, conn) -> None:
        self._pool.put(conn)

    def _get_conn(self):
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        raise RuntimeError(
            "No active transaction. Wrap calls in a `with service.transaction():` block."
        )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        conn = self._acquire()
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            self._release(conn)

    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        conn = self._get_conn()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(sql, params or ())
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]

    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        conn = self._get_conn()
        with conn.cursor() as cur:
            cur.executemany(sql, params_list)

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                for statement in sql.split(";"):
                    statement = statement.strip()
                    if statement:
                        cur.execute(statement)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)

    def batch_insert(self, table: str, columns: list[str], rows: list[tuple]) -> None:
        if not rows:
            return
        cols = ", ".join(columns)
        placeholders = ", ".join("%s" for _ in columns)
        sql = f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"
        self.execute_many(sql, rows)

    def copy_rows(self, table: str, columns: list[str], source: CopySource) -> int:
        cols = ", ".join(columns)
        sql = f"COPY {table} ({cols}) FROM STDIN WITH (FORMAT csv)"
        reader = CopySourceReader(source)
        try:
            with self.transaction():
                conn = self._get_conn()
                with conn.cursor() as cur:
                    cur.copy_expert(sql, reader, size=COPY_READ_SIZE)
                    copied = cur.rowcount
        except psycopg2.Error as exc:
            if reader.failure is None:
                raise
            raise reader.failure from exc
        if copied is None or copied < 0:
            # Older drivers leave rowcount unset after COPY.
            copied = reader.rows
        logger.debug("COPY %s finished: %d rows", table, copied)
        return copied
