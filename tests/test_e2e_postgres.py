"""E2E tests that run against a real PostgreSQL instance.

Requires POSTGRES_URI pointing at a disposable database.
Run with: pytest tests/test_e2e_postgres.py -v -m e2e
"""

import io
import os

import psycopg2
import pytest

from ingestion.csv_ingest import ingest_csv
from ingestion.errors import CsvDecodeError, UnknownHeader
from ingestion.schema import DB_COLUMNS
from rankdb import create_service
from rankdb.migrations import Migrator
from tests.helpers import GOOGLE_ROW, MAJESTIC_HEADER, MIGRATIONS_DIR, ListSource, ranking_row

PG_URL = os.environ.get("POSTGRES_URI", "")

pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(not PG_URL.startswith(("postgres://", "postgresql")), reason="POSTGRES_URI not set"),
]


@pytest.fixture()
def pg_service():
    """Connect to Postgres and rebuild the schema for each test."""
    service = create_service(PG_URL, pool_size=2)
    try:
        service.connect()
    except psycopg2.OperationalError as e:
        pytest.skip(f"PostgreSQL unreachable: {e}")
    try:
        # Clean slate
        service.execute_ddl("DROP TABLE IF EXISTS domain_ranking")
        service.execute_ddl("DROP TABLE IF EXISTS alembic_version")
        Migrator(PG_URL, MIGRATIONS_DIR).up()
        yield service
    finally:
        service.close()


def loaded(service) -> list[dict]:
    with service.transaction():
        return service.execute("SELECT * FROM domain_ranking ORDER BY global_rank")


class TestCopyIngest:
    def test_three_rows(self, pg_service, write_csv):
        rows = [ranking_row(1, "google.com"), ranking_row(2, "facebook.com"), ranking_row(3, "youtube.com")]
        result = ingest_csv(pg_service, write_csv(rows), stream=io.StringIO())
        assert result.rows_copied == 3
        assert [r["domain"] for r in loaded(pg_service)] == ["google.com", "facebook.com", "youtube.com"]

    def test_empty_text_field_is_not_null(self, pg_service, write_csv):
        row = list(GOOGLE_ROW)
        row[6] = ""
        ingest_csv(pg_service, write_csv([row]), stream=io.StringIO())
        assert loaded(pg_service)[0]["idn_domain"] == ""

    def test_unknown_header(self, pg_service, write_csv):
        header = ["Foo"] + MAJESTIC_HEADER[1:]
        with pytest.raises(UnknownHeader):
            ingest_csv(pg_service, write_csv([GOOGLE_ROW], header=header), stream=io.StringIO())
        assert loaded(pg_service) == []

    def test_malformed_row_rolls_back(self, pg_service, tmp_path):
        path = tmp_path / "broken.csv"
        path.write_text(
            ",".join(MAJESTIC_HEADER) + "\n"
            + ",".join(GOOGLE_ROW) + "\n"
            + '2,1,"broken.com,com,1,1,broken.com,com,2,1,1,1\n',
            encoding="utf-8",
        )
        with pytest.raises(CsvDecodeError):
            ingest_csv(pg_service, path, stream=io.StringIO())
        assert loaded(pg_service) == []

    def test_insert_mode(self, pg_service, write_csv):
        rows = [ranking_row(i, f"site{i}.com") for i in range(1, 21)]
        result = ingest_csv(pg_service, write_csv(rows), mode="insert", workers=2, stream=io.StringIO())
        assert result.rows_copied == 20
        assert len(loaded(pg_service)) == 20


class InterruptedSource:
    """Yields one row, then behaves as if Ctrl-C arrived mid-copy."""

    def __init__(self):
        self._sent = False

    def advance(self):
        if self._sent:
            raise KeyboardInterrupt
        self._sent = True
        return True

    def current(self):
        return GOOGLE_ROW

    def error(self):
        return None


class TestCopyRowsFailures:
    def test_source_error_is_not_replaced_by_driver_error(self, pg_service):
        source = ListSource([GOOGLE_ROW], error=CsvDecodeError(3, "unterminated quote"))
        with pytest.raises(CsvDecodeError):
            pg_service.copy_rows("domain_ranking", DB_COLUMNS, source)
        assert loaded(pg_service) == []

    def test_interrupt_propagates_and_rolls_back(self, pg_service):
        with pytest.raises(KeyboardInterrupt):
            pg_service.copy_rows("domain_ranking", DB_COLUMNS, InterruptedSource())
        assert loaded(pg_service) == []
