"""Shared test fixtures."""

import csv
from pathlib import Path

import pytest

from rankdb import create_service
from rankdb.migrations import Migrator
from tests.helpers import MAJESTIC_HEADER, MIGRATIONS_DIR


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def db_service(db_url):
    """Provide a fresh SQLite DatabaseService for each test."""
    service = create_service(db_url)
    service.connect()
    yield service
    service.close()


@pytest.fixture
def ranking_service(db_url, db_service):
    """SQLite service with the project migrations applied."""
    Migrator(db_url, MIGRATIONS_DIR).up()
    return db_service


@pytest.fixture
def write_csv(tmp_path):
    """Write a header plus rows to a CSV file and return its path."""

    def _write(rows: list[list[str]], header: list[str] | None = None, name: str = "ranking.csv") -> Path:
        csv_file = tmp_path / name
        with open(csv_file, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(MAJESTIC_HEADER if header is None else header)
            writer.writerows(rows)
        return csv_file

    return _write
