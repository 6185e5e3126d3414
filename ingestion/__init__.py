"""Streaming Majestic Million ingest: header mapping, producer, bulk copy."""

from ingestion.csv_ingest import IngestResult, ingest_csv, run_ingest
from ingestion.errors import (
    ConfigError,
    CsvDecodeError,
    EmptyFile,
    HeaderError,
    IngestError,
    MissingColumn,
    UnknownHeader,
)
from ingestion.mapping import build_index_map, map_headers, normalize_header, reorder

__all__ = [
    "IngestResult",
    "ingest_csv",
    "run_ingest",
    "IngestError",
    "ConfigError",
    "HeaderError",
    "EmptyFile",
    "UnknownHeader",
    "MissingColumn",
    "CsvDecodeError",
    "normalize_header",
    "map_headers",
    "build_index_map",
    "reorder",
]
