"""Exceptions raised by the ingest pipeline."""


class IngestError(Exception):
    """Base class for every fatal ingest failure."""


class ConfigError(IngestError):
    """Missing or invalid configuration."""


class HeaderError(IngestError):
    """The CSV header cannot be mapped onto the target schema."""


class EmptyFile(HeaderError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"CSV file has no header record: {path}")


class UnknownHeader(HeaderError):
    def __init__(self, header: str):
        self.header = header
        super().__init__(f"No mapping for CSV header: {header!r}")


class MissingColumn(HeaderError):
    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Column {column!r} not found in CSV header")


class CsvDecodeError(IngestError):
    """A data record could not be decoded mid-stream."""

    def __init__(self, line: int, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"CSV decode error at line {line}: {reason}")
