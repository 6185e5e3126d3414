"""Header mapping and column reordering."""

from typing import Mapping, Sequence

from ingestion.errors import MissingColumn, UnknownHeader


def normalize_header(token: str) -> str:
    """Lowercase and trim a raw CSV header token."""
    return token.lower().strip()


def map_headers(headers: Sequence[str], mapping: Mapping[str, str]) -> list[str]:
    """Resolve each raw CSV header to its target column name.

    Raises UnknownHeader (carrying the raw token) for the first header that
    has no entry in mapping.
    """
    mapped = []
    for header in headers:
        column = mapping.get(normalize_header(header))
        if column is None:
            raise UnknownHeader(header)
        mapped.append(column)
    return mapped


def build_index_map(mapped_headers: Sequence[str], columns: Sequence[str]) -> tuple[int, ...]:
    """Return P such that mapped_headers[P[i]] == columns[i].

    Duplicate columns in mapped_headers resolve to the lowest CSV index.
    """
    first_seen: dict[str, int] = {}
    for position, column in enumerate(mapped_headers):
        first_seen.setdefault(column, position)

    index_map = []
    for column in columns:
        if column not in first_seen:
            raise MissingColumn(column)
        index_map.append(first_seen[column])
    return tuple(index_map)


def reorder(record: Sequence[str], index_map: Sequence[int]) -> list[str]:
    """Reshape a CSV record into target column order."""
    return [record[i] for i in index_map]
