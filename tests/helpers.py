"""CSV fixtures shared across test modules."""

import threading
from pathlib import Path

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

MAJESTIC_HEADER = [
    "GlobalRank",
    "TldRank",
    "Domain",
    "TLD",
    "RefSubNets",
    "RefIPs",
    "IDN_Domain",
    "IDN_TLD",
    "PrevGlobalRank",
    "PrevTldRank",
    "PrevRefSubNets",
    "PrevRefIPs",
]

GOOGLE_ROW = [
    "1", "1", "google.com", "com", "500000", "900000",
    "google.com", "com", "1", "1", "499000", "899000",
]


def ranking_row(rank: int, domain: str, tld: str = "com") -> list[str]:
    """A data row in MAJESTIC_HEADER order."""
    return [
        str(rank), "1", domain, tld, str(1000 - rank), str(2000 - rank),
        domain, tld, str(rank), "1", str(999 - rank), str(1999 - rank),
    ]


class ListSource:
    """CopySource over an in-memory list, optionally ending with an error."""

    def __init__(self, rows, error=None):
        self._rows = list(rows)
        self._error = error
        self._pos = -1

    def advance(self):
        if self._pos + 1 >= len(self._rows):
            return False
        self._pos += 1
        return True

    def current(self):
        return self._rows[self._pos]

    def error(self):
        if self._pos + 1 >= len(self._rows):
            return self._error
        return None


def thread_running(name: str) -> bool:
    return any(t.name == name and t.is_alive() for t in threading.enumerate())
