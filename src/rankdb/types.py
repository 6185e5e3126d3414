"""Shared types for the rankdb package."""

from typing import Any, Protocol, Sequence

Params = tuple | list | dict
ParamsList = list[tuple] | list[list]


class CopySource(Protocol):
    """Pull-style row stream consumed by DatabaseService.copy_rows().

    advance() blocks until a row is available and returns False at end of
    stream. current() is only valid after advance() returned True. error()
    is None on a clean end of stream.
    """

    def advance(self) -> bool: ...

    def current(self) -> Sequence[Any]: ...

    def error(self) -> BaseException | None: ...


def drain(source: CopySource):
    """Yield every row from a CopySource, raising its terminal error at the end."""
    while source.advance():
        yield source.current()
    err = source.error()
    if err is not None:
        raise err
