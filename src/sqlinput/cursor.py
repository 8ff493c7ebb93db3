"""
Batch cursors over a streaming select.

A batch cursor hides whether the source streams incrementally or is read
through one execution. `fetch()` returns an iterable of rows, or None once
the result is exhausted; an empty batch means the same as None.

- SingleSelect executes once and returns one lazy batch covering the whole
  result. Rows are pulled `fetch_rows` at a time beneath the iterator.
- PagedSelect executes once and returns one list of at most `fetch_rows`
  rows per call.

Neither state machine ever moves back to an earlier state.
"""
import enum
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any, Self

from sqlinput.exceptions import DriverError, FetchError

__all__ = [
    'CursorState',
    'BatchSelect',
    'SingleSelect',
    'PagedSelect',
    'iter_chunks',
]

logger = logging.getLogger(__name__)


class CursorState(enum.Enum):
    NOT_FETCHED = 'not_fetched'
    MORE_AVAILABLE = 'more_available'
    EXHAUSTED = 'exhausted'


def _fetchmany(cursor: Any, size: int) -> list:
    try:
        return cursor.fetchmany(size)
    except DriverError as err:
        raise FetchError(f'Failed fetching rows: {err}') from err


def iter_chunks(cursor: Any, size: int) -> Iterator[Any]:
    """Iterate through cursor results in chunks of `size` rows."""
    while True:
        chunked = _fetchmany(cursor, size)
        if not chunked:
            break
        yield from chunked


class BatchSelect(ABC):
    """Base class for batch cursors over one select statement.
    """

    def __init__(self, cursor: Any, query: str, fetch_rows: int) -> None:
        self.cursor = cursor
        self.query = query
        self.fetch_rows = fetch_rows
        self.state = CursorState.NOT_FETCHED
        self._closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @abstractmethod
    def fetch(self) -> Iterable[Any] | None:
        """Next batch of rows, or None at end of data."""

    def _execute(self) -> None:
        start = time.time()
        try:
            self.cursor.execute(self.query)
        except DriverError as err:
            logger.error(f'Error with query:\nSQL:\n{self.query}')
            raise FetchError(f'Failed executing query: {err}') from err
        logger.info(f'> {time.time() - start:.2f} seconds')

    def close(self) -> None:
        """Close the underlying cursor. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.state = CursorState.EXHAUSTED
        self.cursor.close()

    @property
    def closed(self) -> bool:
        return self._closed


class SingleSelect(BatchSelect):
    """One execution, one lazy batch covering the whole result.
    """

    def fetch(self) -> Iterator[Any] | None:
        if self.state is CursorState.EXHAUSTED:
            return None
        self._execute()
        self.state = CursorState.EXHAUSTED
        return iter_chunks(self.cursor, self.fetch_rows)


class PagedSelect(BatchSelect):
    """One execution, one list of up to `fetch_rows` rows per call.
    """

    def fetch(self) -> list[Any] | None:
        if self.state is CursorState.EXHAUSTED:
            return None
        if self.state is CursorState.NOT_FETCHED:
            self._execute()
            self.state = CursorState.MORE_AVAILABLE
        rows = _fetchmany(self.cursor, self.fetch_rows)
        if not rows:
            self.state = CursorState.EXHAUSTED
            return None
        return list(rows)
