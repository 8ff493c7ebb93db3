"""
Output record builder and page outputs.

The PageBuilder buffers converted values column by column and emits a
pyarrow RecordBatch every `page_size` records. Pages go to a PageOutput;
ListPageOutput keeps them in memory and exposes the whole result as a
pyarrow Table or a pandas DataFrame.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any

import pandas as pd
import pyarrow as pa
from sqlinput.types import Column, Schema

__all__ = [
    'PageOutput',
    'ListPageOutput',
    'PageBuilder',
]

logger = logging.getLogger(__name__)


class PageOutput(ABC):
    """Receives pages from a PageBuilder.
    """

    def open(self, arrow_schema: pa.Schema) -> None:
        """Called once before the first page."""

    @abstractmethod
    def add(self, batch: pa.RecordBatch) -> None:
        """Receive one page."""

    def finish(self) -> None:
        """Called once after the last page."""

    def close(self) -> None:
        """Called once when the execution ends, whether or not it finished."""


class ListPageOutput(PageOutput):
    """Collects pages in memory.
    """

    def __init__(self) -> None:
        self.arrow_schema: pa.Schema | None = None
        self.pages: list[pa.RecordBatch] = []
        self.finished = False
        self.closed = False

    def open(self, arrow_schema: pa.Schema) -> None:
        self.arrow_schema = arrow_schema

    def add(self, batch: pa.RecordBatch) -> None:
        self.pages.append(batch)

    def finish(self) -> None:
        self.finished = True

    def close(self) -> None:
        self.closed = True

    @property
    def num_rows(self) -> int:
        return sum(page.num_rows for page in self.pages)

    def to_table(self) -> pa.Table:
        """All pages as one table; empty with the output columns when no rows."""
        if not self.pages:
            return self.arrow_schema.empty_table()
        return pa.Table.from_batches(self.pages, schema=self.arrow_schema)

    def to_pandas(self) -> pd.DataFrame:
        """PyArrow-backed pandas DataFrame of all pages.
        """
        return self.to_table().to_pandas(types_mapper=pd.ArrowDtype)


class PageBuilder:
    """Builds output records for one execution.

    Converters call `set_value` / `set_null` for every column of a row, then
    the coordinator commits the record with `add_record`. A record left
    partially set is never emitted.
    """

    def __init__(self, schema: Schema, output: PageOutput, page_size: int = 1024) -> None:
        self.schema = schema
        self.output = output
        self.page_size = page_size
        self.arrow_schema = schema.to_arrow()
        self.records = 0
        self.pages = 0
        self._columns: list[list[Any]] = [[] for _ in schema]
        self._current: list[Any] = [None] * len(schema)
        self._finished = False
        output.open(self.arrow_schema)

    def set_value(self, column: Column, value: Any) -> None:
        self._current[column.index] = value

    def set_null(self, column: Column) -> None:
        self._current[column.index] = None

    def add_record(self) -> None:
        """Commit the current record; emit a page when it is full."""
        for values, value in zip(self._columns, self._current):
            values.append(value)
        self._current = [None] * len(self.schema)
        self.records += 1
        if self.buffered >= self.page_size:
            self.flush()

    @property
    def buffered(self) -> int:
        return len(self._columns[0]) if self._columns else 0

    def flush(self) -> None:
        """Emit buffered records as one page, if any."""
        if not self.buffered:
            return
        arrays = [pa.array(values, type=field.type)
                  for values, field in zip(self._columns, self.arrow_schema)]
        batch = pa.RecordBatch.from_arrays(arrays, schema=self.arrow_schema)
        self.output.add(batch)
        self.pages += 1
        self._columns = [[] for _ in self.schema]

    def finish(self) -> None:
        """Flush the last page and finish the output. Safe to call more than once."""
        if self._finished:
            return
        self.flush()
        self._finished = True
        self.output.finish()
        logger.debug(f'Built {self.records:,} records in {self.pages} pages')
