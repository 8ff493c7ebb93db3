"""
Extraction coordinator.

`SqlInput` drives the two-phase protocol:

1. plan: connect, discover the query schema, derive the output schema and
   capture everything in a RunTask. No rows are read.
2. execute: rebuild converters from the task's query schema, reconnect,
   stream the query through a batch cursor and convert every row into the
   page builder.

Execution never rediscovers the schema, so a persisted task always yields
the output schema it was planned with. Subclasses customize the converter
registry and the connection through `new_converter_registry` and
`new_connection`.
"""
import logging
import time
from typing import Any

from sqlinput.connection import SourceConnection, connect
from sqlinput.converters import ColumnConverter
from sqlinput.cursor import BatchSelect
from sqlinput.exceptions import SqlInputError
from sqlinput.options import InputOptions, load_input_options
from sqlinput.page import PageBuilder, PageOutput
from sqlinput.registry import TypeRegistry, get_registry
from sqlinput.task import RunTask
from sqlinput.types import Schema

from libb import attrdict

__all__ = ['SqlInput']

logger = logging.getLogger(__name__)


class SqlInput:
    """Plans and executes query extraction runs.
    """

    #: First progress threshold; doubles after every report.
    report_rows: int = 500

    def new_converter_registry(self, task: RunTask) -> TypeRegistry:
        return get_registry()

    def new_connection(self, options: InputOptions) -> SourceConnection:
        return connect(options)

    def plan(self, options: InputOptions | dict[str, Any] | str,
             config: Any | None = None, **kw: Any) -> tuple[Schema, RunTask]:
        """Discover the query schema and build the run task.

        Returns
            Output schema and the RunTask holding the captured query schema
        """
        options = load_input_options(options, config, **kw)
        with self.new_connection(options) as con:
            query_schema = con.discover_schema(options.query)
        task = RunTask.from_options(options, query_schema)
        return self.build_schema(task), task

    def build_schema(self, task: RunTask) -> Schema:
        """Output schema from the task's query schema alone.

        Raises
            UnsupportedTypeError: If a column type has no converter
        """
        registry = self.new_converter_registry(task)
        kinds = registry.output_kinds(task.query_schema)
        names = [column.name for column in task.query_schema]
        return Schema.from_kinds(names, kinds)

    def new_converters(self, task: RunTask, schema: Schema) -> list[ColumnConverter]:
        """One converter per query column, checked against `schema`.
        """
        converters = self.new_converter_registry(task).new_converters(task.query_schema)
        if len(converters) != len(schema):
            raise SqlInputError(
                f'Output schema has {len(schema)} columns, query schema has {len(converters)}')
        for converter, column in zip(converters, schema):
            if converter.to_kind is not column.kind:
                raise SqlInputError(
                    f"Column '{column.name}' is {column.kind.value} in the output schema "
                    f'but converts to {converter.to_kind.value}')
        return converters

    def execute(self, task: RunTask, schema: Schema, output: PageOutput) -> attrdict:
        """Stream the task's query into `output`.

        Returns
            attrdict with `rows` and `seconds`
        """
        converters = self.new_converters(task, schema)
        builder = PageBuilder(schema, output, task.page_size)

        start = time.time()
        try:
            with self.new_connection(task.to_options()) as con, \
                    con.open_cursor(task.query, task.fetch_rows, task.paged) as cursor:
                rows = self._fetch_all(cursor, converters, builder)
            builder.finish()
        finally:
            output.close()
        seconds = time.time() - start

        logger.info(f'Extracted {rows:,} rows in {seconds:.2f} seconds')
        return attrdict(rows=rows, pages=builder.pages, seconds=seconds)

    def _fetch_all(self, cursor: BatchSelect, converters: list[ColumnConverter],
                   builder: PageBuilder) -> int:
        columns = builder.schema.columns
        rows = 0
        report_rows = self.report_rows
        while True:
            batch = cursor.fetch()
            if batch is None:
                break
            fetched = 0
            for row in batch:
                for i, converter in enumerate(converters):
                    converter.get_and_set(row, i, builder, columns[i])
                builder.add_record()
                fetched += 1
                rows += 1
                if rows == report_rows:
                    logger.info(f'Fetched {rows:,} rows.')
                    report_rows *= 2
            if not fetched:
                break
        return rows

    def run(self, options: InputOptions | dict[str, Any] | str, output: PageOutput,
            config: Any | None = None, **kw: Any) -> attrdict:
        """Plan, then execute once.

        Returns
            The execution report plus `schema`, `task` and `config_diff`
        """
        schema, task = self.plan(options, config, **kw)
        report = self.execute(task, schema, output)
        return attrdict({**report, 'schema': schema, 'task': task,
                         'config_diff': self.build_next_config_diff(task, [report])})

    def resume(self, task: RunTask | dict[str, Any] | str | bytes, output: PageOutput) -> attrdict:
        """Execute a persisted task again with its captured schema.
        """
        task = RunTask.load(task)
        schema = self.build_schema(task)
        report = self.execute(task, schema, output)
        return attrdict({**report, 'schema': schema, 'task': task,
                         'config_diff': self.build_next_config_diff(task, [report])})

    def guess(self, options: InputOptions | dict[str, Any] | str,
              config: Any | None = None, **kw: Any) -> dict[str, Any]:
        """No settings are guessed for a query source."""
        return {}

    def build_next_config_diff(self, task: RunTask, reports: list[attrdict]) -> dict[str, Any]:
        return {}
