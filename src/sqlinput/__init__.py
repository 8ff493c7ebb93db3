"""
Query extraction from relational sources into typed columnar pages.

Extraction runs in two phases:
- plan: discover the result schema of a query and capture it in a RunTask
- execute: stream the query through column converters into page output

The module functions are facades over a default SqlInput.
"""
__version__ = '0.1.0'

from typing import Any

import pandas as pd
from sqlinput.connection import SourceConnection, connect
from sqlinput.exceptions import ConnectionFailure, FetchError, QueryError
from sqlinput.exceptions import SqlInputError, TypeConversionError
from sqlinput.exceptions import UnsupportedTypeError
from sqlinput.options import InputOptions
from sqlinput.page import ListPageOutput, PageBuilder, PageOutput
from sqlinput.plugin import SqlInput
from sqlinput.registry import TypeRegistry, get_registry
from sqlinput.task import RunTask
from sqlinput.types import Column, OutputKind, Schema, SqlColumn, SqlSchema
from sqlinput.types import SqlType

from libb import attrdict

_default = SqlInput()


def plan(options: InputOptions | dict[str, Any] | str, config: Any | None = None,
         **kw: Any) -> tuple[Schema, RunTask]:
    """Discover the query schema and return the output schema and run task.
    """
    return _default.plan(options, config, **kw)


def execute(task: RunTask, schema: Schema, output: PageOutput) -> attrdict:
    """Stream a planned task into `output`.
    """
    return _default.execute(task, schema, output)


def run(options: InputOptions | dict[str, Any] | str, output: PageOutput,
        config: Any | None = None, **kw: Any) -> attrdict:
    """Plan and execute once.
    """
    return _default.run(options, output, config, **kw)


def resume(task: RunTask | dict[str, Any] | str | bytes, output: PageOutput) -> attrdict:
    """Execute a persisted task with its captured schema.
    """
    return _default.resume(task, output)


def read_frame(options: InputOptions | dict[str, Any] | str, config: Any | None = None,
               **kw: Any) -> pd.DataFrame:
    """Run a query and return all rows as a PyArrow-backed DataFrame.
    """
    output = ListPageOutput()
    _default.run(options, output, config, **kw)
    return output.to_pandas()


__all__ = [
    'SqlInput',
    'SourceConnection',
    'connect',
    'plan',
    'execute',
    'run',
    'resume',
    'read_frame',
    'InputOptions',
    'RunTask',
    'PageBuilder',
    'PageOutput',
    'ListPageOutput',
    'TypeRegistry',
    'get_registry',
    'Column',
    'OutputKind',
    'Schema',
    'SqlColumn',
    'SqlSchema',
    'SqlType',
    'SqlInputError',
    'UnsupportedTypeError',
    'ConnectionFailure',
    'QueryError',
    'TypeConversionError',
    'FetchError',
]
