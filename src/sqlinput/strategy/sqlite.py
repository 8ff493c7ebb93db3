"""
SQLite-specific strategy implementation.

SQLite cursors report no column types, so result metadata is read from the
declared types of a temporary view defined over the query. Declared types
are mapped by name first, then by SQLite's column affinity rules.

A view reports no declared type for expression columns, CAST included. An
expression that is a bare `CAST(... AS <type>)` takes its target type;
any other expression maps to NULL, which is unsupported. CAST computed
columns to extract them.
"""
import logging
import uuid
from typing import Any

from sqlinput.sql import cast_type, normalize_query, quote_identifier
from sqlinput.sql import select_list
from sqlinput.strategy.base import DialectStrategy, register_strategy
from sqlinput.types import SqlColumn, SqlSchema, SqlType

logger = logging.getLogger(__name__)

sqlite_types: dict[str, SqlType] = {
    'BOOLEAN': SqlType.BOOLEAN,
    'BOOL': SqlType.BOOLEAN,
    'BIT': SqlType.BIT,
    'TINYINT': SqlType.TINYINT,
    'SMALLINT': SqlType.SMALLINT,
    'INT2': SqlType.SMALLINT,
    'INT': SqlType.INTEGER,
    'INTEGER': SqlType.INTEGER,
    'MEDIUMINT': SqlType.INTEGER,
    'BIGINT': SqlType.BIGINT,
    'INT8': SqlType.BIGINT,
    'REAL': SqlType.REAL,
    'FLOAT': SqlType.FLOAT,
    'DOUBLE': SqlType.DOUBLE,
    'DOUBLE PRECISION': SqlType.DOUBLE,
    'NUMERIC': SqlType.NUMERIC,
    'DECIMAL': SqlType.DECIMAL,
    'CHAR': SqlType.CHAR,
    'CHARACTER': SqlType.CHAR,
    'VARCHAR': SqlType.VARCHAR,
    'VARYING CHARACTER': SqlType.VARCHAR,
    'TEXT': SqlType.VARCHAR,
    'CLOB': SqlType.CLOB,
    'NCHAR': SqlType.NCHAR,
    'NATIVE CHARACTER': SqlType.NCHAR,
    'NVARCHAR': SqlType.NVARCHAR,
    'DATE': SqlType.DATE,
    'TIME': SqlType.TIME,
    'DATETIME': SqlType.TIMESTAMP,
    'TIMESTAMP': SqlType.TIMESTAMP,
    'BLOB': SqlType.BLOB,
}


def sql_type_from_decltype(decltype: str | None) -> SqlType:
    """Map a declared SQLite column type to a SqlType code.
    """
    if not decltype:
        return SqlType.NULL
    base = decltype.split('(')[0].strip().upper()
    if base in sqlite_types:
        return sqlite_types[base]
    # affinity rules, in SQLite's order of precedence
    if 'INT' in base:
        return SqlType.INTEGER
    if any(s in base for s in ('CHAR', 'CLOB', 'TEXT')):
        return SqlType.VARCHAR
    if 'BLOB' in base:
        return SqlType.BLOB
    if any(s in base for s in ('REAL', 'FLOA', 'DOUB')):
        return SqlType.DOUBLE
    return SqlType.NUMERIC


@register_strategy('sqlite')
class SQLiteStrategy(DialectStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def describe_query(self, raw_conn: Any, query: str) -> SqlSchema:
        """Read declared column types through a temporary view.

        The view is dropped before returning; no rows are read.
        """
        view = quote_identifier(f'sqlinput_describe_{uuid.uuid4().hex}')
        with self._cursor(raw_conn) as cursor:
            cursor.execute(f'CREATE TEMP VIEW {view} AS {normalize_query(query)}')
            try:
                cursor.execute(f'PRAGMA temp.table_info({view})')
                info = cursor.fetchall()
            finally:
                cursor.execute(f'DROP VIEW temp.{view}')
        expressions = select_list(query)
        if expressions is None or len(expressions) != len(info):
            expressions = [''] * len(info)
        columns = []
        for (_, name, decltype, *_), expression in zip(info, expressions):
            decltype = decltype or cast_type(expression)
            columns.append(SqlColumn(
                name=name,
                type_name=decltype or 'NULL',
                sql_type=int(sql_type_from_decltype(decltype))))
        logger.debug(f'Declared types: {[(c.name, c.type_name) for c in columns]}')
        return SqlSchema(tuple(columns))

    def create_select_cursor(self, raw_conn: Any, fetch_rows: int) -> Any:
        """Plain cursor; `fetchmany()` defaults to `fetch_rows` rows.
        """
        cursor = raw_conn.cursor()
        cursor.arraysize = fetch_rows
        return cursor
