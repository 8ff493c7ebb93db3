"""
PostgreSQL-specific strategy implementation.

This module implements the DialectStrategy interface for PostgreSQL through
psycopg. It handles:
- Result metadata discovery through a zero-row wrapping select
- Translation of type OIDs to SqlType using psycopg's type registry
- Server-side (named) cursors so rows stream in `fetch_rows` chunks
- search_path scoping for the configured schema
"""
import logging
import uuid
from typing import Any

from psycopg.postgres import types as pg_types
from sqlinput.sql import normalize_query
from sqlinput.strategy.base import DialectStrategy, register_strategy
from sqlinput.types import SqlColumn, SqlSchema, SqlType

logger = logging.getLogger(__name__)

# Keyed by psycopg TypeInfo.name. psycopg loads money and bit as text, so
# they stay OTHER; CAST them to numeric or integer in the query.
postgres_types: dict[str, SqlType] = {
    'int2': SqlType.SMALLINT,
    'int4': SqlType.INTEGER,
    'int8': SqlType.BIGINT,
    'oid': SqlType.BIGINT,
    'float4': SqlType.REAL,
    'float8': SqlType.DOUBLE,
    'numeric': SqlType.NUMERIC,
    'bool': SqlType.BOOLEAN,
    '"char"': SqlType.CHAR,
    'bpchar': SqlType.CHAR,
    'varchar': SqlType.VARCHAR,
    'text': SqlType.VARCHAR,
    'name': SqlType.VARCHAR,
    'date': SqlType.DATE,
    'time': SqlType.TIME,
    'timetz': SqlType.TIME,
    'timestamp': SqlType.TIMESTAMP,
    'timestamptz': SqlType.TIMESTAMP,
    'bytea': SqlType.BINARY,
    'xml': SqlType.SQLXML,
}


@register_strategy('postgresql')
class PostgresStrategy(DialectStrategy):
    """PostgreSQL-specific operations.
    """

    supports_schema = True

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def resolve_native_type(self, raw_conn: Any, oid: int) -> tuple[str, int]:
        """Map a type OID to its type name and SqlType code.

        Arrays map to ARRAY and anything else without a known name to OTHER.
        """
        info = pg_types.get(oid)
        if info is None:
            return self._format_type(raw_conn, oid), SqlType.OTHER
        if info.array_oid == oid:
            return f'{info.name}[]', SqlType.ARRAY
        return info.name, postgres_types.get(info.name, SqlType.OTHER)

    def _format_type(self, raw_conn: Any, oid: int) -> str:
        with self._cursor(raw_conn) as cursor:
            cursor.execute('SELECT format_type(%s, NULL)', (oid,))
            row = cursor.fetchone()
        return row[0] if row and row[0] else str(oid)

    def describe_query(self, raw_conn: Any, query: str) -> SqlSchema:
        """Read result metadata from a LIMIT 0 select over the query.
        """
        sql = f'SELECT * FROM (\n{normalize_query(query)}\n) AS sqlinput_describe LIMIT 0'
        with self._cursor(raw_conn) as cursor:
            cursor.execute(sql)
            description = list(cursor.description or [])
        logger.debug(f'Result OIDs: {[(d[0], d[1]) for d in description]}')
        columns = []
        for desc in description:
            type_name, sql_type = self.resolve_native_type(raw_conn, desc[1])
            columns.append(SqlColumn(name=desc[0], type_name=type_name, sql_type=int(sql_type)))
        return SqlSchema(tuple(columns))

    def create_select_cursor(self, raw_conn: Any, fetch_rows: int) -> Any:
        """Named cursor; psycopg pulls `itersize` rows per round trip.
        """
        cursor = raw_conn.cursor(name=f'sqlinput_{uuid.uuid4().hex}')
        cursor.itersize = fetch_rows
        return cursor

    def build_set_schema_sql(self, quoted_schema: str) -> str:
        return f'SET search_path TO {quoted_schema}'
