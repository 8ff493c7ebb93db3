"""
Extraction-specific exception classes.
"""
import sqlite3

import psycopg
import sqlalchemy as sa


class SqlInputError(Exception):
    """Base class for all sqlinput errors.
    """


class UnsupportedTypeError(SqlInputError):
    """A query column has a native type with no registered converter.
    """

    def __init__(self, name: str, type_name: str, sql_type: int) -> None:
        self.name = name
        self.type_name = type_name
        self.sql_type = sql_type
        super().__init__(
            f"Unsupported type {type_name} (sqlType={sql_type}) of '{name}' column. "
            'Please exclude the column from the query.')


class ConnectionFailure(SqlInputError):
    """Error loading a driver or establishing the source connection.
    """


class QueryError(SqlInputError):
    """Error preparing a query or discovering its result schema.
    """


class TypeConversionError(SqlInputError):
    """Error converting a fetched value to its declared output kind.
    """


class FetchError(SqlInputError):
    """Error while executing or streaming the select cursor.
    """


DriverError = (
    psycopg.Error,
    sqlite3.Error,
    sa.exc.DBAPIError,
    )
