"""
Source connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for opening a source connection from options
2. The `SourceConnection` class that owns one live connection for one phase
3. Engine creation and management through a thread-safe registry

A SourceConnection is opened per planning call and per execution call and
is never shared between them. It exposes schema discovery and select cursor
creation; everything dialect specific is delegated to the strategy.
"""
import atexit
import logging
import threading
from collections.abc import Callable
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlinput.cursor import BatchSelect, PagedSelect, SingleSelect
from sqlinput.driver import ensure_driver
from sqlinput.exceptions import ConnectionFailure, DriverError, QueryError
from sqlinput.options import InputOptions, load_input_options
from sqlinput.sql import quote_identifier
from sqlinput.strategy import DialectStrategy, get_strategy
from sqlinput.types import SqlSchema

__all__ = [
    'SourceConnection',
    'connect',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def create_url_from_options(options: InputOptions,
                            url_creator: Callable[..., sa.URL] = sa.engine.make_url) -> sa.URL:
    """Convert InputOptions to SQLAlchemy URL.

    `user` and `password` override credentials embedded in the url. A bare
    `postgresql://` url is bound to the psycopg driver.
    """
    url = url_creator(options.url)
    if url.drivername == 'postgresql':
        url = url.set(drivername='postgresql+psycopg')
    if options.user is not None:
        url = url.set(username=options.user)
    if options.password is not None:
        url = url.set(password=options.password)
    return url


def get_engine_for_options(options: InputOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.

    Engines never pool connections; every phase gets a fresh connection.
    """
    url = create_url_from_options(options)
    key = f'{url.render_as_string(hide_password=False)}_{sorted(options.options.items())!r}'

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.dialect}')
            return _engine_registry[key]

        engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
        if options.options:
            engine_kwargs['connect_args'] = dict(options.options)
        engine_kwargs.update(get_strategy(options.dialect).get_engine_kwargs(options))
        engine_kwargs.update(kwargs)

        try:
            engine = engine_factory(url, **engine_kwargs)
        except (sa.exc.NoSuchModuleError, ImportError) as err:
            raise ConnectionFailure(f'Cannot load driver for {url.drivername}: {err}') from err

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.dialect}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in list(_engine_registry.values()):
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All source engines disposed')


atexit.register(dispose_all_engines)


class SourceConnection:
    """Owns one live source connection.

    This class:
    1. Scopes the session to a schema when one is configured
    2. Discovers the result schema of a query without reading rows
    3. Opens batch cursors that stream the query
    4. Supports the context manager protocol; closing is idempotent

    Not reentrant; use one instance per phase.
    """

    def __init__(self, sa_connection: sa.engine.Connection, strategy: DialectStrategy,
                 schema: str | None = None) -> None:
        self.sa_connection = sa_connection
        self.dbapi_connection = sa_connection.connection
        self.strategy = strategy
        self.schema = schema
        self.identifier_quote = sa_connection.dialect.identifier_preparer.initial_quote
        self._closed = False
        if schema is not None:
            self.set_search_path(schema)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def dialect(self) -> str:
        return self.strategy.dialect_name

    @property
    def closed(self) -> bool:
        return self._closed

    def quote_identifier(self, identifier: str) -> str:
        """Quote with the identifier quote character of this connection."""
        return quote_identifier(identifier, self.identifier_quote)

    def set_search_path(self, schema: str) -> None:
        sql = self.strategy.build_set_schema_sql(self.quote_identifier(schema))
        self.execute_update(sql)

    def execute_update(self, sql: str) -> int:
        """Execute a statement that returns no rows.
        """
        logger.info(f'SQL: {sql}')
        cursor = self.dbapi_connection.cursor()
        try:
            cursor.execute(sql)
            return cursor.rowcount
        except DriverError as err:
            logger.error(f'Error with statement:\nSQL:\n{sql}')
            raise QueryError(f'Failed executing statement: {err}') from err
        finally:
            cursor.close()

    def discover_schema(self, query: str) -> SqlSchema:
        """Result schema of `query`, from metadata only.
        """
        try:
            schema = self.strategy.describe_query(self.dbapi_connection, query)
        except DriverError as err:
            logger.error(f'Error with query:\nSQL:\n{query}')
            raise QueryError(f'Failed discovering schema of query: {err}') from err
        logger.debug(f'Discovered query schema: {schema.to_list()}')
        return schema

    def open_cursor(self, query: str, fetch_rows: int, paged: bool = False) -> BatchSelect:
        """Prepare a batch cursor for `query`; rows are read on `fetch()`.
        """
        logger.info(f'SQL: {query}')
        try:
            cursor = self.strategy.create_select_cursor(self.dbapi_connection, fetch_rows)
        except DriverError as err:
            raise QueryError(f'Failed creating cursor: {err}') from err
        cursor_cls = PagedSelect if paged else SingleSelect
        return cursor_cls(cursor, query, fetch_rows)

    def close(self) -> None:
        """Close the connection. Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        self.sa_connection.close()
        logger.debug('Source connection closed')


def connect(options: InputOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> SourceConnection:
    """Open a source connection.

    Args:
        options: Can be:
                - InputOptions object
                - String name of a setting on `config`
                - Dictionary of options
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        SourceConnection, which the caller must close
    """
    options = load_input_options(options, config, **kw)

    if options.driver_path:
        ensure_driver(options.driver_path)

    strategy = get_strategy(options.dialect)
    engine = get_engine_for_options(options)

    try:
        sa_connection = engine.connect()
    except DriverError as err:
        raise ConnectionFailure(f'Failed connecting to {options.dialect} source: {err}') from err

    try:
        strategy.configure_connection(sa_connection.connection)
        return SourceConnection(sa_connection, strategy, options.schema)
    except Exception:
        sa_connection.close()
        raise
