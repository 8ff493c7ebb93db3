"""
Base strategy interface for dialect-specific source operations.

Defines the abstract base class that all dialect strategies inherit from.
A strategy knows how its driver reports result metadata, how to translate
native type codes into SqlType, how to open a streaming cursor and how to
scope a session to a schema. The source connection talks to every database
through this interface.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlinput.types import SqlSchema

if TYPE_CHECKING:
    from sqlinput.options import InputOptions

# backend name -> strategy class, filled by @register_strategy
_STRATEGY_REGISTRY: dict[str, type['DialectStrategy']] = {}


def register_strategy(dialect: str):
    """Class decorator binding a strategy to a SQLAlchemy backend name.
    """
    def decorator(cls: type['DialectStrategy']) -> type['DialectStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DialectStrategy(ABC):
    """Base class for dialect-specific operations.
    """

    #: Whether a session can be scoped to a schema with one statement.
    supports_schema: bool = False

    @contextmanager
    def _cursor(self, raw_conn: Any):
        """Context manager for cursor lifecycle.
        """
        cursor = raw_conn.cursor()
        try:
            yield cursor
        finally:
            cursor.close()

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @abstractmethod
    def describe_query(self, raw_conn: Any, query: str) -> SqlSchema:
        """Discover the result schema of a query without pulling rows.

        Args:
            raw_conn: Raw DBAPI connection
            query: Query text

        Returns
            SqlSchema with one column per result column, in order
        """

    @abstractmethod
    def create_select_cursor(self, raw_conn: Any, fetch_rows: int) -> Any:
        """Create the DBAPI cursor used to stream a select.

        Args:
            raw_conn: Raw DBAPI connection
            fetch_rows: Rows to buffer per driver round trip

        Returns
            DBAPI cursor, not yet executed
        """

    def build_set_schema_sql(self, quoted_schema: str) -> str:
        """Statement that scopes the session to `quoted_schema`.

        Args:
            quoted_schema: Schema name, already quoted for this connection

        Returns
            SQL statement text
        """
        raise NotImplementedError(f'{self.dialect_name} does not support session schemas')

    def configure_connection(self, raw_conn: Any) -> None:
        """Configure a freshly opened connection. No-op by default.
        """

    def get_engine_kwargs(self, options: 'InputOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect.
        """
        return {}

    @classmethod
    def validate_options(cls, options: 'InputOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If an option is not supported by the dialect
        """
        if options.schema and not cls.supports_schema:
            raise ValueError(f'schema option is not supported for {options.dialect}')
