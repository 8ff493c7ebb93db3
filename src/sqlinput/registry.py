"""
Type registry: native type code to column converter factory.

The registry is populated at initialization from a table of SqlType codes.
Anything not registered is unsupported, and resolving it raises
UnsupportedTypeError while converters are being built, before any row is
fetched.
"""
import logging
from collections.abc import Callable, Iterable

from sqlinput.converters import BooleanColumnConverter, ColumnConverter
from sqlinput.converters import DateColumnConverter
from sqlinput.converters import DecimalToDoubleColumnConverter
from sqlinput.converters import DoubleColumnConverter
from sqlinput.converters import IntegerColumnConverter
from sqlinput.converters import StringColumnConverter, TimeColumnConverter
from sqlinput.converters import TimestampColumnConverter
from sqlinput.exceptions import UnsupportedTypeError
from sqlinput.types import OutputKind, SqlColumn, SqlSchema, SqlType

__all__ = [
    'ConverterFactory',
    'TypeRegistry',
    'DEFAULT_TYPE_MAP',
    'get_registry',
]

logger = logging.getLogger(__name__)

ConverterFactory = Callable[[SqlColumn], ColumnConverter]

DEFAULT_TYPE_MAP: dict[type[ColumnConverter], tuple[SqlType, ...]] = {
    IntegerColumnConverter: (
        SqlType.TINYINT,
        SqlType.SMALLINT,
        SqlType.INTEGER,
        SqlType.BIGINT,
    ),
    DoubleColumnConverter: (
        SqlType.DOUBLE,
        SqlType.FLOAT,
        SqlType.REAL,
    ),
    # BIT is boolean here, unlike SQL-92
    BooleanColumnConverter: (
        SqlType.BOOLEAN,
        SqlType.BIT,
    ),
    StringColumnConverter: (
        SqlType.CHAR,
        SqlType.VARCHAR,
        SqlType.LONGVARCHAR,
        SqlType.CLOB,
        SqlType.NCHAR,
        SqlType.NVARCHAR,
        SqlType.LONGNVARCHAR,
        SqlType.NCLOB,
    ),
    DateColumnConverter: (SqlType.DATE,),
    TimeColumnConverter: (SqlType.TIME,),
    TimestampColumnConverter: (SqlType.TIMESTAMP,),
    DecimalToDoubleColumnConverter: (
        SqlType.NUMERIC,
        SqlType.DECIMAL,
    ),
}


class TypeRegistry:
    """Registry of converter factories keyed by native type code.

    Lookups are exact; there is no fallback converter. Subclass or call
    `register()` to support more codes.
    """

    _instance = None

    @classmethod
    def get_instance(cls) -> 'TypeRegistry':
        """Get singleton instance.
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self) -> None:
        self._factories: dict[int, ConverterFactory] = {}
        self._initialize_type_map()

    def _initialize_type_map(self) -> None:
        for factory, sql_types in DEFAULT_TYPE_MAP.items():
            self.register(sql_types, factory)

    def register(self, sql_types: Iterable[int], factory: ConverterFactory) -> None:
        """Register `factory` for each of `sql_types`, replacing earlier entries.
        """
        for sql_type in sql_types:
            self._factories[int(sql_type)] = factory

    def is_supported(self, sql_type: int) -> bool:
        return int(sql_type) in self._factories

    def supported_types(self) -> list[int]:
        return sorted(self._factories)

    def lookup(self, sql_type: int) -> ConverterFactory | None:
        """Factory for a type code, or None when unsupported."""
        return self._factories.get(int(sql_type))

    def resolve(self, column: SqlColumn) -> ConverterFactory:
        """Factory for the column's type code.

        Raises UnsupportedTypeError naming the column, its type name and
        type code.
        """
        factory = self.lookup(column.sql_type)
        if factory is None:
            raise UnsupportedTypeError(column.name, column.type_name, column.sql_type)
        return factory

    def new_converter(self, column: SqlColumn) -> ColumnConverter:
        return self.resolve(column)(column)

    def new_converters(self, schema: SqlSchema) -> list[ColumnConverter]:
        """Build one converter per column, in source order.

        Fails on the first unsupported column, before any row is read.
        """
        converters = [self.new_converter(column) for column in schema]
        logger.debug(f'Built converters: {converters}')
        return converters

    def output_kinds(self, schema: SqlSchema) -> list[OutputKind]:
        return [converter.to_kind for converter in self.new_converters(schema)]


def get_registry() -> TypeRegistry:
    """Get the shared type registry."""
    return TypeRegistry.get_instance()
