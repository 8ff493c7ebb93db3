"""
Type model shared by the planning and execution phases.

This module provides:
- SqlType: generic native type codes that dialect strategies map into
- OutputKind: the fixed set of value kinds the output side understands
- SqlColumn, SqlSchema: the query schema discovered at planning time
- Column, Schema: the output schema handed to the page builder
"""
import enum
from dataclasses import dataclass
from typing import Any, Self

import pyarrow as pa


class SqlType(enum.IntEnum):
    """Generic SQL type codes (the java.sql.Types numbering).

    Dialect strategies translate driver specific codes (PostgreSQL OIDs,
    SQLite declared types) into these values so one registry serves all
    sources.
    """
    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    JAVA_OBJECT = 2000
    DISTINCT = 2001
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    REF = 2006
    DATALINK = 70
    BOOLEAN = 16
    ROWID = -8
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    NCLOB = 2011
    SQLXML = 2009
    REF_CURSOR = 2012
    TIME_WITH_TIMEZONE = 2013
    TIMESTAMP_WITH_TIMEZONE = 2014


class OutputKind(enum.Enum):
    """Value kinds produced by column converters."""
    INTEGER = 'integer'
    DOUBLE = 'double'
    BOOLEAN = 'boolean'
    STRING = 'string'
    DATE = 'date'
    TIME = 'time'
    TIMESTAMP = 'timestamp'

    def to_arrow(self) -> pa.DataType:
        """Return the arrow type used to buffer values of this kind."""
        return _ARROW_TYPES[self]


_ARROW_TYPES: dict[OutputKind, pa.DataType] = {
    OutputKind.INTEGER: pa.int64(),
    OutputKind.DOUBLE: pa.float64(),
    OutputKind.BOOLEAN: pa.bool_(),
    OutputKind.STRING: pa.string(),
    OutputKind.DATE: pa.date32(),
    OutputKind.TIME: pa.time64('us'),
    OutputKind.TIMESTAMP: pa.timestamp('us', tz='UTC'),
}


@dataclass(frozen=True)
class SqlColumn:
    """Column descriptor discovered from result set metadata."""
    name: str
    type_name: str
    sql_type: int

    def to_dict(self) -> dict[str, Any]:
        return {'name': self.name, 'typeName': self.type_name, 'sqlType': self.sql_type}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(name=data['name'], type_name=data['typeName'], sql_type=int(data['sqlType']))


@dataclass(frozen=True)
class SqlSchema:
    """Ordered, immutable query schema.
    """
    columns: tuple[SqlColumn, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, 'columns', tuple(self.columns))

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self):
        return iter(self.columns)

    def __getitem__(self, i: int) -> SqlColumn:
        return self.columns[i]

    @property
    def count(self) -> int:
        return len(self.columns)

    def get_column_name(self, i: int) -> str:
        return self.columns[i].name

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize to a JSON compatible list, one dict per column."""
        return [c.to_dict() for c in self.columns]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]]) -> Self:
        return cls(tuple(SqlColumn.from_dict(d) for d in data))


@dataclass(frozen=True)
class Column:
    """Output column: position, name and the kind of its values."""
    index: int
    name: str
    kind: OutputKind

    def __repr__(self) -> str:
        return f'Column(index={self.index}, name={self.name!r}, kind={self.kind.value})'


@dataclass(frozen=True)
class Schema:
    """Ordered output schema.
    """
    columns: tuple[Column, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, 'columns', tuple(self.columns))

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self):
        return iter(self.columns)

    def __getitem__(self, i: int) -> Column:
        return self.columns[i]

    def get_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def get_kinds(self) -> list[OutputKind]:
        return [col.kind for col in self.columns]

    def to_arrow(self) -> pa.Schema:
        """Arrow schema with one nullable field per output column."""
        return pa.schema([pa.field(col.name, col.kind.to_arrow()) for col in self.columns])

    @classmethod
    def from_kinds(cls, names: list[str], kinds: list[OutputKind]) -> Self:
        return cls(tuple(Column(i, name, kind) for i, (name, kind) in enumerate(zip(names, kinds))))
