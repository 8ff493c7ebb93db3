"""
Column converters: read one source field, write one output value.

Each converter is bound to a single SqlColumn and produces exactly one
OutputKind. Converters never advance the source cursor; they only read
`row[index]` and hand the converted value (or a null) to the page builder.

Conversion failures are fatal for the run. A value that cannot be
represented in the declared kind raises TypeConversionError naming the
column, there is no per-value recovery.
"""
import datetime
import decimal
from numbers import Real
from typing import TYPE_CHECKING, Any

import dateutil.parser
from sqlinput.exceptions import TypeConversionError
from sqlinput.types import Column, OutputKind, SqlColumn

if TYPE_CHECKING:
    from sqlinput.page import PageBuilder


INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

TRUE_STRINGS: set[str] = {'t', 'true', 'y', 'yes', 'on', '1'}
FALSE_STRINGS: set[str] = {'f', 'false', 'n', 'no', 'off', '0'}


class ColumnConverter:
    """Base class for per-column converters.

    Subclasses set `to_kind` and implement `convert()` for non-null values.
    """

    to_kind: OutputKind

    def __init__(self, column: SqlColumn) -> None:
        self.column = column

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.column.name!r} -> {self.to_kind.value})'

    def get_and_set(self, row: Any, index: int, to: 'PageBuilder', to_column: Column) -> None:
        """Read `row[index]` and write it into `to` at `to_column`.
        """
        value = row[index]
        if value is None:
            to.set_null(to_column)
            return
        try:
            converted = self.convert(value)
        except (ValueError, TypeError, ArithmeticError) as err:
            raise TypeConversionError(
                f"Cannot convert {value!r} of '{self.column.name}' column "
                f'({self.column.type_name}) to {self.to_kind.value}: {err}') from err
        to.set_value(to_column, converted)

    def convert(self, value: Any) -> Any:
        raise NotImplementedError


class IntegerColumnConverter(ColumnConverter):
    """Integers of any width, stored as 64-bit."""

    to_kind = OutputKind.INTEGER

    def convert(self, value: Any) -> int:
        if isinstance(value, int):
            result = int(value)
        elif isinstance(value, float | decimal.Decimal):
            if value % 1:
                raise ValueError('not an integral value')
            result = int(value)
        elif isinstance(value, str):
            result = int(value.strip())
        else:
            raise TypeError(f'unexpected {type(value).__name__}')
        if not INT64_MIN <= result <= INT64_MAX:
            raise OverflowError('out of 64-bit integer range')
        return result


class DoubleColumnConverter(ColumnConverter):

    to_kind = OutputKind.DOUBLE

    def convert(self, value: Any) -> float:
        if isinstance(value, Real | decimal.Decimal | str):
            return float(value)
        raise TypeError(f'unexpected {type(value).__name__}')


class DecimalToDoubleColumnConverter(DoubleColumnConverter):
    """Exact numerics widened to double.

    Precision beyond what a 64-bit float holds is lost. Output for NUMERIC
    and DECIMAL columns stays double; changing it breaks consumers.
    """

    def convert(self, value: Any) -> float:
        if isinstance(value, str):
            value = decimal.Decimal(value.strip())
        return super().convert(value)


class BooleanColumnConverter(ColumnConverter):

    to_kind = OutputKind.BOOLEAN

    def convert(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int | decimal.Decimal):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in TRUE_STRINGS:
                return True
            if lowered in FALSE_STRINGS:
                return False
            raise ValueError('not a boolean literal')
        raise TypeError(f'unexpected {type(value).__name__}')


class StringColumnConverter(ColumnConverter):

    to_kind = OutputKind.STRING

    def convert(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bytes | bytearray | memoryview):
            return bytes(value).decode('utf-8')
        return str(value)


class DateColumnConverter(ColumnConverter):

    to_kind = OutputKind.DATE

    def convert(self, value: Any) -> datetime.date:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        if isinstance(value, str):
            return dateutil.parser.isoparse(value.strip()).date()
        raise TypeError(f'unexpected {type(value).__name__}')


class TimeColumnConverter(ColumnConverter):
    """Times of day in UTC. Values with an offset (timetz) are shifted to UTC,
    wrapping around midnight; naive values are taken as UTC.
    """

    to_kind = OutputKind.TIME

    def convert(self, value: Any) -> datetime.time:
        if isinstance(value, str):
            value = dateutil.parser.parse(value.strip())
        if isinstance(value, datetime.datetime):
            if value.tzinfo is not None:
                value = value.astimezone(datetime.timezone.utc)
            return value.time()
        if isinstance(value, datetime.time):
            offset = value.utcoffset()
            if offset:
                value = (datetime.datetime.combine(datetime.date(2000, 1, 1), value) - offset).time()
            return value.replace(tzinfo=None)
        raise TypeError(f'unexpected {type(value).__name__}')


class TimestampColumnConverter(ColumnConverter):
    """Timestamps as UTC instants. Naive values are taken as UTC."""

    to_kind = OutputKind.TIMESTAMP

    def convert(self, value: Any) -> datetime.datetime:
        if isinstance(value, str):
            value = dateutil.parser.isoparse(value.strip())
        elif isinstance(value, Real) and not isinstance(value, bool):
            return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
        elif isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
            value = datetime.datetime.combine(value, datetime.time())
        if not isinstance(value, datetime.datetime):
            raise TypeError(f'unexpected {type(value).__name__}')
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc)
