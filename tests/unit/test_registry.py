import pytest
from sqlinput.converters import BooleanColumnConverter, DateColumnConverter
from sqlinput.converters import DecimalToDoubleColumnConverter
from sqlinput.converters import DoubleColumnConverter, IntegerColumnConverter
from sqlinput.converters import StringColumnConverter, TimeColumnConverter
from sqlinput.converters import TimestampColumnConverter
from sqlinput.exceptions import UnsupportedTypeError
from sqlinput.registry import TypeRegistry, get_registry
from sqlinput.types import OutputKind, SqlColumn, SqlSchema, SqlType


class TestTypeRegistry:

    @pytest.mark.parametrize(('sql_type', 'kind'), [
        (SqlType.TINYINT, OutputKind.INTEGER),
        (SqlType.SMALLINT, OutputKind.INTEGER),
        (SqlType.INTEGER, OutputKind.INTEGER),
        (SqlType.BIGINT, OutputKind.INTEGER),
        (SqlType.DOUBLE, OutputKind.DOUBLE),
        (SqlType.FLOAT, OutputKind.DOUBLE),
        (SqlType.REAL, OutputKind.DOUBLE),
        (SqlType.BOOLEAN, OutputKind.BOOLEAN),
        (SqlType.BIT, OutputKind.BOOLEAN),
        (SqlType.CHAR, OutputKind.STRING),
        (SqlType.VARCHAR, OutputKind.STRING),
        (SqlType.LONGVARCHAR, OutputKind.STRING),
        (SqlType.CLOB, OutputKind.STRING),
        (SqlType.NCHAR, OutputKind.STRING),
        (SqlType.NVARCHAR, OutputKind.STRING),
        (SqlType.LONGNVARCHAR, OutputKind.STRING),
        (SqlType.NCLOB, OutputKind.STRING),
        (SqlType.DATE, OutputKind.DATE),
        (SqlType.TIME, OutputKind.TIME),
        (SqlType.TIMESTAMP, OutputKind.TIMESTAMP),
        (SqlType.NUMERIC, OutputKind.DOUBLE),
        (SqlType.DECIMAL, OutputKind.DOUBLE),
    ])
    def test_supported_type_resolves_to_kind(self, sql_type, kind):
        column = SqlColumn('col', sql_type.name.lower(), int(sql_type))
        converter = get_registry().new_converter(column)
        assert converter.to_kind is kind
        assert converter.column is column

    @pytest.mark.parametrize('sql_type', [
        SqlType.ARRAY, SqlType.STRUCT, SqlType.REF, SqlType.DATALINK,
        SqlType.SQLXML, SqlType.ROWID, SqlType.DISTINCT, SqlType.JAVA_OBJECT,
        SqlType.OTHER, SqlType.BINARY, SqlType.VARBINARY, SqlType.BLOB,
        SqlType.NULL, SqlType.TIME_WITH_TIMEZONE, SqlType.TIMESTAMP_WITH_TIMEZONE,
    ])
    def test_unsupported_type_raises(self, sql_type):
        column = SqlColumn('tags', 'some_type', int(sql_type))
        with pytest.raises(UnsupportedTypeError) as exc_info:
            get_registry().resolve(column)
        err = exc_info.value
        assert err.name == 'tags'
        assert err.type_name == 'some_type'
        assert err.sql_type == int(sql_type)
        message = str(err)
        assert "'tags' column" in message
        assert 'some_type' in message
        assert f'sqlType={int(sql_type)}' in message
        assert 'exclude the column from the query' in message

    def test_unknown_code_raises(self):
        column = SqlColumn('mystery', 'geometry', 424242)
        with pytest.raises(UnsupportedTypeError, match='geometry'):
            get_registry().new_converter(column)

    def test_decimal_uses_widening_converter(self):
        registry = get_registry()
        assert registry.lookup(SqlType.NUMERIC) is DecimalToDoubleColumnConverter
        assert registry.lookup(SqlType.DECIMAL) is DecimalToDoubleColumnConverter

    def test_lookup_classes(self):
        registry = get_registry()
        assert registry.lookup(SqlType.BIGINT) is IntegerColumnConverter
        assert registry.lookup(SqlType.FLOAT) is DoubleColumnConverter
        assert registry.lookup(SqlType.BIT) is BooleanColumnConverter
        assert registry.lookup(SqlType.NCLOB) is StringColumnConverter
        assert registry.lookup(SqlType.DATE) is DateColumnConverter
        assert registry.lookup(SqlType.TIME) is TimeColumnConverter
        assert registry.lookup(SqlType.TIMESTAMP) is TimestampColumnConverter
        assert registry.lookup(SqlType.ARRAY) is None

    def test_supported_types(self):
        registry = get_registry()
        supported = registry.supported_types()
        assert int(SqlType.INTEGER) in supported
        assert int(SqlType.ARRAY) not in supported
        assert supported == sorted(supported)
        assert registry.is_supported(SqlType.VARCHAR)
        assert not registry.is_supported(SqlType.OTHER)

    def test_register_extends_registry(self):
        registry = TypeRegistry()
        registry.register([SqlType.SQLXML], StringColumnConverter)
        column = SqlColumn('doc', 'xml', int(SqlType.SQLXML))
        assert registry.new_converter(column).to_kind is OutputKind.STRING
        assert not get_registry().is_supported(SqlType.SQLXML)

    def test_singleton(self):
        assert get_registry() is get_registry()
        assert TypeRegistry.get_instance() is get_registry()

    def test_new_converters_fails_on_first_unsupported(self):
        schema = SqlSchema((
            SqlColumn('id', 'int4', int(SqlType.INTEGER)),
            SqlColumn('tags', 'text[]', int(SqlType.ARRAY)),
            SqlColumn('blob', 'bytea', int(SqlType.BINARY)),
        ))
        with pytest.raises(UnsupportedTypeError) as exc_info:
            get_registry().new_converters(schema)
        assert exc_info.value.name == 'tags'

    def test_output_kinds_in_source_order(self):
        schema = SqlSchema((
            SqlColumn('name', 'varchar', int(SqlType.VARCHAR)),
            SqlColumn('price', 'numeric', int(SqlType.NUMERIC)),
            SqlColumn('born', 'date', int(SqlType.DATE)),
        ))
        assert get_registry().output_kinds(schema) == [
            OutputKind.STRING, OutputKind.DOUBLE, OutputKind.DATE]
