import pyarrow as pa
import pytest
from sqlinput.types import Column, OutputKind, Schema, SqlColumn, SqlSchema
from sqlinput.types import SqlType


@pytest.fixture
def query_schema():
    return SqlSchema((
        SqlColumn('id', 'int4', int(SqlType.INTEGER)),
        SqlColumn('name', 'varchar', int(SqlType.VARCHAR)),
        SqlColumn('updated', 'timestamptz', int(SqlType.TIMESTAMP)),
    ))


def test_sql_type_codes():
    """Type codes follow the JDBC numbering"""
    assert SqlType.INTEGER == 4
    assert SqlType.BIGINT == -5
    assert SqlType.VARCHAR == 12
    assert SqlType.TIMESTAMP == 93
    assert SqlType.ARRAY == 2003
    assert SqlType.OTHER == 1111


def test_sql_schema_accessors(query_schema):
    assert len(query_schema) == 3
    assert query_schema.count == 3
    assert query_schema.get_column_name(1) == 'name'
    assert query_schema[2].type_name == 'timestamptz'
    assert [c.name for c in query_schema] == ['id', 'name', 'updated']


def test_sql_schema_list_form(query_schema):
    data = query_schema.to_list()
    assert data[0] == {'name': 'id', 'typeName': 'int4', 'sqlType': 4}
    assert SqlSchema.from_list(data) == query_schema


def test_sql_schema_is_immutable(query_schema):
    with pytest.raises(AttributeError):
        query_schema.columns = ()
    assert isinstance(SqlSchema([SqlColumn('a', 'text', 12)]).columns, tuple)


def test_output_schema_from_kinds():
    schema = Schema.from_kinds(['id', 'name'], [OutputKind.INTEGER, OutputKind.STRING])
    assert schema[0] == Column(0, 'id', OutputKind.INTEGER)
    assert schema[1].index == 1
    assert schema.get_names() == ['id', 'name']
    assert schema.get_kinds() == [OutputKind.INTEGER, OutputKind.STRING]
    assert repr(schema[1]) == "Column(index=1, name='name', kind=string)"


def test_output_schema_to_arrow():
    kinds = list(OutputKind)
    schema = Schema.from_kinds([k.value for k in kinds], kinds)
    arrow_schema = schema.to_arrow()
    assert arrow_schema.names == [k.value for k in kinds]
    assert arrow_schema.field('integer').type == pa.int64()
    assert arrow_schema.field('double').type == pa.float64()
    assert arrow_schema.field('boolean').type == pa.bool_()
    assert arrow_schema.field('string').type == pa.string()
    assert arrow_schema.field('date').type == pa.date32()
    assert arrow_schema.field('time').type == pa.time64('us')
    assert arrow_schema.field('timestamp').type == pa.timestamp('us', tz='UTC')
