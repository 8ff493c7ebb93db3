import config
import pytest
from sqlinput.options import InputOptions, load_input_options


def test_init_defaults():
    """Test default initialization"""
    options = InputOptions(url='sqlite:///source.db', query='select 1')

    assert options.user is None
    assert options.password is None
    assert options.schema is None
    assert options.options == {}
    assert options.fetch_rows == 10000
    assert options.driver_path is None
    assert options.paged is False
    assert options.page_size == 1024
    assert options.dialect == 'sqlite'


def test_dialect_from_url():
    options = InputOptions(url='postgresql+psycopg://host/db', query='select 1')
    assert options.dialect == 'postgresql'
    options = InputOptions(url='postgresql://host/db', query='select 1', schema='public')
    assert options.dialect == 'postgresql'


@pytest.mark.parametrize(('kwargs', 'match'), [
    ({'query': 'select 1'}, 'url'),
    ({'url': 'sqlite:///source.db'}, 'query'),
    ({'url': 'sqlite:///source.db', 'query': 'select 1', 'fetch_rows': 0}, 'fetch_rows'),
    ({'url': 'sqlite:///source.db', 'query': 'select 1', 'page_size': 0}, 'page_size'),
    ({'url': 'mysql://host/db', 'query': 'select 1'}, 'dialect'),
    ({'url': 'not a url', 'query': 'select 1'}, 'url'),
    ({'url': 'sqlite:///source.db', 'query': 'select 1', 'schema': 'main'}, 'schema'),
])
def test_validation(kwargs, match):
    """Test validation rules"""
    with pytest.raises(ValueError, match=match):
        InputOptions(**kwargs)


def test_load_from_dict_with_overrides():
    options = load_input_options({'url': 'sqlite:///source.db', 'query': 'select 1'},
                                 fetch_rows=50)
    assert isinstance(options, InputOptions)
    assert options.fetch_rows == 50


def test_load_from_config_setting():
    options = load_input_options('sqlite', config=config)
    assert options.url == config.sqlite.url
    assert options.query == config.sqlite.query
    assert options.fetch_rows == 500


def test_load_passes_instance_through():
    options = InputOptions(url='sqlite:///source.db', query='select 1')
    assert load_input_options(options) is options
