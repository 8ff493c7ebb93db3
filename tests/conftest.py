import pathlib
import site

import pytest
from sqlinput.connection import dispose_all_engines
from sqlinput.registry import TypeRegistry

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def reset_registries():
    """Fresh type registry and engine registry around each test."""
    TypeRegistry._instance = None
    yield
    TypeRegistry._instance = None
    dispose_all_engines()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
    'tests.fixtures.postgres',
]
