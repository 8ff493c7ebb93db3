from dataclasses import dataclass, field
from typing import Any

import sqlalchemy as sa
from sqlinput.strategy import get_available_dialects, get_strategy_class
from sqlinput.strategy import is_supported_dialect

from libb import ConfigOptions, load_options

__all__ = [
    'InputOptions',
    'load_input_options',
]


@dataclass
class InputOptions(ConfigOptions):
    """Options

    supported url dialects: `postgresql`, `sqlite`

    Connection options:
    - url: SQLAlchemy URL of the source, e.g. `postgresql+psycopg://host/db`
    - user, password: override the credentials in the URL
    - schema: scope the session to this schema before any query runs
    - options: extra keyword arguments passed to the DBAPI connect()
    - driver_path: directory added to the import path (once per path)
      before connecting

    Query options:
    - query: the select to extract
    - fetch_rows: rows buffered per driver round trip (default: 10000)
    - paged: fetch in `fetch_rows` batches instead of one lazy batch
    - page_size: records per output page (default: 1024)
    """
    url: str = None
    user: str = None
    password: str = None
    schema: str = None
    options: dict[str, Any] = field(default_factory=dict)
    query: str = None
    fetch_rows: int = 10000
    driver_path: str = None
    paged: bool = False
    page_size: int = 1024

    def __post_init__(self):
        if not self.url:
            raise ValueError('field url cannot be None')
        if not self.query:
            raise ValueError('field query cannot be None')
        self.fetch_rows = int(self.fetch_rows)
        if self.fetch_rows < 1:
            raise ValueError('fetch_rows must be at least 1')
        self.page_size = int(self.page_size)
        if self.page_size < 1:
            raise ValueError('page_size must be at least 1')
        self.options = dict(self.options or {})
        if not is_supported_dialect(self.dialect):
            available = get_available_dialects()
            raise ValueError(f'url dialect must be one of: {available}')
        get_strategy_class(self.dialect).validate_options(self)

    @property
    def dialect(self) -> str:
        """Backend name of the url (e.g. 'postgresql' for postgresql+psycopg)."""
        try:
            return sa.engine.make_url(self.url).get_backend_name()
        except sa.exc.ArgumentError as err:
            raise ValueError(f'Invalid url: {err}') from err


def load_input_options(options: InputOptions | dict[str, Any] | str,
                       config: Any | None = None, **kw: Any) -> InputOptions:
    """Load InputOptions from an instance, a dict or a named config setting.

    Keyword arguments override loaded values; they are ignored when an
    InputOptions instance is passed.
    """
    if isinstance(options, InputOptions):
        return options
    options_func = load_options(cls=InputOptions)(lambda o, c: o)
    return options_func(options, config, **kw)
