"""
Dialect strategies for source metadata and streaming cursors.
"""
from functools import lru_cache

from sqlinput.strategy.base import _STRATEGY_REGISTRY
from sqlinput.strategy.base import DialectStrategy as DialectStrategy
from sqlinput.strategy.base import register_strategy as register_strategy
from sqlinput.strategy.postgres import PostgresStrategy as PostgresStrategy
from sqlinput.strategy.sqlite import SQLiteStrategy as SQLiteStrategy


def _check_registered(dialect: str) -> None:
    if dialect not in _STRATEGY_REGISTRY:
        raise ValueError(f'Unsupported dialect: {dialect}. '
                         f'Available: {sorted(_STRATEGY_REGISTRY)}')


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DialectStrategy:
    """Shared strategy instance for a backend name such as 'postgresql'.
    """
    _check_registered(dialect)
    return _STRATEGY_REGISTRY[dialect]()


def get_strategy_class(dialect: str) -> type[DialectStrategy]:
    """Strategy class for a backend name, not instantiated."""
    _check_registered(dialect)
    return _STRATEGY_REGISTRY[dialect]


def get_available_dialects() -> list[str]:
    return list(_STRATEGY_REGISTRY)


def is_supported_dialect(dialect: str) -> bool:
    return dialect in _STRATEGY_REGISTRY
