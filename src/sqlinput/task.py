"""
Run task: the frozen description of one execution attempt.

A RunTask is created by planning and carries everything execution needs:
connection settings, the query text, the fetch batch size and the query
schema captured while planning. It is a plain value that survives a JSON
round trip unchanged, so an execution can be retried or resumed from a
persisted task without touching the source for metadata.
"""
import json
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Self

from sqlinput.options import InputOptions
from sqlinput.types import SqlSchema

__all__ = ['RunTask']


@dataclass(frozen=True)
class RunTask:
    """Frozen execution description.
    """
    url: str
    query: str
    query_schema: SqlSchema
    fetch_rows: int = 10000
    user: str | None = None
    password: str | None = None
    schema: str | None = None
    options: dict[str, Any] = field(default_factory=dict)
    driver_path: str | None = None
    paged: bool = False
    page_size: int = 1024

    @classmethod
    def from_options(cls, options: InputOptions, query_schema: SqlSchema) -> Self:
        return cls(
            url=options.url,
            query=options.query,
            query_schema=query_schema,
            fetch_rows=options.fetch_rows,
            user=options.user,
            password=options.password,
            schema=options.schema,
            options=dict(options.options),
            driver_path=options.driver_path,
            paged=options.paged,
            page_size=options.page_size,
        )

    def to_options(self) -> InputOptions:
        """Connection and query options for opening the source again."""
        return InputOptions(
            url=self.url,
            user=self.user,
            password=self.password,
            schema=self.schema,
            options=dict(self.options),
            query=self.query,
            fetch_rows=self.fetch_rows,
            driver_path=self.driver_path,
            paged=self.paged,
            page_size=self.page_size,
        )

    def with_schema(self, query_schema: SqlSchema) -> Self:
        return replace(self, query_schema=query_schema)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data['query_schema'] = self.query_schema.to_list()
        data['options'] = dict(self.options)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        data = dict(data)
        data['query_schema'] = SqlSchema.from_list(data['query_schema'])
        data['options'] = dict(data.get('options') or {})
        return cls(**data)

    def dump(self) -> str:
        """Deterministic JSON text of the task."""
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def load(cls, source: 'str | bytes | dict[str, Any] | RunTask') -> Self:
        """Restore a task from `dump()` output, its dict, or a task."""
        if isinstance(source, RunTask):
            return source
        if isinstance(source, str | bytes):
            source = json.loads(source)
        return cls.from_dict(source)
