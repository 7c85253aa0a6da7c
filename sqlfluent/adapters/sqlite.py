"""SQLite data-source handle over the standard library ``sqlite3`` driver."""

import sqlite3
from functools import partial
from typing import TYPE_CHECKING, TypedDict, Union

from typing_extensions import NotRequired, Unpack

from sqlfluent.adapters.dbapi import DbApiProviderFactory
from sqlfluent.base import Database
from sqlfluent.core.dialects import NamedParameterDialect
from sqlfluent.registry import DEFAULT_QUERY_FILE_EXTENSIONS
from sqlfluent.utils.locking import DEFAULT_LOCK_TIMEOUT

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from sqlfluent.core.dialects import ParameterDialect

__all__ = ("SqliteConnectionParams", "SqliteDatabase")


class SqliteConnectionParams(TypedDict, total=False):
    """SQLite connection parameters passed through to :func:`sqlite3.connect`."""

    timeout: NotRequired[float]
    detect_types: NotRequired[int]
    isolation_level: "NotRequired[str | None]"
    check_same_thread: NotRequired[bool]
    cached_statements: NotRequired[int]
    uri: NotRequired[bool]


class SqliteDatabase(Database):
    """:class:`~sqlfluent.base.Database` backed by ``sqlite3``.

    ``sqlite3`` binds ``@name`` placeholders natively, so the provider dialect
    is the named one. Every statement opens its own connection, so an
    in-memory database does not outlive a single statement; use a file path
    or a shared-cache URI instead.

    Args:
        database: File path or ``file:`` URI.
        source_dialect: Placeholder dialect application SQL is written in.
        lock_timeout: Seconds to wait for the query registry lock.
        query_file_extensions: Extensions the registry treats as query files by default.
        **connect_kwargs: Extra :func:`sqlite3.connect` arguments.
    """

    def __init__(
        self,
        database: "Union[str, Path]",
        *,
        source_dialect: "ParameterDialect | None" = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        query_file_extensions: "Iterable[str]" = DEFAULT_QUERY_FILE_EXTENSIONS,
        **connect_kwargs: "Unpack[SqliteConnectionParams]",
    ) -> None:
        factory = DbApiProviderFactory(
            partial(sqlite3.connect, **connect_kwargs), paramstyle_dialect=NamedParameterDialect()
        )
        super().__init__(
            factory,
            str(database),
            source_dialect=source_dialect,
            provider_dialect=NamedParameterDialect(),
            lock_timeout=lock_timeout,
            query_file_extensions=query_file_extensions,
        )
