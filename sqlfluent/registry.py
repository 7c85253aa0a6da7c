"""Named query registry.

A :class:`QueryRegistry` maps query names to SQL text for one data-source
handle. Queries are registered one by one or in bulk from files: each file
passes an optional selector and is then handed to an extractor that turns it
into zero or more :class:`NamedQuery` objects.

Two extractors ship with the registry:

- :func:`sql_file_extractor`: one query per file, named after the file stem.
- :func:`named_statement_extractor`: aiosql-style files with ``-- name:`` headers.

Example:
    ```python
    registry = QueryRegistry()
    registry.register("get_user", "SELECT * FROM users WHERE id = @id")
    registry.register_from_sql_files("queries/")
    sql = registry.find("get_user")
    ```
"""

import re
import time
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Final, Optional, Union, overload

from sqlfluent.exceptions import InvalidArgumentError, QueryNotFoundError, SQLFileParseError
from sqlfluent.utils.locking import DEFAULT_LOCK_TIMEOUT, LockHolder, create_lock
from sqlfluent.utils.logging import correlation_context, get_logger

if TYPE_CHECKING:
    from sqlfluent.typing import FileSelector, QueryExtractor

__all__ = (
    "DEFAULT_QUERY_FILE_EXTENSIONS",
    "NamedQuery",
    "QueryRegistry",
    "has_extension",
    "named_statement_extractor",
    "sql_file_extractor",
)

logger = get_logger("registry")

DEFAULT_QUERY_FILE_EXTENSIONS: Final = (".sql",)

# Matches: -- name: query_name (supports hyphens and aiosql suffixes such as ! or $)
QUERY_NAME_PATTERN: Final = re.compile(r"^\s*--\s*name\s*:\s*([\w-]+[^\w\s]*)\s*$", re.MULTILINE | re.IGNORECASE)
TRIM_SPECIAL_CHARS: Final = re.compile(r"[^\w-]")


class NamedQuery:
    """A query name paired with its SQL text.

    The name is fixed at construction; the SQL may be edited afterwards.
    """

    __slots__ = ("_name", "sql")

    def __init__(self, name: str, sql: str) -> None:
        self._name = name
        self.sql = sql

    @property
    def name(self) -> str:
        return self._name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedQuery):
            return False
        return self._name == other._name and self.sql == other.sql

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"NamedQuery(name={self._name!r}, sql={self.sql!r})"


def has_extension(*extensions: str) -> "FileSelector":
    """Build a file selector accepting the given suffixes (case-insensitive).

    Args:
        *extensions: Suffixes including the leading dot, e.g. ``".sql"``.
    """
    wanted = {extension.lower() for extension in extensions or DEFAULT_QUERY_FILE_EXTENSIONS}

    def _selector(path: Path) -> bool:
        return path.suffix.lower() in wanted

    return _selector


def sql_file_extractor(path: Path, encoding: str = "utf-8") -> "list[NamedQuery]":
    """Turn one file into one query: the stem is the name, the contents the SQL."""
    try:
        sql = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise SQLFileParseError(str(path), e) from e
    return [NamedQuery(path.stem, sql)]


def _normalize_query_name(name: str) -> str:
    """Strip aiosql suffix characters and turn hyphens into underscores."""
    return TRIM_SPECIAL_CHARS.sub("", name).replace("-", "_")


def _strip_leading_comments(sql_text: str) -> str:
    lines = sql_text.strip().split("\n")
    for index, line in enumerate(lines):
        if line.strip() and not line.strip().startswith("--"):
            return "\n".join(lines[index:]).strip()
    return ""


def parse_named_statements(content: str, file_path: str = "<string>") -> "list[NamedQuery]":
    """Parse aiosql-style content into named queries.

    Each ``-- name: query_name`` header starts a query that runs until the
    next header. Leading comment lines of a query body are dropped.

    Args:
        content: Raw file content.
        file_path: Path used in error messages.

    Raises:
        SQLFileParseError: If a name is declared twice in the same content.

    Returns:
        Queries in file order; empty when the content declares none.
    """
    name_matches = list(QUERY_NAME_PATTERN.finditer(content))
    queries: dict[str, NamedQuery] = {}
    for index, match in enumerate(name_matches):
        raw_name = match.group(1).strip()
        end_pos = name_matches[index + 1].start() if index + 1 < len(name_matches) else len(content)
        sql = _strip_leading_comments(content[match.end() : end_pos])
        if not raw_name or not sql:
            continue
        name = _normalize_query_name(raw_name)
        if name in queries:
            raise SQLFileParseError(file_path, ValueError(f"Duplicate statement name: {raw_name}"))
        queries[name] = NamedQuery(name, sql)
    return list(queries.values())


def named_statement_extractor(path: Path, encoding: str = "utf-8") -> "list[NamedQuery]":
    """Extract every ``-- name:`` query from one file."""
    try:
        content = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise SQLFileParseError(str(path), e) from e
    return parse_named_statements(content, str(path))


def _select_all(path: Path) -> bool:
    return True


class QueryRegistry:
    """Thread-shared mapping of query name to SQL text.

    Every operation runs under one re-entrant lock acquired with
    ``lock_timeout``; a timed out acquisition raises
    :class:`~sqlfluent.exceptions.LockTimeoutError` instead of running the
    operation unprotected. Registering an existing name replaces its SQL.

    Args:
        lock_timeout: Seconds to wait for the registry lock.
        encoding: Text encoding used by the built-in file loaders.
        query_file_extensions: Default extensions for :meth:`register_from_sql_files`.
    """

    __slots__ = ("_lock", "_queries", "encoding", "lock_timeout", "query_file_extensions")

    def __init__(
        self,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        *,
        encoding: str = "utf-8",
        query_file_extensions: "Iterable[str]" = DEFAULT_QUERY_FILE_EXTENSIONS,
    ) -> None:
        self._queries: dict[str, str] = {}
        self._lock = create_lock()
        self.lock_timeout = lock_timeout
        self.encoding = encoding
        self.query_file_extensions = tuple(query_file_extensions)

    def _locked(self) -> LockHolder:
        return LockHolder(self._lock, self.lock_timeout, "query registry")

    @property
    def count(self) -> int:
        with self._locked():
            return len(self._queries)

    def __len__(self) -> int:
        return self.count

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(name) and self.contains(name)

    @overload
    def register(self, query: NamedQuery) -> None: ...

    @overload
    def register(self, query: str, sql: str) -> None: ...

    def register(self, query: "Union[NamedQuery, str]", sql: "Optional[str]" = None) -> None:
        """Register a query under a name, replacing any previous SQL.

        Args:
            query: A :class:`NamedQuery`, or the query name.
            sql: The SQL text when ``query`` is a name.

        Raises:
            InvalidArgumentError: If the query is ``None`` or its name is empty.
        """
        if query is None:
            raise InvalidArgumentError("query")
        if isinstance(query, NamedQuery):
            name, sql = query.name, query.sql
        else:
            name = query
        if not name:
            raise InvalidArgumentError("name")
        with self._locked():
            self._queries[name] = sql  # type: ignore[assignment]

    def register_from_files(
        self,
        files: "Iterable[Union[str, Path]]",
        process_file: "QueryExtractor",
        file_selector: "Optional[FileSelector]" = None,
    ) -> int:
        """Register the queries extracted from a sequence of files.

        Paths that are not existing files are skipped.

        Args:
            files: File paths.
            process_file: Extractor turning one file into zero or more queries.
            file_selector: Predicate choosing which files to process; all by default.

        Raises:
            InvalidArgumentError: If ``files`` or ``process_file`` is ``None``.

        Returns:
            Number of queries registered.
        """
        if files is None:
            raise InvalidArgumentError("files")
        if process_file is None:
            raise InvalidArgumentError("process_file")
        selector = file_selector or _select_all

        with correlation_context() as correlation_id:
            return self._register_selected(files, process_file, selector, correlation_id)

    def _register_selected(
        self,
        files: "Iterable[Union[str, Path]]",
        process_file: "QueryExtractor",
        selector: "FileSelector",
        correlation_id: str,
    ) -> int:
        start_time = time.perf_counter()
        file_count = 0
        query_count = 0
        try:
            with self._locked():
                for file in files:
                    path = Path(file)
                    if not path.is_file() or not selector(path):
                        continue
                    file_count += 1
                    for query in process_file(path) or ():
                        self.register(query)
                        query_count += 1
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.exception(
                "Failed to register queries from files after %.3fms",
                duration * 1000,
                extra={
                    "extra_fields": {
                        "error_type": type(e).__name__,
                        "duration_ms": duration * 1000,
                        "correlation_id": correlation_id,
                    }
                },
            )
            raise

        duration = time.perf_counter() - start_time
        logger.info(
            "Registered %d queries from %d files in %.3fms",
            query_count,
            file_count,
            duration * 1000,
            extra={
                "extra_fields": {
                    "files_loaded": file_count,
                    "new_queries": query_count,
                    "duration_ms": duration * 1000,
                    "correlation_id": correlation_id,
                }
            },
        )
        return query_count

    def register_from_path(
        self,
        start_path: "Union[str, Path]",
        process_file: "QueryExtractor",
        file_selector: "Optional[FileSelector]" = None,
    ) -> int:
        """Register queries from every file below ``start_path``, recursively.

        Raises:
            InvalidArgumentError: If ``start_path`` is empty.
        """
        if not start_path:
            raise InvalidArgumentError("start_path")
        files = sorted(path for path in Path(start_path).rglob("*") if path.is_file())
        return self.register_from_files(files, process_file, file_selector)

    def register_from_sql_files(
        self, start_path: "Union[str, Path]", extensions: "Optional[Iterable[str]]" = None
    ) -> int:
        """Register every query file below ``start_path``.

        The file stem is the query name and the full contents are the SQL.
        Without ``extensions`` the registry's :attr:`query_file_extensions`
        select the files.
        """
        encoding = self.encoding
        return self.register_from_path(
            start_path,
            lambda path: sql_file_extractor(path, encoding),
            has_extension(*(self.query_file_extensions if extensions is None else extensions)),
        )

    def contains(self, name: str) -> bool:
        if not name:
            raise InvalidArgumentError("name")
        with self._locked():
            return name in self._queries

    def find(self, name: str) -> str:
        """Return the SQL registered under ``name``.

        Raises:
            InvalidArgumentError: If ``name`` is empty.
            QueryNotFoundError: If nothing is registered under ``name``.
        """
        if not name:
            raise InvalidArgumentError("name")
        with self._locked():
            try:
                return self._queries[name]
            except KeyError:
                raise QueryNotFoundError(name) from None

    def remove(self, name: str) -> None:
        """Remove the query registered under ``name``.

        Removing a missing name is an error, not a no-op.

        Raises:
            InvalidArgumentError: If ``name`` is empty.
            QueryNotFoundError: If nothing is registered under ``name``.
        """
        if not name:
            raise InvalidArgumentError("name")
        with self._locked():
            if name not in self._queries:
                raise QueryNotFoundError(name)
            del self._queries[name]

    def clear(self) -> None:
        with self._locked():
            self._queries.clear()

    def names(self) -> "list[str]":
        """Registered names, sorted."""
        with self._locked():
            return sorted(self._queries)

    def __repr__(self) -> str:
        return f"QueryRegistry(count={len(self._queries)})"
