"""Generic provider for PEP 249 (DB-API 2.0) drivers.

Any driver module exposing ``connect()`` can back a
:class:`~sqlfluent.base.Database` through :class:`DbApiProviderFactory`.
Parameters are bound as a sequence when the provider dialect is positional
and as a mapping keyed by the bare parameter name otherwise.
"""

from collections.abc import Iterator, MutableSequence, Sequence
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from sqlfluent.core.dialects import NamedParameterDialect, ParameterDialect, PositionalParameterDialect
from sqlfluent.core.parameters import Parameter, ParameterDirection
from sqlfluent.core.statement import CommandKind
from sqlfluent.exceptions import SQLFluentError
from sqlfluent.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfluent.core.result import Table
    from sqlfluent.protocols import ProviderParameter

__all__ = ("DbApiCommand", "DbApiConnection", "DbApiCursor", "DbApiFillAdapter", "DbApiProviderFactory")

logger = get_logger("adapters.dbapi")

ConnectFunction = Callable[[str], Any]

PARAMETER_SIGILS = "@:$"

_BOUND_DIRECTIONS = frozenset({ParameterDirection.INPUT, ParameterDirection.INPUT_OUTPUT})
_PROCEDURE_ARGUMENT_DIRECTIONS = _BOUND_DIRECTIONS | {ParameterDirection.OUTPUT}


def _bare_name(name: str) -> str:
    return name.lstrip(PARAMETER_SIGILS)


class DbApiCursor:
    """Forward-only view over a DB-API cursor."""

    __slots__ = ("_cursor",)

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    @property
    def description(self) -> "Optional[Sequence[Sequence[Any]]]":
        return self._cursor.description

    def __iter__(self) -> "Iterator[Sequence[Any]]":
        while True:
            row = self._cursor.fetchone()
            if row is None:
                return
            yield row

    def close(self) -> None:
        self._cursor.close()


class DbApiCommand:
    """Command text plus parameters, executed on one DB-API connection.

    Args:
        connection: Open DB-API connection.
        dialect: Provider dialect; decides how parameters are bound.
    """

    def __init__(self, connection: Any, dialect: ParameterDialect) -> None:
        self._connection = connection
        self._dialect = dialect
        self._cursors: list[Any] = []
        self._parameters: list[ProviderParameter] = []
        self.text = ""
        self.kind = CommandKind.TEXT

    @property
    def parameters(self) -> "MutableSequence[ProviderParameter]":
        return self._parameters

    def bound_parameters(self) -> "Union[list[Any], dict[str, Any]]":
        """Parameter values in the shape the driver expects."""
        parameters = [p for p in self._parameters if p.direction in _BOUND_DIRECTIONS]
        if isinstance(self._dialect, PositionalParameterDialect):
            return [parameter.value for parameter in parameters]
        return {_bare_name(parameter.name): parameter.value for parameter in parameters}

    def procedure_arguments(self) -> "list[Any]":
        """Positional ``callproc`` arguments, one per procedure argument.

        Output arguments are sent as ``None`` placeholders; return values are
        not procedure arguments and are left out.
        """
        return [
            None if parameter.direction is ParameterDirection.OUTPUT else parameter.value
            for parameter in self._parameters
            if parameter.direction in _PROCEDURE_ARGUMENT_DIRECTIONS
        ]

    def _execute(self) -> Any:
        cursor = self._connection.cursor()
        self._cursors.append(cursor)
        if self.kind is CommandKind.STORED_PROCEDURE:
            callproc = getattr(cursor, "callproc", None)
            if callproc is None:
                msg = f"{type(self._connection).__name__} does not support stored procedures"
                raise SQLFluentError(msg)
            callproc(self.text, self.procedure_arguments())
        else:
            cursor.execute(self.text, self.bound_parameters())
        return cursor

    def execute_reader(self) -> DbApiCursor:
        return DbApiCursor(self._execute())

    def execute_non_query(self) -> int:
        cursor = self._execute()
        rowcount = cursor.rowcount if hasattr(cursor, "rowcount") else -1
        if hasattr(self._connection, "commit"):
            self._connection.commit()
        return rowcount

    def close(self) -> None:
        while self._cursors:
            self._cursors.pop().close()


class DbApiConnection:
    """Lazily opened DB-API connection.

    Args:
        connect: Callable receiving the connection string and returning a
            DB-API connection.
        dialect: Provider dialect handed to every command.
    """

    def __init__(self, connect: ConnectFunction, dialect: ParameterDialect) -> None:
        self._connect = connect
        self._dialect = dialect
        self._connection: Optional[Any] = None
        self.connection_string = ""

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def raw_connection(self) -> Any:
        return self._connection

    def open(self) -> None:
        if self._connection is None:
            self._connection = self._connect(self.connection_string)

    def create_command(self) -> DbApiCommand:
        if self._connection is None:
            msg = "Connection is not open"
            raise SQLFluentError(msg)
        return DbApiCommand(self._connection, self._dialect)

    def close(self) -> None:
        if self._connection is not None:
            connection, self._connection = self._connection, None
            connection.close()


class DbApiFillAdapter:
    """Copies a command's full result set into a :class:`~sqlfluent.core.result.Table`."""

    def __init__(self) -> None:
        self.select_command: Optional[DbApiCommand] = None

    def fill(self, table: "Table") -> int:
        if self.select_command is None:
            msg = "select_command must be set before fill()"
            raise SQLFluentError(msg)
        cursor = self.select_command.execute_reader()
        try:
            if not table.columns:
                for column in cursor.description or ():
                    table.add_column(str(column[0]), column[1] if len(column) > 1 else None)
            added = 0
            for row in cursor:
                table.add_row(row)
                added += 1
        finally:
            cursor.close()
        logger.debug("Fill adapter copied %d rows into %r", added, table.name)
        return added

    def close(self) -> None:
        self.select_command = None


class DbApiProviderFactory:
    """Provider factory over a DB-API ``connect`` callable.

    Example:
        ```python
        import sqlite3

        factory = DbApiProviderFactory(sqlite3.connect)
        db = Database(factory, "app.db")
        ```

    Args:
        connect: Callable receiving the connection string.
        paramstyle_dialect: Placeholder dialect the driver accepts; named by default.
    """

    __slots__ = ("connect", "dialect")

    def __init__(self, connect: ConnectFunction, *, paramstyle_dialect: "Optional[ParameterDialect]" = None) -> None:
        self.connect = connect
        self.dialect = paramstyle_dialect or NamedParameterDialect()

    def create_connection(self) -> DbApiConnection:
        return DbApiConnection(self.connect, self.dialect)

    def create_parameter(self) -> Parameter:
        return Parameter()

    def create_fill_adapter(self) -> DbApiFillAdapter:
        return DbApiFillAdapter()
