"""Runtime-checkable protocols for the collaborators SQLFluent drives.

A provider (see :mod:`sqlfluent.adapters.dbapi`) supplies connections,
commands, parameters and fill adapters. SQLFluent only ever talks to these
through the narrow surface declared here.
"""

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator, MutableSequence, Sequence

    from sqlfluent.core.parameters import DbType, ParameterDirection
    from sqlfluent.core.result import Table
    from sqlfluent.core.statement import CommandKind

__all__ = (
    "Command",
    "Connection",
    "Cursor",
    "FillAdapter",
    "ProviderFactory",
    "ProviderParameter",
)


@runtime_checkable
class ProviderParameter(Protocol):
    """Provider-native parameter object."""

    name: str
    value: Any
    db_type: "Optional[DbType]"
    direction: "ParameterDirection"


@runtime_checkable
class Cursor(Protocol):
    """Forward-only, single pass row stream."""

    @property
    def description(self) -> "Optional[Sequence[Sequence[Any]]]":
        """PEP 249 column metadata: ``(name, type_code, ...)`` per column."""
        ...

    def __iter__(self) -> "Iterator[Sequence[Any]]":
        """Iterate over the remaining rows."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Command(Protocol):
    """A command bound to one open connection."""

    text: str
    kind: "CommandKind"

    @property
    def parameters(self) -> "MutableSequence[ProviderParameter]":
        """Parameters sent with the command."""
        ...

    def execute_reader(self) -> Cursor:
        """Execute and return a cursor over the result set."""
        ...

    def execute_non_query(self) -> int:
        """Execute without a result set and return the affected row count."""
        ...

    def close(self) -> None:
        """Release the command."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Connection to a data source."""

    connection_string: str

    def open(self) -> None:
        """Open the connection."""
        ...

    def create_command(self) -> Command:
        """Create a command bound to this connection."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


@runtime_checkable
class FillAdapter(Protocol):
    """Bulk-fills a :class:`~sqlfluent.core.result.Table` from a command."""

    select_command: "Optional[Command]"

    def fill(self, table: "Table") -> int:
        """Fill ``table`` from ``select_command`` and return the rows added."""
        ...

    def close(self) -> None:
        """Release the adapter."""
        ...


@runtime_checkable
class ProviderFactory(Protocol):
    """Creates the provider-native objects for one kind of data source."""

    def create_connection(self) -> Connection:
        """Create a new, unopened connection."""
        ...

    def create_parameter(self) -> ProviderParameter:
        """Create an empty provider parameter."""
        ...

    def create_fill_adapter(self) -> FillAdapter:
        """Create a bulk-fill adapter."""
        ...
