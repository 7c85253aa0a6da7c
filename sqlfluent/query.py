"""Self-building query objects.

A query object assembles its own SQL and parameter values when built;
:meth:`sqlfluent.base.Database.running_query` builds it and turns the result
into a statement.
"""

import io
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from sqlfluent.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from sqlfluent.typing import QueryBuildFunction

__all__ = ("GenericSqlQuery", "SqlQuery")


class SqlQuery(ABC):
    """Base class for queries that build their SQL on demand."""

    def __init__(self) -> None:
        self.sql: Optional[str] = None
        self.parameters: dict[str, Any] = {}
        self._is_built = False

    @property
    def is_built(self) -> bool:
        return self._is_built

    def build(self) -> None:
        """Build the SQL and parameters."""
        self._do_build()
        self._is_built = True

    @abstractmethod
    def _do_build(self) -> None:
        """Populate :attr:`sql` and :attr:`parameters`."""


class GenericSqlQuery(SqlQuery):
    """Query built by a plain function.

    Example:
        ```python
        def build(buffer, parameters):
            buffer.write("SELECT * FROM users WHERE 1 = 1")
            if name:
                buffer.write(" AND name = @name")
                parameters["@name"] = name

        statement = db.running_query(GenericSqlQuery(build))
        ```

    Args:
        build_function: Receives a text buffer and the parameter dict.

    Raises:
        InvalidArgumentError: If ``build_function`` is ``None``.
    """

    def __init__(self, build_function: "QueryBuildFunction") -> None:
        if build_function is None:
            raise InvalidArgumentError("build_function")
        super().__init__()
        self._build_function = build_function

    def _do_build(self) -> None:
        buffer = io.StringIO()
        self._build_function(buffer, self.parameters)
        self.sql = buffer.getvalue()
