"""The data-source handle.

:class:`Database` ties a provider factory to one connection string, owns the
query registry, and is the entry point for creating statements.

Example:
    ```python
    db = SqliteDatabase("app.db")
    users = list(
        db.executing_sql("SELECT id, name FROM users WHERE active = @active")
        .attach_parameter("@active", True)
        .execute_for_each_row(lambda row: (row.get("id", int), row.get("name", str)))
    )
    ```
"""

from typing import TYPE_CHECKING, Optional

from typing_extensions import Self

from sqlfluent.core.dialects import NamedParameterDialect, ParameterDialect
from sqlfluent.core.statement import SqlStatement, Statement, StoredProcedureStatement
from sqlfluent.exceptions import InvalidArgumentError
from sqlfluent.registry import DEFAULT_QUERY_FILE_EXTENSIONS, QueryRegistry
from sqlfluent.utils.locking import DEFAULT_LOCK_TIMEOUT
from sqlfluent.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlfluent.config import DatabaseConfig
    from sqlfluent.protocols import Connection, FillAdapter, ProviderFactory, ProviderParameter
    from sqlfluent.query import SqlQuery
    from sqlfluent.typing import QueryFinder, RegistryConfigurator

__all__ = ("Database",)

logger = get_logger("base")


class Database:
    """Vendor-neutral handle on one data source.

    Args:
        provider_factory: Creates connections, parameters and fill adapters.
        connection_string: Connection string handed to every new connection.
        source_dialect: Placeholder dialect application SQL is written in.
        provider_dialect: Placeholder dialect the provider understands.
        lock_timeout: Seconds to wait for the query registry lock.
        query_file_extensions: Extensions the registry treats as query files by default.

    Raises:
        InvalidArgumentError: If ``provider_factory`` is ``None`` or ``connection_string`` is empty.
    """

    def __init__(
        self,
        provider_factory: "ProviderFactory",
        connection_string: str,
        *,
        source_dialect: "Optional[ParameterDialect]" = None,
        provider_dialect: "Optional[ParameterDialect]" = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        query_file_extensions: "Iterable[str]" = DEFAULT_QUERY_FILE_EXTENSIONS,
    ) -> None:
        if provider_factory is None:
            raise InvalidArgumentError("provider_factory")
        if not connection_string:
            raise InvalidArgumentError("connection_string")
        self.provider_factory = provider_factory
        self.connection_string = connection_string
        self.query_registry = QueryRegistry(lock_timeout, query_file_extensions=query_file_extensions)
        default_dialect = NamedParameterDialect()
        self.source_code_syntax: ParameterDialect = source_dialect or default_dialect
        self.provider_syntax: ParameterDialect = provider_dialect or default_dialect

    @classmethod
    def from_config(cls, provider_factory: "ProviderFactory", config: "DatabaseConfig") -> Self:
        """Create a handle from a :class:`~sqlfluent.config.DatabaseConfig`."""
        if config is None:
            raise InvalidArgumentError("config")
        return cls(
            provider_factory,
            config.connection_string,
            source_dialect=config.get_source_dialect(),
            provider_dialect=config.get_provider_dialect(),
            lock_timeout=config.lock_timeout,
            query_file_extensions=config.query_file_extensions,
        )

    # -- provider objects ----------------------------------------------------

    def create_connection(self) -> "Connection":
        """Create an unopened connection bound to :attr:`connection_string`."""
        connection = self.provider_factory.create_connection()
        connection.connection_string = self.connection_string
        return connection

    def create_fill_adapter(self) -> "FillAdapter":
        return self.provider_factory.create_fill_adapter()

    def create_parameter(self) -> "ProviderParameter":
        return self.provider_factory.create_parameter()

    # -- parameter syntax ----------------------------------------------------

    def using_source_code_syntax(self, dialect: ParameterDialect) -> Self:
        """Declare the placeholder dialect application SQL is written in."""
        if dialect is None:
            raise InvalidArgumentError("dialect")
        self.source_code_syntax = dialect
        return self

    def map_source_code_syntax_to(self, dialect: ParameterDialect) -> Self:
        """Declare the placeholder dialect the provider expects."""
        if dialect is None:
            raise InvalidArgumentError("dialect")
        self.provider_syntax = dialect
        return self

    def translate_parameter_syntax(self, sql: str) -> str:
        """Rewrite ``sql`` from the source-code dialect into the provider dialect.

        SQL is returned unchanged when both dialects are the same.
        """
        if self.source_code_syntax == self.provider_syntax:
            return sql
        return self.provider_syntax.replace_parameter_syntax(sql, self.source_code_syntax)

    # -- query registry ------------------------------------------------------

    def configure_query_registry(self, configurator: "RegistryConfigurator") -> Self:
        """Call ``configurator`` with the query registry."""
        if configurator is None:
            raise InvalidArgumentError("configurator")
        configurator(self.query_registry)
        return self

    # -- statements ----------------------------------------------------------

    def executing_sql(self, sql: str) -> Statement:
        """Create a statement running ``sql``."""
        return SqlStatement(self, sql)

    def calling_stored_procedure(self, procedure_name: str) -> Statement:
        """Create a statement calling the stored procedure ``procedure_name``."""
        return StoredProcedureStatement(self, procedure_name)

    def running_query(self, query: "SqlQuery") -> Statement:
        """Build ``query`` and create a statement from its SQL and parameters."""
        if query is None:
            raise InvalidArgumentError("query")
        query.build()
        return SqlStatement(self, query.sql or "").attach_parameters(query.parameters)

    def load_query_registered_as(self, query_name: str) -> Statement:
        """Create a statement from the SQL registered as ``query_name``.

        Raises:
            QueryNotFoundError: If no query is registered under that name.
        """
        return SqlStatement(self, self.query_registry.find(query_name))

    def retrieve_query_from_registry(self, query_finder: "QueryFinder") -> Statement:
        """Create a statement from the SQL ``query_finder`` picks out of the registry."""
        if query_finder is None:
            raise InvalidArgumentError("query_finder")
        return SqlStatement(self, query_finder(self.query_registry))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(provider_factory={type(self.provider_factory).__name__}, "
            f"source_syntax={self.source_code_syntax!r}, provider_syntax={self.provider_syntax!r})"
        )
