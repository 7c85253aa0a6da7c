"""SQLFluent: fluent, provider-neutral data access for Python."""

from sqlfluent import adapters, base, core, exceptions, registry, typing, utils
from sqlfluent.__metadata__ import __version__
from sqlfluent.adapters import DbApiProviderFactory, SqliteDatabase
from sqlfluent.base import Database
from sqlfluent.config import DatabaseConfig, load_config_from_env
from sqlfluent.core import (
    DataSet,
    DbType,
    NamedParameterDialect,
    Parameter,
    ParameterDirection,
    ParameterList,
    PositionalParameterDialect,
    ResultRow,
    Statement,
    Table,
)
from sqlfluent.exceptions import (
    ColumnNotFoundError,
    ImproperConfigurationError,
    InvalidArgumentError,
    LockTimeoutError,
    NotFoundError,
    ParameterNotFoundError,
    QueryNotFoundError,
    SQLFileParseError,
    SQLFluentError,
)
from sqlfluent.query import GenericSqlQuery, SqlQuery
from sqlfluent.registry import NamedQuery, QueryRegistry

__all__ = (
    "ColumnNotFoundError",
    "DataSet",
    "Database",
    "DatabaseConfig",
    "DbApiProviderFactory",
    "DbType",
    "GenericSqlQuery",
    "ImproperConfigurationError",
    "InvalidArgumentError",
    "LockTimeoutError",
    "NamedParameterDialect",
    "NamedQuery",
    "NotFoundError",
    "Parameter",
    "ParameterDirection",
    "ParameterList",
    "ParameterNotFoundError",
    "PositionalParameterDialect",
    "QueryNotFoundError",
    "QueryRegistry",
    "ResultRow",
    "SQLFileParseError",
    "SQLFluentError",
    "SqlQuery",
    "SqliteDatabase",
    "Statement",
    "Table",
    "__version__",
    "adapters",
    "base",
    "core",
    "exceptions",
    "registry",
    "typing",
    "utils",
)
