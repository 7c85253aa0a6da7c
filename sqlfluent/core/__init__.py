"""SQLFluent Core Module.

Architecture Overview:
- dialects.py: parameter placeholder dialects and syntax rewriting
- parameters.py: parameter types and the parameter list
- result.py: result row adapter, tables and data sets
- cache.py: per-type writable member cache
- statement.py: statements and the execution pipeline
"""

from sqlfluent.core.cache import FieldDescriptor, PropertyCache, property_cache
from sqlfluent.core.dialects import (
    NamedParameterDialect,
    ParameterDialect,
    ParameterMatch,
    ParameterStyle,
    PositionalParameterDialect,
    get_dialect,
)
from sqlfluent.core.parameters import DbType, Parameter, ParameterDirection, ParameterList, infer_db_type
from sqlfluent.core.result import DataSet, ResultRow, Table
from sqlfluent.core.statement import CommandKind, SqlStatement, Statement, StoredProcedureStatement

__all__ = (
    "CommandKind",
    "DataSet",
    "DbType",
    "FieldDescriptor",
    "NamedParameterDialect",
    "Parameter",
    "ParameterDialect",
    "ParameterDirection",
    "ParameterList",
    "ParameterMatch",
    "ParameterStyle",
    "PositionalParameterDialect",
    "PropertyCache",
    "ResultRow",
    "SqlStatement",
    "Statement",
    "StoredProcedureStatement",
    "Table",
    "get_dialect",
    "infer_db_type",
    "property_cache",
)
