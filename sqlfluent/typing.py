from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

from typing_extensions import TypeAlias, TypeVar

if TYPE_CHECKING:
    from pathlib import Path

    from sqlfluent.core.parameters import ParameterList
    from sqlfluent.core.result import DataSet, ResultRow
    from sqlfluent.protocols import ProviderParameter
    from sqlfluent.registry import NamedQuery, QueryRegistry

__all__ = (
    "ColumnMap",
    "DataSetT",
    "FileSelector",
    "ModelT",
    "ParameterMapping",
    "ParameterPopulator",
    "ParameterSource",
    "QueryBuildFunction",
    "QueryExtractor",
    "QueryFinder",
    "RegistryConfigurator",
    "RowMapper",
    "SingleParameterPopulator",
    "T",
)

T = TypeVar("T")
ModelT = TypeVar("ModelT")
DataSetT = TypeVar("DataSetT", bound="DataSet")

RowMapper: TypeAlias = "Callable[[ResultRow], Any]"
"""Callable turning the current result row into one output value."""

ColumnMap: TypeAlias = "Mapping[str, str]"
"""Mapping of model field name to result-set column name."""

ParameterMapping: TypeAlias = "Mapping[str, Any]"
"""Mapping of parameter name to parameter value."""

ParameterPopulator: TypeAlias = "Callable[[ParameterList], Any]"
"""Callable that receives the live parameter list and mutates it."""

SingleParameterPopulator: TypeAlias = "Callable[[ProviderParameter], Any]"
"""Callable that fills in a freshly created provider parameter."""

ParameterSource: TypeAlias = "Union[ParameterMapping, ParameterPopulator, ParameterList]"

QueryFinder: TypeAlias = "Callable[[QueryRegistry], str]"

QueryBuildFunction: TypeAlias = "Callable[[Any, dict[str, Any]], Any]"

RegistryConfigurator: TypeAlias = "Callable[[QueryRegistry], Any]"

FileSelector: TypeAlias = "Callable[[Path], bool]"

QueryExtractor: TypeAlias = "Callable[[Path], Optional[Iterable[NamedQuery]]]"
