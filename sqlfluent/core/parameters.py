"""Statement parameters.

Components:
- DbType / ParameterDirection: provider-neutral parameter metadata
- Parameter: default provider parameter implementation
- infer_db_type: value based type inference
- ParameterList: ordered, name and position addressable parameter collection
"""

import uuid
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import singledispatch
from typing import TYPE_CHECKING, Any, Final, Optional, Union, overload

from mypy_extensions import mypyc_attr

from sqlfluent.exceptions import InvalidArgumentError, ParameterNotFoundError

if TYPE_CHECKING:
    from sqlfluent.protocols import ProviderFactory, ProviderParameter
    from sqlfluent.typing import SingleParameterPopulator

__all__ = ("DbType", "Parameter", "ParameterDirection", "ParameterList", "infer_db_type")

INT32_MIN: Final = -(2**31)
INT32_MAX: Final = 2**31 - 1


class DbType(str, Enum):
    """Provider-neutral parameter type hint."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"
    BINARY = "binary"
    GUID = "guid"
    OBJECT = "object"


class ParameterDirection(str, Enum):
    """Which way a parameter's value flows."""

    INPUT = "input"
    OUTPUT = "output"
    INPUT_OUTPUT = "input_output"
    RETURN_VALUE = "return_value"


@singledispatch
def infer_db_type(value: Any) -> DbType:
    """Infer the :class:`DbType` for a parameter value.

    Args:
        value: Parameter value.

    Returns:
        The inferred type, ``DbType.OBJECT`` when nothing more specific fits.
    """
    return DbType.OBJECT


@infer_db_type.register
def _(value: str) -> DbType:
    return DbType.STRING


@infer_db_type.register
def _(value: bool) -> DbType:
    return DbType.BOOLEAN


@infer_db_type.register
def _(value: int) -> DbType:
    return DbType.INT32 if INT32_MIN <= value <= INT32_MAX else DbType.INT64


@infer_db_type.register
def _(value: float) -> DbType:
    return DbType.DOUBLE


@infer_db_type.register
def _(value: Decimal) -> DbType:
    return DbType.DECIMAL


@infer_db_type.register
def _(value: datetime) -> DbType:
    return DbType.DATETIME


@infer_db_type.register
def _(value: date) -> DbType:
    return DbType.DATE


@infer_db_type.register
def _(value: time) -> DbType:
    return DbType.TIME


@infer_db_type.register(bytes)
@infer_db_type.register(bytearray)
@infer_db_type.register(memoryview)
def _(value: Any) -> DbType:
    return DbType.BINARY


@infer_db_type.register
def _(value: uuid.UUID) -> DbType:
    return DbType.GUID


@mypyc_attr(allow_interpreted_subclasses=True)
class Parameter:
    """Default provider parameter.

    Attributes:
        name: Parameter name as written in the SQL (e.g. ``@id``)
        value: The bound value
        db_type: Optional type hint
        direction: Value flow direction
    """

    __slots__ = ("db_type", "direction", "name", "value")

    def __init__(
        self,
        name: str = "",
        value: Any = None,
        db_type: "Optional[DbType]" = None,
        direction: ParameterDirection = ParameterDirection.INPUT,
    ) -> None:
        self.name = name
        self.value = value
        self.db_type = db_type
        self.direction = direction

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parameter):
            return False
        return (self.name, self.value, self.db_type, self.direction) == (
            other.name,
            other.value,
            other.db_type,
            other.direction,
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Parameter(name={self.name!r}, value={self.value!r}, "
            f"db_type={self.db_type!r}, direction={self.direction!r})"
        )


class ParameterList:
    """Ordered parameter collection addressable by position and by name.

    Indexing by name returns the first case-insensitive match while
    :meth:`contains` is an exact, case-sensitive test. Duplicate names are
    allowed; avoiding ambiguity is up to the caller.

    Args:
        provider_factory: Factory used to materialize provider-native parameters.
    """

    __slots__ = ("_parameters", "_provider_factory")

    def __init__(self, provider_factory: "ProviderFactory") -> None:
        self._provider_factory = provider_factory
        self._parameters: list[ProviderParameter] = []

    def _create_parameter(self) -> "ProviderParameter":
        return self._provider_factory.create_parameter()

    def add(
        self,
        name: str,
        value: Any,
        db_type: "Optional[DbType]" = None,
        direction: ParameterDirection = ParameterDirection.INPUT,
    ) -> "ParameterList":
        """Add a parameter by value.

        Args:
            name: Parameter name, must not be empty.
            value: Parameter value.
            db_type: Type hint; inferred from ``value`` when omitted.
            direction: Value flow direction.

        Raises:
            InvalidArgumentError: If ``name`` is empty.

        Returns:
            This list, for chaining.
        """
        if not name:
            raise InvalidArgumentError("name")
        parameter = self._create_parameter()
        parameter.name = name
        parameter.value = value
        parameter.db_type = infer_db_type(value) if db_type is None else db_type
        parameter.direction = direction
        self._parameters.append(parameter)
        return self

    def add_populated(self, populator: "SingleParameterPopulator") -> "ParameterList":
        """Add a parameter filled in by ``populator``.

        Args:
            populator: Receives a fresh provider parameter and sets its fields.

        Raises:
            InvalidArgumentError: If ``populator`` is ``None`` or left the name empty.

        Returns:
            This list, for chaining.
        """
        if populator is None:
            raise InvalidArgumentError("populator")
        parameter = self._create_parameter()
        populator(parameter)
        if not parameter.name:
            raise InvalidArgumentError("name", "Parameter name cannot be empty or None")
        self._parameters.append(parameter)
        return self

    def add_range(self, parameters: "Iterable[ProviderParameter]") -> "ParameterList":
        """Append every parameter from another sequence.

        Raises:
            InvalidArgumentError: If ``parameters`` is ``None``.
        """
        if parameters is None:
            raise InvalidArgumentError("parameters")
        self._parameters.extend(list(parameters))
        return self

    def contains(self, name: str) -> bool:
        """Return whether a parameter named exactly ``name`` exists (case-sensitive).

        Raises:
            InvalidArgumentError: If ``name`` is empty.
        """
        if not name:
            raise InvalidArgumentError("name")
        return any(parameter.name == name for parameter in self._parameters)

    @property
    def count(self) -> int:
        return len(self._parameters)

    @overload
    def __getitem__(self, key: int) -> "ProviderParameter": ...

    @overload
    def __getitem__(self, key: str) -> "ProviderParameter": ...

    def __getitem__(self, key: "Union[int, str]") -> "ProviderParameter":
        if isinstance(key, str):
            folded = key.casefold()
            for parameter in self._parameters:
                if parameter.name.casefold() == folded:
                    return parameter
            raise ParameterNotFoundError(key)
        return self._parameters[key]

    def __setitem__(self, index: int, parameter: "ProviderParameter") -> None:
        self._parameters[index] = parameter

    def __len__(self) -> int:
        return len(self._parameters)

    def __iter__(self) -> "Iterator[ProviderParameter]":
        return iter(self._parameters)

    def __repr__(self) -> str:
        return f"ParameterList({self._parameters!r})"
