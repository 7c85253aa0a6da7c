"""Result access.

- ResultRow: typed, null-safe view over the current row of a cursor
- Table / DataSet: bulk-filled, locale invariant tabular results
"""

from collections import OrderedDict
from collections.abc import Iterator, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any, ClassVar, Final, Optional, Union, overload

from mypy_extensions import mypyc_attr

from sqlfluent.exceptions import ColumnNotFoundError

if TYPE_CHECKING:
    from sqlfluent.typing import T

__all__ = ("INVARIANT_LOCALE", "DataSet", "ResultRow", "Table", "column_names", "zero_value")

INVARIANT_LOCALE: Final = "invariant"
DEFAULT_TABLE_NAME: Final = "Table"

_DEFAULT_CONSTRUCTIBLE: Final = frozenset({int, float, complex, bool, Decimal, str, bytes})


def zero_value(type_: "Optional[type[Any]]") -> Any:
    """Return the value a null cell reads as for ``type_``.

    Numeric and boolean types read as zero, ``str``/``bytes`` as empty and
    everything else as ``None``.
    """
    if type_ is not None and type_ in _DEFAULT_CONSTRUCTIBLE:
        return type_()
    return None


def column_names(description: "Optional[Sequence[Sequence[Any]]]") -> "list[str]":
    """Extract column names from PEP 249 cursor metadata."""
    if not description:
        return []
    return [str(column[0]) for column in description]


def _column_type(description: "Optional[Sequence[Sequence[Any]]]", ordinal: int) -> "Optional[type[Any]]":
    if not description:
        return None
    column = description[ordinal]
    type_code = column[1] if len(column) > 1 else None
    return type_code if isinstance(type_code, type) else None


@mypyc_attr(allow_interpreted_subclasses=False)
class ResultRow:
    """View over the current position of a forward-only cursor.

    Only valid while the row mapper that received it is running.

    Args:
        values: Cell values of the current row.
        description: The cursor's PEP 249 column metadata.
        columns: Pre-computed column names, shared by all rows of one cursor.
    """

    __slots__ = ("_columns", "_description", "_values")

    def __init__(
        self,
        values: "Sequence[Any]",
        description: "Optional[Sequence[Sequence[Any]]]",
        columns: "Optional[list[str]]" = None,
    ) -> None:
        self._values = values
        self._description = description
        self._columns = columns if columns is not None else column_names(description)

    @property
    def columns(self) -> "list[str]":
        return list(self._columns)

    @property
    def field_count(self) -> int:
        return len(self._values)

    def get_ordinal(self, name: str) -> int:
        """Resolve a column name to its position.

        An exact match wins over a case-insensitive one.

        Raises:
            ColumnNotFoundError: If the cursor has no such column.
        """
        try:
            return self._columns.index(name)
        except ValueError:
            folded = name.casefold()
            for ordinal, column in enumerate(self._columns):
                if column.casefold() == folded:
                    return ordinal
        raise ColumnNotFoundError(name)

    def _resolve(self, key: "Union[int, str]") -> int:
        return self.get_ordinal(key) if isinstance(key, str) else key

    def is_null(self, key: "Union[int, str]") -> bool:
        """Return whether the cell at ``key`` (ordinal or column name) is null."""
        return self._values[self._resolve(key)] is None

    @overload
    def get(self, key: "Union[int, str]") -> Any: ...

    @overload
    def get(self, key: "Union[int, str]", type_: "type[T]") -> "T": ...

    def get(self, key: "Union[int, str]", type_: "Optional[type[Any]]" = None) -> Any:
        """Read a cell by ordinal or column name.

        Null cells never raise: they read as :func:`zero_value` of ``type_``,
        or of the column's declared type when no ``type_`` is given.

        Args:
            key: Column ordinal or name.
            type_: Requested Python type; the stored value is coerced to it.

        Raises:
            ColumnNotFoundError: If ``key`` names an unknown column.

        Returns:
            The cell value.
        """
        ordinal = self._resolve(key)
        value = self._values[ordinal]
        if type_ is None:
            if value is None:
                return zero_value(_column_type(self._description, ordinal))
            return value
        if value is None:
            return zero_value(type_)
        if isinstance(value, type_):
            return value
        return type_(value)

    def __getitem__(self, key: "Union[int, str]") -> Any:
        return self.get(key)

    def to_dict(self) -> "dict[str, Any]":
        return dict(zip(self._columns, self._values))

    def __repr__(self) -> str:
        return f"ResultRow({self.to_dict()!r})"


class Table:
    """In-memory table filled in bulk from a result set.

    Attributes:
        name: Table name.
        columns: Column names, in result-set order.
        column_types: PEP 249 ``type_code`` per column.
        rows: Row tuples.
        locale: Always :data:`INVARIANT_LOCALE`.
    """

    __slots__ = ("column_types", "columns", "locale", "name", "rows")

    def __init__(self, name: str = DEFAULT_TABLE_NAME) -> None:
        self.name = name
        self.columns: list[str] = []
        self.column_types: list[Any] = []
        self.rows: list[tuple[Any, ...]] = []
        self.locale = INVARIANT_LOCALE

    def add_column(self, name: str, type_code: Any = None) -> None:
        self.columns.append(name)
        self.column_types.append(type_code)

    def add_row(self, values: "Sequence[Any]") -> None:
        self.rows.append(tuple(values))

    def to_dicts(self) -> "list[dict[str, Any]]":
        return [dict(zip(self.columns, row)) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> "Iterator[tuple[Any, ...]]":
        return iter(self.rows)

    def __repr__(self) -> str:
        return f"Table(name={self.name!r}, columns={self.columns!r}, rows={len(self.rows)})"


class DataSet:
    """Ordered collection of :class:`Table` objects.

    Subclasses may declare ``table_names``; those tables exist from
    construction and the first one is the fill target for typed queries.
    """

    table_names: "ClassVar[tuple[str, ...]]" = ()

    def __init__(self) -> None:
        self.locale = INVARIANT_LOCALE
        self.tables: OrderedDict[str, Table] = OrderedDict()
        for name in self.table_names:
            self.add_table(name)

    def add_table(self, name: str = DEFAULT_TABLE_NAME) -> Table:
        """Return the table named ``name``, creating it if needed."""
        table = self.tables.get(name)
        if table is None:
            table = Table(name)
            self.tables[name] = table
        return table

    def __getitem__(self, key: "Union[int, str]") -> Table:
        if isinstance(key, int):
            return list(self.tables.values())[key]
        return self.tables[key]

    def __len__(self) -> int:
        return len(self.tables)

    def __iter__(self) -> "Iterator[Table]":
        return iter(self.tables.values())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tables={list(self.tables)!r})"
