"""Statements and the execution pipeline.

A statement bundles command text, command kind and a parameter list. Its
terminal ``execute_*`` methods open a connection, build a command and either
stream rows lazily or bulk-fill a table. Connection, command and cursor are
released on every exit path, cursor first and connection last.
"""

import time
from abc import ABC
from collections.abc import Generator, Iterable, Iterator, Mapping
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union, overload

from typing_extensions import Self

from sqlfluent.core.cache import property_cache
from sqlfluent.core.parameters import ParameterDirection, ParameterList
from sqlfluent.core.result import DataSet, ResultRow, Table, column_names, zero_value
from sqlfluent.exceptions import InvalidArgumentError
from sqlfluent.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfluent.base import Database
    from sqlfluent.core.cache import FieldDescriptor
    from sqlfluent.core.parameters import DbType
    from sqlfluent.protocols import Command, Connection, Cursor
    from sqlfluent.typing import ColumnMap, DataSetT, ModelT, ParameterSource, RowMapper, SingleParameterPopulator

__all__ = ("CommandKind", "SqlStatement", "Statement", "StoredProcedureStatement")

logger = get_logger("core.statement")


class CommandKind(str, Enum):
    """How the provider interprets the command text."""

    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"


class Statement(ABC):
    """A pending database operation.

    Statements are owned by a single call chain and are not safe for
    concurrent mutation.

    Args:
        database: Data-source handle that supplies connections.
        command_text: SQL text or stored procedure name.

    Raises:
        InvalidArgumentError: If ``database`` is ``None`` or ``command_text`` is empty.
    """

    __slots__ = ("_command_text", "_database", "_parameters")

    command_kind: "ClassVar[CommandKind]"

    def __init__(self, database: "Database", command_text: str) -> None:
        if database is None:
            raise InvalidArgumentError("database")
        if not command_text:
            raise InvalidArgumentError("command_text")
        self._database = database
        self._command_text = command_text
        self._parameters = ParameterList(database.provider_factory)

    @property
    def database(self) -> "Database":
        return self._database

    @property
    def command_text(self) -> str:
        return self._command_text

    @property
    def parameters(self) -> ParameterList:
        return self._parameters

    def prepared_command_text(self) -> str:
        """Return the text sent to the provider."""
        return self._command_text

    # -- parameters -----------------------------------------------------------

    @overload
    def attach_parameter(self, name: "SingleParameterPopulator") -> Self: ...

    @overload
    def attach_parameter(
        self,
        name: str,
        value: Any,
        db_type: "Optional[DbType]" = None,
        direction: ParameterDirection = ParameterDirection.INPUT,
    ) -> Self: ...

    def attach_parameter(
        self,
        name: "Union[str, SingleParameterPopulator]",
        value: Any = None,
        db_type: "Optional[DbType]" = None,
        direction: ParameterDirection = ParameterDirection.INPUT,
    ) -> Self:
        """Append one parameter.

        ``name`` may instead be a callable that fills in a fresh provider
        parameter.

        Raises:
            InvalidArgumentError: If the resulting parameter name is empty.

        Returns:
            This statement, for chaining.
        """
        if callable(name):
            self._parameters.add_populated(name)
        else:
            self._parameters.add(name, value, db_type, direction)
        return self

    def attach_parameters(self, parameters: "ParameterSource") -> Self:
        """Append several parameters at once.

        Args:
            parameters: A name to value mapping, another parameter sequence, or
                a callable that receives the live :class:`ParameterList`.

        Raises:
            InvalidArgumentError: If ``parameters`` is ``None`` or unsupported.

        Returns:
            This statement, for chaining.
        """
        if parameters is None:
            raise InvalidArgumentError("parameters")
        if isinstance(parameters, Mapping):
            for name, value in parameters.items():
                self.attach_parameter(name, value)
        elif isinstance(parameters, ParameterList):
            self._parameters.add_range(parameters)
        elif callable(parameters):
            parameters(self._parameters)
        elif isinstance(parameters, Iterable) and not isinstance(parameters, (str, bytes)):
            self._parameters.add_range(parameters)
        else:
            msg = f"Unsupported parameter source of type {type(parameters).__name__}"
            raise InvalidArgumentError("parameters", msg)
        return self

    # -- resource management ------------------------------------------------

    @contextmanager
    def _managed_connection(self) -> "Generator[Connection, None, None]":
        connection = self._database.create_connection()
        try:
            connection.open()
            yield connection
        finally:
            connection.close()

    @contextmanager
    def _managed_command(self, connection: "Connection") -> "Generator[Command, None, None]":
        command = connection.create_command()
        try:
            command.text = self.prepared_command_text()
            command.kind = self.command_kind
            command.parameters.extend(self._parameters)
            yield command
        finally:
            command.close()

    @staticmethod
    @contextmanager
    def _managed_cursor(command: "Command") -> "Generator[Cursor, None, None]":
        cursor = command.execute_reader()
        try:
            yield cursor
        finally:
            cursor.close()

    def _log_extra(self, **fields: Any) -> "dict[str, Any]":
        return {
            "extra_fields": {
                "command_kind": self.command_kind.value,
                "parameter_count": len(self._parameters),
                **fields,
            }
        }

    # -- row streaming ------------------------------------------------------

    def _iter_rows(self, row_mapper: "RowMapper") -> "Generator[Any, None, None]":
        start_time = time.perf_counter()
        produced = 0
        logger.debug("Executing %s statement for rows", self.command_kind.value, extra=self._log_extra())
        try:
            with (
                self._managed_connection() as connection,
                self._managed_command(connection) as command,
                self._managed_cursor(command) as cursor,
            ):
                columns = column_names(cursor.description)
                for values in cursor:
                    yield row_mapper(ResultRow(values, cursor.description, columns))
                    produced += 1
        finally:
            duration = time.perf_counter() - start_time
            logger.debug(
                "Row stream released after %d rows in %.3fms",
                produced,
                duration * 1000,
                extra=self._log_extra(rows=produced, duration_ms=duration * 1000),
            )

    def _model_row_mapper(self, model_type: "type[ModelT]", column_map: "ColumnMap") -> "RowMapper":
        resolved: list[tuple[FieldDescriptor, str, Optional[type[Any]]]] = []
        for field_name, column_name in column_map.items():
            descriptor = property_cache.get_field(model_type, field_name)
            # unknown fields are skipped, not reported
            if descriptor is not None:
                field_type = descriptor.annotation if isinstance(descriptor.annotation, type) else None
                resolved.append((descriptor, column_name, field_type))

        def _map_row(row: ResultRow) -> "ModelT":
            instance = model_type()
            for descriptor, column_name, field_type in resolved:
                # nulls read as the field's zero value; drivers rarely report column types
                if field_type is not None and row.is_null(column_name):
                    descriptor.set_value(instance, zero_value(field_type))
                else:
                    descriptor.set_value(instance, row.get(column_name))
            return instance

        return _map_row

    def _resolve_row_mapper(
        self, row_mapper: "Union[RowMapper, ColumnMap]", model_type: "Optional[type[Any]]"
    ) -> "RowMapper":
        if row_mapper is None:
            raise InvalidArgumentError("row_mapper")
        if isinstance(row_mapper, Mapping):
            if model_type is None:
                raise InvalidArgumentError("model_type", "A model type is required when mapping columns to fields")
            return self._model_row_mapper(model_type, row_mapper)
        if not callable(row_mapper):
            msg = f"row_mapper must be callable or a mapping, not {type(row_mapper).__name__}"
            raise InvalidArgumentError("row_mapper", msg)
        return row_mapper

    @overload
    def execute_for_each_row(self, row_mapper: "RowMapper") -> "Iterator[Any]": ...

    @overload
    def execute_for_each_row(self, row_mapper: "ColumnMap", model_type: "type[ModelT]") -> "Iterator[ModelT]": ...

    def execute_for_each_row(
        self, row_mapper: "Union[RowMapper, ColumnMap]", model_type: "Optional[type[Any]]" = None
    ) -> "Iterator[Any]":
        """Execute and lazily map every row.

        Nothing is executed until the first value is pulled. The returned
        iterator is single pass; closing it (or dropping it) before exhaustion
        releases the cursor, command and connection.

        Args:
            row_mapper: Callable receiving a :class:`ResultRow`, or a mapping of
                ``model_type`` field names to column names.
            model_type: Default-constructible type built for each row when
                ``row_mapper`` is a mapping. Unknown field names are skipped.

        Raises:
            InvalidArgumentError: If ``row_mapper`` is ``None`` or unusable, or a
                mapping is given without ``model_type``.

        Returns:
            Iterator of mapped rows.
        """
        return self._iter_rows(self._resolve_row_mapper(row_mapper, model_type))

    @overload
    def execute_for_first_row(self, row_mapper: "RowMapper", *, default: Any = None) -> Any: ...

    @overload
    def execute_for_first_row(
        self, row_mapper: "ColumnMap", model_type: "type[ModelT]", *, default: "Optional[ModelT]" = None
    ) -> "Optional[ModelT]": ...

    def execute_for_first_row(
        self,
        row_mapper: "Union[RowMapper, ColumnMap]",
        model_type: "Optional[type[Any]]" = None,
        *,
        default: Any = None,
    ) -> Any:
        """Execute and map only the first row.

        Returns:
            The first mapped row, or ``default`` when the result set is empty.
        """
        rows = self._iter_rows(self._resolve_row_mapper(row_mapper, model_type))
        try:
            return next(rows, default)
        finally:
            rows.close()

    # -- bulk results -------------------------------------------------------

    def _fill(self, table: Table) -> Table:
        start_time = time.perf_counter()
        with self._managed_connection() as connection, self._managed_command(connection) as command:
            adapter = self._database.create_fill_adapter()
            try:
                adapter.select_command = command
                adapter.fill(table)
            finally:
                adapter.close()
        duration = time.perf_counter() - start_time
        logger.debug(
            "Filled table %r with %d rows in %.3fms",
            table.name,
            len(table),
            duration * 1000,
            extra=self._log_extra(rows=len(table), duration_ms=duration * 1000),
        )
        return table

    def execute_for_table(self) -> Table:
        """Execute and bulk-fill a single :class:`Table`."""
        return self._fill(Table())

    @overload
    def execute_for_dataset(self) -> DataSet: ...

    @overload
    def execute_for_dataset(self, dataset_type: "type[DataSetT]") -> "DataSetT": ...

    def execute_for_dataset(self, dataset_type: "type[Any]" = DataSet) -> Any:
        """Execute and bulk-fill a :class:`DataSet`.

        Args:
            dataset_type: ``DataSet`` or a subclass. A subclass declaring
                ``table_names`` is filled into its first declared table.

        Returns:
            The populated data set.
        """
        if dataset_type is None:
            raise InvalidArgumentError("dataset_type")
        dataset = dataset_type()
        table = dataset[0] if dataset.table_names else dataset.add_table()
        self._fill(table)
        return dataset

    def execute_without_result(self) -> None:
        """Execute a command that produces no result set (INSERT, UPDATE, DELETE, DDL)."""
        start_time = time.perf_counter()
        with self._managed_connection() as connection, self._managed_command(connection) as command:
            affected = command.execute_non_query()
        duration = time.perf_counter() - start_time
        logger.debug(
            "Executed %s statement affecting %d rows in %.3fms",
            self.command_kind.value,
            affected,
            duration * 1000,
            extra=self._log_extra(rows_affected=affected, duration_ms=duration * 1000),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._command_text!r}, parameters={len(self._parameters)})"


class SqlStatement(Statement):
    """Statement whose command text is SQL.

    The text is rewritten into the provider's placeholder syntax when the
    database maps one parameter dialect onto another.
    """

    __slots__ = ()

    command_kind = CommandKind.TEXT

    def prepared_command_text(self) -> str:
        return self._database.translate_parameter_syntax(self._command_text)


class StoredProcedureStatement(Statement):
    """Statement whose command text names a stored procedure."""

    __slots__ = ()

    command_kind = CommandKind.STORED_PROCEDURE
