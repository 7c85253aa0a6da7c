import pytest

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


def test_exception_hierarchy() -> None:
    """Test exception classes inherit correctly."""
    assert issubclass(InvalidArgumentError, SQLFluentError)
    assert issubclass(InvalidArgumentError, ValueError)
    assert issubclass(NotFoundError, LookupError)
    assert issubclass(QueryNotFoundError, NotFoundError)
    assert issubclass(QueryNotFoundError, KeyError)
    assert issubclass(ParameterNotFoundError, KeyError)
    assert issubclass(ColumnNotFoundError, NotFoundError)
    assert issubclass(LockTimeoutError, SQLFluentError)
    assert issubclass(ImproperConfigurationError, SQLFluentError)
    assert issubclass(SQLFileParseError, SQLFluentError)


def test_exception_instantiation() -> None:
    """Test exceptions can be instantiated with messages."""
    exc = SQLFluentError("Something failed")

    assert str(exc) == "Something failed"
    assert exc.detail == "Something failed"
    assert repr(exc) == "SQLFluentError - Something failed"


def test_invalid_argument_error_message() -> None:
    """Test the default message names the argument."""
    exc = InvalidArgumentError("row_mapper")

    assert exc.argument == "row_mapper"
    assert str(exc) == "Argument 'row_mapper' cannot be empty or None."
    assert str(InvalidArgumentError("sql", "custom")) == "custom"


def test_query_not_found_error_message() -> None:
    """Test the registry miss message names the query."""
    exc = QueryNotFoundError("get_user")

    assert exc.name == "get_user"
    assert str(exc) == "Could not find query registered with name 'get_user'"


def test_lock_timeout_error_message() -> None:
    """Test the timeout message names the resource and the wait."""
    exc = LockTimeoutError("query registry", 1.5)

    assert exc.timeout == 1.5
    assert str(exc) == "Timed out after 1.500s waiting for lock on query registry"


def test_sql_file_parse_error_message() -> None:
    """Test the parse error includes the path and cause."""
    exc = SQLFileParseError("queries/users.sql", ValueError("bad header"))

    assert exc.path == "queries/users.sql"
    assert str(exc) == "Failed to parse SQL file queries/users.sql: bad header"


def test_exception_chaining() -> None:
    """Test exceptions support chaining with 'from'."""
    with pytest.raises(SQLFileParseError) as exc_info:
        try:
            raise OSError("Original error")
        except OSError as e:
            raise SQLFileParseError("a.sql", e) from e

    assert isinstance(exc_info.value.__cause__, OSError)
