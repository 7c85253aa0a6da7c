from typing import Any

import pytest

from sqlfluent.exceptions import InvalidArgumentError
from sqlfluent.query import GenericSqlQuery, SqlQuery


class ActiveUsersQuery(SqlQuery):
    def __init__(self, min_age: int) -> None:
        super().__init__()
        self.min_age = min_age

    def _do_build(self) -> None:
        self.sql = "SELECT * FROM users WHERE active = 1 AND age >= @min_age"
        self.parameters["@min_age"] = self.min_age


def test_sql_query_build() -> None:
    """Test subclasses populate SQL and parameters when built."""
    query = ActiveUsersQuery(21)

    assert not query.is_built
    assert query.sql is None

    query.build()

    assert query.is_built
    assert query.sql == "SELECT * FROM users WHERE active = 1 AND age >= @min_age"
    assert query.parameters == {"@min_age": 21}


def test_generic_sql_query_writes_to_buffer() -> None:
    """Test the build function writes SQL into a text buffer."""
    name = "alice"

    def build(buffer: Any, parameters: dict[str, Any]) -> None:
        buffer.write("SELECT * FROM users WHERE 1 = 1")
        if name:
            buffer.write(" AND name = @name")
            parameters["@name"] = name

    query = GenericSqlQuery(build)
    query.build()

    assert query.sql == "SELECT * FROM users WHERE 1 = 1 AND name = @name"
    assert query.parameters == {"@name": "alice"}


def test_generic_sql_query_requires_build_function() -> None:
    """Test a None build function is rejected."""
    with pytest.raises(InvalidArgumentError):
        GenericSqlQuery(None)  # type: ignore[arg-type]


def test_sql_query_is_abstract() -> None:
    """Test the base class cannot be instantiated."""
    with pytest.raises(TypeError):
        SqlQuery()  # type: ignore[abstract]
