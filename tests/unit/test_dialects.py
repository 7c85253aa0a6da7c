"""Unit tests for parameter placeholder dialects."""

import pytest

from sqlfluent.core.dialects import (
    NamedParameterDialect,
    ParameterMatch,
    ParameterStyle,
    PositionalParameterDialect,
    get_dialect,
)
from sqlfluent.exceptions import InvalidArgumentError


@pytest.fixture
def named() -> NamedParameterDialect:
    return NamedParameterDialect()


@pytest.fixture
def positional() -> PositionalParameterDialect:
    return PositionalParameterDialect()


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("SELECT * FROM users WHERE id = @id AND name = @name", ["@id", "@name"]),
        ("INSERT INTO t (a, b) VALUES (@a,@b)", ["@a", "@b"]),
        ("SELECT @@ROWCOUNT, @id", ["@id"]),
        ("SELECT * FROM users", []),
        ("SELECT * FROM t WHERE code = @order-code", ["@order-code"]),
    ],
    ids=["where", "values", "double_at", "none", "hyphen"],
)
def test_named_find_parameter_names(named: NamedParameterDialect, sql: str, expected: list[str]) -> None:
    """Test named parameter discovery."""
    assert named.find_parameter_names(sql) == expected


def test_named_placeholder_needs_delimiter(named: NamedParameterDialect) -> None:
    """Test a placeholder glued to other punctuation is not a parameter."""
    assert named.find_parameter_names("SELECT * FROM t WHERE a = @a;") == []


def test_named_next_parameter_match(named: NamedParameterDialect) -> None:
    """Test the first named placeholder is located."""
    match = named.next_parameter_match("WHERE id = @id AND x = @x ")

    assert match == ParameterMatch(11, 3, "@id")
    assert match is not None and match.end == 14


def test_named_next_parameter_match_none(named: NamedParameterDialect) -> None:
    """Test no match when there are no placeholders."""
    assert named.next_parameter_match("SELECT 1") is None


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("SELECT * FROM users WHERE id = ? AND age >= ?", ["@id", "@age"]),
        ("UPDATE users SET name = ? WHERE id <> ?", ["@name", "@id"]),
        ("SELECT * FROM users", []),
    ],
    ids=["comparisons", "update", "none"],
)
def test_positional_find_parameter_names(positional: PositionalParameterDialect, sql: str, expected: list[str]) -> None:
    """Test positional names are recovered from comparisons."""
    assert positional.find_parameter_names(sql) == expected


def test_positional_insert_pairs_columns_with_values(positional: PositionalParameterDialect) -> None:
    """Test INSERT column and value lists are paired; literals are skipped."""
    sql = "INSERT INTO users (id, name, active) VALUES (?, 'bob', ?)"

    assert positional.find_parameter_names(sql) == ["@id", "@active"]


def test_positional_insert_is_case_insensitive(positional: PositionalParameterDialect) -> None:
    """Test lowercase INSERT statements are recognized."""
    assert positional.find_parameter_names("  insert into users (id) values (?)") == ["@id"]


def test_positional_unbalanced_insert_returns_empty(positional: PositionalParameterDialect) -> None:
    """Test an odd number of INSERT tokens silently yields no names."""
    assert positional.find_parameter_names("INSERT INTO users (id, name) VALUES (?)") == []


def test_positional_next_parameter_match(positional: PositionalParameterDialect) -> None:
    """Test the first question mark is located."""
    assert positional.next_parameter_match("a = ? AND b = ?") == ParameterMatch(4, 1, "?")
    assert positional.next_parameter_match("a = 1") is None


def test_replace_named_with_positional(named: NamedParameterDialect, positional: PositionalParameterDialect) -> None:
    """Test named placeholders become question marks."""
    sql = "UPDATE users SET name = @name WHERE id = @id"

    assert positional.replace_parameter_syntax(sql, named) == "UPDATE users SET name = ? WHERE id = ?"


def test_replace_positional_with_named(named: NamedParameterDialect, positional: PositionalParameterDialect) -> None:
    """Test question marks become auto-numbered named placeholders."""
    sql = "SELECT * FROM t WHERE a = ? AND b IN (?, ?)"

    assert named.replace_parameter_syntax(sql, positional) == "SELECT * FROM t WHERE a = @p0 AND b IN (@p1, @p2)"


def test_replace_placeholder_at_end_of_statement(
    named: NamedParameterDialect, positional: PositionalParameterDialect
) -> None:
    """Test a placeholder ending the statement is still replaced."""
    assert positional.replace_parameter_syntax("SELECT * FROM t WHERE id = @id", named) == (
        "SELECT * FROM t WHERE id = ?"
    )


def test_replace_same_dialect_returns_stripped(named: NamedParameterDialect) -> None:
    """Test rewriting into the same dialect only strips whitespace."""
    assert named.replace_parameter_syntax("  SELECT @a  ", NamedParameterDialect()) == "SELECT @a"


def test_replace_without_source_returns_stripped(positional: PositionalParameterDialect) -> None:
    """Test a missing source dialect leaves placeholders untouched."""
    assert positional.replace_parameter_syntax(" SELECT @a ", None) == "SELECT @a"


def test_replace_rejects_none_sql(named: NamedParameterDialect, positional: PositionalParameterDialect) -> None:
    """Test None SQL is rejected."""
    with pytest.raises(InvalidArgumentError):
        named.replace_parameter_syntax(None, positional)  # type: ignore[arg-type]


def test_dialect_equality() -> None:
    """Test dialects compare equal by kind."""
    assert NamedParameterDialect() == NamedParameterDialect()
    assert PositionalParameterDialect() == PositionalParameterDialect()
    assert NamedParameterDialect() != PositionalParameterDialect()
    assert hash(NamedParameterDialect()) == hash(NamedParameterDialect())


def test_dialect_styles() -> None:
    """Test each dialect reports its placeholder style."""
    assert NamedParameterDialect.style is ParameterStyle.NAMED_AT
    assert PositionalParameterDialect.style is ParameterStyle.QMARK


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("named", NamedParameterDialect),
        ("NAMED_AT", NamedParameterDialect),
        ("standard", NamedParameterDialect),
        ("positional", PositionalParameterDialect),
        ("qmark", PositionalParameterDialect),
        ("legacy", PositionalParameterDialect),
        (ParameterStyle.QMARK, PositionalParameterDialect),
        (ParameterStyle.NAMED_AT, NamedParameterDialect),
    ],
)
def test_get_dialect(value: object, expected: type) -> None:
    """Test dialect resolution by name and style."""
    assert type(get_dialect(value)) is expected  # type: ignore[arg-type]


def test_get_dialect_passes_instances_through(named: NamedParameterDialect) -> None:
    """Test dialect instances are returned as-is."""
    assert get_dialect(named) is named


def test_get_dialect_unknown() -> None:
    """Test an unknown dialect name is rejected."""
    with pytest.raises(ValueError, match="Unknown parameter dialect"):
        get_dialect("pyformat")
