"""Tests for database configuration and environment loading."""

from typing import Any

import pytest

from sqlfluent.config import DatabaseConfig, load_config_from_env
from sqlfluent.core.dialects import NamedParameterDialect, PositionalParameterDialect
from sqlfluent.exceptions import ImproperConfigurationError


def test_config_defaults() -> None:
    """Test default values."""
    config = DatabaseConfig(connection_string="app.db")

    assert config.source_dialect == "named"
    assert config.provider_dialect == "named"
    assert config.lock_timeout == 60.0
    assert config.query_file_extensions == (".sql",)
    assert config.get_source_dialect() == NamedParameterDialect()


def test_config_accepts_dialect_instances() -> None:
    """Test dialects may be given as instances."""
    config = DatabaseConfig(connection_string="app.db", provider_dialect=PositionalParameterDialect())

    assert config.get_provider_dialect() == PositionalParameterDialect()


def test_config_is_frozen() -> None:
    """Test configuration objects are immutable."""
    config = DatabaseConfig(connection_string="app.db")

    with pytest.raises(AttributeError):
        config.lock_timeout = 1.0  # type: ignore[misc]


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"connection_string": ""}, "connection_string"),
        ({"connection_string": "db", "lock_timeout": 0}, "lock_timeout"),
        ({"connection_string": "db", "source_dialect": "pyformat"}, "source_dialect"),
        ({"connection_string": "db", "provider_dialect": "numeric"}, "provider_dialect"),
        ({"connection_string": "db", "query_file_extensions": ("sql",)}, "query_file_extensions"),
        ({"connection_string": "db", "query_file_extensions": ()}, "query_file_extensions"),
    ],
    ids=["empty_connection", "zero_timeout", "bad_source", "bad_provider", "no_dot", "no_extensions"],
)
def test_config_validation(kwargs: "dict[str, Any]", message: str) -> None:
    """Test invalid values raise a configuration error."""
    with pytest.raises(ImproperConfigurationError, match=message):
        DatabaseConfig(**kwargs)


def test_load_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test every setting can come from the environment."""
    monkeypatch.setenv("SQLFLUENT_CONNECTION_STRING", "file:app.db")
    monkeypatch.setenv("SQLFLUENT_SOURCE_DIALECT", "positional")
    monkeypatch.setenv("SQLFLUENT_PROVIDER_DIALECT", "named")
    monkeypatch.setenv("SQLFLUENT_LOCK_TIMEOUT", "2.5")
    monkeypatch.setenv("SQLFLUENT_QUERY_FILE_EXTENSIONS", ".sql, .ddl")

    config = load_config_from_env()

    assert config.connection_string == "file:app.db"
    assert config.get_source_dialect() == PositionalParameterDialect()
    assert config.lock_timeout == 2.5
    assert config.query_file_extensions == (".sql", ".ddl")


def test_load_config_from_env_invalid_timeout_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test an unparsable timeout falls back to the default."""
    monkeypatch.setenv("SQLFLUENT_CONNECTION_STRING", "app.db")
    monkeypatch.setenv("SQLFLUENT_LOCK_TIMEOUT", "soon")
    monkeypatch.delenv("SQLFLUENT_QUERY_FILE_EXTENSIONS", raising=False)

    config = load_config_from_env()

    assert config.lock_timeout == 60.0
    assert config.query_file_extensions == (".sql",)


def test_load_config_from_env_requires_connection_string(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a missing connection string is a configuration error."""
    monkeypatch.delenv("SQLFLUENT_CONNECTION_STRING", raising=False)

    with pytest.raises(ImproperConfigurationError):
        load_config_from_env()
