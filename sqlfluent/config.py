"""Database handle configuration.

Environment Variables Supported by :func:`load_config_from_env`:
- SQLFLUENT_CONNECTION_STRING: Connection string (required)
- SQLFLUENT_SOURCE_DIALECT: Placeholder dialect SQL is written in (named/positional)
- SQLFLUENT_PROVIDER_DIALECT: Placeholder dialect the provider understands (named/positional)
- SQLFLUENT_LOCK_TIMEOUT: Seconds to wait for shared locks (float)
- SQLFLUENT_QUERY_FILE_EXTENSIONS: Comma separated query file suffixes
"""

import os
from dataclasses import dataclass, field
from typing import Union

from sqlfluent.core.dialects import ParameterDialect, get_dialect
from sqlfluent.exceptions import ImproperConfigurationError
from sqlfluent.registry import DEFAULT_QUERY_FILE_EXTENSIONS
from sqlfluent.utils.locking import DEFAULT_LOCK_TIMEOUT
from sqlfluent.utils.logging import get_logger

__all__ = ("DatabaseConfig", "load_config_from_env")

logger = get_logger("config")

DialectSetting = Union[str, ParameterDialect]


@dataclass(frozen=True)
class DatabaseConfig:
    """Settings for a :class:`~sqlfluent.base.Database`.

    Raises:
        ImproperConfigurationError: If any value is unusable.
    """

    connection_string: str
    source_dialect: DialectSetting = "named"
    provider_dialect: DialectSetting = "named"
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    query_file_extensions: "tuple[str, ...]" = field(default=DEFAULT_QUERY_FILE_EXTENSIONS)

    def __post_init__(self) -> None:
        if not self.connection_string:
            msg = "connection_string must not be empty"
            raise ImproperConfigurationError(msg)
        if self.lock_timeout <= 0:
            msg = f"lock_timeout must be positive, got {self.lock_timeout!r}"
            raise ImproperConfigurationError(msg)
        for setting in ("source_dialect", "provider_dialect"):
            try:
                get_dialect(getattr(self, setting))
            except ValueError as e:
                msg = f"Invalid {setting}: {e}"
                raise ImproperConfigurationError(msg) from e
        if not self.query_file_extensions or not all(ext.startswith(".") for ext in self.query_file_extensions):
            msg = f"query_file_extensions must be suffixes starting with '.', got {self.query_file_extensions!r}"
            raise ImproperConfigurationError(msg)

    def get_source_dialect(self) -> ParameterDialect:
        return get_dialect(self.source_dialect)

    def get_provider_dialect(self) -> ParameterDialect:
        return get_dialect(self.provider_dialect)


def _env_float(key: str, default: float) -> float:
    """Get float value from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Invalid float value for %s: %s, using default %f", key, value, default)
        return default


def load_config_from_env() -> DatabaseConfig:
    """Load a :class:`DatabaseConfig` from ``SQLFLUENT_*`` environment variables.

    Raises:
        ImproperConfigurationError: If ``SQLFLUENT_CONNECTION_STRING`` is unset or a value is invalid.
    """
    extensions = os.getenv("SQLFLUENT_QUERY_FILE_EXTENSIONS")
    return DatabaseConfig(
        connection_string=os.getenv("SQLFLUENT_CONNECTION_STRING", ""),
        source_dialect=os.getenv("SQLFLUENT_SOURCE_DIALECT", "named"),
        provider_dialect=os.getenv("SQLFLUENT_PROVIDER_DIALECT", "named"),
        lock_timeout=_env_float("SQLFLUENT_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT),
        query_file_extensions=(
            tuple(ext.strip() for ext in extensions.split(",") if ext.strip())
            if extensions
            else DEFAULT_QUERY_FILE_EXTENSIONS
        ),
    )
