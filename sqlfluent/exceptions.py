from typing import Any, Optional

__all__ = (
    "ColumnNotFoundError",
    "ImproperConfigurationError",
    "InvalidArgumentError",
    "LockTimeoutError",
    "NotFoundError",
    "ParameterNotFoundError",
    "QueryNotFoundError",
    "SQLFileParseError",
    "SQLFluentError",
)


class SQLFluentError(Exception):
    """Base exception class from which all SQLFluent exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLFluentError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class InvalidArgumentError(SQLFluentError, ValueError):
    """A required argument was empty or ``None``.

    Raised synchronously, before any connection is opened.
    """

    argument: str

    def __init__(self, argument: str, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Argument {argument!r} cannot be empty or None."
        super().__init__(detail=message)
        self.argument = argument


class NotFoundError(SQLFluentError, LookupError):
    """An identity does not exist."""


class QueryNotFoundError(NotFoundError, KeyError):
    """No query is registered under the requested name."""

    name: str

    def __init__(self, name: str) -> None:
        super().__init__(detail=f"Could not find query registered with name '{name}'")
        self.name = name


class ParameterNotFoundError(NotFoundError, KeyError):
    """No parameter in the list matches the requested name."""

    name: str

    def __init__(self, name: str) -> None:
        super().__init__(detail=f"No parameter named '{name}'")
        self.name = name


class ColumnNotFoundError(NotFoundError):
    """The cursor has no column with the requested name."""

    column: str

    def __init__(self, column: str) -> None:
        super().__init__(detail=f"Column '{column}' is not part of the result set")
        self.column = column


class LockTimeoutError(SQLFluentError):
    """A bounded lock could not be acquired in time."""

    timeout: float

    def __init__(self, resource: str, timeout: float) -> None:
        super().__init__(detail=f"Timed out after {timeout:.3f}s waiting for lock on {resource}")
        self.timeout = timeout


class ImproperConfigurationError(SQLFluentError):
    """Improper Configuration error.

    Raised when a configuration object holds values that cannot be used.
    """


class SQLFileParseError(SQLFluentError):
    """A query file could not be read or parsed."""

    path: str

    def __init__(self, path: str, original_error: "Optional[Exception]" = None) -> None:
        message = f"Failed to parse SQL file {path}"
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(detail=message)
        self.path = path
