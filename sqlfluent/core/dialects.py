"""Parameter placeholder dialects.

Two placeholder conventions are supported:

- ``NAMED_AT``: ``@name`` placeholders, used by most modern providers.
- ``QMARK``: ``?`` placeholders, used by ODBC/OLE style providers.

Each dialect can list the parameter names found in a statement, locate the
next placeholder of its own kind, and rewrite a statement written in another
dialect into its own placeholder syntax.
"""

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Final, Optional, Union

from mypy_extensions import mypyc_attr

from sqlfluent.exceptions import InvalidArgumentError
from sqlfluent.utils.logging import get_logger

__all__ = (
    "NamedParameterDialect",
    "ParameterDialect",
    "ParameterMatch",
    "ParameterStyle",
    "PositionalParameterDialect",
    "get_dialect",
)

logger = get_logger("core.dialects")

# @name, not @@name, and only when followed by whitespace, a comma or a closing paren
NAMED_PARAMETER_PATTERN: Final = re.compile(r"(?<!@)(?P<placeholder>@(?P<name>[A-Za-z0-9_-]+))(?=[\s,)])")
QMARK_PARAMETER_PATTERN: Final = re.compile(r"\?")
INSERT_STATEMENT_PATTERN: Final = re.compile(r"^\s*insert\s+into\s+", re.IGNORECASE)
INSERT_TOKEN_PATTERN: Final = re.compile(r"\(?\s*(?P<token>\?|[A-Za-z0-9_-]+|'(?:[^']|'')*')\s*(?:,|\))")
COMPARISON_PARAMETER_PATTERN: Final = re.compile(
    r"(?P<name>[A-Za-z0-9_-]+)\s*(?:<>|!=|>=|<=|=|<|>)\s*\?", re.IGNORECASE
)


class ParameterStyle(str, Enum):
    """Placeholder style understood by a dialect."""

    NAMED_AT = "named_at"
    QMARK = "qmark"


@mypyc_attr(allow_interpreted_subclasses=False)
class ParameterMatch:
    """Location of one placeholder inside a SQL string."""

    __slots__ = ("length", "start", "text")

    def __init__(self, start: int, length: int, text: str) -> None:
        self.start = start
        self.length = length
        self.text = text

    @property
    def end(self) -> int:
        return self.start + self.length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterMatch):
            return False
        return (self.start, self.length, self.text) == (other.start, other.length, other.text)

    def __hash__(self) -> int:
        return hash((self.start, self.length, self.text))

    def __repr__(self) -> str:
        return f"ParameterMatch(start={self.start}, length={self.length}, text={self.text!r})"


class ParameterDialect(ABC):
    """Base class for placeholder dialects."""

    __slots__ = ()

    style: "Optional[ParameterStyle]" = None

    @abstractmethod
    def find_parameter_names(self, sql: str) -> "list[str]":
        """Parse ``sql`` and return the parameter names it references, in order.

        Returned names always carry a leading ``@``.

        Args:
            sql: The SQL text.

        Returns:
            Parameter names in order of appearance.
        """

    @abstractmethod
    def next_parameter_match(self, sql: str) -> "Optional[ParameterMatch]":
        """Find the first placeholder of this dialect in ``sql``.

        Args:
            sql: The SQL text.

        Returns:
            The match, or ``None`` when there is no placeholder left.
        """

    @abstractmethod
    def placeholder(self, index: int) -> str:
        """Return the native placeholder for the ``index``-th replaced parameter."""

    def replace_parameter_syntax(self, sql: str, source_dialect: "Optional[ParameterDialect]") -> str:
        """Rewrite ``sql`` from ``source_dialect`` placeholders into this dialect's.

        ``source_dialect`` is asked repeatedly for its next placeholder in the
        partially rewritten text; each one is replaced by an auto-numbered
        placeholder of this dialect until the source reports no match.

        Args:
            sql: The SQL text, written in ``source_dialect``.
            source_dialect: Dialect the SQL was written in.

        Raises:
            InvalidArgumentError: If ``sql`` is ``None``.

        Returns:
            The rewritten SQL, stripped of surrounding whitespace.
        """
        if sql is None:
            raise InvalidArgumentError("sql")
        if source_dialect is None or type(source_dialect) is type(self):
            # Nothing to translate; re-scanning our own output would never terminate.
            return sql.strip()

        # trailing blank so a placeholder ending the statement still has a delimiter
        rewritten = f"{sql} "
        index = 0
        match = source_dialect.next_parameter_match(rewritten)
        while match is not None:
            rewritten = f"{rewritten[: match.start]}{self.placeholder(index)}{rewritten[match.end :]}"
            index += 1
            match = source_dialect.next_parameter_match(rewritten)
        return rewritten.strip()

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NamedParameterDialect(ParameterDialect):
    """``@name`` placeholders (``@@name`` is left alone)."""

    __slots__ = ()

    style = ParameterStyle.NAMED_AT

    def find_parameter_names(self, sql: str) -> "list[str]":
        return [f"@{match.group('name')}" for match in NAMED_PARAMETER_PATTERN.finditer(f"{sql} ")]

    def next_parameter_match(self, sql: str) -> "Optional[ParameterMatch]":
        match = NAMED_PARAMETER_PATTERN.search(sql)
        if match is None:
            return None
        start, end = match.span("placeholder")
        return ParameterMatch(start, end - start, match.group("placeholder"))

    def placeholder(self, index: int) -> str:
        return f"@p{index}"


class PositionalParameterDialect(ParameterDialect):
    """``?`` placeholders.

    Names are recovered from the statement shape: for ``INSERT INTO`` the
    column list is paired with the value list, otherwise every
    ``column <op> ?`` comparison contributes its column name.
    """

    __slots__ = ()

    style = ParameterStyle.QMARK

    def find_parameter_names(self, sql: str) -> "list[str]":
        if INSERT_STATEMENT_PATTERN.match(sql):
            return self._find_insert_parameter_names(sql)
        return [f"@{match.group('name').strip()}" for match in COMPARISON_PARAMETER_PATTERN.finditer(f"{sql} ")]

    @staticmethod
    def _find_insert_parameter_names(sql: str) -> "list[str]":
        tokens = [match.group("token") for match in INSERT_TOKEN_PATTERN.finditer(sql)]
        if len(tokens) % 2:
            logger.debug("Unbalanced INSERT column/value lists (%d tokens); no parameter names found", len(tokens))
            return []
        half = len(tokens) // 2
        columns, values = tokens[:half], tokens[half:]
        return [f"@{column}" for column, value in zip(columns, values) if value == "?"]

    def next_parameter_match(self, sql: str) -> "Optional[ParameterMatch]":
        match = QMARK_PARAMETER_PATTERN.search(sql)
        if match is None:
            return None
        return ParameterMatch(match.start(), 1, "?")

    def placeholder(self, index: int) -> str:
        return "?"


_DIALECTS: "dict[str, type[ParameterDialect]]" = {
    "named": NamedParameterDialect,
    "named_at": NamedParameterDialect,
    "standard": NamedParameterDialect,
    "positional": PositionalParameterDialect,
    "qmark": PositionalParameterDialect,
    "legacy": PositionalParameterDialect,
}


def get_dialect(dialect: "Union[str, ParameterStyle, ParameterDialect]") -> ParameterDialect:
    """Resolve a dialect instance from a name, style or instance.

    Args:
        dialect: ``"named"``/``"positional"`` (or an alias), a
            :class:`ParameterStyle`, or a dialect instance.

    Raises:
        ValueError: If the name is unknown.

    Returns:
        A dialect instance.
    """
    if isinstance(dialect, ParameterDialect):
        return dialect
    key = dialect.value if isinstance(dialect, ParameterStyle) else str(dialect).lower().strip()
    try:
        return _DIALECTS[key]()
    except KeyError:
        msg = f"Unknown parameter dialect {dialect!r}. Expected one of: {', '.join(sorted(_DIALECTS))}"
        raise ValueError(msg) from None
