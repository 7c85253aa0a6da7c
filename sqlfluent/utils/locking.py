"""Bounded mutual exclusion for state shared across threads.

The query registry and the property cache both guard a plain ``dict`` with a
re-entrant lock that is acquired with a timeout. Acquisition either succeeds
or raises :class:`~sqlfluent.exceptions.LockTimeoutError`; the guarded block
never runs without the lock held.
"""

import threading
from typing import TYPE_CHECKING, Any, Optional

from mypy_extensions import mypyc_attr

from sqlfluent.exceptions import LockTimeoutError
from sqlfluent.utils.logging import get_logger

if TYPE_CHECKING:
    from types import TracebackType

__all__ = ("DEFAULT_LOCK_TIMEOUT", "LockHolder", "create_lock")

logger = get_logger("utils.locking")

DEFAULT_LOCK_TIMEOUT = 60.0
"""Seconds to wait for a shared lock before giving up."""


def create_lock() -> Any:
    """Create the re-entrant lock type used for shared registries."""
    return threading.RLock()


@mypyc_attr(allow_interpreted_subclasses=False)
class LockHolder:
    """Context manager that holds ``handle`` for the duration of a block.

    Example:
        ```python
        with LockHolder(self._lock, self.lock_timeout, "query registry"):
            self._queries[name] = sql
        ```

    Args:
        handle: Lock object exposing ``acquire(timeout=...)`` and ``release()``.
        timeout: Seconds to wait. ``None`` or a negative value waits forever.
        resource: Human readable name used in the timeout error.
    """

    __slots__ = ("_handle", "_timeout", "is_locked", "resource")

    def __init__(self, handle: Any, timeout: "Optional[float]" = DEFAULT_LOCK_TIMEOUT, resource: str = "lock") -> None:
        self._handle = handle
        self._timeout = -1 if timeout is None or timeout < 0 else timeout
        self.resource = resource
        self.is_locked = False

    def __enter__(self) -> "LockHolder":
        self.is_locked = self._handle.acquire(timeout=self._timeout)
        if not self.is_locked:
            logger.warning("Timed out acquiring lock on %s after %.3fs", self.resource, self._timeout)
            raise LockTimeoutError(self.resource, self._timeout)
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        if self.is_locked:
            self._handle.release()
        self.is_locked = False
