"""Unit tests for bounded lock acquisition."""

import logging
import threading

import pytest

from sqlfluent.core.cache import PropertyCache
from sqlfluent.exceptions import LockTimeoutError
from sqlfluent.utils.locking import DEFAULT_LOCK_TIMEOUT, LockHolder, create_lock


def _hold_in_other_thread(lock: object) -> "tuple[threading.Thread, threading.Event]":
    acquired = threading.Event()
    release = threading.Event()

    def holder() -> None:
        with LockHolder(lock, None, "test"):
            acquired.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    assert acquired.wait(5)
    return thread, release


def test_default_timeout() -> None:
    """Test the default timeout is sixty seconds."""
    assert DEFAULT_LOCK_TIMEOUT == 60.0


def test_lock_holder_acquires_and_releases() -> None:
    """Test the lock is held inside the block only."""
    lock = create_lock()

    with LockHolder(lock, 1.0, "resource") as holder:
        assert holder.is_locked

    assert not holder.is_locked
    assert lock.acquire(blocking=False)
    lock.release()


def test_lock_holder_is_reentrant() -> None:
    """Test nested acquisition on the same thread succeeds."""
    lock = create_lock()

    with LockHolder(lock, 0.1, "outer"), LockHolder(lock, 0.1, "inner") as inner:
        assert inner.is_locked


def test_lock_holder_releases_on_error() -> None:
    """Test the lock is released when the block raises."""
    lock = create_lock()

    with pytest.raises(RuntimeError), LockHolder(lock, 1.0, "resource"):
        raise RuntimeError("boom")

    thread, release = _hold_in_other_thread(lock)
    release.set()
    thread.join()


def test_lock_holder_times_out(caplog: pytest.LogCaptureFixture) -> None:
    """Test a held lock raises instead of running the block."""
    lock = create_lock()
    thread, release = _hold_in_other_thread(lock)
    ran = False
    caplog.set_level(logging.WARNING, logger="sqlfluent.utils.locking")
    try:
        with pytest.raises(LockTimeoutError) as exc_info, LockHolder(lock, 0.05, "query registry"):
            ran = True
    finally:
        release.set()
        thread.join()

    assert not ran
    assert exc_info.value.timeout == 0.05
    assert "query registry" in str(exc_info.value)
    assert any("Timed out acquiring lock" in record.message for record in caplog.records)


def test_property_cache_times_out() -> None:
    """Test the property cache fails fast while another thread holds its lock."""
    property_cache = PropertyCache(lock_timeout=0.05)
    thread, release = _hold_in_other_thread(property_cache._lock)
    try:
        with pytest.raises(LockTimeoutError):
            property_cache.get_fields(int)
    finally:
        release.set()
        thread.join()

    assert not property_cache.is_cached(int)
