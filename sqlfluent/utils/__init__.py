from sqlfluent.utils import locking, logging

__all__ = ("locking", "logging")
