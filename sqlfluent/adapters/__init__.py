"""Provider adapters.

- dbapi: generic provider over any PEP 249 driver
- sqlite: data-source handle over the standard library ``sqlite3`` driver
"""

from sqlfluent.adapters.dbapi import DbApiProviderFactory
from sqlfluent.adapters.sqlite import SqliteDatabase

__all__ = ("DbApiProviderFactory", "SqliteDatabase")
