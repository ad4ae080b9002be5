"""
SQLite Adapter - Realtime search indexes on SQLite FTS5.
"""

from .transport import SQLiteConnection, SQLiteIndex, connect

__all__ = ["SQLiteConnection", "SQLiteIndex", "connect"]
