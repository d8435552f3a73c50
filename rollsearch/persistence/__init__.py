"""
Data access layer.

Provides the abstract record store and its SQLite implementation.
"""

from .repository import RecordStore
from .sqlite_store import SQLiteRecordStore

__all__ = [
    "RecordStore",
    "SQLiteRecordStore",
]
