"""Persistence layer"""

from .record_store import RecordStore
from .db_manager import DatabaseManager, VideoRow, StoreInitializationError

__all__ = [
    "RecordStore",
    "DatabaseManager",
    "VideoRow",
    "StoreInitializationError",
]
