"""Storage engine boundary for Bongo."""

from bongo.storage.engine import StorageEngine, is_duplicate_column, is_missing_table

__all__ = [
    "StorageEngine",
    "is_duplicate_column",
    "is_missing_table",
]
