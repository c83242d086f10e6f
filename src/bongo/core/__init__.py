"""Core utilities for Bongo: exceptions and logging."""

from bongo.core.exceptions import (
    BongoError,
    CollectionNotFoundError,
    DocumentValidationError,
    EngineError,
    SchemaError,
    StoreConnectionError,
)
from bongo.core.logging import get_logger, setup_logging

__all__ = [
    "BongoError",
    "CollectionNotFoundError",
    "DocumentValidationError",
    "EngineError",
    "SchemaError",
    "StoreConnectionError",
    "get_logger",
    "setup_logging",
]
