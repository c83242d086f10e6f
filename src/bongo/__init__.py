"""Bongo - document-style collections on top of SQLite."""

# Core
from bongo.core.exceptions import (
    BongoError,
    CollectionNotFoundError,
    DocumentValidationError,
    EngineError,
    SchemaError,
    StoreConnectionError,
)
from bongo.core.logging import get_logger, setup_logging

# Ids
from bongo.ids.generator import IdGenerator, derive_key, generate_id

# Schema
from bongo.schema.models import BongoDoc, FieldDeclaration, StorageType
from bongo.schema.fields import doc_field
from bongo.schema.registry import FieldRegistry
from bongo.schema.manager import SchemaManager

# Query
from bongo.query.models import DeleteResult, InsertResult, QueryOptions, UpdateResult
from bongo.query.translator import QueryTranslator

# Storage
from bongo.storage.engine import StorageEngine

# Store
from bongo.store.store import Bongo, BongoService

# Settings
from bongo.settings import Settings, StoreSettings, get_settings

__version__ = "0.1.0"
__all__ = [
    # Core
    "BongoError",
    "CollectionNotFoundError",
    "DocumentValidationError",
    "EngineError",
    "SchemaError",
    "StoreConnectionError",
    "get_logger",
    "setup_logging",
    # Ids
    "IdGenerator",
    "derive_key",
    "generate_id",
    # Schema
    "BongoDoc",
    "FieldDeclaration",
    "StorageType",
    "doc_field",
    "FieldRegistry",
    "SchemaManager",
    # Query
    "DeleteResult",
    "InsertResult",
    "QueryOptions",
    "UpdateResult",
    "QueryTranslator",
    # Storage
    "StorageEngine",
    # Store
    "Bongo",
    "BongoService",
    # Settings
    "Settings",
    "StoreSettings",
    "get_settings",
]
