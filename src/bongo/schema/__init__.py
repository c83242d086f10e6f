"""Schema module for Bongo.

This module provides:
- FieldDeclaration, StorageType and BongoDoc models
- FieldRegistry for per-shape field declarations
- SchemaManager for additive table, column and index migrations
"""

from bongo.schema.fields import declarations_from_model, doc_field
from bongo.schema.manager import SchemaManager, index_name
from bongo.schema.models import (
    ID_FIELD,
    KEY_FIELD,
    BongoDoc,
    FieldDeclaration,
    StorageType,
)
from bongo.schema.registry import FieldRegistry

__all__ = [
    "ID_FIELD",
    "KEY_FIELD",
    "BongoDoc",
    "FieldDeclaration",
    "StorageType",
    "FieldRegistry",
    "SchemaManager",
    "declarations_from_model",
    "doc_field",
    "index_name",
]
