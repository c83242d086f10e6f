"""Schema models for Bongo."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from bongo.ids.generator import derive_key, generate_id

ID_FIELD = "_id"
KEY_FIELD = "key"
RESERVED_FIELDS = frozenset({ID_FIELD, KEY_FIELD})


class StorageType(str, Enum):
    """SQLite column storage types."""

    TEXT = "TEXT"
    INTEGER = "INTEGER"
    REAL = "REAL"
    BLOB = "BLOB"
    NULL = "NULL"

    @property
    def ddl_name(self) -> Optional[str]:
        """Type name used in column DDL, or None for an untyped column."""
        if self is StorageType.NULL:
            return None
        return self.value


class FieldDeclaration(BaseModel):
    """Declaration of a single document field.
    
    Declarations are collected per shape by the FieldRegistry and turned
    into columns by the SchemaManager.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: StorageType = StorageType.TEXT
    allow_null: bool = True
    unique: bool = False
    default: Optional[Union[str, int, float]] = Field(
        default=None,
        description="Column DEFAULT; needed for NOT NULL columns added to populated tables",
    )


class BongoDoc(BaseModel):
    """Base model for typed documents.
    
    Subclasses declare their fields as regular pydantic annotations and
    can be registered as a shape with FieldRegistry.register_model().
    
    Example:
        ```python
        class User(BongoDoc):
            name: str = doc_field(unique=True)
            age: Optional[int] = None
        ```
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default_factory=generate_id, alias=ID_FIELD)

    @property
    def key(self) -> str:
        """Short display key derived from the id."""
        return derive_key(self.id)

    def to_document(self) -> dict[str, Any]:
        """Dump to a plain document keyed by column name."""
        return self.model_dump(by_alias=True)
