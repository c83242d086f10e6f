"""Derive field declarations from pydantic models.

Annotations on a BongoDoc subclass are mapped to SQLite storage types;
per-field overrides are read from `json_schema_extra`.
"""

from __future__ import annotations

import types
from typing import TYPE_CHECKING, Any, Optional, Union, get_args, get_origin

from pydantic import Field

from bongo.schema.models import RESERVED_FIELDS, FieldDeclaration, StorageType

if TYPE_CHECKING:
    from pydantic import BaseModel


# Mapping of Python types to SQLite storage types
_TYPE_MAP: dict[type, StorageType] = {
    str: StorageType.TEXT,
    int: StorageType.INTEGER,
    bool: StorageType.INTEGER,
    float: StorageType.REAL,
    bytes: StorageType.BLOB,
}


def _get_storage_type(python_type: Any) -> StorageType:
    """Get the storage type for a Python type annotation.
    
    Args:
        python_type: Python type annotation
        
    Returns:
        Corresponding StorageType (TEXT when unknown)
    """
    # Optional[X] is Union[X, None]
    origin = get_origin(python_type)
    if origin is Union or origin is types.UnionType:
        non_none = [a for a in get_args(python_type) if a is not type(None)]
        if len(non_none) == 1:
            return _get_storage_type(non_none[0])
        return StorageType.TEXT
    
    if python_type is type(None):
        return StorageType.NULL
    
    return _TYPE_MAP.get(python_type, StorageType.TEXT)


def doc_field(
    default: Any = None,
    *,
    unique: bool = False,
    storage_type: Optional[StorageType] = None,
    allow_null: Optional[bool] = None,
    **kwargs: Any,
) -> Any:
    """Pydantic Field carrying Bongo column options.
    
    Args:
        default: Field default
        unique: Create a unique index over this field
        storage_type: Override the storage type derived from the annotation
        allow_null: Declare the column NULL/NOT NULL (NULL if not provided)
        **kwargs: Passed through to pydantic.Field
        
    Returns:
        A pydantic FieldInfo
    """
    extra: dict[str, Any] = {"unique": unique}
    if storage_type is not None:
        extra["storage_type"] = StorageType(storage_type).value
    if allow_null is not None:
        extra["allow_null"] = allow_null
    
    return Field(default, json_schema_extra=extra, **kwargs)


def declarations_from_model(model: type["BaseModel"]) -> list[FieldDeclaration]:
    """Build field declarations from a pydantic model class.
    
    Columns are nullable unless the field says otherwise, since SQLite
    refuses to add a NOT NULL column without a default. A scalar field
    default becomes the column default.
    
    Args:
        model: Pydantic model class (usually a BongoDoc subclass)
        
    Returns:
        Declarations in model field order, reserved fields skipped
    """
    declarations: list[FieldDeclaration] = []
    
    for name, info in model.model_fields.items():
        column = info.alias or name
        if column in RESERVED_FIELDS or name in RESERVED_FIELDS:
            continue
        
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        storage_type = extra.get("storage_type")
        default = info.default if isinstance(info.default, (str, int, float)) else None
        
        declarations.append(
            FieldDeclaration(
                name=column,
                type=StorageType(storage_type) if storage_type else _get_storage_type(info.annotation),
                allow_null=bool(extra.get("allow_null", True)),
                unique=bool(extra.get("unique", False)),
                default=default,
            )
        )
    
    return declarations
