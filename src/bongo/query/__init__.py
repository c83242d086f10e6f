"""Query translation for Bongo."""

from bongo.query.models import (
    DeleteResult,
    InsertResult,
    QueryOptions,
    UpdateResult,
)
from bongo.query.translator import QueryTranslator

__all__ = [
    "DeleteResult",
    "InsertResult",
    "QueryOptions",
    "UpdateResult",
    "QueryTranslator",
]
