"""Identifier generation for Bongo documents."""

from bongo.ids.generator import IdGenerator, derive_key, generate_id

__all__ = [
    "IdGenerator",
    "derive_key",
    "generate_id",
]
